"""Websocket networking client."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Optional

import websockets
from websockets.asyncio.client import ClientConnection


class NetworkClient:
    """Asynchronous websocket client that exchanges events with the server."""

    def __init__(self, uri: str) -> None:
        self.uri = uri
        self.websocket: Optional[ClientConnection] = None
        self._incoming: asyncio.Queue[Dict[str, Any]] = asyncio.Queue()
        self._receiver_task: Optional[asyncio.Task[None]] = None

    async def connect(self) -> Dict[str, Any]:
        """Connect and return the initial ``gameState`` message."""

        self.websocket = await websockets.connect(self.uri)
        state = await self._recv_json()
        self._receiver_task = asyncio.create_task(self._receiver_loop())
        return state

    async def _receiver_loop(self) -> None:
        assert self.websocket is not None
        try:
            async for message in self.websocket:
                try:
                    payload = json.loads(message)
                except json.JSONDecodeError:
                    continue
                await self._incoming.put(payload)
        except websockets.ConnectionClosed:
            pass
        finally:
            await self._incoming.put({"type": "disconnect"})

    async def _send_json(self, payload: Dict[str, Any]) -> None:
        if self.websocket is None:
            raise RuntimeError("Client is not connected")
        await self.websocket.send(json.dumps(payload))

    async def _recv_json(self) -> Dict[str, Any]:
        if self.websocket is None:
            raise RuntimeError("Client is not connected")
        message = await self.websocket.recv()
        return json.loads(message)

    async def send_move(self, x: float, y: float, angle: float, speed: float) -> None:
        await self._send_json({"type": "playerMove", "x": x, "y": y, "angle": angle, "speed": speed})

    async def send_shoot(self, angle: float) -> None:
        await self._send_json({"type": "playerShoot", "angle": angle})

    async def send_chat(self, message: str) -> None:
        await self._send_json({"type": "chatMessage", "message": message})

    async def next_event(self) -> Dict[str, Any]:
        return await self._incoming.get()

    def pending_events(self) -> list[Dict[str, Any]]:
        """Return every event received so far without waiting."""

        events = []
        while not self._incoming.empty():
            events.append(self._incoming.get_nowait())
        return events

    async def close(self) -> None:
        if self.websocket is not None:
            await self.websocket.close()
        if self._receiver_task is not None:
            await self._receiver_task
