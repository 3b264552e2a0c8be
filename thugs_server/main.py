"""Entry point for the asyncio based game server."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import os
from typing import AsyncIterator, Dict, Optional, Set

import websockets
from websockets.asyncio.server import ServerConnection

from . import constants, protocol
from .world import World


class GameServer:
    """High level orchestration of the world simulation and websocket IO."""

    def __init__(
        self,
        host: str,
        port: int,
        world: Optional[World] = None,
        tick_rate: int = constants.TICK_RATE,
        send_timeout: float = constants.SEND_TIMEOUT,
    ) -> None:
        self.host = host
        self.port = port
        self.world = world or World()
        self.tick_rate = tick_rate
        self.send_timeout = send_timeout
        self.clients: Dict[str, ServerConnection] = {}
        self._broadcast_lock = asyncio.Lock()
        self._closing: Set[asyncio.Task] = set()

    async def start(self) -> None:
        """Start the websocket server and the world update loop."""

        async with self.listen() as port:
            logging.info("Server listening on %s:%s", self.host, port)
            await self._run_game_loop()

    @contextlib.asynccontextmanager
    async def listen(self) -> AsyncIterator[int]:
        """Accept connections while the context is open; yield the bound port."""

        async with websockets.serve(self._handle_client, self.host, self.port) as server:
            sockets = list(server.sockets)
            yield sockets[0].getsockname()[1] if sockets else self.port

    async def _run_game_loop(self) -> None:
        loop = asyncio.get_running_loop()
        tick_interval = 1.0 / self.tick_rate
        next_tick = loop.time()
        while True:
            try:
                self.world.update()
            except Exception:
                logging.exception("Simulation tick %d failed", self.world.tick)
                raise
            await self._flush()
            next_tick += tick_interval
            await asyncio.sleep(max(0.0, next_tick - loop.time()))

    async def _flush(self) -> None:
        """Deliver every queued world event to the clients it is addressed to."""

        async with self._broadcast_lock:
            for outgoing in self.world.drain_events():
                if not self.clients:
                    continue
                payload = protocol.encode(outgoing.message)
                for player_id, ws in list(self.clients.items()):
                    if not outgoing.wants(player_id):
                        continue
                    try:
                        await asyncio.wait_for(ws.send(payload), self.send_timeout)
                    except websockets.ConnectionClosed:
                        logging.info("Dropping client %s after failed send", player_id)
                        self.clients.pop(player_id, None)
                    except asyncio.TimeoutError:
                        logging.warning("Dropping client %s after send timed out", player_id)
                        self._drop_slow_client(player_id, ws)

    def _drop_slow_client(self, player_id: str, ws: ServerConnection) -> None:
        # the close handshake runs in the background so the tick is not held up;
        # the handler's finally block removes the player once the socket ends
        self.clients.pop(player_id, None)
        task = asyncio.ensure_future(ws.close())
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    async def _handle_client(self, websocket: ServerConnection) -> None:
        player_id = str(websocket.id)
        self.clients[player_id] = websocket
        self.world.add_player(player_id)
        logging.info("Player connected: %s", player_id)
        await self._flush()
        try:
            async for message in websocket:
                try:
                    command = protocol.parse_client_message(message)
                except protocol.ProtocolError as exc:
                    logging.debug("Ignoring message from %s: %s", player_id, exc)
                    continue
                self.world.handle(player_id, command)
                await self._flush()
        except websockets.ConnectionClosed:
            pass
        finally:
            logging.info("Player disconnected: %s", player_id)
            self.clients.pop(player_id, None)
            self.world.remove_player(player_id)
            await self._flush()


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Thugs.io game server")
    parser.add_argument("--host", default="0.0.0.0", help="Host interface to bind to")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", 3000)),
        help="Port to listen on (defaults to $PORT or 3000)",
    )
    parser.add_argument(
        "--tick-rate", type=int, default=constants.TICK_RATE, help="Simulation ticks per second"
    )
    parser.add_argument(
        "--broadcast-interval",
        type=int,
        default=constants.BROADCAST_INTERVAL_TICKS,
        help="Send the aggregate update every N ticks",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser.parse_args(argv)


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="[%(levelname)s] %(message)s")
    world = World(broadcast_interval=args.broadcast_interval)
    server = GameServer(args.host, args.port, world=world, tick_rate=args.tick_rate)
    asyncio.run(server.start())


if __name__ == "__main__":
    main()
