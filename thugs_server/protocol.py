"""JSON protocol for the websocket transport.

Every frame is a JSON object tagged with a ``"type"`` field. Inbound frames
are validated into command objects here, at the boundary; outbound events are
explicit message classes that know their own wire shape.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
import json
import math
from typing import Any, ClassVar, Dict, List, Optional, Union


class ProtocolError(ValueError):
    """Raised for a client frame that cannot be turned into a command."""


# -- client to server -------------------------------------------------------


@dataclass(frozen=True)
class MoveCommand:
    type: ClassVar[str] = "playerMove"

    x: float
    y: float
    angle: float
    speed: float


@dataclass(frozen=True)
class ShootCommand:
    type: ClassVar[str] = "playerShoot"

    angle: float


@dataclass(frozen=True)
class ChatCommand:
    type: ClassVar[str] = "chatMessage"

    message: str


ClientCommand = Union[MoveCommand, ShootCommand, ChatCommand]


def _number(payload: Dict[str, Any], key: str) -> float:
    value = payload.get(key)
    # bool is an int subclass but never a valid coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ProtocolError(f"Field {key!r} must be a number")
    try:
        number = float(value)
    except OverflowError as exc:
        raise ProtocolError(f"Field {key!r} is out of range") from exc
    if not math.isfinite(number):
        raise ProtocolError(f"Field {key!r} must be finite")
    return number


def parse_client_message(message: Union[str, bytes]) -> ClientCommand:
    """Parse a raw client ``message`` into a command."""

    try:
        payload = json.loads(message)
    except (ValueError, RecursionError) as exc:
        raise ProtocolError("Invalid client message") from exc
    if not isinstance(payload, dict):
        raise ProtocolError("Client message must be a JSON object")

    kind = payload.get("type")
    if kind == MoveCommand.type:
        return MoveCommand(
            x=_number(payload, "x"),
            y=_number(payload, "y"),
            angle=_number(payload, "angle"),
            speed=_number(payload, "speed"),
        )
    if kind == ShootCommand.type:
        return ShootCommand(angle=_number(payload, "angle"))
    if kind == ChatCommand.type:
        text = payload.get("message")
        if not isinstance(text, str):
            raise ProtocolError("Chat message must be a string")
        return ChatCommand(message=text)
    raise ProtocolError(f"Unknown message type {kind!r}")


# -- server to client -------------------------------------------------------


class ServerMessage(abc.ABC):
    """Base class of every outbound event."""

    type: ClassVar[str] = ""

    @abc.abstractmethod
    def fields(self) -> Dict[str, Any]:
        raise NotImplementedError

    def to_payload(self) -> Dict[str, Any]:
        payload = {"type": self.type}
        payload.update(self.fields())
        return payload


@dataclass(frozen=True)
class GameStateMessage(ServerMessage):
    """Full entity tables, sent once to a newly connected player."""

    type: ClassVar[str] = "gameState"

    player_id: str
    players: Dict[str, dict]
    bullets: List[dict]
    police: List[dict]
    game_time: float

    def fields(self) -> Dict[str, Any]:
        return {
            "playerId": self.player_id,
            "players": self.players,
            "bullets": self.bullets,
            "police": self.police,
            "gameTime": self.game_time,
        }


@dataclass(frozen=True)
class PlayerJoined(ServerMessage):
    type: ClassVar[str] = "playerJoined"

    player: dict

    def fields(self) -> Dict[str, Any]:
        return {"player": self.player}


@dataclass(frozen=True)
class PlayerLeft(ServerMessage):
    type: ClassVar[str] = "playerLeft"

    player_id: str

    def fields(self) -> Dict[str, Any]:
        return {"playerId": self.player_id}


@dataclass(frozen=True)
class PlayerUpdate(ServerMessage):
    type: ClassVar[str] = "playerUpdate"

    player_id: str
    x: float
    y: float
    angle: float
    speed: float
    health: int
    alive: bool

    def fields(self) -> Dict[str, Any]:
        return {
            "id": self.player_id,
            "x": self.x,
            "y": self.y,
            "angle": self.angle,
            "speed": self.speed,
            "health": self.health,
            "isAlive": self.alive,
        }


@dataclass(frozen=True)
class BulletFired(ServerMessage):
    type: ClassVar[str] = "bulletFired"

    bullet: dict
    weapon: Optional[str] = None

    def fields(self) -> Dict[str, Any]:
        fields = dict(self.bullet)
        if self.weapon is not None:
            fields["weapon"] = self.weapon
        return fields


@dataclass(frozen=True)
class BulletRemoved(ServerMessage):
    type: ClassVar[str] = "bulletRemoved"

    bullet_id: str

    def fields(self) -> Dict[str, Any]:
        return {"id": self.bullet_id}


@dataclass(frozen=True)
class PlayerHit(ServerMessage):
    type: ClassVar[str] = "playerHit"

    player_id: str
    attacker_id: str
    damage: int
    health: int
    died: bool

    def fields(self) -> Dict[str, Any]:
        return {
            "playerId": self.player_id,
            "attackerId": self.attacker_id,
            "damage": self.damage,
            "health": self.health,
            "died": self.died,
        }


@dataclass(frozen=True)
class PlayerDied(ServerMessage):
    type: ClassVar[str] = "playerDied"

    player_id: str
    killer_id: str
    kills: int

    def fields(self) -> Dict[str, Any]:
        return {"playerId": self.player_id, "killerId": self.killer_id, "kills": self.kills}


@dataclass(frozen=True)
class PoliceKilled(ServerMessage):
    type: ClassVar[str] = "policeKilled"

    police_id: str
    killer_id: str

    def fields(self) -> Dict[str, Any]:
        return {"policeId": self.police_id, "killerId": self.killer_id}


@dataclass(frozen=True)
class WantedLevelChanged(ServerMessage):
    type: ClassVar[str] = "wantedLevelChanged"

    player_id: str
    wanted_level: int

    def fields(self) -> Dict[str, Any]:
        return {"playerId": self.player_id, "wantedLevel": self.wanted_level}


@dataclass(frozen=True)
class ChatBroadcast(ServerMessage):
    type: ClassVar[str] = "chatMessage"

    player_id: str
    message: str
    timestamp: float

    def fields(self) -> Dict[str, Any]:
        return {"playerId": self.player_id, "message": self.message, "timestamp": self.timestamp}


@dataclass(frozen=True)
class GameUpdate(ServerMessage):
    """Throttled aggregate of the whole world."""

    type: ClassVar[str] = "gameUpdate"

    players: Dict[str, dict]
    police: List[dict]
    bullet_count: int

    def fields(self) -> Dict[str, Any]:
        return {"players": self.players, "police": self.police, "bulletCount": self.bullet_count}


def encode(message: ServerMessage) -> str:
    """Encode an outbound ``message`` as a JSON text frame."""

    return json.dumps(message.to_payload())
