"""Client side entity representations mirroring the server state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


@dataclass
class PlayerEntity:
    """Player state as last reported by the server."""

    id: str
    x: float = 0.0
    y: float = 0.0
    angle: float = 0.0
    speed: float = 0.0
    health: int = 100
    alive: bool = True
    money: int = 0
    wanted: int = 0
    kills: int = 0
    deaths: int = 0

    def update_from(self, payload: Dict[str, Any]) -> None:
        self.x = float(payload.get("x", self.x))
        self.y = float(payload.get("y", self.y))
        self.angle = float(payload.get("angle", self.angle))
        self.speed = float(payload.get("speed", self.speed))
        self.health = int(payload.get("health", self.health))
        self.alive = bool(payload.get("isAlive", self.alive))
        self.money = int(payload.get("money", self.money))
        self.wanted = int(payload.get("wanted", self.wanted))
        self.kills = int(payload.get("kills", self.kills))
        self.deaths = int(payload.get("deaths", self.deaths))


@dataclass
class BulletEntity:
    id: str
    owner_id: str
    x: float
    y: float
    angle: float


@dataclass
class PoliceEntity:
    id: str
    x: float
    y: float
    target_id: str


@dataclass
class ChatLine:
    player_id: str
    message: str
    timestamp: float


@dataclass
class EntityStore:
    """Maintain the client's copy of the world from server events.

    Discrete events patch individual entities as they arrive; the periodic
    ``gameUpdate`` overwrites player stats and replaces the police list.
    """

    local_id: Optional[str] = None
    players: Dict[str, PlayerEntity] = field(default_factory=dict)
    bullets: Dict[str, BulletEntity] = field(default_factory=dict)
    police: Dict[str, PoliceEntity] = field(default_factory=dict)
    chat: List[ChatLine] = field(default_factory=list)

    @property
    def local_player(self) -> Optional[PlayerEntity]:
        if self.local_id is None:
            return None
        return self.players.get(self.local_id)

    def apply(self, payload: Dict[str, Any]) -> None:
        """Apply one decoded server message; unknown types are ignored."""

        handler: Optional[Callable[[Dict[str, Any]], None]] = getattr(
            self, f"_on_{payload.get('type')}", None
        )
        if handler is not None:
            handler(payload)

    def _upsert_player(self, data: Dict[str, Any]) -> PlayerEntity:
        player_id = str(data["id"])
        entity = self.players.get(player_id)
        if entity is None:
            entity = PlayerEntity(id=player_id)
            self.players[player_id] = entity
        entity.update_from(data)
        return entity

    def _replace_police(self, police: List[Dict[str, Any]]) -> None:
        self.police = {
            str(unit["id"]): PoliceEntity(
                id=str(unit["id"]),
                x=float(unit["x"]),
                y=float(unit["y"]),
                target_id=str(unit.get("targetId", "")),
            )
            for unit in police
        }

    def _add_bullet(self, data: Dict[str, Any]) -> None:
        bullet_id = str(data["id"])
        self.bullets[bullet_id] = BulletEntity(
            id=bullet_id,
            owner_id=str(data.get("playerId", "")),
            x=float(data["x"]),
            y=float(data["y"]),
            angle=float(data["angle"]),
        )

    def _on_gameState(self, payload: Dict[str, Any]) -> None:
        self.local_id = payload.get("playerId", self.local_id)
        self.players = {}
        for data in payload.get("players", {}).values():
            self._upsert_player(data)
        self.bullets = {}
        for data in payload.get("bullets", []):
            self._add_bullet(data)
        self._replace_police(payload.get("police", []))

    def _on_playerJoined(self, payload: Dict[str, Any]) -> None:
        self._upsert_player(payload["player"])

    def _on_playerLeft(self, payload: Dict[str, Any]) -> None:
        self.players.pop(payload["playerId"], None)

    def _on_playerUpdate(self, payload: Dict[str, Any]) -> None:
        if payload["id"] in self.players:
            self._upsert_player(payload)

    def _on_bulletFired(self, payload: Dict[str, Any]) -> None:
        self._add_bullet(payload)

    def _on_bulletRemoved(self, payload: Dict[str, Any]) -> None:
        self.bullets.pop(payload["id"], None)

    def _on_playerHit(self, payload: Dict[str, Any]) -> None:
        victim = self.players.get(payload["playerId"])
        if victim is not None:
            victim.health = int(payload["health"])

    def _on_playerDied(self, payload: Dict[str, Any]) -> None:
        victim = self.players.get(payload["playerId"])
        if victim is not None:
            victim.alive = False
            victim.health = 0
        killer = self.players.get(payload["killerId"])
        if killer is not None:
            killer.kills = int(payload["kills"])

    def _on_policeKilled(self, payload: Dict[str, Any]) -> None:
        self.police.pop(payload["policeId"], None)

    def _on_wantedLevelChanged(self, payload: Dict[str, Any]) -> None:
        player = self.players.get(payload["playerId"])
        if player is not None:
            player.wanted = int(payload["wantedLevel"])

    def _on_chatMessage(self, payload: Dict[str, Any]) -> None:
        self.chat.append(
            ChatLine(str(payload["playerId"]), str(payload["message"]), float(payload["timestamp"]))
        )

    def _on_gameUpdate(self, payload: Dict[str, Any]) -> None:
        for data in payload.get("players", {}).values():
            if data["id"] in self.players:
                self._upsert_player(data)
        if "police" in payload:
            self._replace_police(payload["police"])
