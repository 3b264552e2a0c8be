"""Police NPC entity and its pursuit behaviour."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from . import constants, utils
from .bullet import Bullet
from .ids import ActorRef
from .player import Player


@dataclass
class PoliceNPC:
    """A police unit chasing exactly one wanted player."""

    id: str
    position: utils.Vec2
    target_id: str
    angle: float = 0.0
    speed: float = 0.0
    health: int = constants.POLICE_HEALTH
    alive: bool = True
    last_shot_at: float = 0.0
    shoot_cooldown: float = constants.POLICE_SHOOT_COOLDOWN_MS
    aggro_radius: float = constants.POLICE_AGGRO_RADIUS
    shoot_radius: float = constants.POLICE_SHOOT_RADIUS

    @property
    def radius(self) -> float:
        return constants.POLICE_RADIUS

    @property
    def ref(self) -> ActorRef:
        return ActorRef.police(self.id)

    def _target(self, players: Mapping[str, Player]) -> Optional[Player]:
        target = players.get(self.target_id)
        if target is None or not target.alive or target.wanted == 0:
            return None
        return target

    def advance(
        self,
        players: Mapping[str, Player],
        now: float,
        next_bullet_id: Callable[[], str],
    ) -> Optional[Bullet]:
        """Advance the unit by one tick and return the bullet it fired, if any.

        A unit whose target disconnected, died or was cleared of its wanted
        level stands down by marking itself dead; the world drops it.
        """

        target = self._target(players)
        if target is None:
            self.alive = False
            self.speed = 0.0
            return None

        distance = self.position.distance_to(target.position)
        if distance <= self.aggro_radius:
            self.angle = self.position.angle_to(target.position)
            if distance > constants.POLICE_STOP_DISTANCE:
                self.speed = constants.POLICE_SPEED
                self.position = self.position + utils.Vec2.from_angle(self.angle, self.speed)
            else:
                self.speed = 0.0
        else:
            self.speed = 0.0
        self.position = utils.clamp_to_world(self.position, self.radius)

        if distance <= self.shoot_radius and now - self.last_shot_at >= self.shoot_cooldown:
            self.last_shot_at = now
            return Bullet.fired_from(
                next_bullet_id(),
                self.position,
                self.angle,
                self.ref,
                constants.POLICE_BULLET_DAMAGE,
            )
        return None

    def take_damage(self, amount: int) -> bool:
        """Subtract ``amount`` health and return ``True`` if the unit died."""

        if not self.alive:
            return False
        self.health = max(0, self.health - amount)
        if self.health == 0:
            self.alive = False
            return True
        return False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "x": self.position.x,
            "y": self.position.y,
            "angle": self.angle,
            "speed": self.speed,
            "health": self.health,
            "isAlive": self.alive,
            "targetId": self.target_id,
            "radius": self.radius,
        }
