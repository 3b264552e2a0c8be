"""Bullet entity definition."""

from __future__ import annotations

from dataclasses import dataclass
import math

from . import constants, utils
from .ids import ActorRef


@dataclass
class Bullet:
    """A projectile fired by a player or a police unit."""

    id: str
    position: utils.Vec2
    angle: float
    owner: ActorRef
    damage: int = constants.BULLET_DAMAGE
    speed: float = constants.BULLET_SPEED
    life: int = constants.BULLET_LIFETIME_TICKS

    @property
    def radius(self) -> float:
        return constants.BULLET_RADIUS

    @classmethod
    def fired_from(
        cls, bullet_id: str, origin: utils.Vec2, angle: float, owner: ActorRef, damage: int
    ) -> "Bullet":
        """Create a bullet just ahead of ``origin`` along ``angle``."""

        muzzle = origin + utils.Vec2.from_angle(angle, constants.MUZZLE_OFFSET)
        return cls(id=bullet_id, position=muzzle, angle=angle, owner=owner, damage=damage)

    def advance(self) -> bool:
        """Move one tick; return ``False`` once the bullet should be removed."""

        self.position = utils.Vec2(
            self.position.x + math.cos(self.angle) * self.speed,
            self.position.y + math.sin(self.angle) * self.speed,
        )
        self.life -= 1
        if not utils.in_world(self.position):
            return False
        return self.life > 0

    def to_dict(self) -> dict[str, float | int | str]:
        """Serialise the bullet to a JSON friendly dictionary."""

        return {
            "id": self.id,
            "playerId": self.owner.id,
            "ownerKind": self.owner.kind.value,
            "x": self.position.x,
            "y": self.position.y,
            "angle": self.angle,
            "damage": self.damage,
            "life": self.life,
        }
