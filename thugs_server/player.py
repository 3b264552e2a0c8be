"""Player entity implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import random
from typing import Optional

from . import constants, utils
from .wanted import WantedLevel


@dataclass
class Player:
    """Authoritative representation of a connected player."""

    id: str
    position: utils.Vec2 = field(
        default_factory=lambda: utils.Vec2(constants.DEFAULT_SPAWN_X, constants.DEFAULT_SPAWN_Y)
    )
    angle: float = 0.0
    speed: float = 0.0
    max_speed: float = constants.PLAYER_MAX_SPEED
    health: int = constants.PLAYER_MAX_HEALTH
    max_health: int = constants.PLAYER_MAX_HEALTH
    weapon: str = constants.DEFAULT_WEAPON
    money: int = 0
    kills: int = 0
    deaths: int = 0
    alive: bool = True
    respawn_at: float = 0.0
    heat: WantedLevel = field(default_factory=WantedLevel)

    @property
    def radius(self) -> float:
        """Collision radius of the player."""

        return constants.PLAYER_RADIUS

    @property
    def wanted(self) -> int:
        return self.heat.level

    def move_to(self, x: float, y: float, angle: float, speed: float) -> None:
        """Apply a client reported movement, keeping the player inside the world."""

        self.position = utils.clamp_to_world(utils.Vec2(x, y), self.radius)
        self.angle = angle
        self.speed = speed

    def update_tick(self, now: float, rng: random.Random) -> bool:
        """Advance timers; return ``True`` if the player respawned this tick."""

        self.heat.decay(now)
        if not self.alive and now >= self.respawn_at:
            self.respawn(rng)
            return True
        return False

    def take_damage(self, amount: int, now: float, killer: Optional["Player"] = None) -> bool:
        """Subtract ``amount`` health and return ``True`` if the hit was lethal.

        Hits on a dead player are ignored. ``killer`` is only used for kill
        credit when the hit turns out to be lethal.
        """

        if not self.alive:
            return False
        self.health = max(0, self.health - amount)
        if self.health == 0:
            self.die(now, killer)
            return True
        return False

    def die(self, now: float, killer: Optional["Player"] = None) -> bool:
        """Run the death transition; return ``True`` if ``killer`` got credit."""

        self.alive = False
        self.health = 0
        self.deaths += 1
        self.respawn_at = now + constants.RESPAWN_DELAY_MS
        self.heat.reset()
        logging.info("Player %s was killed by %s", self.id, killer.id if killer else "unknown")
        if killer is None or killer is self or not killer.alive:
            return False
        killer.kills += 1
        killer.money += constants.KILL_BOUNTY
        return True

    def respawn(self, rng: random.Random) -> None:
        """Bring the player back with full health at a random spawn point."""

        self.alive = True
        self.health = self.max_health
        self.position = utils.random_spawn_point(rng)
        self.speed = 0.0
        logging.info("Player %s respawned", self.id)

    def to_dict(self) -> dict:
        """Serialise the player to the JSON record used on the wire."""

        return {
            "id": self.id,
            "x": self.position.x,
            "y": self.position.y,
            "angle": self.angle,
            "speed": self.speed,
            "maxSpeed": self.max_speed,
            "health": self.health,
            "maxHealth": self.max_health,
            "weapon": self.weapon,
            "money": self.money,
            "wanted": self.wanted,
            "kills": self.kills,
            "deaths": self.deaths,
            "isAlive": self.alive,
            "radius": self.radius,
        }

    def to_update(self) -> dict:
        """Return the compact record sent in aggregate updates."""

        return {
            "id": self.id,
            "x": self.position.x,
            "y": self.position.y,
            "angle": self.angle,
            "speed": self.speed,
            "health": self.health,
            "isAlive": self.alive,
            "kills": self.kills,
            "deaths": self.deaths,
            "money": self.money,
            "wanted": self.wanted,
        }
