"""Utility primitives used by the authoritative game server."""

from __future__ import annotations

from dataclasses import dataclass
import math
import random
import time

from . import constants


@dataclass
class Vec2:
    """Plain 2D vector for positions and headings in world units."""

    x: float
    y: float

    def copy(self) -> "Vec2":
        """Return a shallow copy of the vector."""

        return Vec2(self.x, self.y)

    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vec2":
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def length(self) -> float:
        """Return the Euclidean length of the vector."""

        return math.hypot(self.x, self.y)

    def distance_to(self, other: "Vec2") -> float:
        """Return the distance between this vector and ``other``."""

        return (self - other).length()

    def angle_to(self, other: "Vec2") -> float:
        """Return the heading in radians pointing from this vector to ``other``."""

        return math.atan2(other.y - self.y, other.x - self.x)

    @classmethod
    def from_angle(cls, angle: float, length: float = 1.0) -> "Vec2":
        """Return a vector of ``length`` pointing along ``angle``."""

        return cls(math.cos(angle) * length, math.sin(angle) * length)


def now_ms() -> float:
    """Wall clock in milliseconds, the unit every deadline is expressed in."""

    return time.time() * 1000.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_to_world(position: Vec2, margin: float) -> Vec2:
    """Clamp ``position`` inside the world rectangle shrunk by ``margin``."""

    return Vec2(
        clamp(position.x, margin, constants.WORLD_WIDTH - margin),
        clamp(position.y, margin, constants.WORLD_HEIGHT - margin),
    )


def in_world(position: Vec2) -> bool:
    """Return ``True`` if ``position`` lies on or inside the world rectangle."""

    return 0 <= position.x <= constants.WORLD_WIDTH and 0 <= position.y <= constants.WORLD_HEIGHT


def random_spawn_point(rng: random.Random) -> Vec2:
    """Return a uniformly random point inside the inset spawn rectangle."""

    margin = constants.SPAWN_MARGIN
    return Vec2(
        rng.random() * (constants.WORLD_WIDTH - 2 * margin) + margin,
        rng.random() * (constants.WORLD_HEIGHT - 2 * margin) + margin,
    )


def random_point_on_annulus(
    rng: random.Random, center: Vec2, inner: float, outer: float
) -> Vec2:
    """Return a random point between ``inner`` and ``outer`` around ``center``.

    The result is clamped to the spawn rectangle, so near the world edges it
    may end up closer than ``inner``.
    """

    angle = rng.random() * 2 * math.pi
    distance = inner + rng.random() * (outer - inner)
    return clamp_to_world(center + Vec2.from_angle(angle, distance), constants.SPAWN_MARGIN)
