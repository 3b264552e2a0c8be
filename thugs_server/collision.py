"""Collision helpers for the game server."""

from __future__ import annotations

import math
from typing import Iterable, Optional, Protocol, Union

from . import utils
from .bullet import Bullet
from .player import Player
from .police import PoliceNPC


class Circle(Protocol):
    position: utils.Vec2

    @property
    def radius(self) -> float: ...


def circles_collide(a: Circle, b: Circle) -> bool:
    """Return ``True`` if the two circles overlap."""

    dx = a.position.x - b.position.x
    dy = a.position.y - b.position.y
    return math.sqrt(dx * dx + dy * dy) < a.radius + b.radius


def resolve_player_collisions(players: Iterable[Player]) -> None:
    """Push every overlapping pair of alive players apart.

    Each player of a pair moves away from the other by half the overlap and
    is clamped back inside the world. Players sharing the exact same centre
    have no separating axis and are left alone.
    """

    alive = [player for player in players if player.alive]
    for index, first in enumerate(alive):
        for second in alive[index + 1:]:
            if not circles_collide(first, second):
                continue
            delta = second.position - first.position
            distance = delta.length()
            if distance == 0:
                continue
            push = delta * ((first.radius + second.radius - distance) / 2 / distance)
            first.position = utils.clamp_to_world(first.position - push, first.radius)
            second.position = utils.clamp_to_world(second.position + push, second.radius)


def find_bullet_target(
    bullet: Bullet,
    players: Iterable[Player],
    police: Iterable[PoliceNPC],
) -> Optional[Union[Player, PoliceNPC]]:
    """Return the first entity ``bullet`` hits, or ``None``.

    Players are tested first and a bullet never hits its own shooter. Only
    player bullets are tested against police.
    """

    for player in players:
        if not player.alive:
            continue
        if not bullet.owner.is_police and player.id == bullet.owner.id:
            continue
        if circles_collide(bullet, player):
            return player
    if bullet.owner.is_police:
        return None
    for unit in police:
        if unit.alive and circles_collide(bullet, unit):
            return unit
    return None
