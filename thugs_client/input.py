"""Turn the mirrored world into movement and fire commands for a bot."""

from __future__ import annotations

from dataclasses import dataclass
import math
import random
from typing import Optional

from thugs_server.constants import PLAYER_MAX_SPEED, PLAYER_RADIUS, WORLD_HEIGHT, WORLD_WIDTH

from .entities import EntityStore, PlayerEntity

FIRE_RANGE = 400.0


@dataclass
class InputState:
    """Represents the control state to send to the server."""

    x: float
    y: float
    angle: float
    speed: float
    fire: bool


class BotController:
    """Chase the nearest living opponent and shoot once in range."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()
        self._wander_angle = self.rng.random() * 2 * math.pi

    def _nearest_opponent(self, store: EntityStore, me: PlayerEntity) -> Optional[PlayerEntity]:
        opponents = [p for p in store.players.values() if p.alive and p.id != me.id]
        if not opponents:
            return None
        return min(opponents, key=lambda p: math.hypot(p.x - me.x, p.y - me.y))

    def update(self, store: EntityStore) -> Optional[InputState]:
        me = store.local_player
        if me is None or not me.alive:
            return None

        target = self._nearest_opponent(store, me)
        if target is not None:
            angle = math.atan2(target.y - me.y, target.x - me.x)
            fire = math.hypot(target.x - me.x, target.y - me.y) <= FIRE_RANGE
        else:
            if self.rng.random() < 0.02:
                self._wander_angle = self.rng.random() * 2 * math.pi
            angle = self._wander_angle
            fire = False

        x = min(max(me.x + math.cos(angle) * PLAYER_MAX_SPEED, PLAYER_RADIUS), WORLD_WIDTH - PLAYER_RADIUS)
        y = min(max(me.y + math.sin(angle) * PLAYER_MAX_SPEED, PLAYER_RADIUS), WORLD_HEIGHT - PLAYER_RADIUS)
        me.x, me.y, me.angle = x, y, angle
        return InputState(x=x, y=y, angle=angle, speed=PLAYER_MAX_SPEED, fire=fire)
