"""Wanted-level escalation and decay."""

from __future__ import annotations

from dataclasses import dataclass

from . import constants


@dataclass
class WantedLevel:
    """Tracks how much heat a player has collected.

    The level climbs with every act of aggression and cools down by one step
    for each full decay window that passes without a new escalation. Death
    clears it unconditionally.
    """

    level: int = 0
    last_change_at: float = 0.0

    def escalate(self, amount: int, now: float) -> int:
        """Raise the level by ``amount`` (capped) and restart the decay timer."""

        self.level = min(constants.WANTED_MAX, self.level + amount)
        self.last_change_at = now
        return self.level

    def decay(self, now: float) -> bool:
        """Drop one level if the decay window elapsed; return whether it changed."""

        if self.level <= 0:
            return False
        if now - self.last_change_at <= constants.WANTED_DECAY_MS:
            return False
        self.level -= 1
        self.last_change_at = now
        return True

    def reset(self) -> None:
        self.level = 0

    @property
    def calls_police(self) -> bool:
        """``True`` once the level is high enough for police to be dispatched."""

        return self.level >= constants.WANTED_POLICE_THRESHOLD

    @property
    def police_cap(self) -> int:
        """Maximum number of police units allowed to chase this player."""

        return self.level * constants.POLICE_PER_WANTED_LEVEL
