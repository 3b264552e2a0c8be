"""Actor identities shared by players, police units and bullets."""

from __future__ import annotations

from dataclasses import dataclass
import enum
import itertools


class ActorKind(str, enum.Enum):
    """Who owns an id: a connected player or a police unit."""

    PLAYER = "player"
    POLICE = "police"


@dataclass(frozen=True)
class ActorRef:
    """An actor id tagged with its kind."""

    kind: ActorKind
    id: str

    @classmethod
    def player(cls, actor_id: str) -> "ActorRef":
        return cls(ActorKind.PLAYER, actor_id)

    @classmethod
    def police(cls, actor_id: str) -> "ActorRef":
        return cls(ActorKind.POLICE, actor_id)

    @property
    def is_police(self) -> bool:
        return self.kind is ActorKind.POLICE


class IdGenerator:
    """Monotonic id source, one counter per prefix.

    A fresh generator yields ``bullet_1``, ``bullet_2``... which keeps ids
    deterministic under test.
    """

    def __init__(self) -> None:
        self._counters: dict[str, itertools.count] = {}

    def next(self, prefix: str) -> str:
        counter = self._counters.setdefault(prefix, itertools.count(1))
        return f"{prefix}_{next(counter)}"
