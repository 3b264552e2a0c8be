"""Authoritative game world simulation."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import random
from typing import Callable, Dict, List, Optional

from . import collision, constants, protocol, utils
from .bullet import Bullet
from .ids import ActorRef, IdGenerator
from .player import Player
from .police import PoliceNPC


@dataclass(frozen=True)
class Outgoing:
    """An outbound event together with the players that should receive it."""

    message: protocol.ServerMessage
    only: Optional[str] = None
    exclude: Optional[str] = None

    def wants(self, player_id: str) -> bool:
        if self.only is not None:
            return player_id == self.only
        return player_id != self.exclude


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of the world rebuilt every tick."""

    players: Dict[str, dict]
    bullets: List[dict]
    police: List[dict]
    game_time: float


class World:
    """Holds all entities and advances the simulation on every tick.

    The world is the only writer of the player, bullet and police tables.
    Network handlers call into it synchronously between ticks, and every
    notification it produces is queued until the server drains it.
    """

    def __init__(
        self,
        clock: Callable[[], float] = utils.now_ms,
        ids: Optional[IdGenerator] = None,
        rng: Optional[random.Random] = None,
        broadcast_interval: int = constants.BROADCAST_INTERVAL_TICKS,
    ) -> None:
        self.clock = clock
        self.ids = ids or IdGenerator()
        self.rng = rng or random.Random()
        self.broadcast_interval = broadcast_interval
        self.tick: int = 0
        self.players: Dict[str, Player] = {}
        self.bullets: Dict[str, Bullet] = {}
        self.police: Dict[str, PoliceNPC] = {}
        self.state = self.snapshot()
        self._outbox: List[Outgoing] = []

    # -- events ---------------------------------------------------------

    def _emit(
        self,
        message: protocol.ServerMessage,
        only: Optional[str] = None,
        exclude: Optional[str] = None,
    ) -> None:
        self._outbox.append(Outgoing(message, only=only, exclude=exclude))

    def drain_events(self) -> List[Outgoing]:
        """Return the queued events in emission order and clear the queue."""

        events, self._outbox = self._outbox, []
        return events

    # -- connection lifecycle ---------------------------------------------

    def add_player(self, player_id: str, position: Optional[utils.Vec2] = None) -> Player:
        if position is None:
            position = utils.random_spawn_point(self.rng)
        player = Player(id=player_id, position=position)
        self.players[player_id] = player
        self.state = self.snapshot()
        self._emit(
            protocol.GameStateMessage(
                player_id=player_id,
                players=self.state.players,
                bullets=self.state.bullets,
                police=self.state.police,
                game_time=self.state.game_time,
            ),
            only=player_id,
        )
        self._emit(protocol.PlayerJoined(player.to_dict()), exclude=player_id)
        return player

    def remove_player(self, player_id: str) -> None:
        if self.players.pop(player_id, None) is None:
            return
        self._emit(protocol.PlayerLeft(player_id), exclude=player_id)

    # -- inbound commands -----------------------------------------------

    def handle(self, player_id: str, command: protocol.ClientCommand) -> None:
        """Apply a validated client ``command``; invalid preconditions are ignored."""

        if isinstance(command, protocol.MoveCommand):
            self.move_player(player_id, command.x, command.y, command.angle, command.speed)
        elif isinstance(command, protocol.ShootCommand):
            self.shoot(player_id, command.angle)
        elif isinstance(command, protocol.ChatCommand):
            self.chat(player_id, command.message)

    def move_player(self, player_id: str, x: float, y: float, angle: float, speed: float) -> None:
        player = self.players.get(player_id)
        if player is None or not player.alive:
            return
        player.move_to(x, y, angle, speed)
        self._emit(
            protocol.PlayerUpdate(
                player_id=player.id,
                x=player.position.x,
                y=player.position.y,
                angle=player.angle,
                speed=player.speed,
                health=player.health,
                alive=player.alive,
            ),
            exclude=player_id,
        )

    def shoot(self, player_id: str, angle: float) -> Optional[Bullet]:
        player = self.players.get(player_id)
        if player is None or not player.alive:
            return None
        bullet = Bullet.fired_from(
            self._next_bullet_id(),
            player.position,
            angle,
            ActorRef.player(player.id),
            constants.BULLET_DAMAGE,
        )
        self._add_bullet(bullet, weapon=player.weapon)
        return bullet

    def chat(self, player_id: str, message: str) -> None:
        if player_id not in self.players:
            return
        self._emit(protocol.ChatBroadcast(player_id, message, self.clock()))

    # -- wanted level and police ----------------------------------------

    def escalate(self, player: Player, amount: int) -> None:
        """Raise ``player``'s wanted level and dispatch police when it is high enough.

        Dead players carry no heat, so escalations against them are dropped.
        """

        if not player.alive:
            return
        before = player.wanted
        player.heat.escalate(amount, self.clock())
        if player.wanted != before:
            self._emit(protocol.WantedLevelChanged(player.id, player.wanted))
        if player.heat.calls_police:
            self.spawn_police(player)

    def spawn_police(self, player: Player) -> List[PoliceNPC]:
        """Dispatch up to a batch of police units at ``player``, respecting the cap."""

        active = sum(
            1 for unit in self.police.values() if unit.alive and unit.target_id == player.id
        )
        count = min(constants.POLICE_SPAWN_BATCH, player.heat.police_cap - active)
        spawned: List[PoliceNPC] = []
        for _ in range(count):
            position = utils.random_point_on_annulus(
                self.rng,
                player.position,
                constants.POLICE_SPAWN_MIN_DISTANCE,
                constants.POLICE_SPAWN_MAX_DISTANCE,
            )
            unit = PoliceNPC(id=self.ids.next("police"), position=position, target_id=player.id)
            unit.angle = unit.position.angle_to(player.position)
            self.police[unit.id] = unit
            spawned.append(unit)
        if spawned:
            logging.info(
                "Dispatched %d police unit(s) after player %s (wanted %d)",
                len(spawned),
                player.id,
                player.wanted,
            )
        return spawned

    # -- combat ---------------------------------------------------------

    def _next_bullet_id(self) -> str:
        return self.ids.next("bullet")

    def _add_bullet(self, bullet: Bullet, weapon: Optional[str] = None) -> None:
        self.bullets[bullet.id] = bullet
        self._emit(protocol.BulletFired(bullet.to_dict(), weapon=weapon))

    def _remove_bullet(self, bullet: Bullet) -> None:
        if self.bullets.pop(bullet.id, None) is not None:
            self._emit(protocol.BulletRemoved(bullet.id))

    def _damage_player(self, victim: Player, bullet: Bullet) -> None:
        attacker = None
        if not bullet.owner.is_police:
            attacker = self.players.get(bullet.owner.id)
        had_heat = victim.wanted > 0
        killer_was_alive = attacker is not None and attacker.alive
        died = victim.take_damage(bullet.damage, self.clock(), killer=attacker)
        self._emit(
            protocol.PlayerHit(
                player_id=victim.id,
                attacker_id=bullet.owner.id,
                damage=bullet.damage,
                health=victim.health,
                died=died,
            )
        )
        if died:
            if had_heat:
                self._emit(protocol.WantedLevelChanged(victim.id, victim.wanted))
            self._emit(
                protocol.PlayerDied(
                    player_id=victim.id,
                    killer_id=bullet.owner.id,
                    kills=attacker.kills if attacker is not None else 0,
                )
            )
        if attacker is None or attacker is victim:
            return
        self.escalate(attacker, 1)
        if died and killer_was_alive:
            self.escalate(attacker, 2)

    def _damage_police(self, unit: PoliceNPC, bullet: Bullet) -> None:
        if not unit.take_damage(bullet.damage):
            return
        self.police.pop(unit.id, None)
        self._emit(protocol.PoliceKilled(unit.id, bullet.owner.id))
        owner = self.players.get(bullet.owner.id)
        if owner is None:
            return
        owner.money += constants.POLICE_BOUNTY
        logging.info("Player %s killed police unit %s", owner.id, unit.id)
        self.escalate(owner, 1)

    def _resolve_bullet_hits(self) -> None:
        for bullet in list(self.bullets.values()):
            target = collision.find_bullet_target(
                bullet, self.players.values(), self.police.values()
            )
            if target is None:
                continue
            if isinstance(target, Player):
                self._damage_player(target, bullet)
            else:
                self._damage_police(target, bullet)
            self._remove_bullet(bullet)

    # -- tick -----------------------------------------------------------

    def update(self) -> None:
        """Advance the simulation by one tick."""

        self.tick += 1
        now = self.clock()

        for player in list(self.players.values()):
            before = player.wanted
            player.update_tick(now, self.rng)
            if player.wanted != before:
                self._emit(protocol.WantedLevelChanged(player.id, player.wanted))

        for unit in list(self.police.values()):
            bullet = unit.advance(self.players, now, self._next_bullet_id)
            if not unit.alive:
                del self.police[unit.id]
                continue
            if bullet is not None:
                self._add_bullet(bullet)

        for bullet in list(self.bullets.values()):
            if not bullet.advance():
                self._remove_bullet(bullet)

        collision.resolve_player_collisions(self.players.values())
        self._resolve_bullet_hits()

        self.state = self.snapshot(now)
        if self.tick % self.broadcast_interval == 0:
            self._emit(self.aggregate_update())

    # -- snapshots ------------------------------------------------------

    def snapshot(self, now: Optional[float] = None) -> GameSnapshot:
        return GameSnapshot(
            players={player_id: player.to_dict() for player_id, player in self.players.items()},
            bullets=[bullet.to_dict() for bullet in self.bullets.values()],
            police=[unit.to_dict() for unit in self.police.values()],
            game_time=self.clock() if now is None else now,
        )

    def aggregate_update(self) -> protocol.GameUpdate:
        return protocol.GameUpdate(
            players={player_id: player.to_update() for player_id, player in self.players.items()},
            police=self.state.police,
            bullet_count=len(self.state.bullets),
        )
