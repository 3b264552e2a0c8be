import random

from thugs_server import constants, protocol
from thugs_server.bullet import Bullet
from thugs_server.ids import ActorRef, IdGenerator
from thugs_server.utils import Vec2
from thugs_server.world import World

from conftest import FakeClock, event_types


def _events(world: World, kind: str) -> list:
    return [o for o in world.drain_events() if o.message.type == kind]


def _tick(world: World, count: int) -> None:
    for _ in range(count):
        world.update()


def test_join_sends_state_to_joiner_and_announces_to_others(world: World) -> None:
    world.add_player("a", Vec2(100.0, 100.0))
    world.drain_events()
    world.add_player("b", Vec2(500.0, 500.0))
    state, joined = world.drain_events()

    assert isinstance(state.message, protocol.GameStateMessage)
    assert state.wants("b") and not state.wants("a")
    assert set(state.message.players) == {"a", "b"}
    assert state.message.player_id == "b"

    assert isinstance(joined.message, protocol.PlayerJoined)
    assert joined.wants("a") and not joined.wants("b")
    assert joined.message.player["id"] == "b"


def test_join_refreshes_world_state(world: World) -> None:
    world.add_player("a", Vec2(100.0, 100.0))
    (state, _joined) = world.drain_events()
    assert set(world.state.players) == {"a"}
    assert state.message.players is world.state.players

    world.update()
    world.remove_player("a")
    world.add_player("b", Vec2(500.0, 500.0))
    assert set(world.state.players) == {"b"}
    assert world.aggregate_update().police == world.state.police


def test_leave_is_announced_once(world: World) -> None:
    world.add_player("a")
    world.drain_events()
    world.remove_player("a")
    world.remove_player("a")
    assert event_types(world) == ["playerLeft"]
    assert "a" not in world.players


def test_move_is_clamped_and_relayed_to_others(world: World) -> None:
    world.add_player("a", Vec2(100.0, 100.0))
    world.drain_events()
    world.handle("a", protocol.MoveCommand(x=5000.0, y=-3.0, angle=0.5, speed=4.0))
    (update,) = world.drain_events()
    assert update.message.x == constants.WORLD_WIDTH - constants.PLAYER_RADIUS
    assert update.message.y == constants.PLAYER_RADIUS
    assert not update.wants("a")
    assert update.wants("b")


def test_commands_from_missing_or_dead_players_are_ignored(world: World) -> None:
    world.handle("ghost", protocol.MoveCommand(x=1.0, y=1.0, angle=0.0, speed=0.0))
    world.handle("ghost", protocol.ShootCommand(angle=0.0))
    world.handle("ghost", protocol.ChatCommand(message="boo"))
    player = world.add_player("a", Vec2(100.0, 100.0))
    world.drain_events()
    player.die(now=world.clock())
    world.handle("a", protocol.MoveCommand(x=300.0, y=300.0, angle=0.0, speed=0.0))
    world.handle("a", protocol.ShootCommand(angle=0.0))
    assert world.drain_events() == []
    assert player.position == Vec2(100.0, 100.0)
    assert world.bullets == {}


def test_dead_player_can_still_chat(world: World, clock: FakeClock) -> None:
    player = world.add_player("a")
    player.die(now=clock())
    world.drain_events()
    world.handle("a", protocol.ChatCommand(message="gg"))
    (chat,) = world.drain_events()
    assert chat.message == protocol.ChatBroadcast("a", "gg", clock())
    assert chat.wants("a")


def test_shoot_broadcasts_bullet_with_weapon(world: World) -> None:
    world.add_player("a", Vec2(100.0, 100.0))
    world.drain_events()
    bullet = world.shoot("a", 0.0)
    (fired,) = world.drain_events()
    assert bullet is not None
    assert bullet.id == "bullet_1"
    assert fired.message.to_payload()["weapon"] == constants.DEFAULT_WEAPON
    assert fired.wants("a")


def test_expired_bullets_are_removed_with_notification(world: World) -> None:
    world.bullets["b1"] = Bullet(
        id="b1", position=Vec2(1595.0, 600.0), angle=0.0, owner=ActorRef.player("x")
    )
    world.update()
    assert world.bullets == {}
    assert "bulletRemoved" in event_types(world)


def test_hit_escalates_attacker_not_victim(world: World) -> None:
    victim = world.add_player("a", Vec2(400.0, 300.0))
    attacker = world.add_player("b", Vec2(300.0, 300.0))
    world.shoot("b", 0.0)
    world.drain_events()
    _tick(world, 10)

    assert victim.health == constants.PLAYER_MAX_HEALTH - constants.BULLET_DAMAGE
    assert victim.wanted == 0
    assert attacker.wanted == 1
    assert world.bullets == {}
    types = event_types(world)
    assert types.index("playerHit") < types.index("bulletRemoved")
    assert "playerDied" not in types


def test_kill_credits_killer_and_resets_victim(world: World, clock: FakeClock) -> None:
    victim = world.add_player("a", Vec2(400.0, 300.0))
    killer = world.add_player("b", Vec2(300.0, 300.0))
    victim.health = constants.BULLET_DAMAGE
    victim.heat.escalate(3, clock())
    world.shoot("b", 0.0)
    world.drain_events()
    _tick(world, 10)

    assert killer.kills == 1
    assert killer.money == constants.KILL_BOUNTY
    # one level for the hit, two for the kill
    assert killer.wanted == 3
    assert not victim.alive
    assert victim.deaths == 1
    assert victim.wanted == 0
    assert victim.respawn_at == clock() + constants.RESPAWN_DELAY_MS

    events = world.drain_events()
    died = [o.message for o in events if isinstance(o.message, protocol.PlayerDied)]
    assert died == [protocol.PlayerDied(player_id="a", killer_id="b", kills=1)]
    hits = [o.message for o in events if isinstance(o.message, protocol.PlayerHit)]
    assert hits[0].died is True
    assert protocol.WantedLevelChanged("a", 0) in [o.message for o in events]
    assert all(unit.target_id == "b" for unit in world.police.values())
    assert len(world.police) == constants.POLICE_SPAWN_BATCH


def test_dead_player_respawns_after_delay(world: World, clock: FakeClock) -> None:
    player = world.add_player("a")
    player.die(now=clock())
    clock.advance(constants.RESPAWN_DELAY_MS - 1)
    world.update()
    assert not player.alive
    clock.advance(1)
    world.update()
    assert player.alive
    assert player.health == constants.PLAYER_MAX_HEALTH


def test_wanted_two_dispatches_police_nearby(world: World) -> None:
    player = world.add_player("a", Vec2(800.0, 600.0))
    world.escalate(player, 2)
    assert world.police
    for unit in world.police.values():
        assert unit.target_id == "a"
        distance = unit.position.distance_to(player.position)
        assert constants.POLICE_SPAWN_MIN_DISTANCE <= distance <= constants.POLICE_SPAWN_MAX_DISTANCE
        assert 0 <= unit.position.x <= constants.WORLD_WIDTH
        assert 0 <= unit.position.y <= constants.WORLD_HEIGHT


def test_wanted_one_calls_no_police(world: World) -> None:
    player = world.add_player("a", Vec2(800.0, 600.0))
    world.escalate(player, 1)
    assert world.police == {}


def test_police_count_is_capped_by_wanted_level(world: World) -> None:
    player = world.add_player("a", Vec2(800.0, 600.0))
    world.escalate(player, 2)
    for _ in range(5):
        world.spawn_police(player)
    assert len(world.police) == player.heat.police_cap == 4


def test_wanted_decays_after_quiet_period(world: World, clock: FakeClock) -> None:
    player = world.add_player("a", Vec2(800.0, 600.0))
    player.heat.escalate(3, clock())
    world.drain_events()
    clock.advance(35_000)
    world.update()
    assert player.wanted == 2
    changed = _events(world, "wantedLevelChanged")
    assert changed[0].message == protocol.WantedLevelChanged("a", 2)


def test_police_stand_down_within_a_tick_of_clean_record(world: World) -> None:
    player = world.add_player("a", Vec2(800.0, 600.0))
    world.escalate(player, 2)
    assert world.police
    player.heat.reset()
    world.update()
    assert world.police == {}


def test_police_stand_down_when_target_disconnects(world: World) -> None:
    player = world.add_player("a", Vec2(800.0, 600.0))
    world.escalate(player, 3)
    world.remove_player("a")
    world.update()
    assert world.police == {}


def test_killing_police_pays_bounty_and_raises_heat(world: World) -> None:
    player = world.add_player("a", Vec2(800.0, 600.0))
    world.escalate(player, 2)
    unit = next(iter(world.police.values()))
    unit.health = constants.BULLET_DAMAGE
    world.bullets["b1"] = Bullet(
        id="b1",
        position=unit.position - Vec2(constants.BULLET_SPEED, 0.0),
        angle=0.0,
        owner=ActorRef.player("a"),
    )
    world.drain_events()
    world.update()

    assert unit.id not in world.police
    assert player.money == constants.POLICE_BOUNTY
    assert player.wanted == 3
    killed = _events(world, "policeKilled")
    assert killed[0].message == protocol.PoliceKilled(unit.id, "a")


def test_police_bullet_hurts_player_without_heat(world: World) -> None:
    player = world.add_player("a", Vec2(400.0, 300.0))
    world.bullets["p1"] = Bullet(
        id="p1",
        position=Vec2(380.0, 300.0),
        angle=0.0,
        owner=ActorRef.police("police_9"),
        damage=constants.POLICE_BULLET_DAMAGE,
    )
    world.update()
    assert player.health == constants.PLAYER_MAX_HEALTH - constants.POLICE_BULLET_DAMAGE
    assert player.wanted == 0


def test_bullet_moves_before_it_is_tested(world: World) -> None:
    player = world.add_player("a", Vec2(400.0, 300.0))
    # out of reach now, inside the player after one step
    world.bullets["b1"] = Bullet(
        id="b1", position=Vec2(376.0, 300.0), angle=0.0, owner=ActorRef.player("x")
    )
    world.update()
    assert player.health == constants.PLAYER_MAX_HEALTH - constants.BULLET_DAMAGE


def test_bullet_hits_at_most_once(world: World) -> None:
    a = world.add_player("a", Vec2(400.0, 300.0))
    b = world.add_player("b", Vec2(400.0, 300.0))
    world.bullets["b1"] = Bullet(
        id="b1", position=Vec2(390.0, 300.0), angle=0.0, owner=ActorRef.police("police_1")
    )
    world.update()
    assert sorted([a.health, b.health]) == [75, 100]


def test_aggregate_update_every_nth_tick(world: World) -> None:
    world.add_player("a")
    world.drain_events()
    _tick(world, constants.BROADCAST_INTERVAL_TICKS - 1)
    assert "gameUpdate" not in event_types(world)
    world.update()
    (update,) = _events(world, "gameUpdate")
    payload = update.message.to_payload()
    assert set(payload["players"]) == {"a"}
    assert payload["bulletCount"] == 0
    assert payload["police"] == []


def test_snapshot_is_rebuilt_each_tick(world: World, clock: FakeClock) -> None:
    world.add_player("a")
    clock.advance(16)
    world.update()
    assert set(world.state.players) == {"a"}
    assert world.state.game_time == clock()


def test_invariants_hold_during_a_brawl(clock: FakeClock) -> None:
    rng = random.Random(99)
    world = World(clock=clock, ids=IdGenerator(), rng=random.Random(5))
    players = [world.add_player(f"p{i}") for i in range(6)]
    for _ in range(1200):
        for player in players:
            if rng.random() < 0.5:
                world.move_player(
                    player.id,
                    player.position.x + rng.uniform(-5, 5),
                    player.position.y + rng.uniform(-5, 5),
                    rng.uniform(-3.2, 3.2),
                    5.0,
                )
            if rng.random() < 0.1:
                world.shoot(player.id, rng.uniform(-3.2, 3.2))
        clock.advance(1000 / 60)
        world.update()
        world.drain_events()
        for player in players:
            assert 0 <= player.health <= player.max_health
            assert (player.health > 0) == player.alive
            assert 0 <= player.wanted <= constants.WANTED_MAX
            assert player.money >= 0
            if player.alive:
                assert player.radius <= player.position.x <= constants.WORLD_WIDTH - player.radius
                assert player.radius <= player.position.y <= constants.WORLD_HEIGHT - player.radius
        for bullet in world.bullets.values():
            assert bullet.life > 0
        for unit in world.police.values():
            assert unit.alive
