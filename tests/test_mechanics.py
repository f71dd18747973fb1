"""
Tests for game.galaxy.mechanics - spawn, motion, collisions, difficulty
"""

import numpy as np
import pytest

from game.galaxy.entities import GameState, ObjectCategory
from game.galaxy.mechanics import (
    apply_difficulty_step,
    emit_collect,
    resolve_collisions,
    spawn_logic,
    spawn_object,
    tick,
    update_difficulty,
    update_objects,
    update_particles,
    update_player,
)
from game.galaxy.session import GameConfig, GameSession

FRAME_MS = 1000.0 / 60.0


def playing_session(seed=0, **overrides):
    """Started session; spawning disabled unless overridden"""
    overrides.setdefault("base_spawn_prob", 0.0)
    session = GameSession(GameConfig(**overrides), rng=np.random.default_rng(seed))
    session.start()
    return session


# ============================================================================
# Spawner
# ============================================================================


class TestSpawner:
    """Object spawning"""

    def test_spawn_object_placement(self):
        session = playing_session()
        cfg = session.config
        h = spawn_object(session)
        obj = session.objects.get(h)

        assert cfg.spawn_margin <= obj.x <= cfg.width - cfg.spawn_margin
        assert obj.y == cfg.spawn_y
        assert obj.y + obj.height / 2 < 0  # fully above the top edge
        assert session.fall_speed <= obj.speed <= session.fall_speed + cfg.fall_speed_jitter
        assert abs(obj.rotation_speed) <= cfg.rotation_speed_range / 2

    def test_spawn_uses_current_fall_speed(self):
        session = playing_session()
        session.fall_speed = 10.0
        obj = session.objects.get(spawn_object(session))
        assert 10.0 <= obj.speed <= 12.0

    def test_spawn_logic_always_with_probability_one(self):
        session = playing_session(base_spawn_prob=1.0, spawn_prob_cap=1.0)
        assert spawn_logic(session) is not None
        assert len(session.objects) == 1

    def test_spawn_logic_never_with_probability_zero(self):
        session = playing_session()
        for _ in range(200):
            assert spawn_logic(session) is None
        assert len(session.objects) == 0

    def test_no_spawn_outside_playing(self):
        session = GameSession(GameConfig(base_spawn_prob=1.0, spawn_prob_cap=1.0),
                              rng=np.random.default_rng(0))
        assert session.state is GameState.START
        assert spawn_logic(session) is None
        tick(session, FRAME_MS)
        assert len(session.objects) == 0

    def test_spawn_skipped_when_pool_exhausted(self):
        session = playing_session(max_objects=2)
        assert spawn_object(session) is not None
        assert spawn_object(session) is not None
        assert spawn_object(session) is None
        assert len(session.objects) == 2

    def test_spawn_rate_near_probability(self):
        session = playing_session(seed=7, base_spawn_prob=0.02)
        spawned = 0
        for _ in range(5000):
            if spawn_logic(session) is not None:
                spawned += 1
            session.objects.release_all()
        assert spawned / 5000 == pytest.approx(0.02, abs=0.006)


# ============================================================================
# Motion & lifecycle
# ============================================================================


class TestMotion:
    """Player, object and particle motion"""

    def test_object_moves_by_speed_per_reference_frame(self):
        session = playing_session()
        h = spawn_object(session, ObjectCategory.ASTEROID, x=100, y=0)
        obj = session.objects.get(h)
        obj.speed = 4.0
        update_objects(session, FRAME_MS)
        assert obj.y == pytest.approx(4.0)
        update_objects(session, FRAME_MS * 2)
        assert obj.y == pytest.approx(12.0)

    def test_object_evicted_past_bottom_margin(self):
        session = playing_session()
        cfg = session.config
        h = spawn_object(session, ObjectCategory.ASTEROID, x=100,
                         y=cfg.height + cfg.object_size + 0.5)
        evicted = update_objects(session, FRAME_MS)
        assert evicted == 1
        assert h not in session.objects

    def test_partially_visible_object_kept(self):
        session = playing_session()
        cfg = session.config
        h = spawn_object(session, ObjectCategory.ASTEROID, x=100, y=cfg.height + 1)
        session.objects.get(h).speed = 1.0
        update_objects(session, FRAME_MS)
        assert h in session.objects

    def test_every_object_past_margin_gone_after_tick(self):
        session = playing_session(seed=3, base_spawn_prob=0.05, spawn_prob_cap=0.05)
        cfg = session.config
        session.player.x = session.pointer_x = cfg.width / 2
        for _ in range(600):
            tick(session, FRAME_MS)
            for obj in session.objects.values():
                assert obj.y <= cfg.height + obj.height
            if not session.is_playing:
                break

    def test_player_eases_toward_pointer(self):
        session = playing_session()
        start = session.player.x
        session.set_pointer(start + 100)
        update_player(session, FRAME_MS)
        assert session.player.x == pytest.approx(start + 10)

    def test_pointer_clamped_to_playfield(self):
        session = playing_session()
        session.set_pointer(-500)
        assert session.pointer_x == session.player.width / 2
        session.set_pointer(10_000)
        assert session.pointer_x == session.config.width - session.player.width / 2

    def test_particles_expire(self):
        session = playing_session()
        emitted = emit_collect(session, 100, 100)
        assert emitted == 10
        update_particles(session, 400)
        assert len(session.particles) == 10
        update_particles(session, 400)
        assert len(session.particles) == 0

    def test_particle_velocity_decays(self):
        session = playing_session()
        emit_collect(session, 100, 100)
        p = session.particles.values()[0]
        p.vx, p.vy = 1.0, 0.0
        update_particles(session, FRAME_MS)
        assert p.x == pytest.approx(101.0)
        assert p.vx == pytest.approx(0.98)


# ============================================================================
# Collisions
# ============================================================================


class TestCollisions:
    """Collision resolution"""

    def test_collect_star_on_player(self):
        session = playing_session()
        player = session.player
        h = spawn_object(session, ObjectCategory.STAR, x=player.x, y=player.y)
        assert session.score == 0

        tick(session, FRAME_MS)

        assert session.score == 50
        assert h not in session.objects
        assert len(session.objects) == 0
        assert len(session.particles) > 0
        assert session.state is GameState.PLAYING

    def test_harmful_hit_ends_round(self):
        session = playing_session()
        player = session.player
        spawn_object(session, ObjectCategory.STAR, x=player.x, y=player.y)
        tick(session, FRAME_MS)
        assert session.score == 50

        spawn_object(session, ObjectCategory.UFO, x=player.x, y=player.y)
        result = tick(session, FRAME_MS)

        assert result.game_over
        assert session.state is GameState.GAME_OVER
        assert result.summary.score == 50
        frozen_ms = session.elapsed_ms

        for _ in range(30):
            tick(session, FRAME_MS, pointer_x=0)
        assert session.score == 50
        assert session.elapsed_ms == frozen_ms

    def test_first_harmful_hit_stops_scan(self):
        session = playing_session()
        player = session.player
        spawn_object(session, ObjectCategory.STAR, x=player.x, y=player.y)
        spawn_object(session, ObjectCategory.ASTEROID, x=player.x, y=player.y)

        points, summary = resolve_collisions(session)

        # newest first: the asteroid ends the round before the star is reached
        assert summary is not None
        assert points == 0
        assert session.score == 0
        assert len(session.objects) == 2

    def test_distant_objects_ignored(self):
        session = playing_session()
        player = session.player
        spawn_object(session, ObjectCategory.ASTEROID, x=player.x, y=player.y - 200)
        points, summary = resolve_collisions(session)
        assert summary is None and points == 0

    def test_padding_forgives_edge_contact(self):
        session = playing_session()
        player = session.player
        # boxes touch by 2 px, less than the 5 px padding on each side
        spawn_object(session, ObjectCategory.ASTEROID, x=player.x + 35.5, y=player.y)
        _, summary = resolve_collisions(session)
        assert summary is None

    def test_circle_mode(self):
        session = playing_session(collision_mode="circle")
        player = session.player
        # threshold = 20 + 17.5 - 5 = 32.5
        spawn_object(session, ObjectCategory.ASTEROID, x=player.x + 33, y=player.y)
        assert resolve_collisions(session)[1] is None
        spawn_object(session, ObjectCategory.ASTEROID, x=player.x + 32, y=player.y)
        assert resolve_collisions(session)[1] is not None

    def test_game_over_emits_explosion(self):
        session = playing_session()
        player = session.player
        spawn_object(session, ObjectCategory.ASTEROID, x=player.x, y=player.y)
        resolve_collisions(session)
        assert len(session.particles) == 30

    def test_score_never_decreases(self):
        session = playing_session(seed=11, base_spawn_prob=0.05, spawn_prob_cap=0.05)
        rng = np.random.default_rng(5)
        last = session.score
        for _ in range(3000):
            was_playing = session.is_playing
            tick(session, float(rng.uniform(5, 40)), pointer_x=float(rng.uniform(0, 800)))
            if was_playing:
                assert session.score >= last
            else:
                assert session.score == last
            last = session.score


# ============================================================================
# Difficulty
# ============================================================================


class TestDifficulty:
    """Difficulty controller"""

    def test_exactly_two_steps_for_jittered_25_seconds(self):
        session = playing_session(spawn_prob_step=0.0)
        rng = np.random.default_rng(42)
        deltas = rng.uniform(1.0, 60.0, size=1000)
        deltas = deltas / deltas.sum() * 25_000.0

        steps = 0
        for dt in deltas:
            steps += tick(session, float(dt)).difficulty_steps

        assert session.elapsed_ms == pytest.approx(25_000.0)
        assert steps == 2
        assert session.level == 3
        assert session.fall_speed == pytest.approx(session.config.base_fall_speed + 1.0)

    def test_long_frame_catches_up_whole_intervals(self):
        session = playing_session()
        session.elapsed_ms = 25_000.0
        assert update_difficulty(session) == 2
        assert update_difficulty(session) == 0
        session.elapsed_ms = 29_999.0
        assert update_difficulty(session) == 0
        session.elapsed_ms = 30_000.0
        assert update_difficulty(session) == 1

    def test_step_values(self):
        session = playing_session(base_spawn_prob=0.02)
        apply_difficulty_step(session)
        assert session.level == 2
        assert session.fall_speed == pytest.approx(3.5)
        assert session.spawn_prob == pytest.approx(0.025)

    def test_spawn_probability_capped(self):
        session = playing_session(base_spawn_prob=0.02)
        for _ in range(50):
            apply_difficulty_step(session)
        assert session.spawn_prob == 0.05
        assert session.level == 51

    def test_no_steps_outside_playing(self):
        session = GameSession(GameConfig(), rng=np.random.default_rng(0))
        session.elapsed_ms = 50_000.0
        assert update_difficulty(session) == 0
        assert session.level == 1

    def test_level_up_emits_particles(self):
        session = playing_session()
        session.elapsed_ms = 10_000.0
        update_difficulty(session)
        assert len(session.particles) == 20


# ============================================================================
# Tick
# ============================================================================


class TestTick:
    """Whole-frame update"""

    def test_negative_delta_rejected(self):
        session = playing_session()
        with pytest.raises(ValueError):
            tick(session, -1.0)

    def test_clock_runs_in_every_state(self):
        session = GameSession(GameConfig(), rng=np.random.default_rng(0))
        tick(session, 100.0)
        assert session.clock_ms == 100.0
        assert session.elapsed_ms == 0.0

    def test_pointer_sample_applied(self):
        session = playing_session()
        tick(session, FRAME_MS, pointer_x=123.0)
        assert session.pointer_x == 123.0
        assert session.player.x < session.config.width / 2
