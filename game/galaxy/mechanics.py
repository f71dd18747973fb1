"""
Per-tick game mechanics: spawning, motion, collisions, difficulty.

Every function takes the GameSession it works on. `tick` runs them in the
fixed per-frame order:

    input -> player -> spawn -> objects/particles -> collisions -> difficulty

Speeds are per reference frame (`GameConfig.frame_ms`, 60 Hz by default) and
are scaled by the real frame delta, so the game plays the same at any
refresh rate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .entities import CATEGORY_TABLE, FallingObject, ObjectCategory, Player
from .session import GameSession, SessionSummary
from .utils import circle_collide, clamp, decay, frames_for, hsl_color, rect_overlap, weighted_choice

logger = logging.getLogger(__name__)

COLLECT_COLOR = (255, 215, 0)


@dataclass
class TickResult:
    """What happened during one tick"""
    spawned: Optional[int] = None
    evicted: int = 0
    collected_points: int = 0
    difficulty_steps: int = 0
    summary: Optional[SessionSummary] = None

    @property
    def game_over(self) -> bool:
        return self.summary is not None


# ----------------------------
# Frame
# ----------------------------

def tick(session: GameSession, dt_ms: float, pointer_x: Optional[float] = None) -> TickResult:
    """Advance the session by one frame of `dt_ms` milliseconds"""
    if dt_ms < 0:
        raise ValueError(f"dt_ms must not be negative, got {dt_ms}")

    result = TickResult()
    session.clock_ms += dt_ms

    if pointer_x is not None:
        session.set_pointer(pointer_x)

    if session.is_playing:
        session.elapsed_ms += dt_ms
        update_player(session, dt_ms)
        result.spawned = spawn_logic(session)
        result.evicted = update_objects(session, dt_ms)

    # Particles keep moving on the start and game-over screens
    update_particles(session, dt_ms)

    if session.is_playing:
        points, summary = resolve_collisions(session)
        result.collected_points = points
        result.summary = summary

    if session.is_playing:
        result.difficulty_steps = update_difficulty(session)

    return result


# ----------------------------
# Player
# ----------------------------

def update_player(session: GameSession, dt_ms: float) -> None:
    """Ease the player toward the latest pointer sample"""
    cfg = session.config
    player = session.player
    frames = frames_for(dt_ms, cfg.frame_ms)
    follow = 1.0 - decay(1.0 - cfg.player_follow, frames)
    player.x += (session.pointer_x - player.x) * follow

    half = player.width / 2
    player.x = clamp(player.x, half, cfg.width - half)


# ----------------------------
# Spawner
# ----------------------------

def choose_category(session: GameSession) -> ObjectCategory:
    return weighted_choice(session.rng, CATEGORY_TABLE)


def spawn_logic(session: GameSession) -> Optional[int]:
    """Maybe spawn one object this tick; returns its handle"""
    if not session.is_playing:
        return None
    if session.rng.random() >= session.spawn_prob:
        return None
    return spawn_object(session)


def spawn_object(
    session: GameSession,
    category: Optional[ObjectCategory] = None,
    x: Optional[float] = None,
    y: Optional[float] = None,
) -> Optional[int]:
    """Take an object from the pool and place it above the top edge"""
    cfg = session.config
    rng = session.rng

    handle = session.objects.acquire()
    if handle is None:
        logger.warning("Object pool exhausted (%d active), skipping spawn", len(session.objects))
        return None

    if category is None:
        category = choose_category(session)

    obj = session.objects.get(handle)
    obj.category = category
    obj.width = cfg.object_size
    obj.height = cfg.object_size
    obj.x = x if x is not None else rng.uniform(cfg.spawn_margin, cfg.width - cfg.spawn_margin)
    obj.y = y if y is not None else cfg.spawn_y
    obj.speed = session.fall_speed + rng.uniform(0.0, cfg.fall_speed_jitter)
    obj.rotation = 0.0
    half_spin = cfg.rotation_speed_range / 2
    obj.rotation_speed = rng.uniform(-half_spin, half_spin)
    return handle


# ----------------------------
# Motion & lifecycle
# ----------------------------

def update_objects(session: GameSession, dt_ms: float) -> int:
    """Move objects down; release those fully below the playfield"""
    cfg = session.config
    frames = frames_for(dt_ms, cfg.frame_ms)
    pool = session.objects

    evicted = 0
    for handle in reversed(pool.handles()):
        obj = pool.get(handle)
        obj.y += obj.speed * frames
        obj.rotation += obj.rotation_speed * frames

        if obj.y > cfg.height + obj.height:
            pool.release(handle)
            evicted += 1
    return evicted


def update_particles(session: GameSession, dt_ms: float) -> int:
    cfg = session.config
    frames = frames_for(dt_ms, cfg.frame_ms)
    damping = decay(cfg.particle_damping, frames)
    pool = session.particles

    expired = 0
    for handle in reversed(pool.handles()):
        p = pool.get(handle)
        p.x += p.vx * frames
        p.y += p.vy * frames
        p.vx *= damping
        p.vy *= damping
        p.life -= dt_ms

        if p.life <= 0:
            pool.release(handle)
            expired += 1
    return expired


# ----------------------------
# Collisions
# ----------------------------

def collides(session: GameSession, player: Player, obj: FallingObject) -> bool:
    cfg = session.config
    if cfg.collision_mode == "circle":
        return circle_collide(
            player.x, player.y, player.width / 2,
            obj.x, obj.y, obj.width / 2 - cfg.collision_padding,
        )
    return rect_overlap(
        player.x, player.y, player.width, player.height,
        obj.x, obj.y, obj.width, obj.height,
        padding=cfg.collision_padding,
    )


def resolve_collisions(session: GameSession):
    """
    Test the player against every active object.

    Returns (points collected, summary). The first harmful hit ends the
    round and stops the scan; beneficial objects are scored and released.
    """
    if not session.is_playing:
        return 0, None

    player = session.player
    pool = session.objects
    collected = 0

    for handle in reversed(pool.handles()):
        obj = pool.get(handle)
        if not collides(session, player, obj):
            continue

        if obj.harmful:
            summary = session.game_over()
            emit_explosion(session, player.x, player.y)
            return collected, summary

        session.score += obj.points
        collected += obj.points
        emit_collect(session, obj.x, obj.y)
        pool.release(handle)

    return collected, None


# ----------------------------
# Difficulty
# ----------------------------

def apply_difficulty_step(session: GameSession) -> None:
    cfg = session.config
    session.level += 1
    session.fall_speed += cfg.fall_speed_step
    session.spawn_prob = min(cfg.spawn_prob_cap, session.spawn_prob + cfg.spawn_prob_step)


def update_difficulty(session: GameSession) -> int:
    """Apply one step per whole interval of play time; returns steps applied"""
    if not session.is_playing:
        return 0

    interval = session.config.difficulty_interval_ms
    steps = 0
    while session.elapsed_ms - session.last_difficulty_ms >= interval:
        session.last_difficulty_ms += interval
        apply_difficulty_step(session)
        steps += 1

    if steps:
        logger.info("Level %d (fall speed %.1f, spawn %.3f)",
                    session.level, session.fall_speed, session.spawn_prob)
        emit_level_up(session)
    return steps


# ----------------------------
# Effects (cosmetic)
# ----------------------------

def _emit(session, count, x, y, spread, life_ms, color_fn, size_range):
    rng = session.rng
    pool = session.particles
    emitted = 0
    for _ in range(count):
        handle = pool.acquire()
        if handle is None:
            break
        p = pool.get(handle)
        p.x = x() if callable(x) else x
        p.y = y() if callable(y) else y
        p.vx = (rng.random() - 0.5) * spread
        p.vy = (rng.random() - 0.5) * spread
        p.life = life_ms
        p.max_life = life_ms
        p.color = color_fn()
        p.size = rng.uniform(*size_range)
        emitted += 1
    return emitted


def emit_collect(session: GameSession, x: float, y: float) -> int:
    return _emit(session, 10, x, y, 6.0, 800.0, lambda: COLLECT_COLOR, (2.0, 6.0))


def emit_explosion(session: GameSession, x: float, y: float) -> int:
    rng = session.rng
    return _emit(session, 30, x, y, 10.0, 1500.0,
                 lambda: hsl_color(rng.random() * 60, 1.0, 0.6), (3.0, 9.0))


def emit_level_up(session: GameSession) -> int:
    rng = session.rng
    cfg = session.config
    return _emit(session, 20,
                 lambda: rng.random() * cfg.width,
                 lambda: rng.random() * cfg.height,
                 4.0, 1000.0,
                 lambda: hsl_color(180 + rng.random() * 60, 1.0, 0.7), (2.0, 5.0))
