"""
Session context: configuration, state machine and per-round metrics.

A GameSession is the one piece of mutable game state. Mechanics and the
renderer receive it explicitly; nothing is kept at module level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from .entities import (
    FallingObject,
    GameState,
    Particle,
    Player,
    reset_object,
    reset_particle,
)
from .pool import SlotPool
from .utils import clamp

logger = logging.getLogger(__name__)

COLLISION_MODES = ("rect", "circle")


class IllegalTransition(RuntimeError):
    """Raised when a state change is not allowed from the current state"""


@dataclass
class GameConfig:
    """Gameplay tunables (logical px, ms, and per-reference-frame speeds)"""
    width: int = 800
    height: int = 600
    frame_ms: float = 1000.0 / 60.0

    # Player
    player_size: float = 40.0
    player_offset: float = 80.0  # distance of player centre from the bottom edge
    player_follow: float = 0.1

    # Falling objects
    object_size: float = 35.0
    spawn_y: float = -40.0
    spawn_margin: float = 20.0
    base_fall_speed: float = 3.0
    fall_speed_jitter: float = 2.0
    rotation_speed_range: float = 0.1
    max_objects: int = 100

    # Spawning and difficulty
    base_spawn_prob: float = 0.02
    spawn_prob_step: float = 0.005
    spawn_prob_cap: float = 0.05
    fall_speed_step: float = 0.5
    difficulty_interval_ms: float = 10000.0

    # Collisions
    collision_mode: str = "rect"
    collision_padding: float = 5.0

    # Particles
    max_particles: int = 200
    particle_damping: float = 0.98

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"playfield must be positive, got {self.width}x{self.height}")
        if self.frame_ms <= 0:
            raise ValueError("frame_ms must be positive")
        if self.collision_mode not in COLLISION_MODES:
            raise ValueError(
                f"collision_mode must be one of {COLLISION_MODES}, got {self.collision_mode!r}"
            )
        if not 0.0 <= self.base_spawn_prob <= 1.0:
            raise ValueError("base_spawn_prob must be in [0, 1]")
        if not 0.0 <= self.spawn_prob_cap <= 1.0:
            raise ValueError("spawn_prob_cap must be in [0, 1]")
        if self.base_spawn_prob > self.spawn_prob_cap:
            raise ValueError("base_spawn_prob exceeds spawn_prob_cap")
        if self.spawn_prob_step < 0 or self.fall_speed_step < 0:
            raise ValueError("difficulty steps must not be negative")
        if self.difficulty_interval_ms <= 0:
            raise ValueError("difficulty_interval_ms must be positive")
        if not 0.0 < self.player_follow <= 1.0:
            raise ValueError("player_follow must be in (0, 1]")
        if not 0.0 <= self.particle_damping <= 1.0:
            raise ValueError("particle_damping must be in [0, 1]")
        if self.max_objects <= 0 or self.max_particles <= 0:
            raise ValueError("pool capacities must be positive")


@dataclass
class SessionSummary:
    """Figures captured at the moment a round ends"""
    score: int
    survival_seconds: int
    level: int
    best_score: int
    new_best: bool


class GameSession:
    """Everything one player's game needs between ticks"""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[np.random.Generator] = None,
        best_score: int = 0,
    ):
        self.config = config or GameConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.state = GameState.START
        self.best_score = int(best_score)
        self.summary: Optional[SessionSummary] = None

        cfg = self.config
        self.player = Player(
            x=cfg.width / 2,
            y=cfg.height - cfg.player_offset,
            width=cfg.player_size,
            height=cfg.player_size,
        )
        self.objects: SlotPool[FallingObject] = SlotPool(
            lambda: FallingObject(width=cfg.object_size, height=cfg.object_size),
            reset_object,
            cfg.max_objects,
        )
        self.particles: SlotPool[Particle] = SlotPool(Particle, reset_particle, cfg.max_particles)

        # Cosmetic clock, advances in every state (drives the starfield)
        self.clock_ms = 0.0

        self._reset_metrics()

    # ----------------------------
    # State machine
    # ----------------------------

    @property
    def is_playing(self) -> bool:
        return self.state is GameState.PLAYING

    def start(self) -> None:
        """START -> PLAYING"""
        self._require(GameState.START, "start")
        self.reset()
        self.state = GameState.PLAYING
        logger.debug("Round started")

    def restart(self) -> None:
        """GAME_OVER -> PLAYING, with a full reset"""
        self._require(GameState.GAME_OVER, "restart")
        self.reset()
        self.state = GameState.PLAYING
        logger.debug("Round restarted")

    def game_over(self) -> SessionSummary:
        """PLAYING -> GAME_OVER; freezes and returns the round summary"""
        self._require(GameState.PLAYING, "game_over")
        self.state = GameState.GAME_OVER

        new_best = self.score > self.best_score
        if new_best:
            self.best_score = self.score
        self.summary = SessionSummary(
            score=self.score,
            survival_seconds=self.survival_seconds,
            level=self.level,
            best_score=self.best_score,
            new_best=new_best,
        )
        logger.info(
            "Game over: score=%d time=%ds level=%d%s",
            self.summary.score,
            self.summary.survival_seconds,
            self.summary.level,
            " (new best)" if new_best else "",
        )
        return self.summary

    def _require(self, expected: GameState, action: str) -> None:
        if self.state is not expected:
            raise IllegalTransition(
                f"cannot {action} from {self.state.value} (requires {expected.value})"
            )

    # ----------------------------
    # Reset / input
    # ----------------------------

    def reset(self) -> None:
        """Return every per-round value to its initial state"""
        self._reset_metrics()
        self.objects.release_all()
        self.particles.release_all()
        self.summary = None

    def _reset_metrics(self) -> None:
        cfg = self.config
        self.score = 0
        self.elapsed_ms = 0.0
        self.level = 1
        self.fall_speed = cfg.base_fall_speed
        self.spawn_prob = cfg.base_spawn_prob
        self.last_difficulty_ms = 0.0

        self.player.x = cfg.width / 2
        self.player.y = cfg.height - cfg.player_offset
        self.pointer_x = cfg.width / 2

    def set_pointer(self, x: float) -> None:
        """Record the latest pointer sample, clamped so the player stays on screen"""
        half = self.player.width / 2
        self.pointer_x = clamp(float(x), half, self.config.width - half)

    # ----------------------------
    # Derived values
    # ----------------------------

    @property
    def survival_seconds(self) -> int:
        return int(self.elapsed_ms // 1000)

    def stats(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "objects": self.objects.stats(),
            "particles": self.particles.stats(),
        }
