"""
GalaxyDefenderEnv - the falling-objects arcade game as an RL environment
-------------------------------------------------------------------------
- Gymnasium API over the same GameSession the interactive window plays
- 1 agent that steers the rocket by choosing a pointer position
- Stars give points, any asteroid or UFO ends the episode
- Vector observation: player state + difficulty + top-K nearest objects
- Discrete action space: pointer bin across the playfield width
- rgb_array frames rasterised with NumPy, human mode through Arcade

Install:
    pip install gymnasium arcade numpy

Quick test:
    python -m game.galaxy.galaxy_env
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .entities import GameState
from .mechanics import tick
from .renderer import compose_frame, rasterize
from .session import GameConfig, GameSession
from .utils import clamp


class GalaxyDefenderEnv(gym.Env):
    """Galaxy Defender environment (rendering with NumPy or Arcade)"""

    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 60}

    def __init__(
        self,
        render_mode: Optional[str] = None,
        width: int = 800,
        height: int = 600,
        frame_ms: float = 1000.0 / 60.0,
        max_steps: int = 3600,  # 60s at 60 FPS
        n_pointer_bins: int = 16,
        k_objects: int = 5,
        collision_mode: str = "rect",
        base_spawn_prob: float = 0.02,
        spawn_prob_cap: float = 0.05,
        difficulty_interval_ms: float = 10000.0,
        reward_collect: float = 1.0,  # per 50 points
        reward_alive: float = 0.001,
        reward_crash: float = 5.0,
    ):
        super().__init__()

        assert render_mode is None or render_mode in self.metadata["render_modes"]
        self.render_mode = render_mode

        self.game_config = GameConfig(
            width=width,
            height=height,
            frame_ms=frame_ms,
            collision_mode=collision_mode,
            base_spawn_prob=base_spawn_prob,
            spawn_prob_cap=spawn_prob_cap,
            difficulty_interval_ms=difficulty_interval_ms,
        )
        self.max_steps = max_steps

        # Fastest object an episode can see: every difficulty step reachable in
        # max_steps frames applied, plus full speed jitter
        cfg = self.game_config
        max_levels = int(max_steps * cfg.frame_ms // cfg.difficulty_interval_ms)
        self.max_speed = (cfg.base_fall_speed + cfg.fall_speed_jitter
                          + max_levels * cfg.fall_speed_step)
        self.n_pointer_bins = n_pointer_bins
        self.k_objects = k_objects

        self.reward_collect = reward_collect
        self.reward_alive = reward_alive
        self.reward_crash = reward_crash

        # Action: index of the pointer bin the rocket should steer to
        self.action_space = spaces.Discrete(self.n_pointer_bins)

        # Observation (vector)
        # Player: x(1) fall speed(1) spawn prob(1)
        # Each object: rel pos(2) speed(1) harmful(1)
        obs_dim = 3 + self.k_objects * 4
        self.observation_space = spaces.Box(
            low=-1.0, high=1.0, shape=(obs_dim,), dtype=np.float32
        )

        self._window = None
        self._best_score = 0

        self.session: GameSession = None  # type: ignore
        self._step_count = 0

    # ----------------------------
    # Gym API
    # ----------------------------

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)

        if self.session is not None:
            self._best_score = self.session.best_score

        self.session = GameSession(self.game_config, rng=self.np_random, best_score=self._best_score)
        self.session.start()
        self._step_count = 0

        if self.render_mode == "human":
            self.render()

        return self._get_obs(), self._get_info()

    def step(self, action):
        prev_score = self.session.score
        pointer_x = self.pointer_for_action(int(action))

        result = tick(self.session, self.game_config.frame_ms, pointer_x)

        reward = self.reward_alive
        reward += self.reward_collect * (self.session.score - prev_score) / 50.0
        if result.game_over:
            reward -= self.reward_crash

        terminated = self.session.state is GameState.GAME_OVER
        self._step_count += 1
        truncated = self._step_count >= self.max_steps

        if self.render_mode == "human":
            self.render()

        return self._get_obs(), float(reward), terminated, truncated, self._get_info()

    def pointer_for_action(self, action: int) -> float:
        """Logical x at the centre of pointer bin `action`"""
        action = int(clamp(action, 0, self.n_pointer_bins - 1))
        return (action + 0.5) * self.game_config.width / self.n_pointer_bins

    # ----------------------------
    # Observation / info
    # ----------------------------

    def _get_obs(self) -> np.ndarray:
        cfg = self.game_config
        s = self.session
        player = s.player

        max_speed = self.max_speed

        obs_parts = [
            (player.x / cfg.width) * 2 - 1,
            clamp(s.fall_speed / max_speed, 0, 1) * 2 - 1,
            (s.spawn_prob / max(1e-6, cfg.spawn_prob_cap)) * 2 - 1,
        ]

        objects_sorted = sorted(
            s.objects.values(),
            key=lambda o: (o.x - player.x) ** 2 + (o.y - player.y) ** 2
        )
        for i in range(self.k_objects):
            if i < len(objects_sorted):
                o = objects_sorted[i]
                obs_parts += [
                    clamp((o.x - player.x) / cfg.width, -1, 1),
                    clamp((o.y - player.y) / cfg.height, -1, 1),
                    clamp(o.speed / max_speed, 0, 1),
                    1.0 if o.harmful else -1.0,
                ]
            else:
                obs_parts += [0.0, 0.0, 0.0, 0.0]

        return np.clip(np.array(obs_parts, dtype=np.float32), -1.0, 1.0)

    def _get_info(self) -> Dict[str, Any]:
        s = self.session
        return {
            "score": s.score,
            "elapsed_ms": s.elapsed_ms,
            "survival_seconds": s.survival_seconds,
            "level": s.level,
            "best_score": s.best_score,
            "num_objects": len(s.objects),
            "num_particles": len(s.particles),
            "state": s.state.value,
            "step": self._step_count,
        }

    # ----------------------------
    # Rendering
    # ----------------------------

    def render(self):
        if self.render_mode is None:
            return None

        if self.render_mode == "rgb_array":
            return rasterize(compose_frame(self.session))

        if self._window is None:
            # Imported lazily so headless use never needs a display
            from .window import GalaxyWindow
            self._window = GalaxyWindow(self.session, interactive=False)

        self._window.session = self.session
        self._window.dispatch_events()
        self._window.on_draw()
        self._window.flip()
        return None

    def close(self):
        if self._window is not None:
            self._window.close()
            self._window = None


# ----------------------------
# Quick sanity test
# ----------------------------

def run_random_episode(render: bool = True, seed: Optional[int] = 42) -> Dict[str, Any]:
    """Run one random-pointer episode; returns the final info dict"""
    env = GalaxyDefenderEnv(render_mode="human" if render else None)
    obs, info = env.reset(seed=seed)

    terminated = False
    truncated = False
    total = 0.0

    while not (terminated or truncated):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total += reward

    print(f"Random episode return: {total:.3f}  score: {info['score']}  "
          f"survived: {info['survival_seconds']}s  level: {info['level']}")
    env.close()
    info["return"] = total
    return info


if __name__ == "__main__":
    run_random_episode(render=True)
