"""
Configuration for the Galaxy Defender game and environment
"""

# Gameplay parameters (GameConfig keyword arguments)
GAME_CONFIG = {
    "width": 800,
    "height": 600,
    "frame_ms": 1000 / 60,
    "base_fall_speed": 3.0,
    "fall_speed_step": 0.5,
    "base_spawn_prob": 0.02,
    "spawn_prob_step": 0.005,
    "spawn_prob_cap": 0.05,
    "difficulty_interval_ms": 10000.0,
    "collision_mode": "rect",
}

# ==============================================================================
# REWARD SHAPING
# ==============================================================================

REWARD_CONFIG = {
    "reward_collect": 1.0,   # per 50-point star
    "reward_alive": 0.001,   # per step survived
    "reward_crash": 5.0,     # on game over
}

# Environment parameters (GalaxyDefenderEnv keyword arguments)
ENV_CONFIG = {
    # "render_mode": None,  # set per script
    "width": GAME_CONFIG["width"],
    "height": GAME_CONFIG["height"],
    "frame_ms": GAME_CONFIG["frame_ms"],
    "max_steps": 3600,  # 60 seconds at 60 FPS
    "n_pointer_bins": 16,
    "k_objects": 5,
    "collision_mode": GAME_CONFIG["collision_mode"],
    "base_spawn_prob": GAME_CONFIG["base_spawn_prob"],
    "spawn_prob_cap": GAME_CONFIG["spawn_prob_cap"],
    "difficulty_interval_ms": GAME_CONFIG["difficulty_interval_ms"],
    **REWARD_CONFIG,
}

# ==============================================================================
# EVALUATION
# ==============================================================================

EVAL_CONFIG = {
    "n_episodes": 10,
    "seed": 42,
    "policies": ["random", "center", "dodge"],
}


if __name__ == "__main__":
    print("Environment config:")
    for key, value in ENV_CONFIG.items():
        print(f"  {key:24} {value}")
