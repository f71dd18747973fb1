"""Galaxy Defender - falling-objects arcade game"""

from .entities import CATEGORY_TABLE, GameState, ObjectCategory
from .galaxy_env import GalaxyDefenderEnv, run_random_episode
from .mechanics import tick
from .session import GameConfig, GameSession, IllegalTransition

__all__ = [
    'CATEGORY_TABLE',
    'GameState',
    'ObjectCategory',
    'GalaxyDefenderEnv',
    'run_random_episode',
    'tick',
    'GameConfig',
    'GameSession',
    'IllegalTransition',
]
