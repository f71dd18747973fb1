"""
Game entity dataclasses and the falling-object category table
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

Color = Tuple[int, int, int]


class GameState(Enum):
    """Session state machine: START -> PLAYING -> GAME_OVER -> PLAYING ..."""
    START = "start"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class ObjectCategory(Enum):
    """Kinds of falling objects, in selection order"""
    STAR = "star"
    ASTEROID = "asteroid"
    UFO = "ufo"


@dataclass(frozen=True)
class CategorySpec:
    """Static properties shared by every object of one category"""
    symbol: str
    points: int
    harmful: bool
    weight: float
    color: Color  # used when the symbol cannot be drawn (rgb_array frames)


CATEGORY_TABLE: Dict[ObjectCategory, CategorySpec] = {
    ObjectCategory.STAR: CategorySpec("⭐", 50, False, 0.40, (255, 215, 0)),
    ObjectCategory.ASTEROID: CategorySpec("☄️", 0, True, 0.35, (170, 120, 90)),
    ObjectCategory.UFO: CategorySpec("\U0001f6f8", 0, True, 0.25, (180, 90, 220)),
}


def validate_category_table(table: Dict[ObjectCategory, CategorySpec]) -> None:
    """Raise ValueError unless the table is non-empty with weights summing to 1"""
    if not table:
        raise ValueError("category table is empty")
    total = sum(spec.weight for spec in table.values())
    if abs(total - 1.0) > 1e-9:
        raise ValueError(f"category weights must sum to 1, got {total}")
    for category, spec in table.items():
        if spec.weight < 0:
            raise ValueError(f"negative weight for {category.value}")


validate_category_table(CATEGORY_TABLE)


@dataclass
class Player:
    """Player rocket; y stays fixed, x follows the pointer"""
    x: float
    y: float
    width: float = 40.0
    height: float = 40.0
    symbol: str = "\U0001f680"


@dataclass
class FallingObject:
    """Object falling from the top edge (pooled, so every field has a default)"""
    x: float = 0.0
    y: float = 0.0
    width: float = 35.0
    height: float = 35.0
    speed: float = 0.0  # px per reference frame
    category: ObjectCategory = ObjectCategory.STAR
    rotation: float = 0.0  # radians
    rotation_speed: float = 0.0

    @property
    def spec(self) -> CategorySpec:
        return CATEGORY_TABLE[self.category]

    @property
    def harmful(self) -> bool:
        return self.spec.harmful

    @property
    def points(self) -> int:
        return self.spec.points

    @property
    def symbol(self) -> str:
        return self.spec.symbol


@dataclass
class Particle:
    """Cosmetic particle; never takes part in collisions"""
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    life: float = 0.0  # ms left
    max_life: float = 1.0
    color: Color = (255, 255, 255)
    size: float = 2.0

    @property
    def alpha(self) -> float:
        if self.max_life <= 0:
            return 0.0
        return max(0.0, min(1.0, self.life / self.max_life))


def reset_object(obj: FallingObject) -> None:
    """Return a released object to its blank pooled state"""
    obj.x = 0.0
    obj.y = 0.0
    obj.speed = 0.0
    obj.category = ObjectCategory.STAR
    obj.rotation = 0.0
    obj.rotation_speed = 0.0


def reset_particle(particle: Particle) -> None:
    """Return a released particle to its blank pooled state"""
    particle.x = 0.0
    particle.y = 0.0
    particle.vx = 0.0
    particle.vy = 0.0
    particle.life = 0.0
    particle.max_life = 1.0
