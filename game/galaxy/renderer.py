"""
Frame composition and headless rasterisation.

`compose_frame` reads a GameSession and returns a list of draw primitives
in logical coordinates (origin top-left, y down). It never writes to the
session. The Arcade window draws those primitives on screen; `rasterize`
draws them into a NumPy array for `rgb_array` rendering.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, NamedTuple, Tuple, Union

import numpy as np

from .entities import GameState
from .session import GameSession

RGBA = Tuple[int, int, int, int]

BACKGROUND = (12, 12, 46)
STAR_COLOR: RGBA = (255, 255, 255, 204)
PLAYER_COLOR: RGBA = (80, 200, 120, 255)
HUD_COLOR: RGBA = (220, 220, 220, 255)
TITLE_COLOR: RGBA = (255, 215, 0, 255)
ALERT_COLOR: RGBA = (255, 90, 90, 255)

STAR_COUNT = 50


class Rect(NamedTuple):
    x: float  # left
    y: float  # top
    w: float
    h: float
    color: RGBA


class Circle(NamedTuple):
    x: float
    y: float
    radius: float
    color: RGBA


class Glyph(NamedTuple):
    """A symbol centred at (x, y); `color` is used where symbols can't be drawn"""
    text: str
    x: float
    y: float
    size: float
    rotation: float  # radians
    color: RGBA


class Label(NamedTuple):
    text: str
    x: float
    y: float
    size: int
    color: RGBA
    anchor: str = "center"  # "center" or "left"


Command = Union[Rect, Circle, Glyph, Label]


@dataclass
class Frame:
    width: int
    height: int
    background: Tuple[int, int, int] = BACKGROUND
    commands: List[Command] = field(default_factory=list)


# ----------------------------
# Composition
# ----------------------------

def starfield(clock_ms: float, width: int, height: int, count: int = STAR_COUNT) -> List[Rect]:
    """Background stars; positions depend only on the clock"""
    stars = []
    for i in range(count):
        x = (i * 137.5) % width
        y = (i * 73.3 + clock_ms * 0.05) % height
        size = (i % 3) + 1
        stars.append(Rect(x, y, size, size, STAR_COLOR))
    return stars


def compose_frame(session: GameSession) -> Frame:
    cfg = session.config
    frame = Frame(cfg.width, cfg.height)
    cmds = frame.commands

    cmds.extend(starfield(session.clock_ms, cfg.width, cfg.height))

    if session.state is GameState.PLAYING:
        for obj in session.objects.values():
            spec = obj.spec
            cmds.append(Glyph(spec.symbol, obj.x, obj.y, obj.width, obj.rotation,
                              spec.color + (255,)))

        player = session.player
        hover = math.sin(session.elapsed_ms * 0.005) * 2
        cmds.append(Glyph(player.symbol, player.x, player.y + hover, player.width, 0.0,
                          PLAYER_COLOR))

    for p in session.particles.values():
        alpha = int(round(255 * p.alpha))
        cmds.append(Circle(p.x, p.y, p.size, p.color + (alpha,)))

    cmds.extend(_overlay(session))
    return frame


def _overlay(session: GameSession) -> List[Label]:
    cfg = session.config
    cx = cfg.width / 2
    cy = cfg.height / 2

    if session.state is GameState.START:
        return [
            Label("GALAXY DEFENDER", cx, cy - 60, 40, TITLE_COLOR),
            Label("Dodge asteroids and UFOs, collect stars", cx, cy, 18, HUD_COLOR),
            Label("Click or press SPACE to start", cx, cy + 40, 18, HUD_COLOR),
            Label(f"Best: {session.best_score}", cx, cy + 90, 16, HUD_COLOR),
        ]

    if session.state is GameState.PLAYING:
        return [
            Label(f"Score: {session.score}", 12, 20, 16, HUD_COLOR, "left"),
            Label(f"Time: {session.survival_seconds}", 12, 44, 16, HUD_COLOR, "left"),
            Label(f"Level: {session.level}", 12, 68, 16, HUD_COLOR, "left"),
        ]

    summary = session.summary
    labels = [Label("GAME OVER", cx, cy - 90, 40, ALERT_COLOR)]
    if summary is not None:
        labels += [
            Label(f"Score: {summary.score}", cx, cy - 30, 20, HUD_COLOR),
            Label(f"Survived: {summary.survival_seconds}s", cx, cy, 20, HUD_COLOR),
            Label(f"Level: {summary.level}", cx, cy + 30, 20, HUD_COLOR),
            Label(f"Best: {summary.best_score}" + ("  NEW!" if summary.new_best else ""),
                  cx, cy + 60, 20, TITLE_COLOR if summary.new_best else HUD_COLOR),
        ]
    labels.append(Label("Click or press SPACE to play again", cx, cy + 110, 18, HUD_COLOR))
    return labels


# ----------------------------
# Rasterisation
# ----------------------------

def _blend(canvas: np.ndarray, mask, color: RGBA) -> None:
    alpha = color[3] / 255.0
    if alpha <= 0:
        return
    rgb = np.asarray(color[:3], dtype=np.float32)
    region = canvas[mask]
    canvas[mask] = region * (1.0 - alpha) + rgb * alpha


def _disc_mask(height: int, width: int, x: float, y: float, radius: float):
    yy, xx = np.ogrid[:height, :width]
    return (xx - x) ** 2 + (yy - y) ** 2 <= radius * radius


def rasterize(frame: Frame) -> np.ndarray:
    """Render a frame to an (height, width, 3) uint8 array; labels are skipped"""
    h, w = frame.height, frame.width
    canvas = np.empty((h, w, 3), dtype=np.float32)
    canvas[:, :] = frame.background

    for cmd in frame.commands:
        if isinstance(cmd, Rect):
            x0 = max(0, int(math.floor(cmd.x)))
            y0 = max(0, int(math.floor(cmd.y)))
            x1 = min(w, int(math.ceil(cmd.x + cmd.w)))
            y1 = min(h, int(math.ceil(cmd.y + cmd.h)))
            if x0 < x1 and y0 < y1:
                _blend(canvas, (slice(y0, y1), slice(x0, x1)), cmd.color)
        elif isinstance(cmd, Circle):
            _blend(canvas, _disc_mask(h, w, cmd.x, cmd.y, max(cmd.radius, 0.5)), cmd.color)
        elif isinstance(cmd, Glyph):
            _blend(canvas, _disc_mask(h, w, cmd.x, cmd.y, cmd.size * 0.4), cmd.color)

    return np.clip(canvas, 0, 255).astype(np.uint8)
