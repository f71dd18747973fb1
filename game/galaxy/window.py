"""
Interactive Arcade window: the frame driver for human play.

Arcade calls `on_update` then `on_draw` once per refresh. The window keeps
the latest pointer sample, runs one `tick` per update and draws the frame
composed by the renderer.

Run:
    python -m game.galaxy.window
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from typing import List, Optional

import numpy as np
import arcade

from .entities import GameState
from .highscore import DEFAULT_PATH, HighScoreStore
from .mechanics import tick
from .renderer import Circle, Frame, Glyph, Label, Rect, compose_frame
from .session import COLLISION_MODES, GameConfig, GameSession

logger = logging.getLogger(__name__)

# Longest frame fed to the game; a stalled window resumes instead of fast-forwarding
MAX_FRAME_MS = 250.0


def draw_frame(frame: Frame) -> None:
    """Draw renderer primitives, flipping logical y-down to Arcade's y-up"""
    h = frame.height
    for cmd in frame.commands:
        if isinstance(cmd, Rect):
            arcade.draw_lrbt_rectangle_filled(
                cmd.x, cmd.x + cmd.w, h - (cmd.y + cmd.h), h - cmd.y, cmd.color
            )
        elif isinstance(cmd, Circle):
            arcade.draw_circle_filled(cmd.x, h - cmd.y, cmd.radius, cmd.color)
        elif isinstance(cmd, Glyph):
            arcade.draw_text(
                cmd.text, cmd.x, h - cmd.y, arcade.color.WHITE, cmd.size * 0.75,
                anchor_x="center", anchor_y="center",
                rotation=math.degrees(cmd.rotation),
            )
        elif isinstance(cmd, Label):
            arcade.draw_text(
                cmd.text, cmd.x, h - cmd.y, cmd.color, cmd.size,
                anchor_x=cmd.anchor, anchor_y="center",
            )


class GalaxyWindow(arcade.Window):
    """Arcade window that plays (or just shows) a GameSession"""

    def __init__(
        self,
        session: GameSession,
        store: Optional[HighScoreStore] = None,
        interactive: bool = True,
        max_frame_ms: float = MAX_FRAME_MS,
    ):
        cfg = session.config
        super().__init__(cfg.width, cfg.height, "Galaxy Defender",
                         update_rate=cfg.frame_ms / 1000.0)
        self.background_color = (12, 12, 46)

        self.session = session
        self.store = store
        self.interactive = interactive
        self.max_frame_ms = max_frame_ms
        self._pointer_x: Optional[float] = None

    # ----------------------------
    # Input
    # ----------------------------

    def on_mouse_motion(self, x, y, dx, dy):
        self._pointer_x = x

    def on_mouse_press(self, x, y, button, modifiers):
        self.trigger()

    def on_key_press(self, symbol, modifiers):
        if symbol == arcade.key.SPACE:
            self.trigger()
        elif symbol == arcade.key.ESCAPE:
            self.close()

    def trigger(self) -> None:
        """Start or restart, depending on the current state"""
        if not self.interactive:
            return
        if self.session.state is GameState.START:
            self.session.start()
        elif self.session.state is GameState.GAME_OVER:
            self.session.restart()

    # ----------------------------
    # Frame
    # ----------------------------

    def on_update(self, delta_time: float):
        if not self.interactive:
            return
        dt_ms = min(delta_time * 1000.0, self.max_frame_ms)
        try:
            result = tick(self.session, dt_ms, self._pointer_x)
        except Exception:
            logger.exception("Tick failed, continuing with the next frame")
            return

        if result.summary is not None and result.summary.new_best and self.store is not None:
            try:
                self.store.submit(result.summary.score)
            except OSError as e:
                logger.warning("Could not save high score: %s", e)

    def on_draw(self):
        self.clear()
        draw_frame(compose_frame(self.session))


# ----------------------------
# Entry point
# ----------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play Galaxy Defender")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--collision", choices=COLLISION_MODES, default="rect",
                        help="Collision test used for the whole session")
    parser.add_argument("--highscore", type=str, default=str(DEFAULT_PATH),
                        help="Path of the high score file")
    parser.add_argument("--no-highscore", action="store_true",
                        help="Do not read or write the high score file")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        store = None if args.no_highscore else HighScoreStore(args.highscore)
        session = GameSession(
            GameConfig(collision_mode=args.collision),
            rng=np.random.default_rng(args.seed),
            best_score=store.load() if store is not None else 0,
        )
        window = GalaxyWindow(session, store=store)
    except Exception as e:
        logger.exception("Failed to initialize Galaxy Defender")
        print(f"Failed to start the game: {e}", file=sys.stderr)
        return 1

    logger.info("Galaxy Defender initialized (%dx%d)", window.width, window.height)
    arcade.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
