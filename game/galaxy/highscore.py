"""
Best-score persistence in a small JSON file
"""

import json
import logging
import os
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path.home() / ".galaxy_defender" / "highscore.json"


class HighScoreStore:
    """Keeps a single best score across sessions"""

    def __init__(self, path: Union[str, os.PathLike] = DEFAULT_PATH):
        self.path = Path(path)

    def load(self) -> int:
        """Stored best score; 0 if the file is missing or unreadable"""
        if not self.path.exists():
            return 0
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return max(0, int(data.get("best_score", 0)))
        except (OSError, ValueError, TypeError, AttributeError, OverflowError) as e:
            logger.warning("Ignoring unreadable high score file %s: %s", self.path, e)
            return 0

    def save(self, score: int) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"best_score": int(score)}, f)

    def submit(self, score: int) -> bool:
        """Store `score` if it beats the current best; True when it did"""
        if score <= self.load():
            return False
        self.save(score)
        logger.info("New high score %d saved to %s", score, self.path)
        return True
