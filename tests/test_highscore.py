"""
Tests for game.galaxy.highscore
"""

import json

import pytest

from game.galaxy.highscore import HighScoreStore


class TestHighScoreStore:
    """JSON best-score file"""

    def test_missing_file_is_zero(self, tmp_path):
        assert HighScoreStore(tmp_path / "none.json").load() == 0

    def test_submit_only_improves(self, tmp_path):
        store = HighScoreStore(tmp_path / "scores" / "best.json")
        assert store.submit(100) is True
        assert store.load() == 100
        assert store.submit(50) is False
        assert store.submit(100) is False
        assert store.load() == 100
        assert store.submit(150) is True
        assert json.loads(store.path.read_text()) == {"best_score": 150}

    def test_corrupt_file_is_zero(self, tmp_path):
        path = tmp_path / "best.json"
        path.write_text("{not json")
        assert HighScoreStore(path).load() == 0

    def test_wrong_shape_is_zero(self, tmp_path):
        path = tmp_path / "best.json"
        path.write_text("[1, 2, 3]")
        assert HighScoreStore(path).load() == 0

    @pytest.mark.parametrize("text", ['{"best_score": 1e400}', '{"best_score": Infinity}'])
    def test_non_finite_is_zero(self, tmp_path, text):
        path = tmp_path / "best.json"
        path.write_text(text)
        store = HighScoreStore(path)
        assert store.load() == 0
        assert store.submit(10) is True
        assert store.load() == 10

    def test_negative_clamped(self, tmp_path):
        path = tmp_path / "best.json"
        path.write_text('{"best_score": -5}')
        assert HighScoreStore(path).load() == 0
