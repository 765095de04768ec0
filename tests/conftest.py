import os
import sys

import pytest

# Ensure src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from block_fit.game import GameConfig, PuzzleGame, Ticker  # noqa: E402


@pytest.fixture
def ticker():
    return Ticker()


@pytest.fixture
def game(ticker):
    return PuzzleGame(GameConfig(random_seed=1234), ticker=ticker)
