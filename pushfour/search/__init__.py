"""Statistical game-tree search for push-four."""

from pushfour.search.tree import (
    CertainDraw,
    CertainLoss,
    CertainWin,
    Probabilistic,
    SearchTree,
    Unvisited,
)

__all__ = [
    "CertainDraw",
    "CertainLoss",
    "CertainWin",
    "Probabilistic",
    "SearchTree",
    "Unvisited",
]
