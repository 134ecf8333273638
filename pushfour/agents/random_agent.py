"""Random baseline agent."""

from __future__ import annotations

from typing import Optional

import numpy as np

from pushfour.agents.base import Agent
from pushfour.engine import Board, LegalMove
from pushfour.search.rollout import sample_move


class RandomAgent(Agent):
    """Takes an immediate win when one exists, otherwise plays uniformly at random."""

    def __init__(self, name: str, seed: Optional[int] = None) -> None:
        self.name = name
        self.rng = np.random.default_rng(seed)

    def choose(self, board: Board) -> LegalMove:
        _, _, m = sample_move(board, self.rng)
        return m
