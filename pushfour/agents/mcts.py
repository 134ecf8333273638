"""Monte Carlo tree search agent (Thompson sampling + exact endgame folding)."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import numpy as np
from rich.console import Console

from pushfour.agents.base import Agent
from pushfour.engine import Board, LegalMove
from pushfour.search.tree import CertainLoss, CertainWin, SearchTree

console = Console()


@dataclass(frozen=True)
class SearchBudget:
    """How long one decision may search: a simulation count or wall-clock seconds."""

    iterations: Optional[int] = None
    duration: Optional[float] = None

    def validate(self) -> None:
        if (self.iterations is None) == (self.duration is None):
            raise ValueError("set exactly one of iterations/duration")
        if self.iterations is not None and self.iterations < 1:
            raise ValueError("iterations must be >= 1")
        if self.duration is not None and self.duration <= 0:
            raise ValueError("duration must be > 0")


class MCTSAgent(Agent):
    """
    Searches from scratch on every move.

    The loop stops when the root is proven (more search cannot change the
    answer) or the budget runs out. The budget is only checked between whole
    simulations, so a playout in flight always finishes.
    """

    def __init__(
        self,
        name: str,
        *,
        iterations: Optional[int] = None,
        duration: Optional[float] = None,
        seed: Optional[int] = None,
        verbose: bool = False,
    ) -> None:
        self.name = name
        self.budget = SearchBudget(iterations=iterations, duration=duration)
        self.budget.validate()
        self.verbose = verbose
        self._seeds = np.random.SeedSequence(seed)
        self.last_tree: Optional[SearchTree] = None

    def choose(self, board: Board) -> LegalMove:
        rng = np.random.default_rng(self._seeds.spawn(1)[0])
        tree = SearchTree(board, rng=rng)

        deadline = None
        if self.budget.duration is not None:
            deadline = time.monotonic() + self.budget.duration

        while True:
            tree.explore()
            if tree.is_certain:
                break
            if self.budget.iterations is not None and tree.iterations >= self.budget.iterations:
                break
            if deadline is not None and time.monotonic() >= deadline:
                break

        self.last_tree = tree
        if self.verbose:
            self._report(tree)
        return tree.best_move()

    def _report(self, tree: SearchTree) -> None:
        verdict = tree.verdict
        if isinstance(verdict, CertainWin):
            console.print(f"{self.name}: certain win in {verdict.depth} move(s)")
        elif isinstance(verdict, CertainLoss):
            console.print(f"{self.name}: certain loss in {verdict.depth} move(s)")
        elif verdict is not None:
            console.print(f"{self.name}: certain draw")
        else:
            console.print(f"{self.name}: {tree.iterations} simulations")
