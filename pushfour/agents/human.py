"""Human-in-the-loop agent that defers input handling to a CLI prompt function."""

from __future__ import annotations

from typing import Callable

from pushfour.agents.base import Agent
from pushfour.engine import Board, LegalMove

PromptFn = Callable[[Board, str], LegalMove]


class HumanAgent(Agent):
    def __init__(self, name: str, prompt_fn: PromptFn) -> None:
        self.name = name
        self.prompt_fn = prompt_fn

    def choose(self, board: Board) -> LegalMove:
        return self.prompt_fn(board, self.name)
