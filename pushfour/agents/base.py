"""Abstract base class for push-four agents."""

from __future__ import annotations

import abc

from pushfour.engine import Board, LegalMove


class Agent(abc.ABC):
    name: str

    @abc.abstractmethod
    def choose(self, board: Board) -> LegalMove:
        """Return a move that resolves on `board` as it stands."""
        raise NotImplementedError
