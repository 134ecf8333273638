"""
Push-four engine: an N x N grid where pieces are pushed in from any edge.

A move names an edge (side) and an offset along it. The piece enters at the
edge cell and slides inward through empty cells until the next cell is
occupied or the board ends. Four in a row (any direction) wins; blocks are
fixed obstacles placed when the board is generated.

The board is mutated in place by the game loop and value-copied by the
search, so undoing a simulated line is just dropping the copy.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

WIN_LENGTH = 4


class Entry(enum.IntEnum):
    EMPTY = 0
    PLAYER1 = 1
    PLAYER2 = 2
    BLOCK = 3

    def is_empty(self) -> bool:
        return self is Entry.EMPTY

    def flip(self) -> "Entry":
        return _FLIPPED[self]


_FLIPPED = {
    Entry.EMPTY: Entry.BLOCK,
    Entry.BLOCK: Entry.EMPTY,
    Entry.PLAYER1: Entry.PLAYER2,
    Entry.PLAYER2: Entry.PLAYER1,
}


class Side(enum.IntEnum):
    """Board edges, in the order legal moves are enumerated."""

    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3

    @property
    def delta(self) -> Tuple[int, int]:
        # Inward step for a piece entering from this side.
        return _DELTAS[self]


_DELTAS = {
    Side.NORTH: (1, 0),
    Side.EAST: (0, -1),
    Side.SOUTH: (-1, 0),
    Side.WEST: (0, 1),
}


class Outcome(enum.Enum):
    ONGOING = "ongoing"
    DRAWN = "drawn"
    WON = "won"


class IllegalMove(ValueError):
    def __init__(self, move: "Move") -> None:
        super().__init__(f"{move}: illegal move")
        self.move = move


@dataclass(frozen=True)
class Move:
    """Unvalidated edge-entry descriptor."""

    side: Side
    offset: int

    def __str__(self) -> str:
        return f"{self.side.name[0].lower()}{self.offset}"

    def origin(self, b: "Board") -> Optional[Tuple[int, int]]:
        if not 0 <= self.offset < b.size:
            return None
        if self.side is Side.NORTH:
            return 0, self.offset
        if self.side is Side.EAST:
            return self.offset, b.size - 1
        if self.side is Side.SOUTH:
            return b.size - 1, self.offset
        return self.offset, 0

    def is_legal(self, b: "Board") -> bool:
        pos = self.origin(b)
        return pos is not None and b.get(*pos).is_empty()

    def target(self, b: "Board") -> Optional[Tuple[int, int]]:
        """
        Landing cell of the push, or None when the origin is occupied.

        Starting at the origin, follow the inward direction through empty cells
        and stop at the last empty one before an occupied cell or the far edge.
        """

        if not self.is_legal(b):
            return None
        row, col = self.origin(b)
        dr, dc = self.side.delta
        grid = b.grid
        n = b.size
        while True:
            r, c = row + dr, col + dc
            if not (0 <= r < n and 0 <= c < n) or grid[r, c] != Entry.EMPTY:
                return row, col
            row, col = r, c

    def annotated(self, b: "Board") -> Optional["LegalMove"]:
        pos = self.target(b)
        if pos is None:
            return None
        row, col = pos
        return LegalMove(move=self, row=row, col=col, is_winning=b.is_winning(row, col))


@dataclass(frozen=True)
class LegalMove:
    """
    A Move resolved against a specific board.

    Obtain one through `Move.annotated` or `Board.legal_moves_iter`; it proves
    the move was legal on that board at that instant and carries the landing
    cell so committing it needs no further search.
    """

    move: Move
    row: int
    col: int
    is_winning: bool

    @property
    def side(self) -> Side:
        return self.move.side

    @property
    def offset(self) -> int:
        return self.move.offset

    def __str__(self) -> str:
        return f"{self.move} -> ({self.row},{self.col})"


@dataclass(frozen=True)
class GameConfig:
    size: int = 10
    blocks: int = 0

    def validate(self) -> None:
        if self.size < 1:
            raise ValueError("size must be >= 1")
        if not 0 <= self.blocks <= self.size * self.size:
            raise ValueError("blocks must be in [0, size*size]")

    def new_board(self, rng: Optional[np.random.Generator] = None) -> "Board":
        self.validate()
        return Board.generate(self.size, self.blocks, rng=rng)


class Board:
    """
    Grid state plus the counters the game loop and search need.

    nlegal is the number of (side, offset) entry points whose edge cell is
    empty. A corner is the origin for two sides, so filling it removes two.
    """

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError("size must be >= 1")
        self.size = size
        self.grid = np.zeros((size, size), dtype=np.int8)
        self.active = Entry.PLAYER1
        self.nlegal = 4 * size
        self.outcome = Outcome.ONGOING

    @classmethod
    def generate(
        cls,
        size: int,
        filled: int,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> "Board":
        b = cls(size)
        if filled:
            rng = rng if rng is not None else np.random.default_rng()
            for i in rng.choice(size * size, size=filled, replace=False):
                row, col = divmod(int(i), size)
                b.set(row, col, Entry.BLOCK)
        if b.nlegal == 0:
            # Every entry cell is blocked: nobody can ever move.
            b.outcome = Outcome.DRAWN
        return b

    def copy(self) -> "Board":
        b = Board.__new__(Board)
        b.size = self.size
        b.grid = self.grid.copy()
        b.active = self.active
        b.nlegal = self.nlegal
        b.outcome = self.outcome
        return b

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return (
            self.size == other.size
            and self.active == other.active
            and self.nlegal == other.nlegal
            and self.outcome == other.outcome
            and np.array_equal(self.grid, other.grid)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Board(size={self.size}, active={self.active.name}, "
            f"nlegal={self.nlegal}, outcome={self.outcome.value})"
        )

    @property
    def winner(self) -> Optional[Entry]:
        return self.active if self.outcome is Outcome.WON else None

    def _edge_count(self, row: int, col: int) -> int:
        last = self.size - 1
        # Entry points whose origin is this cell; all four on a 1x1 board.
        return int(row == 0) + int(row == last) + int(col == 0) + int(col == last)

    def get(self, row: int, col: int) -> Entry:
        assert 0 <= row < self.size and 0 <= col < self.size, (row, col)
        return Entry(int(self.grid[row, col]))

    def set(self, row: int, col: int, entry: Entry) -> None:
        prev = self.get(row, col)
        if prev.is_empty() and not entry.is_empty():
            self.nlegal -= self._edge_count(row, col)
        elif not prev.is_empty() and entry.is_empty():
            self.nlegal += self._edge_count(row, col)
        self.grid[row, col] = entry

    def is_winning(self, row: int, col: int) -> bool:
        """
        Would the active player win by landing at (row, col)?

        Scans the row, the column and both diagonals through the cell, treating
        the cell itself as the active player's piece whatever it holds now.
        """

        active = int(self.active)
        grid = self.grid
        n = self.size
        for dr, dc in ((0, 1), (1, 0), (1, 1), (-1, 1)):
            # Walk back to the start of the line, clamped to the board.
            back = min(
                row if dr > 0 else (n - 1 - row if dr < 0 else n),
                col if dc > 0 else n,
            )
            r, c = row - dr * back, col - dc * back
            run = 0
            while 0 <= r < n and 0 <= c < n:
                if (r == row and c == col) or grid[r, c] == active:
                    run += 1
                    if run >= WIN_LENGTH:
                        return True
                else:
                    run = 0
                r += dr
                c += dc
        return False

    def legal_moves_iter(self) -> Iterator[LegalMove]:
        """
        Yield every legal move, annotated, North/East/South/West then by offset.

        This order is the index space the search tree is built against.
        """

        for side in Side:
            for offset in range(self.size):
                lm = Move(side, offset).annotated(self)
                if lm is not None:
                    yield lm

    def make_move(self, m: Move) -> Outcome:
        lm = m.annotated(self)
        if lm is None:
            raise IllegalMove(m)
        return self.make_legal_move(lm)

    def make_legal_move(self, m: LegalMove) -> Outcome:
        assert self.outcome is Outcome.ONGOING, "game is already over"
        self.set(m.row, m.col, self.active)
        if m.is_winning:
            self.outcome = Outcome.WON
        elif self.nlegal == 0:
            self.outcome = Outcome.DRAWN
        else:
            self.active = self.active.flip()
        return self.outcome

    def pass_turn(self) -> None:
        assert self.outcome is Outcome.ONGOING, "game is already over"
        self.active = self.active.flip()
