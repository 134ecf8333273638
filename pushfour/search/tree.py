"""
Monte Carlo search tree with exact endgame folding.

Each node stands for a position and is one of:

  Unvisited      no simulation has reached it yet
  Probabilistic  Beta posterior over the win probability of the side to move,
                 plus one child per legal move (same order as
                 `Board.legal_moves_iter()`)
  CertainWin / CertainLoss / CertainDraw
                 proven outcome for the side to move, with the forcing depth
                 and the index of the deciding move

Scores are always from the point of view of the side to move at the node:
loss 0, draw 1/2, win 1. Going one ply down flips the point of view, so a
child's score s is worth 1 - s to its parent.

Nodes replace themselves as they learn more: `explore()` returns the node that
should occupy the slot from now on together with the score it produced, and
the caller writes the node back. Certain nodes are absorbing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import islice
from typing import ClassVar, List, Optional, Tuple, Union

import numpy as np

from pushfour.engine import Board, LegalMove, Outcome
from pushfour.search.rollout import DRAW, LOSS, WIN, random_playout, sample_move

# Jeffreys prior Beta(1/2, 1/2).
PRIOR = 0.5
PRIOR_MEAN = 0.5

# Ordinal classes used to rank children from the parent's point of view.
_FORCED_LOSS = 0
_FORCED_DRAW = 1
_OPEN = 2
_FORCED_WIN = 3

Rank = Tuple[int, float, int]


def _nth_legal_move(b: Board, index: int) -> LegalMove:
    m = next(islice(b.legal_moves_iter(), index, None), None)
    assert m is not None, f"no legal move at index {index}"
    return m


class Unvisited:
    __slots__ = ()

    def __repr__(self) -> str:
        return "Unvisited()"

    def explore(self, b: Board, rng: np.random.Generator) -> Tuple[Node, float]:
        # First visit: one move (a winning one if available), then a playout.
        index, n, m = sample_move(b, rng)
        outcome = b.make_legal_move(m)
        if outcome is Outcome.WON:
            node: Node = CertainWin(depth=1, index=index)
            return node, node.value
        if outcome is Outcome.DRAWN:
            node = CertainDraw(depth=1, index=index)
            return node, node.value
        score = random_playout(b, rng)
        return Probabilistic.seeded(n, score), score

    def rank(self, rng: Optional[np.random.Generator] = None) -> Rank:
        if rng is None:
            return (_OPEN, PRIOR_MEAN, 0)
        return (_OPEN, float(rng.beta(PRIOR, PRIOR)), 0)


UNVISITED = Unvisited()


@dataclass(frozen=True)
class Certain:
    depth: int
    index: int

    value: ClassVar[float] = DRAW

    def explore(self, b: Board, rng: np.random.Generator) -> Tuple[Node, float]:
        return self, self.value

    def best_move(self, b: Board) -> LegalMove:
        return _nth_legal_move(b, self.index)


class CertainWin(Certain):
    value = WIN

    def rank(self, rng: Optional[np.random.Generator] = None) -> Rank:
        # The parent loses here; put it off as long as possible.
        return (_FORCED_LOSS, 0.0, self.depth)


class CertainLoss(Certain):
    value = LOSS

    def rank(self, rng: Optional[np.random.Generator] = None) -> Rank:
        return (_FORCED_WIN, 0.0, -self.depth)


class CertainDraw(Certain):
    value = DRAW

    def rank(self, rng: Optional[np.random.Generator] = None) -> Rank:
        return (_FORCED_DRAW, 0.0, self.depth)


@dataclass
class Probabilistic:
    score: float
    nplay: float
    children: List[Node] = field(default_factory=list)

    @classmethod
    def seeded(cls, nchildren: int, score: float) -> "Probabilistic":
        return cls(
            score=PRIOR + score,
            nplay=2 * PRIOR + 1,
            children=[UNVISITED] * nchildren,
        )

    @property
    def mean(self) -> float:
        return self.score / self.nplay

    def rank(self, rng: Optional[np.random.Generator] = None) -> Rank:
        if rng is None:
            return (_OPEN, 1.0 - self.mean, 0)
        # Thompson sample of the parent's win probability.
        return (_OPEN, float(rng.beta(self.nplay - self.score, self.score)), 0)

    def fold(self) -> Optional[Certain]:
        """Exact verdict proven by the children, if they prove one."""

        wins: List[Tuple[int, int]] = []
        losses: List[Tuple[int, int]] = []
        draws: List[Tuple[int, int]] = []
        for i, child in enumerate(self.children):
            if isinstance(child, CertainLoss):
                wins.append((child.depth + 1, i))
            elif isinstance(child, CertainWin):
                losses.append((child.depth + 1, i))
            elif isinstance(child, CertainDraw):
                draws.append((child.depth + 1, i))

        if wins:
            return CertainWin(*min(wins))
        n = len(self.children)
        if len(losses) == n:
            return CertainLoss(*max(losses))
        if draws and len(losses) + len(draws) == n:
            return CertainDraw(*max(draws))
        return None

    def explore(self, b: Board, rng: np.random.Generator) -> Tuple[Node, float]:
        assert len(self.children) == b.nlegal, "children out of step with legal moves"
        folded = self.fold()
        if folded is not None:
            return folded, folded.value

        best: Optional[Tuple[Rank, int, LegalMove]] = None
        for i, (child, m) in enumerate(zip(self.children, b.legal_moves_iter())):
            key = child.rank(rng)
            if best is None or key > best[0]:
                best = (key, i, m)
        assert best is not None
        _, index, m = best

        b.make_legal_move(m)
        child, child_score = self.children[index].explore(b, rng)
        self.children[index] = child

        score = 1.0 - child_score
        self.score += score
        self.nplay += 1

        folded = self.fold()
        if folded is not None:
            return folded, folded.value
        return self, score

    def best_move(self, b: Board) -> LegalMove:
        assert len(self.children) == b.nlegal, "children out of step with legal moves"
        _, m = max(zip(self.children, b.legal_moves_iter()), key=lambda cm: cm[0].rank())
        return m


Node = Union[Unvisited, Probabilistic, Certain]


@dataclass(frozen=True)
class ChildStats:
    index: int
    move: LegalMove
    status: str
    value: float
    plays: float


def _status(child: Node) -> str:
    # From the point of view of the side to move at the parent.
    if isinstance(child, CertainLoss):
        return "win"
    if isinstance(child, CertainWin):
        return "loss"
    if isinstance(child, CertainDraw):
        return "draw"
    if isinstance(child, Probabilistic):
        return "open"
    return "unvisited"


class SearchTree:
    """
    Search state for a single decision.

    Built fresh from the position to decide on; every `explore()` runs one
    simulation on a private copy of the board. Once the root is proven,
    further calls do nothing.
    """

    def __init__(self, board: Board, *, rng: Optional[np.random.Generator] = None) -> None:
        assert board.outcome is Outcome.ONGOING, "cannot search a finished game"
        self.board = board.copy()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.root: Node = UNVISITED
        self.iterations = 0

    @property
    def is_certain(self) -> bool:
        return isinstance(self.root, Certain)

    @property
    def verdict(self) -> Optional[Certain]:
        return self.root if isinstance(self.root, Certain) else None

    def explore(self) -> None:
        if self.is_certain:
            return
        self.root, _ = self.root.explore(self.board.copy(), self.rng)
        self.iterations += 1

    def best_move(self) -> LegalMove:
        assert not isinstance(self.root, Unvisited), "no simulations have completed"
        return self.root.best_move(self.board)

    def root_stats(self) -> List[ChildStats]:
        if not isinstance(self.root, Probabilistic):
            return []
        rows: List[ChildStats] = []
        for i, (child, m) in enumerate(zip(self.root.children, self.board.legal_moves_iter())):
            if isinstance(child, Certain):
                value, plays = 1.0 - child.value, 0.0
            elif isinstance(child, Probabilistic):
                value, plays = 1.0 - child.mean, child.nplay
            else:
                value, plays = PRIOR_MEAN, 0.0
            rows.append(ChildStats(index=i, move=m, status=_status(child), value=value, plays=plays))
        return rows
