"""Random playout policy shared by the search tree and the baseline agent."""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from pushfour.engine import Board, LegalMove, Outcome

LOSS = 0.0
DRAW = 0.5
WIN = 1.0


def sample_move(b: Board, rng: np.random.Generator) -> Tuple[int, int, LegalMove]:
    """
    Pick a winning move if there is one, else a uniformly random legal move.

    Single pass over `legal_moves_iter()` with reservoir sampling. Returns
    (index of the chosen move, number of moves seen, move). The count is only
    complete when no winning move cut the scan short.
    """

    chosen: Optional[LegalMove] = None
    index = 0
    n = 0
    for i, m in enumerate(b.legal_moves_iter()):
        n += 1
        if m.is_winning:
            return i, n, m
        if rng.integers(n) == 0:
            index = i
            chosen = m
    assert chosen is not None, "no legal move on an ongoing board"
    return index, n, chosen


def random_playout(b: Board, rng: np.random.Generator) -> float:
    """
    Play `b` out to the end and score it for the player who moved last.

    `b` is consumed; pass a copy if the caller still needs it.
    """

    assert b.outcome is Outcome.ONGOING
    # The opponent of the last mover is to play first.
    ours = False
    while True:
        _, _, m = sample_move(b, rng)
        outcome = b.make_legal_move(m)
        if outcome is Outcome.WON:
            return WIN if ours else LOSS
        if outcome is Outcome.DRAWN:
            return DRAW
        ours = not ours
