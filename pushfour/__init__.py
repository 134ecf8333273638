"""Push-four package (engine + search + agents + CLI)."""

from pushfour.engine import Board, Entry, GameConfig, IllegalMove, LegalMove, Move, Outcome, Side

__all__ = ["Board", "Entry", "GameConfig", "IllegalMove", "LegalMove", "Move", "Outcome", "Side"]
