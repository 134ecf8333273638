"""CLI rendering, input helpers and game/match loops for push-four."""

from __future__ import annotations

import re
from typing import Dict, List, Optional

import numpy as np
import typer
from rich.console import Console
from rich.table import Table
from tqdm import trange

from pushfour.agents import Agent, HumanAgent, MCTSAgent, RandomAgent
from pushfour.engine import Board, Entry, GameConfig, LegalMove, Move, Outcome, Side
from pushfour.search.tree import SearchTree

app = typer.Typer(no_args_is_help=True)
console = Console()

AGENT_KINDS = ("human", "random", "mcts")

_SYMBOLS = {
    Entry.EMPTY: ".",
    Entry.BLOCK: "#",
    Entry.PLAYER1: "X",
    Entry.PLAYER2: "O",
}

_SIDES = {
    "n": Side.NORTH,
    "north": Side.NORTH,
    "e": Side.EAST,
    "east": Side.EAST,
    "s": Side.SOUTH,
    "south": Side.SOUTH,
    "w": Side.WEST,
    "west": Side.WEST,
}

_MOVE_RE = re.compile(r"^\s*([a-z]+)\s*(\d+)\s*$", re.IGNORECASE)


def render_board(b: Board) -> str:
    width = len(str(b.size - 1))
    lines: List[str] = [" " * (width + 1) + " ".join(f"{c:>{width}}" for c in range(b.size))]
    for r in range(b.size):
        cells = " ".join(f"{_SYMBOLS[b.get(r, c)]:>{width}}" for c in range(b.size))
        lines.append(f"{r:>{width}} {cells}")
    return "\n".join(lines)


def symbol(entry: Entry) -> str:
    return _SYMBOLS[entry]


def parse_move(raw: str, size: int) -> Optional[Move]:
    match = _MOVE_RE.match(raw)
    if match is None:
        return None
    side = _SIDES.get(match.group(1).lower())
    if side is None:
        return None
    offset = int(match.group(2))
    if not 0 <= offset < size:
        return None
    return Move(side, offset)


def prompt_for_human_move(b: Board, name: str) -> LegalMove:
    prompt = f"{name} ({symbol(b.active)}) to move. Side and offset, e.g. 'n {b.size // 2}'"

    while True:
        raw = typer.prompt(prompt)
        m = parse_move(raw, b.size)
        if m is None:
            console.print(f"Enter a side (n/e/s/w) and an offset in [0, {b.size - 1}].")
            continue
        lm = m.annotated(b)
        if lm is None:
            console.print("Illegal move: entry cell is occupied.")
            continue
        return lm


def _print_root_stats(tree: SearchTree) -> None:
    rows = tree.root_stats()
    if not rows:
        return
    table = Table(title="Root stats (MCTS)")
    table.add_column("move", justify="left")
    table.add_column("status", justify="left")
    table.add_column("P(win)", justify="right")
    table.add_column("plays", justify="right")
    for row in sorted(rows, key=lambda r: r.plays, reverse=True):
        table.add_row(str(row.move), row.status, f"{row.value:.3f}", f"{row.plays:.1f}")
    console.print(table)


def play_game(
    b: Board,
    p1: Agent,
    p2: Agent,
    *,
    show: bool = True,
    show_root_stats: bool = False,
) -> Outcome:
    """Run the game loop on `b` until it is won or drawn."""

    while b.outcome is Outcome.ONGOING:
        if show:
            console.print(render_board(b))
        agent = p1 if b.active is Entry.PLAYER1 else p2
        mover = b.active
        m = agent.choose(b)
        if show_root_stats and isinstance(agent, MCTSAgent) and agent.last_tree is not None:
            _print_root_stats(agent.last_tree)
        b.make_legal_move(m)
        if show:
            console.print(f"Move: {symbol(mover)} {m}")
            console.print("")

    if show:
        console.print(render_board(b))
        if b.outcome is Outcome.DRAWN:
            console.print("Result: draw")
        else:
            winner = p1 if b.winner is Entry.PLAYER1 else p2
            console.print(f"Result: {winner.name} ({symbol(b.winner)}) wins")
    return b.outcome


def play_match(
    cfg: GameConfig,
    p1: Agent,
    p2: Agent,
    *,
    games: int,
    seed: Optional[int] = None,
) -> Dict[str, int]:
    """
    Play `games` games on freshly generated boards and tally the results.

    The agents take turns moving first. Agent names must differ.
    """

    if p1.name == p2.name:
        raise ValueError("agent names must differ")
    cfg.validate()
    rng = np.random.default_rng(seed)
    tally = {p1.name: 0, p2.name: 0, "draw": 0}

    for g in trange(games, desc="games"):
        b = cfg.new_board(rng)
        first, second = (p1, p2) if g % 2 == 0 else (p2, p1)
        outcome = play_game(b, first, second, show=False)
        if outcome is Outcome.DRAWN:
            tally["draw"] += 1
        else:
            winner = first if b.winner is Entry.PLAYER1 else second
            tally[winner.name] += 1
    return tally


def build_agent(
    kind: str,
    name: str,
    *,
    seed: Optional[int] = None,
    iterations: Optional[int] = None,
    duration: Optional[float] = None,
    verbose: bool = False,
) -> Agent:
    if kind == "human":
        return HumanAgent(name, prompt_for_human_move)
    if kind == "random":
        return RandomAgent(f"Random {name}", seed=seed)
    if kind == "mcts":
        if iterations is None and duration is None:
            iterations = 1_000
        return MCTSAgent(
            f"MCTS {name}",
            iterations=iterations,
            duration=duration,
            seed=seed,
            verbose=verbose,
        )
    raise ValueError(f"unsupported agent choice: {kind}")


def _pick_seed(base: Optional[int], *, offset: int) -> Optional[int]:
    if base is None:
        return None
    return base + offset


def _build_pair(
    p1: str,
    p2: str,
    *,
    seed: Optional[int],
    iterations: Optional[int],
    duration: Optional[float],
    verbose: bool,
) -> List[Agent]:
    agents: List[Agent] = []
    for i, kind in enumerate((p1, p2)):
        if kind not in AGENT_KINDS:
            raise typer.BadParameter(f"agent must be one of {', '.join(AGENT_KINDS)}")
        try:
            agents.append(
                build_agent(
                    kind,
                    f"P{i + 1}",
                    seed=_pick_seed(seed, offset=i + 1),
                    iterations=iterations,
                    duration=duration,
                    verbose=verbose,
                )
            )
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    return agents


def _game_config(size: int, blocks: int) -> GameConfig:
    cfg = GameConfig(size=size, blocks=blocks)
    try:
        cfg.validate()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return cfg


@app.command()
def play(
    p1: str = typer.Option("human", help="Agent for X: human|random|mcts."),
    p2: str = typer.Option("mcts", help="Agent for O: human|random|mcts."),
    size: int = typer.Option(10, help="Board size N (N x N grid)."),
    blocks: int = typer.Option(10, help="Number of fixed blocks placed at random."),
    seed: Optional[int] = typer.Option(None, help="Base random seed (board + agents)."),
    iterations: Optional[int] = typer.Option(None, help="MCTS simulations per move."),
    duration: Optional[float] = typer.Option(None, help="MCTS seconds per move (instead of --iterations)."),
    show_root_stats: bool = typer.Option(
        False, "--show-root-stats", help="Print root child stats after each MCTS move."
    ),
) -> None:
    """Play one game on a freshly generated board."""
    cfg = _game_config(size, blocks)
    x_agent, o_agent = _build_pair(
        p1, p2, seed=seed, iterations=iterations, duration=duration, verbose=True
    )
    b = cfg.new_board(np.random.default_rng(seed))
    play_game(b, x_agent, o_agent, show_root_stats=show_root_stats)


@app.command()
def match(
    p1: str = typer.Option("mcts", help="First agent: random|mcts."),
    p2: str = typer.Option("random", help="Second agent: random|mcts."),
    games: int = typer.Option(10, help="Number of games to play."),
    size: int = typer.Option(10, help="Board size N (N x N grid)."),
    blocks: int = typer.Option(10, help="Number of fixed blocks placed at random."),
    seed: Optional[int] = typer.Option(None, help="Base random seed (boards + agents)."),
    iterations: Optional[int] = typer.Option(None, help="MCTS simulations per move."),
    duration: Optional[float] = typer.Option(None, help="MCTS seconds per move (instead of --iterations)."),
) -> None:
    """Play a series of games between two agents and summarise the results."""
    if "human" in (p1, p2):
        raise typer.BadParameter("match needs non-interactive agents")
    if games < 1:
        raise typer.BadParameter("games must be >= 1")
    cfg = _game_config(size, blocks)
    a1, a2 = _build_pair(p1, p2, seed=seed, iterations=iterations, duration=duration, verbose=False)
    tally = play_match(cfg, a1, a2, games=games, seed=seed)

    table = Table(title=f"Match results ({games} games, {size}x{size}, {blocks} blocks)")
    table.add_column("result", justify="left")
    table.add_column("games", justify="right")
    table.add_column("share", justify="right")
    for key, count in tally.items():
        table.add_row(key, str(count), f"{count / games:.2f}")
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
