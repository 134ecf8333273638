"""Tests for the console front-end."""

import numpy as np
import pytest
from typer.testing import CliRunner

from pushfour import cli
from pushfour.agents import HumanAgent, MCTSAgent, RandomAgent
from pushfour.engine import Board, Entry, GameConfig, Move, Outcome, Side


runner = CliRunner()


class TestParseMove:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("n 3", Move(Side.NORTH, 3)),
            ("N3", Move(Side.NORTH, 3)),
            ("east 0", Move(Side.EAST, 0)),
            ("  s 9 ", Move(Side.SOUTH, 9)),
            ("w1", Move(Side.WEST, 1)),
        ],
    )
    def test_valid(self, raw, expected):
        assert cli.parse_move(raw, 10) == expected

    @pytest.mark.parametrize("raw", ["", "x 3", "n", "3", "n 10", "n -1", "north three"])
    def test_invalid(self, raw):
        assert cli.parse_move(raw, 10) is None


class TestRender:
    def test_symbols_and_indices(self):
        b = Board(4)
        b.set(1, 1, Entry.BLOCK)
        b.make_move(Move(Side.NORTH, 0))
        b.make_move(Move(Side.EAST, 2))
        lines = cli.render_board(b).splitlines()
        assert lines[0] == "  0 1 2 3"
        assert lines[2] == "1 . # . ."
        assert lines[3] == "2 O . . ."
        assert lines[4] == "3 X . . ."

    def test_render_is_pure(self):
        b = Board(5)
        before = b.copy()
        assert cli.render_board(b) == cli.render_board(b)
        assert b == before


class TestPrompt:
    def test_reprompts_until_legal(self, monkeypatch):
        b = Board(4)
        b.make_move(Move(Side.NORTH, 1))
        answers = iter(["bogus", "s 1", "w 2"])
        monkeypatch.setattr(cli.typer, "prompt", lambda *args, **kwargs: next(answers))
        m = cli.prompt_for_human_move(b, "alice")
        assert m.move == Move(Side.WEST, 2)


class TestGameLoop:
    def test_play_game_finishes(self, capsys):
        b = Board.generate(5, 3, rng=np.random.default_rng(4))
        outcome = cli.play_game(b, RandomAgent("a", seed=1), RandomAgent("b", seed=2))
        assert outcome in (Outcome.WON, Outcome.DRAWN)
        assert b.outcome is outcome
        assert "Result:" in capsys.readouterr().out

    def test_human_agent_in_the_loop(self):
        b = Board(4)
        moves = iter([Move(Side.NORTH, 0)] * 4)
        human = HumanAgent("human", lambda board, name: next(moves).annotated(board))
        # Player 2 keeps pushing up column 3 while Player 1 stacks column 0.
        other = HumanAgent("other", lambda board, name: Move(Side.SOUTH, 3).annotated(board))
        outcome = cli.play_game(b, human, other, show=False)
        assert outcome is Outcome.WON
        assert b.winner is Entry.PLAYER1

    def test_play_match_tallies_every_game(self):
        cfg = GameConfig(size=5, blocks=2)
        tally = cli.play_match(
            cfg, RandomAgent("a", seed=1), RandomAgent("b", seed=2), games=4, seed=0
        )
        assert set(tally) == {"a", "b", "draw"}
        assert sum(tally.values()) == 4

    @pytest.mark.parametrize("size, blocks", [(1, 0), (2, 4)])
    def test_play_match_on_tiny_boards(self, size, blocks):
        cfg = GameConfig(size=size, blocks=blocks)
        tally = cli.play_match(
            cfg, RandomAgent("a", seed=1), MCTSAgent("b", iterations=5, seed=2), games=2, seed=0
        )
        assert tally["draw"] == 2

    def test_play_match_needs_distinct_names(self):
        with pytest.raises(ValueError):
            cli.play_match(GameConfig(size=4), RandomAgent("a"), RandomAgent("a"), games=1)


class TestBuildAgent:
    def test_kinds(self):
        assert isinstance(cli.build_agent("random", "P1", seed=0), RandomAgent)
        mcts = cli.build_agent("mcts", "P2", iterations=5)
        assert isinstance(mcts, MCTSAgent)
        assert mcts.budget.iterations == 5
        assert cli.build_agent("mcts", "P2").budget.iterations == 1_000
        assert isinstance(cli.build_agent("human", "P1"), HumanAgent)
        with pytest.raises(ValueError):
            cli.build_agent("alphabeta", "P1")


class TestCommands:
    def test_match_command(self):
        result = runner.invoke(
            cli.app,
            ["match", "--p1", "random", "--p2", "random", "--games", "3", "--size", "5", "--blocks", "2", "--seed", "1"],
        )
        assert result.exit_code == 0, result.output
        assert "Match results" in result.output

    def test_match_with_mcts(self):
        result = runner.invoke(
            cli.app,
            ["match", "--p1", "mcts", "--p2", "random", "--games", "1", "--size", "4",
             "--blocks", "2", "--seed", "3", "--iterations", "20"],
        )
        assert result.exit_code == 0, result.output

    def test_play_command_random_vs_random(self):
        result = runner.invoke(
            cli.app,
            ["play", "--p1", "random", "--p2", "random", "--size", "5", "--blocks", "0", "--seed", "2"],
        )
        assert result.exit_code == 0, result.output
        assert "Result:" in result.output

    def test_match_command_on_single_cell_board(self):
        result = runner.invoke(
            cli.app,
            ["match", "--p1", "random", "--p2", "random", "--games", "1", "--size", "1", "--blocks", "0", "--seed", "0"],
        )
        assert result.exit_code == 0, result.output

    def test_play_command_show_root_stats_flag(self):
        result = runner.invoke(
            cli.app,
            ["play", "--p1", "mcts", "--p2", "random", "--size", "4", "--blocks", "0",
             "--seed", "5", "--iterations", "10", "--show-root-stats"],
        )
        assert result.exit_code == 0, result.output

    def test_rejects_bad_options(self):
        result = runner.invoke(cli.app, ["match", "--p1", "human", "--p2", "random"])
        assert result.exit_code != 0
        result = runner.invoke(cli.app, ["play", "--p1", "random", "--p2", "random", "--size", "3", "--blocks", "20"])
        assert result.exit_code != 0
        result = runner.invoke(
            cli.app, ["play", "--p1", "mcts", "--p2", "random", "--iterations", "5", "--duration", "1"]
        )
        assert result.exit_code != 0
