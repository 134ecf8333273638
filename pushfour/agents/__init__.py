"""Agent implementations for push-four."""

from pushfour.agents.base import Agent
from pushfour.agents.human import HumanAgent
from pushfour.agents.mcts import MCTSAgent, SearchBudget
from pushfour.agents.random_agent import RandomAgent

__all__ = ["Agent", "HumanAgent", "MCTSAgent", "RandomAgent", "SearchBudget"]
