"""
envs - Gymnasium wrapper around the Bertrand oligopoly.

One seat is driven by the agent through the Gym API (reset, step, render);
the remaining seats follow a scripted pricing policy. Observations are the
game's observation tensor for the agent's seat.
"""

from envs.bertrand_env import OPPONENT_POLICIES, BertrandOligopolyEnv

__version__ = "0.1.0"

__all__ = ["BertrandOligopolyEnv", "OPPONENT_POLICIES"]
