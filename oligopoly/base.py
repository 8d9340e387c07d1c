"""
Minimal game contract implemented by the Bertrand oligopoly.

Defines the capabilities a simulation driver relies on:

- Game: immutable descriptor (player count, action count, utility bounds,
  tensor shapes) and a factory for initial states
- State: one trajectory (current player, legal actions, joint action
  application, returns, string/tensor views, cloning)

Simultaneous-move states can also be driven with a single "flat" joint
action, an integer that packs one action per player in base
num_distinct_actions with player 0 as the least significant digit.
"""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

import numpy as np

# Player id tokens
SIMULTANEOUS_PLAYER = -2
TERMINAL_PLAYER = -4
INVALID_PLAYER = -3


class Dynamics(enum.Enum):
    SEQUENTIAL = "sequential"
    SIMULTANEOUS = "simultaneous"


class ChanceMode(enum.Enum):
    DETERMINISTIC = "deterministic"
    EXPLICIT_STOCHASTIC = "explicit_stochastic"


class Information(enum.Enum):
    PERFECT = "perfect_information"
    IMPERFECT = "imperfect_information"


class Utility(enum.Enum):
    ZERO_SUM = "zero_sum"
    GENERAL_SUM = "general_sum"


@dataclass(frozen=True)
class GameType:
    """Static description of a game, shared by all its configurations."""

    short_name: str
    long_name: str
    dynamics: Dynamics
    chance_mode: ChanceMode
    information: Information
    utility: Utility
    min_num_players: int
    max_num_players: int


# =============================================================================
# Flat joint actions
# =============================================================================


def flat_joint_action_to_actions(
    flat_action: int, num_players: int, num_actions: int
) -> list[int]:
    """Unpack a flat joint action into one action per player."""
    num_joint = num_actions**num_players
    if not 0 <= flat_action < num_joint:
        raise ValueError(f"flat joint action must be in [0, {num_joint}), got {flat_action}")
    actions = []
    for _ in range(num_players):
        actions.append(flat_action % num_actions)
        flat_action //= num_actions
    return actions


def actions_to_flat_joint_action(actions: Sequence[int], num_actions: int) -> int:
    """Pack one action per player into a flat joint action."""
    flat_action = 0
    for action in reversed(actions):
        if not 0 <= action < num_actions:
            raise ValueError(f"action must be in [0, {num_actions}), got {action}")
        flat_action = flat_action * num_actions + action
    return flat_action


# =============================================================================
# Capabilities
# =============================================================================


class Game(ABC):
    """Immutable game descriptor."""

    game_type: GameType

    @abstractmethod
    def new_initial_state(self) -> "State":
        pass

    @abstractmethod
    def num_players(self) -> int:
        pass

    @abstractmethod
    def num_distinct_actions(self) -> int:
        pass

    @abstractmethod
    def max_game_length(self) -> int:
        pass

    @abstractmethod
    def min_utility(self) -> float:
        pass

    @abstractmethod
    def max_utility(self) -> float:
        pass

    @abstractmethod
    def utility_sum(self) -> float | None:
        """Constant sum of returns, or None if unconstrained."""
        pass

    @abstractmethod
    def information_state_tensor_shape(self) -> list[int]:
        pass

    @abstractmethod
    def observation_tensor_shape(self) -> list[int]:
        pass

    def max_chance_outcomes(self) -> int:
        return 0


class State(ABC):
    """One trajectory through a game."""

    @abstractmethod
    def current_player(self) -> int:
        pass

    @abstractmethod
    def legal_actions(self, player: int) -> list[int]:
        pass

    @abstractmethod
    def apply_actions(self, actions: Sequence[int]) -> None:
        pass

    @abstractmethod
    def is_terminal(self) -> bool:
        pass

    @abstractmethod
    def returns(self) -> list[float]:
        pass

    @abstractmethod
    def clone(self) -> "State":
        pass

    @abstractmethod
    def information_state_string(self, player: int) -> str:
        pass

    @abstractmethod
    def information_state_tensor(self, player: int) -> np.ndarray:
        pass

    @abstractmethod
    def observation_string(self, player: int) -> str:
        pass

    @abstractmethod
    def observation_tensor(self, player: int) -> np.ndarray:
        pass

    def is_simultaneous_node(self) -> bool:
        return self.current_player() == SIMULTANEOUS_PLAYER
