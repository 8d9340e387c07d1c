"""
Game state for the repeated Bertrand oligopoly.

Every round all players simultaneously choose a price level. The state then:
1. Records the round winner (unique lowest price) or a tie in the win sequence
2. Converts price levels to prices and pays out logit-demand profits
3. Appends the joint action to the action history
4. Advances the round counter, and after the last round fixes the winners

There is no chance node: the game is deterministic given the joint actions.
"""

import copy
import logging
from typing import TYPE_CHECKING, Sequence

import numpy as np

from oligopoly.base import (
    SIMULTANEOUS_PLAYER,
    TERMINAL_PLAYER,
    State,
    actions_to_flat_joint_action,
    flat_joint_action_to_actions,
)
from oligopoly.demand import logit_profits, neutral_vertical_differentiation
from oligopoly.params import ReturnsType
from oligopoly.pricing import PriceGrid

if TYPE_CHECKING:
    from oligopoly.game import BertrandOligopolyGame

logger = logging.getLogger(__name__)


def _fmt(value: float) -> str:
    return f"{value:g}"


class BertrandOligopolyState(State):
    """
    One play-through of the Bertrand oligopoly.

    Attributes:
        current_round: Number of rounds played so far
        points: Cumulative profit per player
        net_profit: Profit per player in the most recent round
        win_sequence: Per round, the unique lowest-priced player or None on a tie
        actions_history: Per round, the full joint action
        winners: Players with maximal points (set once the game is over)
    """

    def __init__(
        self,
        game: "BertrandOligopolyGame",
        num_options: int,
        num_turns: int,
        interval_size: float,
        marginal_cost: float,
        horizontal_differentiation: float,
        outside_good: float,
        imp_info: bool,
        egocentric: bool,
        returns_type: ReturnsType,
    ) -> None:
        self.game = game
        self.num_players = game.num_players()
        self.num_options = num_options
        self.num_turns = num_turns
        self.interval_size = interval_size
        self.marginal_cost = marginal_cost
        self.horizontal_differentiation = horizontal_differentiation
        self.outside_good = outside_good
        self.imp_info = imp_info
        self.egocentric = egocentric
        self.returns_type = returns_type

        # Built from the same inputs as the game's grid, never shared with it.
        # Raises on num_options <= 1.
        self.price_grid = PriceGrid.from_interval_size(num_options, interval_size)
        self.vertical_differentiation = neutral_vertical_differentiation(self.num_players)

        self._current_player = SIMULTANEOUS_PLAYER
        self.current_round = 0
        self.points = np.zeros(self.num_players, dtype=np.float64)
        self.net_profit = np.zeros(self.num_players, dtype=np.float64)
        self.win_sequence: list[int | None] = []
        self.actions_history: list[list[int]] = []
        self.winners: set[int] = set()

    # =========================================================================
    # Dynamics
    # =========================================================================

    def current_player(self) -> int:
        return self._current_player

    def is_terminal(self) -> bool:
        return self._current_player == TERMINAL_PLAYER

    def _check_player(self, player: int) -> None:
        if not 0 <= player < self.num_players:
            raise ValueError(
                f"player must be in [0, {self.num_players}), got {player}"
            )

    @staticmethod
    def _coerce_actions(actions: Sequence[int]) -> list[int]:
        coerced = []
        for p, action in enumerate(actions):
            # Integral floats and numpy integers are fine, 2.9 is not
            if isinstance(action, bool) or int(action) != action:
                raise ValueError(f"action of player {p} must be an integer, got {action!r}")
            coerced.append(int(action))
        return coerced

    def _check_actions(self, actions: Sequence[int]) -> None:
        if len(actions) != self.num_players:
            raise ValueError(
                f"joint action length ({len(actions)}) must equal "
                f"num_players ({self.num_players})"
            )
        for p, action in enumerate(actions):
            if not 0 <= action < self.num_options:
                raise ValueError(
                    f"action of player {p} must be in [0, {self.num_options}), got {action}"
                )

    def legal_actions(self, player: int) -> list[int]:
        """
        Legal actions for a player.

        Args:
            player: A player index, or SIMULTANEOUS_PLAYER for flat joint actions

        Returns:
            Empty list at terminal states, every flat joint action for
            SIMULTANEOUS_PLAYER, otherwise every price level

        Raises:
            ValueError: If player is neither a valid index nor SIMULTANEOUS_PLAYER
        """
        if self.is_terminal():
            return []
        if player == SIMULTANEOUS_PLAYER:
            return list(range(self.num_options**self.num_players))
        self._check_player(player)
        return list(range(self.num_options))

    def legal_actions_mask(self, player: int) -> np.ndarray:
        """Boolean mask over price levels (all False at terminal states)."""
        self._check_player(player)
        mask = np.zeros(self.num_options, dtype=bool)
        if not self.is_terminal():
            mask[:] = True
        return mask

    def apply_actions(self, actions: Sequence[int]) -> None:
        """
        Play one round.

        Args:
            actions: One price level per player

        Raises:
            RuntimeError: If the game is already over
            ValueError: If the joint action has the wrong length or an
                out-of-range entry (the state is left untouched)
        """
        if self.is_terminal():
            raise RuntimeError("Cannot apply actions to a terminal state")
        actions = self._coerce_actions(actions)
        self._check_actions(actions)

        # --- Round winner: the unique lowest price, None on a tie ---
        min_action = min(actions)
        lowest = [p for p, a in enumerate(actions) if a == min_action]
        self.win_sequence.append(lowest[0] if len(lowest) == 1 else None)

        # --- Payouts ---
        prices = self.price_grid.prices(actions)
        self.net_profit = logit_profits(
            prices,
            self.vertical_differentiation,
            self.horizontal_differentiation,
            self.outside_good,
            self.marginal_cost,
        )
        self.points = self.points + self.net_profit

        self.actions_history.append(actions)
        self.current_round += 1

        if self.current_round == self.num_turns:
            max_points = self.points.max()
            self.winners = {p for p in range(self.num_players) if self.points[p] == max_points}
            self._current_player = TERMINAL_PLAYER
            logger.debug(
                f"Game over after {self.current_round} rounds: "
                f"points={self.points.tolist()}, winners={sorted(self.winners)}"
            )

    def apply_flat_joint_action(self, flat_action: int) -> None:
        """Decode a flat joint action and play it."""
        self.apply_actions(
            flat_joint_action_to_actions(flat_action, self.num_players, self.num_options)
        )

    # =========================================================================
    # Outcomes
    # =========================================================================

    def returns(self) -> list[float]:
        """
        Terminal utilities per player (all zeros before the game is over).

        Raises:
            ValueError: If the stored returns type is not recognized
        """
        if not self.is_terminal():
            return [0.0] * self.num_players

        if self.returns_type == ReturnsType.WIN_LOSS:
            num_winners = len(self.winners)
            if num_winners == self.num_players:
                # Everyone tied on points: a draw.
                return [0.0] * self.num_players
            num_losers = self.num_players - num_winners
            return [
                1.0 / num_winners if p in self.winners else -1.0 / num_losers
                for p in range(self.num_players)
            ]
        elif self.returns_type == ReturnsType.POINT_DIFFERENCE:
            return (self.points - self.points.mean()).tolist()
        elif self.returns_type == ReturnsType.TOTAL_POINTS:
            return self.points.tolist()
        else:
            raise ValueError(f"Unrecognized returns type: {self.returns_type}")

    def rewards(self) -> list[float]:
        """Profit of the most recent round (zeros before the first round)."""
        return self.net_profit.tolist()

    def history(self) -> list[int]:
        """All actions played so far, round by round in player order."""
        return [a for joint in self.actions_history for a in joint]

    # =========================================================================
    # Rendering
    # =========================================================================

    def action_to_string(self, player: int, action: int) -> str:
        """Render a price level as its 1-indexed number, e.g. "[P0]: 3" for action 2."""
        if player == SIMULTANEOUS_PLAYER:
            actions = flat_joint_action_to_actions(action, self.num_players, self.num_options)
            return "[" + ", ".join(
                self.action_to_string(p, a) for p, a in enumerate(actions)
            ) + "]"
        if not 0 <= action < self.num_options:
            raise ValueError(f"action must be in [0, {self.num_options}), got {action}")
        return f"[P{player}]: {action + 1}"

    def flat_joint_action(self, actions: Sequence[int]) -> int:
        return actions_to_flat_joint_action(actions, self.num_options)

    def to_string(self) -> str:
        result = ""
        points_line = "Points: "
        for p in range(self.num_players):
            points_line += f"{_fmt(self.points[p])} "
            result += f"P{p} profit: {_fmt(self.net_profit[p])}\n"

        # With imperfect information the full state needs every action sequence
        if self.imp_info:
            for p in range(self.num_players):
                result += f"P{p} actions: "
                for joint in self.actions_history:
                    result += f"{joint[p]} "
                result += "\n"

        result += "\n"
        return result + points_line + "\n"

    def __str__(self) -> str:
        return self.to_string()

    def information_state_string(self, player: int) -> str:
        return self.game.info_state_observer.string_from(self, player)

    def observation_string(self, player: int) -> str:
        return self.game.default_observer.string_from(self, player)

    def information_state_tensor(self, player: int) -> np.ndarray:
        return self.game.info_state_observer.tensor_from(
            self, player, size=self.game.information_state_tensor_shape()[0]
        )

    def observation_tensor(self, player: int) -> np.ndarray:
        return self.game.default_observer.tensor_from(
            self, player, size=self.game.observation_tensor_shape()[0]
        )

    def clone(self) -> "BertrandOligopolyState":
        """Copy of this state that shares no mutable storage with it."""
        state = copy.copy(self)
        state.points = self.points.copy()
        state.net_profit = self.net_profit.copy()
        state.win_sequence = list(self.win_sequence)
        state.actions_history = [list(joint) for joint in self.actions_history]
        state.winners = set(self.winners)
        return state
