"""
Bertrand oligopoly game descriptor.

An N-player repeated price competition. Each of `num_turns` rounds, every
firm simultaneously picks one of `num_options` price levels; profits follow a
multinomial-logit demand model and accumulate into points. At the end,
points are turned into returns according to `returns_type`:

- win_loss: 1 split among the players with the most points, -1 split among
  the rest (all zeros if everybody ties)
- point_difference: points minus the average points
- total_points: points

With `imp_info`, players only see who set the lowest price each round (and
their own past prices), not the opponents' prices.
"""

import logging
from dataclasses import replace
from typing import Any, Mapping

from omegaconf import DictConfig

from oligopoly.base import (
    ChanceMode,
    Dynamics,
    Game,
    GameType,
    Information,
    Utility,
)
from oligopoly.observer import (
    DEFAULT_OBS_TYPE,
    INFO_STATE_OBS_TYPE,
    PRIVATE_OBS_TYPE,
    PUBLIC_OBS_TYPE,
    BertrandOligopolyObserver,
    ObservationType,
    PrivateInfoType,
)
from oligopoly.params import MAX_PLAYERS, MIN_PLAYERS, ReturnsType, make_params, parse_returns_type
from oligopoly.pricing import PriceGrid
from oligopoly.state import BertrandOligopolyState

logger = logging.getLogger(__name__)

GAME_TYPE = GameType(
    short_name="bertrand_oligopoly",
    long_name="Bertrand Oligopoly",
    dynamics=Dynamics.SIMULTANEOUS,
    chance_mode=ChanceMode.DETERMINISTIC,
    information=Information.PERFECT,
    utility=Utility.ZERO_SUM,
    min_num_players=MIN_PLAYERS,
    max_num_players=MAX_PLAYERS,
)


class BertrandOligopolyGame(Game):
    """
    Immutable configuration shared by every state of one game.

    Args:
        params: Parameter overrides (see oligopoly.params.DEFAULT_PARAMS)

    Raises:
        ValueError: On unknown or invalid parameters
    """

    def __init__(self, params: Mapping[str, Any] | DictConfig | None = None) -> None:
        self.params = make_params(params)

        self._num_options: int = self.params.num_options
        self._num_turns: int = self.params.num_turns
        self._num_players: int = self.params.players
        self.interval_size: float = self.params.interval_size
        self.marginal_cost: float = self.params.marginal_cost
        self.horizontal_differentiation: float = self.params.horizontal_differentiation
        self.outside_good: float = self.params.outside_good
        self.returns_type: ReturnsType = parse_returns_type(self.params.returns_type)
        self.imp_info: bool = self.params.imp_info
        self.egocentric: bool = self.params.egocentric

        self.game_type = GAME_TYPE
        if self.returns_type == ReturnsType.TOTAL_POINTS:
            self.game_type = replace(self.game_type, utility=Utility.GENERAL_SUM)
        if self.imp_info:
            self.game_type = replace(self.game_type, information=Information.IMPERFECT)

        self.price_grid = PriceGrid.from_interval_size(self._num_options, self.interval_size)
        logger.debug(
            f"Price grid: [{self.price_grid.low:.5f}, {self.price_grid.high:.5f}] "
            f"in {self._num_options} levels, step {self.price_grid.step_size:.5f}"
        )

        self.default_observer = self.make_observer(DEFAULT_OBS_TYPE)
        self.info_state_observer = self.make_observer(INFO_STATE_OBS_TYPE)
        self.private_observer = self.make_observer(PRIVATE_OBS_TYPE)
        self.public_observer = self.make_observer(PUBLIC_OBS_TYPE)

    # =========================================================================
    # Descriptor queries
    # =========================================================================

    def num_players(self) -> int:
        return self._num_players

    def num_distinct_actions(self) -> int:
        return self._num_options

    def num_options(self) -> int:
        return self._num_options

    def num_turns(self) -> int:
        return self._num_turns

    def max_game_length(self) -> int:
        return self._num_turns

    @property
    def nash_price(self) -> float:
        return self.price_grid.nash_price

    @property
    def monopoly_price(self) -> float:
        return self.price_grid.monopoly_price

    def _round_profit_range(self) -> tuple[float, float]:
        # Demand shares lie in (0, 1), so one round's profit lies between the
        # cheapest and dearest price levels' margins, clipped at zero.
        lowest = min(self.price_grid.low - self.marginal_cost, 0.0)
        highest = max(self.price_grid.high - self.marginal_cost, 0.0)
        return lowest, highest

    def min_utility(self) -> float:
        if self.returns_type == ReturnsType.WIN_LOSS:
            return -1.0
        lowest, highest = self._round_profit_range()
        if self.returns_type == ReturnsType.POINT_DIFFERENCE:
            # No player can trail the average by more than the widest points spread
            return -(highest - lowest) * self._num_turns
        elif self.returns_type == ReturnsType.TOTAL_POINTS:
            # Pricing below cost loses money every round
            return lowest * self._num_turns
        raise ValueError(f"Unrecognized returns type: {self.returns_type}")

    def max_utility(self) -> float:
        if self.returns_type == ReturnsType.WIN_LOSS:
            return 1.0
        lowest, highest = self._round_profit_range()
        if self.returns_type == ReturnsType.POINT_DIFFERENCE:
            return (highest - lowest) * self._num_turns
        elif self.returns_type == ReturnsType.TOTAL_POINTS:
            return highest * self._num_turns
        raise ValueError(f"Unrecognized returns type: {self.returns_type}")

    def utility_sum(self) -> float | None:
        if self.returns_type == ReturnsType.TOTAL_POINTS:
            return None
        return 0.0

    def _tensor_size(self, obs_type: ObservationType) -> int:
        n, t, o = self._num_players, self._num_turns, self._num_options
        size = 0
        if obs_type.public_info:
            size += n
        if self.imp_info and obs_type.public_info:
            size += t * n
        if (
            self.imp_info
            and obs_type.perfect_recall
            and obs_type.private_info == PrivateInfoType.SINGLE_PLAYER
        ):
            size += t * o
        # Never smaller than one slot per (player, price level)
        return max(n * o, size)

    def information_state_tensor_shape(self) -> list[int]:
        return [self._tensor_size(INFO_STATE_OBS_TYPE)]

    def observation_tensor_shape(self) -> list[int]:
        return [self._tensor_size(DEFAULT_OBS_TYPE)]

    # =========================================================================
    # Factories
    # =========================================================================

    def make_observer(
        self,
        obs_type: ObservationType | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> BertrandOligopolyObserver:
        """
        Build an observer.

        Args:
            obs_type: Observation type (DEFAULT_OBS_TYPE if None)
            params: Optional {"egocentric": bool} override of the game setting
        """
        egocentric = self.egocentric
        if params and "egocentric" in params:
            egocentric = bool(params["egocentric"])
        return BertrandOligopolyObserver(obs_type or DEFAULT_OBS_TYPE, egocentric)

    def new_initial_state(self) -> BertrandOligopolyState:
        return BertrandOligopolyState(
            self,
            num_options=self._num_options,
            num_turns=self._num_turns,
            interval_size=self.interval_size,
            marginal_cost=self.marginal_cost,
            horizontal_differentiation=self.horizontal_differentiation,
            outside_good=self.outside_good,
            imp_info=self.imp_info,
            egocentric=self.egocentric,
            returns_type=self.returns_type,
        )

    def __repr__(self) -> str:
        args = ",".join(f"{k}={v}" for k, v in self.params.items())
        return f"{self.game_type.short_name}({args})"
