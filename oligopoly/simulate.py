"""
Random playouts of a simultaneous-move game.

Plays uniformly random joint actions to the end of the game, checking the
state contract after every round:
- the state is not terminal before max_game_length rounds and is after
- legal actions, rendering, and tensors work for every player
- clones evolve independently of their source
- terminal returns respect the utility bounds and the utility sum
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from oligopoly.base import SIMULTANEOUS_PLAYER, TERMINAL_PLAYER, Game, State

logger = logging.getLogger(__name__)

# Slack for float comparisons of summed returns
UTILITY_ATOL = 1e-9


@dataclass
class SimulationSummary:
    """Aggregate results of a batch of random playouts."""

    num_sims: int
    num_rounds: int = 0
    mean_returns: list[float] = field(default_factory=list)
    min_return: float = float("inf")
    max_return: float = float("-inf")
    returns: list[list[float]] = field(default_factory=list)


def _check_views(game: Game, state: State) -> None:
    info_shape = tuple(game.information_state_tensor_shape())
    obs_shape = tuple(game.observation_tensor_shape())
    for player in range(game.num_players()):
        state.information_state_string(player)
        state.observation_string(player)
        info = state.information_state_tensor(player)
        obs = state.observation_tensor(player)
        if info.shape != info_shape:
            raise AssertionError(f"information state tensor shape {info.shape} != {info_shape}")
        if obs.shape != obs_shape:
            raise AssertionError(f"observation tensor shape {obs.shape} != {obs_shape}")


def _check_returns(game: Game, returns: list[float]) -> None:
    lo, hi = game.min_utility(), game.max_utility()
    for r in returns:
        if not lo - UTILITY_ATOL <= r <= hi + UTILITY_ATOL:
            raise AssertionError(f"return {r} outside utility bounds [{lo}, {hi}]")
    utility_sum = game.utility_sum()
    if utility_sum is not None and not np.isclose(sum(returns), utility_sum, atol=1e-6):
        raise AssertionError(f"returns sum to {sum(returns)}, expected {utility_sum}")


def random_playout(game: Game, rng: np.random.Generator, check: bool = True) -> State:
    """
    Play one game with uniformly random joint actions.

    Args:
        game: Game to play
        rng: Random generator for the action choices
        check: Verify the state contract after every round

    Returns:
        The terminal state

    Raises:
        AssertionError: If a contract check fails
    """
    state = game.new_initial_state()
    num_players = game.num_players()
    for round_num in range(game.max_game_length()):
        if state.is_terminal():
            raise AssertionError(f"state terminal after only {round_num} rounds")
        if state.current_player() != SIMULTANEOUS_PLAYER:
            raise AssertionError(f"unexpected current player {state.current_player()}")
        if check:
            _check_views(game, state)

        actions = [int(rng.choice(state.legal_actions(p))) for p in range(num_players)]

        if check:
            # A clone must not move when its source does
            before = state.clone()
            snapshot = str(before)
            state.apply_actions(actions)
            if str(before) != snapshot:
                raise AssertionError("clone changed after applying actions to its source")
        else:
            state.apply_actions(actions)

    if not state.is_terminal() or state.current_player() != TERMINAL_PLAYER:
        raise AssertionError(f"state not terminal after {game.max_game_length()} rounds")
    if check:
        _check_views(game, state)
        for p in range(num_players):
            if state.legal_actions(p):
                raise AssertionError("terminal state has legal actions")
        _check_returns(game, state.returns())
    return state


def random_sim(game: Game, num_sims: int, seed: int | None = None) -> SimulationSummary:
    """
    Run a batch of random playouts.

    Args:
        game: Game to play
        num_sims: Number of playouts
        seed: Seed for the action choices

    Returns:
        SimulationSummary with average and extreme returns
    """
    rng = np.random.default_rng(seed)
    summary = SimulationSummary(num_sims=num_sims)
    totals = np.zeros(game.num_players(), dtype=np.float64)

    for sim in range(num_sims):
        state = random_playout(game, rng)
        returns = state.returns()
        totals += returns
        summary.returns.append(returns)
        summary.num_rounds += game.max_game_length()
        summary.min_return = min(summary.min_return, min(returns))
        summary.max_return = max(summary.max_return, max(returns))
        logger.debug(f"Simulation {sim}: returns={returns}")

    summary.mean_returns = (totals / max(num_sims, 1)).tolist()
    logger.info(
        f"Ran {num_sims} random simulations of {game!r}: "
        f"mean returns {summary.mean_returns}"
    )
    return summary
