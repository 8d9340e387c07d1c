"""
Multinomial-logit demand and per-round profits.

Each firm p sells a differentiated product with quality index a[p] at price
price[p]. Consumers choose among the N products and an outside good with
logit probabilities, so firm p's demand share is

    s[p] = exp((a[p] - price[p]) / mu) / D
    D    = exp(a0 / mu) + sum_q exp((a[q] - price[q]) / mu)

where mu is the horizontal differentiation and a0 the outside good utility.
Round profit is (price[p] - c) * s[p].

Reference: Calvano et al. (2020), "Artificial Intelligence, Algorithmic
Pricing, and Collusion", Section III.
"""

from typing import Sequence

import numpy as np

# Quality index used for every firm (no vertical differentiation)
DEFAULT_VERTICAL_DIFFERENTIATION = 2.0


def _utilities(
    prices: np.ndarray,
    vertical_differentiation: np.ndarray,
    horizontal_differentiation: float,
) -> np.ndarray:
    return (vertical_differentiation - prices) / horizontal_differentiation


def logit_shares(
    prices: Sequence[float],
    vertical_differentiation: Sequence[float],
    horizontal_differentiation: float,
    outside_good: float,
) -> np.ndarray:
    """
    Compute logit demand shares for each firm.

    Exponents are shifted by their maximum (outside good included) before
    exponentiating, so small mu or wide price grids cannot overflow.

    Args:
        prices: One price per firm
        vertical_differentiation: One quality index per firm
        horizontal_differentiation: Substitutability index mu, in (0, 1]
        outside_good: Utility of the outside option

    Returns:
        Array of shares, one per firm. The outside good takes 1 - sum(shares).
    """
    prices = np.asarray(prices, dtype=np.float64)
    vertical = np.asarray(vertical_differentiation, dtype=np.float64)
    if prices.shape != vertical.shape:
        raise ValueError(
            f"prices shape {prices.shape} does not match "
            f"vertical_differentiation shape {vertical.shape}"
        )

    utilities = _utilities(prices, vertical, horizontal_differentiation)
    outside = outside_good / horizontal_differentiation
    shift = np.max(utilities, initial=outside)
    attractions = np.exp(utilities - shift)
    # The largest term is exp(0) == 1, so the denominator is in [1, N + 1].
    # Outside term first, then the firm terms summed as one block. The sum of the
    # firm terms does not depend on player order for two players.
    denominator = np.exp(outside - shift) + attractions.sum()
    return attractions / denominator


def logit_profits(
    prices: Sequence[float],
    vertical_differentiation: Sequence[float],
    horizontal_differentiation: float,
    outside_good: float,
    marginal_cost: float,
) -> np.ndarray:
    """
    Compute each firm's profit for one round.

    Args:
        prices: One price per firm
        vertical_differentiation: One quality index per firm
        horizontal_differentiation: Substitutability index mu, in (0, 1]
        outside_good: Utility of the outside option
        marginal_cost: Unit cost shared by all firms

    Returns:
        Array of profits (price - cost) * share. Negative when a firm prices
        below marginal cost.
    """
    shares = logit_shares(
        prices, vertical_differentiation, horizontal_differentiation, outside_good
    )
    return (np.asarray(prices, dtype=np.float64) - marginal_cost) * shares


def neutral_vertical_differentiation(num_players: int) -> np.ndarray:
    """Identical quality index for every firm."""
    return np.full(num_players, DEFAULT_VERTICAL_DIFFERENTIATION, dtype=np.float64)
