"""
Pricing geometry for the Bertrand oligopoly.

Maps discrete price levels (action indices) onto a continuous price interval.
The interval is anchored on two reference prices of the logit duopoly:

- NASH_PRICE: the one-shot Bertrand-Nash equilibrium price
- MONOPOLY_PRICE: the joint-profit-maximizing (collusive) price

and then widened on both sides by `interval_size` times the distance between
them, so agents can also price slightly below Nash and slightly above monopoly.

The reference prices are fixed approximations for the default demand
parameters (a = 2.0, mu = 0.25, marginal cost 1, outside good 0, two firms).
They are not re-derived from the game configuration.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

NASH_PRICE = 1.47292
MONOPOLY_PRICE = 1.92498


@dataclass(frozen=True)
class PriceGrid:
    """
    Discrete, equally spaced price levels on [low, high].

    Attributes:
        num_options: Number of price levels (must be > 1)
        low: Price of action 0
        high: Price of action num_options - 1
        nash_price: Lower anchor of the interval
        monopoly_price: Upper anchor of the interval
    """

    num_options: int
    low: float
    high: float
    nash_price: float = NASH_PRICE
    monopoly_price: float = MONOPOLY_PRICE

    def __post_init__(self) -> None:
        # A single option would make the step size a division by zero.
        if self.num_options <= 1:
            raise ValueError(f"num_options must be > 1, got {self.num_options}")
        if not self.high > self.low:
            raise ValueError(
                f"price interval must have high > low, got [{self.low}, {self.high}]"
            )

    @classmethod
    def from_interval_size(
        cls,
        num_options: int,
        interval_size: float,
        nash_price: float = NASH_PRICE,
        monopoly_price: float = MONOPOLY_PRICE,
    ) -> "PriceGrid":
        """
        Build the grid around the Nash/monopoly anchors.

        Args:
            num_options: Number of discrete price levels
            interval_size: Extension of the interval on each side, as a
                fraction of (monopoly_price - nash_price)
            nash_price: Lower reference price
            monopoly_price: Upper reference price

        Returns:
            PriceGrid with low = nash - ext and high = monopoly + ext
        """
        extension = interval_size * (monopoly_price - nash_price)
        return cls(
            num_options=num_options,
            low=nash_price - extension,
            high=monopoly_price + extension,
            nash_price=nash_price,
            monopoly_price=monopoly_price,
        )

    @property
    def step_size(self) -> float:
        # num_options - 1 steps so that action 0 is low and the last action is high
        return (self.high - self.low) / (self.num_options - 1)

    def price(self, action: int) -> float:
        """Price of a single price level."""
        if not 0 <= action < self.num_options:
            raise ValueError(
                f"action must be in [0, {self.num_options}), got {action}"
            )
        if action == self.num_options - 1:
            return self.high
        return self.low + action * self.step_size

    def prices(self, actions: Sequence[int]) -> np.ndarray:
        """Vectorized price lookup for a joint action."""
        return np.array([self.price(a) for a in actions], dtype=np.float64)

    def levels(self) -> np.ndarray:
        """All price levels, indexed by action."""
        return self.prices(range(self.num_options))

    def closest_action(self, price: float) -> int:
        """Action whose price level is nearest to `price` (lowest index on ties)."""
        return int(np.argmin(np.abs(self.levels() - price)))
