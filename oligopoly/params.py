"""
Game parameter schema for the Bertrand oligopoly.

Parameters are carried as OmegaConf DictConfig objects so they can be loaded
from YAML, overridden from the command line, and merged onto the defaults:

    imp_info                    bool   Imperfect information variant (default: False)
    egocentric                  bool   Egocentric win sequence (default: False)
    num_options                 int    Number of price levels (default: 15)
    interval_size               float  Interval extension around Nash/monopoly (default: 0.1)
    marginal_cost               int    Unit cost (default: 1)
    horizontal_differentiation  float  Substitutability, in (0, 1] (default: 0.25)
    outside_good                int    Outside good utility (default: 0)
    num_turns                   int    Rounds per game (default: 100)
    players                     int    Number of firms (default: 2)
    returns_type                str    "win_loss", "point_difference" or
                                       "total_points" (default)
"""

import enum
import logging
from typing import Any, Mapping

from omegaconf import DictConfig, OmegaConf

logger = logging.getLogger(__name__)

MIN_PLAYERS = 2
MAX_PLAYERS = 10

DEFAULT_PARAMS: dict[str, Any] = {
    "imp_info": False,
    "egocentric": False,
    "num_options": 15,
    "interval_size": 0.1,
    "marginal_cost": 1,
    "horizontal_differentiation": 0.25,
    "outside_good": 0,
    "num_turns": 100,
    "players": 2,
    "returns_type": "total_points",
}

_INT_PARAMS = ("num_options", "num_turns", "players")
_REAL_PARAMS = ("interval_size", "marginal_cost", "horizontal_differentiation", "outside_good")
_BOOL_PARAMS = ("imp_info", "egocentric")


class ReturnsType(enum.Enum):
    """How accumulated points are turned into terminal utilities."""

    WIN_LOSS = "win_loss"
    POINT_DIFFERENCE = "point_difference"
    TOTAL_POINTS = "total_points"


def parse_returns_type(returns_type: str) -> ReturnsType:
    """
    Parse a returns_type string.

    Raises:
        ValueError: If the string is not a known returns type
    """
    try:
        return ReturnsType(returns_type)
    except ValueError:
        raise ValueError(f"Unrecognized returns_type parameter: {returns_type}") from None


def make_params(overrides: Mapping[str, Any] | DictConfig | None = None) -> DictConfig:
    """
    Merge user overrides onto DEFAULT_PARAMS and validate the result.

    Args:
        overrides: Partial parameter mapping (dict or DictConfig)

    Returns:
        Read-only DictConfig with every parameter set

    Raises:
        ValueError: On unknown keys or invalid values
    """
    overrides = overrides or {}
    unknown = sorted(set(overrides) - set(DEFAULT_PARAMS))
    if unknown:
        logger.error(f"Unknown game parameter(s) requested: {unknown}")
        raise ValueError(f"Unknown game parameter(s): {unknown}")

    base = OmegaConf.create(DEFAULT_PARAMS)
    OmegaConf.set_struct(base, True)
    params = OmegaConf.merge(base, overrides)

    validate_params(params)
    OmegaConf.set_readonly(params, True)
    return params


def validate_params(params: DictConfig) -> None:
    """
    Check parameter ranges.

    Raises:
        ValueError: If any parameter has the wrong type or is out of range
    """
    _check_types(params)
    if params.num_options <= 1:
        raise ValueError(f"num_options must be > 1, got {params.num_options}")
    if params.num_turns < 1:
        raise ValueError(f"num_turns must be >= 1, got {params.num_turns}")
    if not MIN_PLAYERS <= params.players <= MAX_PLAYERS:
        raise ValueError(
            f"players must be in [{MIN_PLAYERS}, {MAX_PLAYERS}], got {params.players}"
        )
    if not 0 < params.horizontal_differentiation <= 1:
        raise ValueError(
            "horizontal_differentiation must be in (0, 1], "
            f"got {params.horizontal_differentiation}"
        )
    if params.interval_size < 0:
        raise ValueError(f"interval_size must be >= 0, got {params.interval_size}")
    parse_returns_type(params.returns_type)


def _check_types(params: DictConfig) -> None:
    # bool is a subclass of int, so flags never pass as counts or prices
    for key in _INT_PARAMS:
        value = params[key]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{key} must be an integer, got {value!r}")
    for key in _REAL_PARAMS:
        value = params[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{key} must be a number, got {value!r}")
    for key in _BOOL_PARAMS:
        value = params[key]
        if not isinstance(value, bool):
            raise ValueError(f"{key} must be a boolean, got {value!r}")
    if not isinstance(params.returns_type, str):
        raise ValueError(f"returns_type must be a string, got {params.returns_type!r}")
