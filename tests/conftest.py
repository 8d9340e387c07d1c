# tests/conftest.py
"""Minimal shared fixtures for test suite."""

import numpy as np
import pytest

from oligopoly import load_game


@pytest.fixture
def seed():
    """Fixed seed for reproducibility."""
    return 42


@pytest.fixture
def rng(seed):
    """Numpy random generator with fixed seed."""
    return np.random.default_rng(seed)


@pytest.fixture
def game():
    """Default two-player game."""
    return load_game("bertrand_oligopoly")


@pytest.fixture
def small_game():
    """Five price levels, one round."""
    return load_game("bertrand_oligopoly", {"num_options": 5, "num_turns": 1})


@pytest.fixture
def imp_info_game():
    """Imperfect information, three rounds, egocentric views."""
    return load_game(
        "bertrand_oligopoly",
        {"imp_info": True, "egocentric": True, "num_options": 5, "num_turns": 3},
    )
