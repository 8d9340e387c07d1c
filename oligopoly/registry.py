# oligopoly/registry.py
"""
Explicit game registry.

Maps a game's short name to a factory taking a parameter mapping. Games are
registered once at import of the `oligopoly` package. Registering the same
name twice is a configuration error and raises instead of being ignored.
"""

import logging
from typing import Any, Callable, Mapping

from oligopoly.base import Game, GameType

logger = logging.getLogger(__name__)

GameFactory = Callable[[Mapping[str, Any] | None], Game]

# short name -> (game type, factory)
_GAMES: dict[str, tuple[GameType, GameFactory]] = {}


def register_game(game_type: GameType, factory: GameFactory) -> None:
    """
    Register a game factory under game_type.short_name.

    Raises:
        ValueError: If the name is already registered
    """
    name = game_type.short_name
    if name in _GAMES:
        logger.error(f"Game '{name}' is already registered")
        raise ValueError(f"Game already registered: {name}")
    _GAMES[name] = (game_type, factory)
    logger.debug(f"Registered game '{name}'")


def unregister_game(name: str) -> None:
    """Remove a registration (used by tests that register throwaway games)."""
    _GAMES.pop(name, None)


def is_registered(name: str) -> bool:
    return name in _GAMES


def registered_names() -> list[str]:
    """ Returns a list of registered game names. """
    return sorted(_GAMES)


def load_game(name: str, params: Mapping[str, Any] | None = None) -> Game:
    """
    Construct a registered game.

    Args:
        name: Registered short name, e.g. "bertrand_oligopoly"
        params: Parameter overrides passed to the factory

    Raises:
        KeyError: If no game is registered under `name`
        ValueError: If the factory rejects the parameters
    """
    if name not in _GAMES:
        logger.error(f"Unknown game requested: '{name}'")
        raise KeyError(f"Unknown game: {name}")
    _, factory = _GAMES[name]
    return factory(params)
