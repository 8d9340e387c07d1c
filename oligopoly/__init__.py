"""
oligopoly - Repeated Bertrand Price Competition

This package contains the deterministic game engine for an N-player repeated
Bertrand oligopoly with logit demand.

Modules:
    pricing: Discrete price grid around the Nash and monopoly prices
    demand: Multinomial-logit demand shares and profits
    params: Parameter schema and validation (OmegaConf)
    base: Game/State contract and flat joint actions
    state: Joint action application, scoring, and returns
    observer: Information state / observation strings and tensors
    game: The game descriptor
    registry: Name -> factory registry
    simulate: Random playouts with invariant checks
"""

from oligopoly.game import GAME_TYPE, BertrandOligopolyGame
from oligopoly.registry import is_registered, load_game, register_game

__version__ = "0.1.0"

if not is_registered(GAME_TYPE.short_name):
    register_game(GAME_TYPE, BertrandOligopolyGame)

__all__ = ["BertrandOligopolyGame", "GAME_TYPE", "load_game", "register_game"]
