import gymnasium as gym
from gymnasium import spaces
import numpy as np
from typing import Any, Dict, Optional, Tuple

from oligopoly import load_game
from oligopoly.state import BertrandOligopolyState

OPPONENT_POLICIES = ("random", "nash", "monopoly")


class BertrandOligopolyEnv(gym.Env):
    """
    Gymnasium environment for the repeated Bertrand oligopoly.

    One learning seat (`agent_player`) picks a price level each round; every
    other seat follows a scripted opponent policy:
    - "random": uniform over price levels
    - "nash": the level closest to the Nash price
    - "monopoly": the level closest to the monopoly price

    Observation is the game's observation tensor for the learning seat.
    Reward is the seat's profit for the round.
    """
    metadata = {"render_modes": ["human", "ansi"], "render_fps": 4}

    def __init__(self, config: Optional[Dict[str, Any]] = None, render_mode: Optional[str] = None):
        super().__init__()
        config = config or {}
        self.config = config
        self.render_mode = render_mode

        self.game = load_game("bertrand_oligopoly", config.get("game", {}))
        self.num_players = self.game.num_players()
        self.num_options = self.game.num_options()

        self.agent_player = config.get("agent_player", 0)
        if not 0 <= self.agent_player < self.num_players:
            raise ValueError(
                f"agent_player must be in [0, {self.num_players}), got {self.agent_player}"
            )
        self.opponent_policy = config.get("opponent_policy", "random")
        if self.opponent_policy not in OPPONENT_POLICIES:
            raise ValueError(
                f"Unknown opponent_policy: {self.opponent_policy} "
                f"(expected one of {OPPONENT_POLICIES})"
            )

        # Action Space: one action per price level
        self.action_space = spaces.Discrete(self.num_options)

        # Observation Space: point totals can be negative (pricing below cost)
        self.observation_space = spaces.Box(
            low=-np.inf,
            high=np.inf,
            shape=tuple(self.game.observation_tensor_shape()),
            dtype=np.float32,
        )

        # Internal State
        self.state: Optional[BertrandOligopolyState] = None

    def reset(self, seed: Optional[int] = None, options: Optional[Dict] = None) -> Tuple[np.ndarray, Dict]:
        super().reset(seed=seed)
        self.state = self.game.new_initial_state()
        return self._get_obs(), self._get_info()

    def step(self, action: int) -> Tuple[np.ndarray, float, bool, bool, Dict]:
        if self.state is None:
            raise RuntimeError("Call reset() before step()")
        if not self.action_space.contains(int(action)):
            raise ValueError(f"Invalid action: {action}")

        # 1. Joint action: learning seat plus scripted opponents
        joint_actions = [
            int(action) if p == self.agent_player else self._opponent_action()
            for p in range(self.num_players)
        ]

        # 2. Play the round
        self.state.apply_actions(joint_actions)

        # 3. Reward is this seat's profit for the round
        reward = float(self.state.net_profit[self.agent_player])
        terminated = self.state.is_terminal()
        truncated = False

        if self.render_mode == "human":
            self.render()

        return self._get_obs(), reward, terminated, truncated, self._get_info()

    def _opponent_action(self) -> int:
        grid = self.game.price_grid
        if self.opponent_policy == "nash":
            return grid.closest_action(grid.nash_price)
        if self.opponent_policy == "monopoly":
            return grid.closest_action(grid.monopoly_price)
        return int(self.np_random.integers(0, self.num_options))

    def _get_obs(self) -> np.ndarray:
        return self.state.observation_tensor(self.agent_player)

    def _get_info(self) -> Dict[str, Any]:
        win_sequence = self.state.win_sequence
        return {
            "points": self.state.points.tolist(),
            "round": self.state.current_round,
            "round_winner": win_sequence[-1] if win_sequence else None,
            "action_mask": self.action_masks(),
        }

    def action_masks(self) -> np.ndarray:
        """
        Return boolean mask of valid actions.
        True = Valid, False = Invalid.
        """
        if self.state is None:
            return np.ones(self.num_options, dtype=bool)
        return self.state.legal_actions_mask(self.agent_player)

    def render(self) -> Optional[str]:
        if self.state is None:
            return None
        text = str(self.state)
        if self.render_mode == "ansi":
            return text
        print(text)
        return None
