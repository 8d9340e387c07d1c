"""
Information exposure for the Bertrand oligopoly.

Renders a state into what one player may see, as a string or as named
tensor blocks. What is visible is controlled by an ObservationType:

- public_info: point totals (and, with imperfect information, who won each round)
- perfect_recall: the requesting player's own full action history
- private_info: whose private information is included

Tensor blocks, written in this order when their predicate holds:

    point_totals            [num_players]            public_info
    win_sequence            [num_turns, num_players]  imp_info and public_info
    player_action_sequence  [num_turns, num_options]  imp_info and perfect_recall
                                                      and private_info == SINGLE_PLAYER

Point totals always start at the requesting player and walk forward. With
`egocentric`, the win sequence is rotated the same way, so two seats that
played the same actions see identical tensors.
"""

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from oligopoly.base import INVALID_PLAYER

if TYPE_CHECKING:
    from oligopoly.state import BertrandOligopolyState


class PrivateInfoType(enum.Enum):
    NONE = "none"
    SINGLE_PLAYER = "single_player"
    ALL_PLAYERS = "all_players"


@dataclass(frozen=True)
class ObservationType:
    public_info: bool = True
    perfect_recall: bool = False
    private_info: PrivateInfoType = PrivateInfoType.SINGLE_PLAYER


DEFAULT_OBS_TYPE = ObservationType(
    public_info=True, perfect_recall=False, private_info=PrivateInfoType.SINGLE_PLAYER
)
INFO_STATE_OBS_TYPE = ObservationType(
    public_info=True, perfect_recall=True, private_info=PrivateInfoType.SINGLE_PLAYER
)
PUBLIC_OBS_TYPE = ObservationType(
    public_info=True, perfect_recall=False, private_info=PrivateInfoType.NONE
)
PRIVATE_OBS_TYPE = ObservationType(
    public_info=False, perfect_recall=False, private_info=PrivateInfoType.SINGLE_PLAYER
)


def _fmt(value: float) -> str:
    return f"{value:g}"


class BertrandOligopolyObserver:
    """
    Stateless renderer of player views.

    Args:
        obs_type: Which information to expose
        egocentric: Rotate win sequence columns relative to the requesting player
    """

    def __init__(self, obs_type: ObservationType, egocentric: bool) -> None:
        self.obs_type = obs_type
        self.egocentric = egocentric

    @property
    def _priv_one(self) -> bool:
        return self.obs_type.private_info == PrivateInfoType.SINGLE_PLAYER

    @staticmethod
    def _check_player(state: "BertrandOligopolyState", player: int) -> None:
        if not 0 <= player < state.num_players:
            raise ValueError(
                f"player must be in [0, {state.num_players}), got {player}"
            )

    # =========================================================================
    # Tensors
    # =========================================================================

    def write_tensor(
        self, state: "BertrandOligopolyState", player: int
    ) -> dict[str, np.ndarray]:
        """
        Named tensor blocks visible to `player`, in write order.

        Raises:
            ValueError: If player is out of range
        """
        self._check_player(state, player)
        imp_info = state.imp_info
        pub_info = self.obs_type.public_info
        perf_rec = self.obs_type.perfect_recall

        blocks: dict[str, np.ndarray] = {}
        if pub_info:
            blocks["point_totals"] = self._point_totals(state, player)
        if imp_info and pub_info:
            blocks["win_sequence"] = self._win_sequence(state, player)
        if imp_info and perf_rec and self._priv_one:
            blocks["player_action_sequence"] = self._player_action_sequence(state, player)
        return blocks

    def tensor_from(
        self, state: "BertrandOligopolyState", player: int, size: int | None = None
    ) -> np.ndarray:
        """
        Flat float32 tensor: the blocks concatenated in write order.

        Args:
            state: State to render
            player: Requesting player
            size: Declared tensor size; the result is zero-padded to it

        Raises:
            ValueError: If the blocks do not fit in `size`
        """
        blocks = self.write_tensor(state, player)
        if blocks:
            flat = np.concatenate([b.ravel() for b in blocks.values()])
        else:
            flat = np.zeros(0, dtype=np.float32)
        if size is None:
            return flat
        if flat.size > size:
            raise ValueError(f"tensor blocks need {flat.size} values, declared size is {size}")
        out = np.zeros(size, dtype=np.float32)
        out[: flat.size] = flat
        return out

    def _point_totals(self, state: "BertrandOligopolyState", player: int) -> np.ndarray:
        n = state.num_players
        out = np.zeros(n, dtype=np.float32)
        for i in range(n):
            out[i] = state.points[(player + i) % n]
        return out

    def _win_sequence(self, state: "BertrandOligopolyState", player: int) -> np.ndarray:
        n = state.num_players
        out = np.zeros((state.num_turns, n), dtype=np.float32)
        for i, winner in enumerate(state.win_sequence):
            if winner is None:
                continue
            one_hot = winner
            if self.egocentric:
                # Positive, relative distance to the winner
                one_hot = (n + winner - player) % n
            out[i, one_hot] = 1.0
        return out

    def _player_action_sequence(
        self, state: "BertrandOligopolyState", player: int
    ) -> np.ndarray:
        out = np.zeros((state.num_turns, state.num_options), dtype=np.float32)
        for i, joint in enumerate(state.actions_history):
            out[i, joint[player]] = 1.0
        return out

    # =========================================================================
    # Strings
    # =========================================================================

    def string_from(self, state: "BertrandOligopolyState", player: int) -> str:
        """
        Text view for `player`.

        Raises:
            ValueError: If player is out of range
        """
        self._check_player(state, player)
        imp_info = state.imp_info
        perf_rec = self.obs_type.perfect_recall

        if imp_info and self._priv_one and perf_rec:
            return (
                self._string_action_sequence(state, player)
                + self._string_win_sequence(state)
                + self._string_points(state)
                + self._string_is_terminal(state)
            )
        if imp_info and self._priv_one and not perf_rec:
            return self._string_points(state) + self._string_win_sequence(state)
        if self.obs_type.public_info:
            return self._string_win_sequence(state) + self._string_points(state)
        return ""

    @staticmethod
    def _string_action_sequence(state: "BertrandOligopolyState", player: int) -> str:
        # Needed for perfect recall: the same win sequence and points can come
        # from different own actions if the opponents played differently.
        result = f"P{player} action sequence: "
        for joint in state.actions_history:
            result += f"{joint[player]} "
        return result + "\n"

    @staticmethod
    def _string_win_sequence(state: "BertrandOligopolyState") -> str:
        result = "Win sequence: "
        for winner in state.win_sequence:
            result += f"{INVALID_PLAYER if winner is None else winner} "
        return result + "\n"

    @staticmethod
    def _string_points(state: "BertrandOligopolyState") -> str:
        result = "Points: "
        for p in range(state.num_players):
            result += f"{_fmt(state.points[p])} "
        return result + "\n"

    @staticmethod
    def _string_is_terminal(state: "BertrandOligopolyState") -> str:
        return f"Terminal?: {int(state.is_terminal())}\n"
