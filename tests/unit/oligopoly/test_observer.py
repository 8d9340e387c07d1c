# tests/unit/oligopoly/test_observer.py
"""
Tests for information state / observation strings and tensors.
"""

import numpy as np
import pytest

from oligopoly import load_game
from oligopoly.observer import (
    INFO_STATE_OBS_TYPE,
    PRIVATE_OBS_TYPE,
    PUBLIC_OBS_TYPE,
    ObservationType,
    PrivateInfoType,
)


def _play(game, rounds):
    state = game.new_initial_state()
    for actions in rounds:
        state.apply_actions(actions)
    return state


def _points_line(state):
    return "Points: " + "".join(f"{p:g} " for p in state.points) + "\n"


# =============================================================================
# Test: Strings
# =============================================================================


class TestStrings:
    def test_perfect_info_uses_public_view(self, game):
        state = _play(game, [[3, 5], [7, 7]])
        expected = "Win sequence: 0 -3 \n" + _points_line(state)
        assert state.information_state_string(0) == expected
        assert state.observation_string(1) == expected

    def test_imp_info_information_state(self, imp_info_game):
        state = _play(imp_info_game, [[3, 0], [2, 2]])
        assert state.information_state_string(0) == (
            "P0 action sequence: 3 2 \n"
            "Win sequence: 1 -3 \n"
            + _points_line(state)
            + "Terminal?: 0\n"
        )
        assert state.information_state_string(1).startswith("P1 action sequence: 0 2 \n")

    def test_imp_info_terminal_flag(self, imp_info_game):
        state = _play(imp_info_game, [[3, 0], [2, 2], [0, 1]])
        assert state.information_state_string(1).endswith("Terminal?: 1\n")

    def test_imp_info_observation(self, imp_info_game):
        state = _play(imp_info_game, [[3, 0]])
        assert state.observation_string(0) == _points_line(state) + "Win sequence: 1 \n"

    def test_public_observer(self, imp_info_game):
        state = _play(imp_info_game, [[3, 0]])
        observer = imp_info_game.public_observer
        assert observer.string_from(state, 0) == "Win sequence: 1 \n" + _points_line(state)

    def test_private_observer(self, imp_info_game, game):
        state = _play(imp_info_game, [[3, 0]])
        assert imp_info_game.private_observer.string_from(state, 0) == (
            _points_line(state) + "Win sequence: 1 \n"
        )
        # Without imperfect information there is nothing private to show
        perfect = _play(game, [[3, 0]])
        assert game.private_observer.string_from(perfect, 0) == ""

    def test_initial_state(self, imp_info_game):
        state = imp_info_game.new_initial_state()
        assert state.information_state_string(0) == (
            "P0 action sequence: \nWin sequence: \nPoints: 0 0 \nTerminal?: 0\n"
        )


# =============================================================================
# Test: Tensors
# =============================================================================


class TestTensorBlocks:
    def test_perfect_info_only_point_totals(self, game):
        state = _play(game, [[3, 5]])
        blocks = game.info_state_observer.write_tensor(state, 0)
        assert list(blocks) == ["point_totals"]

    def test_imp_info_block_order(self, imp_info_game):
        state = _play(imp_info_game, [[3, 0]])
        blocks = imp_info_game.info_state_observer.write_tensor(state, 0)
        assert list(blocks) == ["point_totals", "win_sequence", "player_action_sequence"]
        assert blocks["point_totals"].shape == (2,)
        assert blocks["win_sequence"].shape == (3, 2)
        assert blocks["player_action_sequence"].shape == (3, 5)

    def test_observation_has_no_action_sequence(self, imp_info_game):
        state = _play(imp_info_game, [[3, 0]])
        blocks = imp_info_game.default_observer.write_tensor(state, 0)
        assert list(blocks) == ["point_totals", "win_sequence"]

    def test_point_totals_start_at_requester(self):
        game = load_game("bertrand_oligopoly", {"players": 3, "num_options": 5, "num_turns": 2})
        state = _play(game, [[0, 2, 4]])
        points = state.points.astype(np.float32)
        for player in range(3):
            blocks = game.default_observer.write_tensor(state, player)
            expected = [points[(player + n) % 3] for n in range(3)]
            np.testing.assert_array_equal(blocks["point_totals"], expected)

    def test_win_sequence_absolute(self):
        game = load_game(
            "bertrand_oligopoly",
            {"imp_info": True, "players": 3, "num_options": 5, "num_turns": 3},
        )
        state = _play(game, [[2, 0, 4], [1, 1, 3]])
        win_seq = game.default_observer.write_tensor(state, 2)["win_sequence"]
        np.testing.assert_array_equal(win_seq, [[0, 1, 0], [0, 0, 0], [0, 0, 0]])

    def test_win_sequence_egocentric(self):
        game = load_game(
            "bertrand_oligopoly",
            {"imp_info": True, "egocentric": True, "players": 3, "num_options": 5, "num_turns": 2},
        )
        state = _play(game, [[2, 0, 4]])
        # Winner is player 1: distance 1 from player 0, 0 from player 1, 2 from player 2
        for player, column in [(0, 1), (1, 0), (2, 2)]:
            win_seq = game.default_observer.write_tensor(state, player)["win_sequence"]
            expected = np.zeros((2, 3), dtype=np.float32)
            expected[0, column] = 1.0
            np.testing.assert_array_equal(win_seq, expected)

    def test_player_action_sequence(self, imp_info_game):
        state = _play(imp_info_game, [[3, 0], [2, 2]])
        seq = imp_info_game.info_state_observer.write_tensor(state, 0)["player_action_sequence"]
        expected = np.zeros((3, 5), dtype=np.float32)
        expected[0, 3] = 1.0
        expected[1, 2] = 1.0
        np.testing.assert_array_equal(seq, expected)

    def test_no_public_info_no_point_totals(self, imp_info_game):
        state = _play(imp_info_game, [[3, 0]])
        observer = imp_info_game.make_observer(
            ObservationType(
                public_info=False,
                perfect_recall=True,
                private_info=PrivateInfoType.SINGLE_PLAYER,
            )
        )
        assert list(observer.write_tensor(state, 0)) == ["player_action_sequence"]
        assert imp_info_game.private_observer.write_tensor(state, 0) == {}


class TestFlatTensors:
    def test_shapes(self, game, imp_info_game):
        assert game.information_state_tensor_shape() == [30]
        assert game.observation_tensor_shape() == [30]
        assert imp_info_game.information_state_tensor_shape() == [2 + 3 * 2 + 3 * 5]
        assert imp_info_game.observation_tensor_shape() == [2 * 5]

    def test_flat_layout_and_padding(self, imp_info_game):
        state = _play(imp_info_game, [[3, 0]])
        obs = state.observation_tensor(0)
        assert obs.shape == (10,)
        assert obs.dtype == np.float32
        np.testing.assert_array_equal(obs[:2], state.points.astype(np.float32))
        np.testing.assert_array_equal(obs[2:8], [0, 1, 0, 0, 0, 0])
        np.testing.assert_array_equal(obs[8:], [0, 0])

    def test_overflow_rejected(self, imp_info_game):
        state = imp_info_game.new_initial_state()
        with pytest.raises(ValueError, match="declared size"):
            imp_info_game.info_state_observer.tensor_from(state, 0, size=5)

    def test_unsized_tensor(self, imp_info_game):
        state = imp_info_game.new_initial_state()
        flat = imp_info_game.public_observer.tensor_from(state, 0)
        assert flat.shape == (2 + 3 * 2,)


# =============================================================================
# Test: Read-only, Player Checks, Overrides
# =============================================================================


class TestObserverContract:
    @pytest.mark.parametrize("player", [-1, 2])
    def test_bad_player(self, imp_info_game, player):
        state = imp_info_game.new_initial_state()
        with pytest.raises(ValueError, match="player"):
            state.information_state_string(player)
        with pytest.raises(ValueError, match="player"):
            state.observation_tensor(player)

    def test_rendering_does_not_mutate(self, imp_info_game):
        state = _play(imp_info_game, [[3, 0], [2, 2]])
        before = (state.points.copy(), list(state.win_sequence), str(state))
        for observer in (
            imp_info_game.default_observer,
            imp_info_game.info_state_observer,
            imp_info_game.public_observer,
            imp_info_game.private_observer,
        ):
            for p in range(2):
                first = observer.tensor_from(state, p)
                np.testing.assert_array_equal(first, observer.tensor_from(state, p))
                assert observer.string_from(state, p) == observer.string_from(state, p)
        np.testing.assert_array_equal(state.points, before[0])
        assert state.win_sequence == before[1]
        assert str(state) == before[2]

    def test_egocentric_override(self, imp_info_game):
        observer = imp_info_game.make_observer(INFO_STATE_OBS_TYPE, {"egocentric": False})
        assert observer.egocentric is False
        assert imp_info_game.make_observer(PUBLIC_OBS_TYPE).egocentric is True
        assert imp_info_game.make_observer(PRIVATE_OBS_TYPE).obs_type == PRIVATE_OBS_TYPE


# =============================================================================
# Test: Egocentric Invariance
# =============================================================================


def _info_state_histories(game, own_seq, other_seq):
    """Info state tensors of the `own_seq` player, once per seat."""
    histories = []
    for as_player in range(game.num_players()):
        state = game.new_initial_state()
        history = []
        for own, other in zip(own_seq, other_seq):
            joint = [-1] * game.num_players()
            joint[as_player] = own
            joint[(as_player + 1) % game.num_players()] = other
            state.apply_actions(joint)
            history.append(state.information_state_tensor(as_player))
        histories.append(history)
    return histories


@pytest.mark.parametrize("imp_info", [False, True])
def test_egocentric_view_of_symmetric_actions(imp_info):
    """Playing the same actions from either seat gives identical info states."""
    game = load_game(
        "bertrand_oligopoly",
        {"egocentric": True, "players": 2, "imp_info": imp_info},
    )
    histories = _info_state_histories(game, [3, 2, 0], [0, 1, 2])
    assert len(histories) == 2
    for first, second in zip(histories[0], histories[1]):
        np.testing.assert_array_equal(first, second)


def test_non_egocentric_views_differ():
    game = load_game("bertrand_oligopoly", {"players": 2, "imp_info": True})
    histories = _info_state_histories(game, [3, 2, 0], [0, 1, 2])
    assert not np.array_equal(histories[0][-1], histories[1][-1])
