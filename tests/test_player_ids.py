"""Tests for player identifier helpers."""

from conftest import make_user
from scoreboard.utils.player_ids import (
    is_registered_player,
    is_user_in_game,
    resolve_nickname,
    shorten_player_id,
    split_player_token,
)


def test_split_plain_id():
    assert split_player_token("user-1") == ("user-1", None)


def test_split_composite_token_keeps_colons_in_name():
    assert split_player_token("user-1:Sam: The Man") == ("user-1", "Sam: The Man")


def test_user_in_game_exact_match():
    assert is_user_in_game("user-1", ["user-1", "user-2"])


def test_user_in_game_composite_token():
    assert is_user_in_game("user-1", ["user-1:Sam"])


def test_user_in_game_contained_match():
    assert is_user_in_game("abc", ["team-abc"])


def test_user_not_in_game():
    assert not is_user_in_game("user-9", ["user-1", "user-2:Kim"])
    assert not is_user_in_game("", ["user-1"])


def test_shorten_player_id():
    assert shorten_player_id("0123456789") == "0123456789"
    assert shorten_player_id("0123456789A") == "01234567"


def test_resolve_nickname():
    users = {"u1": make_user("u1", "Ari"), "u2": make_user("u2", None)}
    assert resolve_nickname("u1", users) == "Ari"
    assert resolve_nickname("u2", users) == "Unknown Player"
    assert resolve_nickname("anonymous-player-1", users) == "anonymou"


def test_registered_player_shapes():
    assert is_registered_player("guest_1234")
    assert is_registered_player("3f2b9c1e-7a4d-4e21-9b1a-0c6d5e4f3a2b")
    assert not is_registered_player("Team 1")
    assert not is_registered_player("short-id")
