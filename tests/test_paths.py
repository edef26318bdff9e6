from __future__ import annotations

from fbtransport._paths import channel_parts, join_path, notification_parts, split_path


def test_split_path_drops_empty_segments() -> None:
    assert split_path("/a//b/") == ["a", "b"]
    assert split_path("/") == []
    assert split_path("") == []
    assert split_path(None) == []


def test_channel_without_id_or_band_is_the_prefix() -> None:
    assert channel_parts(["root"]) == ["root"]


def test_channel_with_id_only() -> None:
    assert channel_parts(["root"], "thing.1") == ["root", "thing%2e1"]


def test_channel_with_id_and_band() -> None:
    assert channel_parts(["root", "sub"], "a/b", "istate") == ["root", "sub", "a%2fb", "istate"]


def test_channel_encodes_segments_separately() -> None:
    assert join_path(channel_parts([], "x", "y")) == "x/y"


def test_channel_does_not_alias_the_prefix() -> None:
    prefix = ["root"]
    parts = channel_parts(prefix, "x", "y")
    parts.append("z")
    assert prefix == ["root"]
    assert channel_parts(prefix, "x") == ["root", "x"]


def test_notification_parts_accepts_urls() -> None:
    assert notification_parts("https://db.firebaseio.com/root/x/y") == ["root", "x", "y"]
    assert notification_parts("/root/x") == ["root", "x"]
