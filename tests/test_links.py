from __future__ import annotations

import pytest
from conftest import make_file

from insta_username_app.processing import (
    ClipboardError,
    ExtractionResult,
    ResultSet,
    build_links_text,
    copy_all_links,
    profile_url,
)


def _result_set() -> ResultSet:
    return ResultSet(results=[
        ExtractionResult.from_usernames(make_file(b"a"), ["alice"]),
        ExtractionResult.from_usernames(make_file(b"b"), ["bob", "carol"]),
    ])


def test_profile_url() -> None:
    assert profile_url("alice") == "https://www.instagram.com/alice"


def test_build_links_text_one_per_line_in_order() -> None:
    assert build_links_text(_result_set()) == (
        "https://www.instagram.com/alice\n"
        "https://www.instagram.com/bob\n"
        "https://www.instagram.com/carol"
    )


def test_copy_all_links_writes_text_to_sink() -> None:
    written = []

    text = copy_all_links(_result_set(), written.append)

    assert written == [text]
    assert text.splitlines() == [
        "https://www.instagram.com/alice",
        "https://www.instagram.com/bob",
        "https://www.instagram.com/carol",
    ]


def test_copy_all_links_skips_sink_when_nothing_to_copy() -> None:
    written = []
    empty = ResultSet(results=[ExtractionResult.from_usernames(make_file(b"a"), [])])

    assert copy_all_links(empty, written.append) == ""
    assert written == []


def test_sink_failure_raises_clipboard_error_and_keeps_results() -> None:
    result_set = _result_set()

    def denied(text: str) -> None:
        raise PermissionError("clipboard access denied")

    with pytest.raises(ClipboardError, match="clipboard access denied"):
        copy_all_links(result_set, denied)

    assert result_set.all_usernames == ["alice", "bob", "carol"]
