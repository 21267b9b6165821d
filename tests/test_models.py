from __future__ import annotations

import pytest
from pydantic import ValidationError

from insta_username_app.processing import (
    ExtractionResult,
    InputFile,
    ResultSet,
    UsernameEntry,
    UsernameRef,
    normalize_username,
    normalize_usernames,
)


def test_normalize_username_strips_whitespace_and_single_at() -> None:
    assert normalize_username("  @bob ") == "bob"
    assert normalize_username("@@bob") == "@bob"
    assert normalize_username("alice") == "alice"


def test_normalize_usernames_drops_empty_values() -> None:
    assert normalize_usernames(["@a", "", "  ", "@", "b"]) == ["a", "b"]


def test_input_file_reports_size_and_data_url() -> None:
    file = InputFile(name="shot.png", mime_type="image/png", data=b"abc")

    assert file.size == 3
    assert file.size_kb == "0.0 KB"
    assert file.data_url == "data:image/png;base64,YWJj"


def test_input_file_is_immutable() -> None:
    file = InputFile(name="shot.png", mime_type="image/png", data=b"abc")

    with pytest.raises(ValidationError):
        file.name = "other.png"


def test_username_entry_rejects_empty_value() -> None:
    with pytest.raises(ValidationError):
        UsernameEntry(value="")


def test_result_set_flattens_usernames_in_order() -> None:
    file = InputFile(name="a.png", mime_type="image/png", data=b"a")
    result_set = ResultSet(results=[
        ExtractionResult.from_usernames(file, ["@alice"]),
        ExtractionResult.from_usernames(file, ["bob", "carol"]),
        ExtractionResult.from_usernames(file, []),
    ])

    assert result_set.all_usernames == ["alice", "bob", "carol"]
    assert result_set.total_usernames == 3
    assert len(result_set) == 3


def test_resolve_returns_none_for_out_of_range_refs() -> None:
    file = InputFile(name="a.png", mime_type="image/png", data=b"a")
    result_set = ResultSet(results=[ExtractionResult.from_usernames(file, ["alice"])])

    assert result_set.resolve(UsernameRef(image_index=0, username_index=0)).value == "alice"
    assert result_set.resolve(UsernameRef(image_index=0, username_index=1)) is None
    assert result_set.resolve(UsernameRef(image_index=1, username_index=0)) is None
    assert result_set.resolve(UsernameRef(image_index=-1, username_index=0)) is None


def test_summary_omits_image_bytes() -> None:
    file = InputFile(name="a.png", mime_type="image/png", data=b"abcd")
    result_set = ResultSet(results=[ExtractionResult.from_usernames(file, ["alice"])])

    assert result_set.to_summary() == [
        {"index": 0, "filename": "a.png", "mime_type": "image/png", "size": 4, "usernames": ["alice"]}
    ]
