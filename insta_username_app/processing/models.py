"""
Data Models

Input files, per-image extraction results and the batch result set.
"""

import base64
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def normalize_username(raw: str) -> str:
    """Trim whitespace and strip a single leading '@'."""
    value = raw.strip()
    if value.startswith('@'):
        value = value[1:]
    return value


def normalize_usernames(raw_usernames: Iterable[str]) -> List[str]:
    """Normalize extracted usernames, dropping the ones left empty."""
    usernames = []
    for raw in raw_usernames:
        value = normalize_username(raw)
        if value:
            usernames.append(value)
    return usernames


class InputFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    mime_type: str
    data: bytes = Field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def size_kb(self) -> str:
        return f"{self.size / 1024:.1f} KB"

    @property
    def data_url(self) -> str:
        """Inline data: URL for the result card thumbnail."""
        encoded = base64.b64encode(self.data).decode('utf-8')
        return f"data:{self.mime_type};base64,{encoded}"


class EntryState(str, Enum):
    DISPLAYED = "displayed"
    EDITING = "editing"


class UsernameEntry(BaseModel):
    value: str = Field(min_length=1)
    state: EntryState = EntryState.DISPLAYED

    @property
    def is_editing(self) -> bool:
        return self.state == EntryState.EDITING


class UsernameRef(BaseModel):
    image_index: int
    username_index: int


class ExtractionResult(BaseModel):
    file: InputFile
    entries: List[UsernameEntry] = Field(default_factory=list)

    @classmethod
    def from_usernames(cls, file: InputFile, usernames: Iterable[str]) -> "ExtractionResult":
        return cls(file=file, entries=[UsernameEntry(value=u) for u in normalize_usernames(usernames)])

    @property
    def usernames(self) -> List[str]:
        return [entry.value for entry in self.entries]


class ResultSet(BaseModel):
    """Per-image results, index-aligned with the submitted batch."""

    results: List[ExtractionResult] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def all_usernames(self) -> List[str]:
        return [username for result in self.results for username in result.usernames]

    @property
    def total_usernames(self) -> int:
        return sum(len(result.entries) for result in self.results)

    def resolve(self, ref: UsernameRef) -> Optional[UsernameEntry]:
        """Return the entry a reference points at, or None if it is out of range."""
        if not 0 <= ref.image_index < len(self.results):
            return None
        entries = self.results[ref.image_index].entries
        if not 0 <= ref.username_index < len(entries):
            return None
        return entries[ref.username_index]

    def to_summary(self) -> List[dict]:
        """JSON-friendly view without the raw image bytes."""
        return [
            {
                'index': index,
                'filename': result.file.name,
                'mime_type': result.file.mime_type,
                'size': result.file.size,
                'usernames': result.usernames,
            }
            for index, result in enumerate(self.results)
        ]
