"""
Email document models - representation of a decoded inbound message.

This module defines the core data structures produced by the MIME decoding
engine: the case-insensitive header map, the text/html accumulator and the
final ParsedEmail handed to the webhook layer.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, Field

HeaderValue = Union[str, List[str]]


class HeaderMap(Mapping):
    """
    Read-only, case-insensitive header mapping.

    Keys are stored lower-cased. A header seen once maps to its string value,
    a repeated header maps to the list of its values in arrival order.
    """

    def __init__(self, entries: Optional[Dict[str, HeaderValue]] = None):
        self._entries: Dict[str, HeaderValue] = {}
        for name, value in (entries or {}).items():
            self._entries[name.lower()] = list(value) if isinstance(value, list) else value

    def __getitem__(self, name: str) -> HeaderValue:
        value = self._entries[name.lower()]
        return list(value) if isinstance(value, list) else value

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"HeaderMap({self._entries!r})"

    def get_first(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the first value of a header, or default when absent."""
        value = self._entries.get(name.lower())
        if value is None:
            return default
        if isinstance(value, list):
            return value[0] if value else default
        return value

    def get_all(self, name: str) -> List[str]:
        """Return every value of a header in arrival order."""
        value = self._entries.get(name.lower())
        if value is None:
            return []
        return list(value) if isinstance(value, list) else [value]

    def to_dict(self) -> Dict[str, HeaderValue]:
        """Plain dict copy, suitable for JSON serialization."""
        return {
            name: list(value) if isinstance(value, list) else value
            for name, value in self._entries.items()
        }


@dataclass
class DecodedContent:
    """Accumulated text and html of a message tree."""

    text: Optional[str] = None
    html: Optional[str] = None

    def merge(self, other: "DecodedContent") -> None:
        # Absent until the first value, concatenated afterwards
        if other.text is not None:
            self.text = other.text if self.text is None else self.text + other.text
        if other.html is not None:
            self.html = other.html if self.html is None else self.html + other.html


class ParsedEmail(BaseModel):
    """
    Decoded inbound email.

    This is the output of the decoding engine and the input to the webhook layer.
    """

    from_address: str = Field("", description="Envelope sender")
    to_address: str = Field("", description="Envelope recipient")
    headers: Dict[str, HeaderValue] = Field(
        default_factory=dict, description="Lower-cased header names to value(s)"
    )
    subject: str = Field(description="Trimmed subject or '(No Subject)'")
    message_id: str = Field(description="Message-Id header or synthesized fallback")
    text: Optional[str] = Field(None, description="Decoded text/plain content")
    html: Optional[str] = Field(None, description="Decoded text/html content")

    raw_size_bytes: int = Field(0, description="Size of the raw message")
    encoding_detected: Optional[str] = Field(
        None, description="Detected character encoding of the raw message"
    )
    parser_version: str = Field(description="Decoding engine version")

    model_config = {
        "json_schema_extra": {
            "example": {
                "from_address": "alice@example.com",
                "to_address": "inbox@example.org",
                "headers": {
                    "subject": "Hello",
                    "received": ["from a by b", "from c by d"],
                },
                "subject": "Hello",
                "message_id": "<abc123@example.com>",
                "text": "Hi, there",
                "html": "<p>Hi there</p>",
                "raw_size_bytes": 1024,
                "encoding_detected": "utf-8",
                "parser_version": "mime-engine-1.0.0",
            }
        }
    }
