"""
Content-transfer decoding for MIME leaf parts.

The default strategy infers the encoding from the body's shape: bodies that
look like base64 are base64-decoded, everything else goes through
quoted-printable decoding, which leaves unencoded text untouched.

A header-driven strategy is available for callers that prefer to trust the
part's Content-Transfer-Encoding header when it is present.
"""

import base64
import binascii
import re
from abc import ABC, abstractmethod
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)

# Shorter bodies are too likely to be plain words that happen to fit the alphabet
MIN_BASE64_LENGTH = 20

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]+=*$")
_LINE_BREAKS_RE = re.compile(r"[\r\n]")
_WHITESPACE_RE = re.compile(r"\s")
_SOFT_LINE_BREAK_RE = re.compile(r"=\r?\n")
_ESCAPE_RUN_RE = re.compile(r"(?:=[0-9A-Fa-f]{2})+")


def bytes_to_text(data: bytes) -> str:
    """
    Interpret decoded bytes as UTF-8, falling back to one character per byte.
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def looks_like_base64(body: str) -> bool:
    """Check whether a body, once line breaks are removed, is base64 text."""
    compact = _LINE_BREAKS_RE.sub("", body)
    return len(compact) > MIN_BASE64_LENGTH and bool(_BASE64_RE.match(compact))


def decode_base64(body: str) -> str:
    """
    Decode a base64 body to text.

    URL-safe characters are mapped back to the standard alphabet first.

    Raises:
        binascii.Error: If padding or alphabet are invalid
    """
    compact = _WHITESPACE_RE.sub("", body)
    # Only declared base64 reaches here with "-" or "_"; the heuristic alphabet excludes them.
    compact = compact.replace("-", "+").replace("_", "/")
    return bytes_to_text(base64.b64decode(compact, validate=True))


def decode_quoted_printable(body: str) -> str:
    """
    Decode quoted-printable text.

    Soft line breaks are removed, then each run of =XX escapes is turned back
    into bytes and read as UTF-8 (single-byte characters if that fails).
    Text without escapes is returned unchanged.
    """
    unwrapped = _SOFT_LINE_BREAK_RE.sub("", body)
    return _ESCAPE_RUN_RE.sub(
        lambda m: bytes_to_text(bytes.fromhex(m.group(0).replace("=", ""))),
        unwrapped,
    )


class TransferDecoder(ABC):
    """Strategy turning a leaf part's body into text."""

    name: str = "abstract"

    @abstractmethod
    def decode(self, body: str, transfer_encoding: Optional[str] = None) -> str:
        """
        Decode a part body.

        Args:
            body: Raw body text of a leaf part
            transfer_encoding: Declared Content-Transfer-Encoding, if known

        Returns:
            Decoded text; never raises
        """


class HeuristicTransferDecoder(TransferDecoder):
    """Try base64 when the body looks like it, otherwise quoted-printable."""

    name = "heuristic"

    def decode(self, body: str, transfer_encoding: Optional[str] = None) -> str:
        if looks_like_base64(body):
            try:
                return decode_base64(body)
            except (binascii.Error, ValueError) as e:
                logger.debug("Base64 decoding failed, using quoted-printable", error=str(e))
        return decode_quoted_printable(body)


class DeclaredTransferDecoder(TransferDecoder):
    """
    Honour a declared Content-Transfer-Encoding.

    Parts without a declaration, or with one that fails to decode, fall back
    to the heuristic strategy.
    """

    name = "declared"

    def __init__(self, fallback: Optional[TransferDecoder] = None):
        self.fallback = fallback or HeuristicTransferDecoder()

    def decode(self, body: str, transfer_encoding: Optional[str] = None) -> str:
        encoding = (transfer_encoding or "").strip().lower()

        if encoding == "base64":
            try:
                return decode_base64(body)
            except (binascii.Error, ValueError) as e:
                logger.debug("Declared base64 body is invalid", error=str(e))
        elif encoding == "quoted-printable":
            return decode_quoted_printable(body)
        elif encoding in ("7bit", "8bit", "binary"):
            return body

        return self.fallback.decode(body)


_DECODERS = {
    HeuristicTransferDecoder.name: HeuristicTransferDecoder,
    DeclaredTransferDecoder.name: DeclaredTransferDecoder,
}


def get_transfer_decoder(name: str = "heuristic") -> TransferDecoder:
    """
    Build a transfer decoder by name.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return _DECODERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown transfer decoder '{name}'. Expected one of: {sorted(_DECODERS)}"
        ) from None
