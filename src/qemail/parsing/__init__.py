# MIME decoding engine

from .envelope import Envelope, split_envelope
from .eml_parser import (
    NO_SUBJECT,
    detect_encoding,
    extract_message_id,
    extract_subject,
    parse_eml_file,
    parse_inbound_email,
    synthesize_message_id,
)
from .headers import (
    decode_header_value,
    normalize_headers,
    parse_header_block,
    split_header_lines,
    unfold_header_block,
)
from .mime_walker import MimeWalker, decode_content, extract_boundary
from .transfer_decoding import (
    DeclaredTransferDecoder,
    HeuristicTransferDecoder,
    TransferDecoder,
    decode_base64,
    decode_quoted_printable,
    get_transfer_decoder,
    looks_like_base64,
)

__all__ = [
    "Envelope",
    "split_envelope",
    "NO_SUBJECT",
    "detect_encoding",
    "extract_message_id",
    "extract_subject",
    "parse_eml_file",
    "parse_inbound_email",
    "synthesize_message_id",
    "decode_header_value",
    "normalize_headers",
    "parse_header_block",
    "split_header_lines",
    "unfold_header_block",
    "MimeWalker",
    "decode_content",
    "extract_boundary",
    "DeclaredTransferDecoder",
    "HeuristicTransferDecoder",
    "TransferDecoder",
    "decode_base64",
    "decode_quoted_printable",
    "get_transfer_decoder",
    "looks_like_base64",
]
