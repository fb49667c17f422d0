"""
Version constants for the qemail relay.

Parsed output carries the parser version so downstream consumers can tell
which decoding rules produced a given result.
"""

# API Version
API_VERSION = "1.0.0"

# Component versions (update these when implementations change)
PARSER_VERSION = "mime-engine-1.0.0"
WEBHOOK_PROTOCOL_VERSION = "webhook-1"
