"""
qemail - inbound mail relay.

Decodes raw MIME messages into headers, plain text and HTML, and relays
them to a webhook endpoint.
"""

from .version import API_VERSION

__version__ = API_VERSION
