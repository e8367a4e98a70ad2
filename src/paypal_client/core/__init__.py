"""Core components of the PayPal client.

The request execution engine: error mapping, the token handshake and the
executor every API call goes through.
"""

from __future__ import annotations

from .authenticator import Authenticator
from .errors import ErrorFactory
from .http_executor import RequestExecutor, decode_response

__all__ = [
    "Authenticator",
    "ErrorFactory",
    "RequestExecutor",
    "decode_response",
]
