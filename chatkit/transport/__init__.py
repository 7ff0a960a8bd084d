"""HTTP transports.

This package contains the transport interface and its httpx implementation.
"""

from .base import HTTPResponse, StreamingHTTPResponse, Transport
from .httpx_transport import HTTPXStreamingResponse, HTTPXTransport

__all__ = [
    "Transport",
    "HTTPResponse",
    "StreamingHTTPResponse",
    "HTTPXTransport",
    "HTTPXStreamingResponse",
]
