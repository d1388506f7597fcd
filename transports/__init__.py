"""
HTTP transports for the MCP server: streamable HTTP and legacy SSE.
"""

from transports.sessions import SessionStore
from transports.sse import SseChannel, SseTransport
from transports.streamable import StreamableHttpTransport

__all__ = ["SessionStore", "SseChannel", "SseTransport", "StreamableHttpTransport"]
