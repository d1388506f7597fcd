"""
HTTP front door: routes requests to the MCP transports.
"""

import contextlib

from mcp.server.lowlevel import Server
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route

from transports import SessionStore, SseTransport, StreamableHttpTransport


async def health(request: Request) -> PlainTextResponse:
    """Liveness check."""
    return PlainTextResponse("trello-mcp is running")


def create_app(
    server: Server,
    streamable_sessions: SessionStore | None = None,
    sse_sessions: SessionStore | None = None,
    json_response: bool = False,
) -> Starlette:
    """
    Build the Starlette app serving both transports.

    Args:
        server: MCP server every session runs against
        streamable_sessions: Session store for /mcp (a fresh one if omitted)
        sse_sessions: Session store for /sse + /messages (a fresh one if omitted)
        json_response: Answer /mcp POSTs with JSON instead of an event stream
    """
    if streamable_sessions is None:
        streamable_sessions = SessionStore("streamable")
    if sse_sessions is None:
        sse_sessions = SessionStore("sse")

    streamable = StreamableHttpTransport(server, streamable_sessions, json_response=json_response)
    sse = SseTransport(server, sse_sessions, message_path="/messages")

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        async with streamable.run():
            yield

    app = Starlette(
        routes=[
            Route("/", health, methods=["GET"]),
            Route("/mcp", streamable),
            Route("/sse", sse, methods=["GET"]),
            Route("/messages", sse, methods=["POST"]),
        ],
        lifespan=lifespan,
    )
    app.state.streamable_sessions = streamable_sessions
    app.state.sse_sessions = sse_sessions
    return app
