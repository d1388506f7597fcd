"""
Legacy SSE transport: GET /sse opens a server-push stream, and the client
POSTs each message to /messages?sessionId=<id>.
"""

import contextlib
import logging
from collections.abc import AsyncIterator
from typing import Any
from urllib.parse import urlencode
from uuid import uuid4

import anyio
import pydantic
from mcp import types
from mcp.server.lowlevel import Server
from mcp.shared.message import SessionMessage
from sse_starlette import EventSourceResponse
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.types import Receive, Scope, Send

from errors import UnknownSessionError
from transports.sessions import SessionStore

logger = logging.getLogger(__name__)

SESSION_ID_PARAM = "sessionId"


class SseChannel:
    """One SSE session: a push stream out, POSTed messages in."""

    def __init__(self, message_path: str):
        self.session_id = uuid4().hex
        self.message_path = message_path

        self._read_writer, self._read_stream = anyio.create_memory_object_stream(0)
        self._write_stream, self._write_reader = anyio.create_memory_object_stream(0)

    @property
    def endpoint(self) -> str:
        """Where the client must POST its messages, relative to the app root."""
        return f"{self.message_path}?{urlencode({SESSION_ID_PARAM: self.session_id})}"

    @contextlib.asynccontextmanager
    async def connect(self, scope: Scope, receive: Receive, send: Send) -> AsyncIterator[tuple[Any, Any]]:
        """
        Answer the GET with an event stream and yield (read_stream, write_stream)
        for the MCP server. The first event tells the client where to POST.
        """
        endpoint = scope.get("root_path", "") + self.endpoint
        sse_writer, sse_reader = anyio.create_memory_object_stream(0)

        async def pump_messages():
            async with sse_writer, self._write_reader:
                await sse_writer.send({"event": "endpoint", "data": endpoint})
                async for session_message in self._write_reader:
                    await sse_writer.send({
                        "event": "message",
                        "data": session_message.message.model_dump_json(by_alias=True, exclude_none=True),
                    })

        async def stream_response():
            response = EventSourceResponse(content=sse_reader, data_sender_callable=pump_messages)
            await response(scope, receive, send)
            # Client went away: end the server's read loop
            await self._read_writer.aclose()
            await self._write_reader.aclose()

        async with anyio.create_task_group() as tg:
            tg.start_soon(stream_response)
            yield self._read_stream, self._write_stream

    async def handle_post_message(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Accept one JSON-RPC message and feed it to the MCP server."""
        request = Request(scope, receive)
        body = await request.body()

        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except pydantic.ValidationError as e:
            logger.warning("Unparseable message for SSE session %s: %s", self.session_id, e)
            response = PlainTextResponse("Could not parse message", status_code=400)
            await response(scope, receive, send)
            return

        response = PlainTextResponse("Accepted", status_code=202)
        await response(scope, receive, send)

        try:
            await self._read_writer.send(SessionMessage(message))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            logger.warning("SSE session %s closed before its message was delivered", self.session_id)


class SseTransport:
    """ASGI app for both SSE routes: GET opens a session, POST delivers to one."""

    def __init__(self, server: Server, sessions: SessionStore[SseChannel], message_path: str = "/messages"):
        self.server = server
        self.sessions = sessions
        self.message_path = message_path

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["method"] == "POST":
            await self.handle_message(scope, receive, send)
        else:
            await self.handle_stream(scope, receive, send)

    async def handle_stream(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Open a session and serve it until the connection closes."""
        channel = SseChannel(self.message_path)
        self.sessions.create(channel.session_id, channel)
        try:
            async with channel.connect(scope, receive, send) as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            self.sessions.remove(channel.session_id)

    async def handle_message(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Route a POSTed message to its session's channel."""
        request = Request(scope, receive)
        session_id = request.query_params.get(SESSION_ID_PARAM)

        try:
            channel = self.sessions.get(session_id)
        except UnknownSessionError as e:
            logger.warning("Rejected message for unknown SSE session %s", session_id)
            response = PlainTextResponse(str(e), status_code=400)
            await response(scope, receive, send)
            return

        await channel.handle_post_message(scope, receive, send)
