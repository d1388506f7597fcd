"""
Streamable HTTP transport: one endpoint, sessions resumed through the
mcp-session-id header.
"""

import contextlib
import logging
from collections.abc import AsyncIterator
from uuid import uuid4

import anyio
import pydantic
from anyio.abc import TaskGroup, TaskStatus
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER, StreamableHTTPServerTransport
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.types import Message, Receive, Scope, Send

from errors import UnknownSessionError
from transports.sessions import SessionStore

logger = logging.getLogger(__name__)


class StreamableHttpTransport:
    """ASGI app serving the MCP server over streamable HTTP."""

    def __init__(
        self,
        server: Server,
        sessions: SessionStore[StreamableHTTPServerTransport],
        json_response: bool = False,
    ):
        self.server = server
        self.sessions = sessions
        self.json_response = json_response
        self._task_group: TaskGroup | None = None

    @contextlib.asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        """Own the task group that session servers run in. Enter once, from the app lifespan."""
        if self._task_group is not None:
            raise RuntimeError("StreamableHttpTransport is already running")

        async with anyio.create_task_group() as tg:
            self._task_group = tg
            logger.info("Streamable HTTP transport started")
            try:
                yield
            finally:
                tg.cancel_scope.cancel()
                self._task_group = None
                self.sessions.clear()
                logger.info("Streamable HTTP transport stopped")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        session_id = request.headers.get(MCP_SESSION_ID_HEADER)

        if session_id is None:
            await self._handle_new_session(request, scope, send)
            return

        try:
            channel = self.sessions.get(session_id)
        except UnknownSessionError as e:
            logger.warning("Rejected request for unknown streamable session %s", session_id)
            response = PlainTextResponse(str(e), status_code=400)
            await response(scope, receive, send)
            return

        status = await _handle_and_capture_status(channel, scope, receive, send)
        if scope["method"] == "DELETE" and status < 400:
            self.sessions.remove(session_id)

    async def _handle_new_session(self, request: Request, scope: Scope, send: Send) -> None:
        """Open a session for a headerless initialize POST; reject anything else."""
        body = await request.body()
        if scope["method"] != "POST" or not _is_initialize(body):
            logger.warning("Rejected %s /mcp without a session id", scope["method"])
            response = PlainTextResponse("Bad Request: Missing session ID", status_code=400)
            await response(scope, request.receive, send)
            return

        channel = await self._open_session()
        status = await _handle_and_capture_status(channel, scope, _replay_body(body, request.receive), send)
        if status >= 400:
            # The client never learned this id, so nothing could ever close it
            self.sessions.remove(channel.mcp_session_id)
            await channel.terminate()

    async def _open_session(self) -> StreamableHTTPServerTransport:
        if self._task_group is None:
            raise RuntimeError("StreamableHttpTransport.run() must be entered before handling requests")

        channel = StreamableHTTPServerTransport(
            mcp_session_id=uuid4().hex,
            is_json_response_enabled=self.json_response,
        )
        self.sessions.create(channel.mcp_session_id, channel)
        try:
            await self._task_group.start(self._serve, channel)
        except BaseException:
            self.sessions.remove(channel.mcp_session_id)
            raise
        return channel

    async def _serve(
        self,
        channel: StreamableHTTPServerTransport,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        """Run the MCP server over one session until its streams close."""
        session_id = channel.mcp_session_id
        try:
            async with channel.connect() as (read_stream, write_stream):
                task_status.started()
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        except Exception:
            # Nothing awaits this task; a crash here would tear down every session
            logger.exception("Streamable session %s crashed", session_id)
        finally:
            self.sessions.remove(session_id)


def _is_initialize(body: bytes) -> bool:
    try:
        message = types.JSONRPCMessage.model_validate_json(body)
    except pydantic.ValidationError:
        return False
    return isinstance(message.root, types.JSONRPCRequest) and message.root.method == "initialize"


def _replay_body(body: bytes, receive: Receive) -> Receive:
    """A receive callable that yields an already-read body once, then defers to the real one."""
    replayed = False

    async def replay() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


async def _handle_and_capture_status(
    channel: StreamableHTTPServerTransport, scope: Scope, receive: Receive, send: Send
) -> int:
    """Let the channel answer the request; return the status it answered with."""
    status = 500

    async def capture(message: Message) -> None:
        nonlocal status
        if message["type"] == "http.response.start":
            status = message["status"]
        await send(message)

    await channel.handle_request(scope, receive, capture)
    return status
