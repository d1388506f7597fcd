"""
Error types for the Trello MCP server.
"""


class TrelloMCPError(Exception):
    """Base class for all errors raised by this server."""


class ConfigurationError(TrelloMCPError):
    """Startup configuration is unusable (missing credentials, duplicate tool)."""


class ValidationError(TrelloMCPError):
    """Tool arguments do not match the tool's input schema."""

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = fields or []


class RemoteAPIError(TrelloMCPError):
    """Trello answered with a non-2xx status."""

    def __init__(self, status: int, status_text: str, body: str):
        super().__init__(f"{status} {status_text}: {body}")
        self.status = status
        self.status_text = status_text
        self.body = body


class TransportError(TrelloMCPError):
    """The request never got an HTTP answer from Trello."""


class UnknownSessionError(TrelloMCPError):
    """No open session is registered under the given id."""

    def __init__(self, session_id: str | None):
        super().__init__("No transport found for sessionId")
        self.session_id = session_id


class UnknownToolError(TrelloMCPError):
    """No tool is registered under the given name."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name
