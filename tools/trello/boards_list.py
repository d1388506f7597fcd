"""
Trello board listing: boards owned by the authenticated member.
"""

from mcp.types import Tool

from tools.trello.client import TrelloClient

TOOL = Tool(
    name="trello_list_boards",
    title="List Trello boards",
    description="List boards for the authenticated user",
    inputSchema={
        "type": "object",
        "properties": {},
        "required": []
    }
)


async def handle(client: TrelloClient, arguments: dict) -> list[dict]:
    """Handle trello_list_boards tool call."""
    boards = await client.call("/members/me/boards")
    return [{"id": b["id"], "name": b["name"]} for b in boards]
