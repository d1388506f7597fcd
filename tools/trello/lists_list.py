"""
Trello list listing: the lists (columns) of one board, in board order.
"""

from urllib.parse import quote

from mcp.types import Tool

from tools.trello.client import TrelloClient

TOOL = Tool(
    name="trello_list_lists",
    title="List lists on a board",
    description="Given a boardId, list its lists (columns)",
    inputSchema={
        "type": "object",
        "properties": {
            "boardId": {
                "type": "string",
                "minLength": 1,
                "description": "Trello board ID (from trello_list_boards)"
            }
        },
        "required": ["boardId"]
    }
)


async def handle(client: TrelloClient, arguments: dict) -> list[dict]:
    """Handle trello_list_lists tool call."""
    board_id = quote(arguments["boardId"], safe="")
    lists = await client.call(f"/boards/{board_id}/lists")
    return [{"id": lst["id"], "name": lst["name"]} for lst in lists]
