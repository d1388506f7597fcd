"""
Trello card creation: create a card in a list.
"""

from mcp.types import Tool

from tools.trello.client import TrelloClient

TOOL = Tool(
    name="trello_create_card",
    title="Create a Trello card",
    description="Create a card in a given list",
    inputSchema={
        "type": "object",
        "properties": {
            "listId": {
                "type": "string",
                "minLength": 1,
                "description": "Trello list ID (from trello_list_lists)"
            },
            "name": {
                "type": "string",
                "minLength": 1,
                "description": "Card title"
            },
            "desc": {
                "type": "string",
                "description": "Card description (Markdown supported)"
            }
        },
        "required": ["listId", "name"]
    }
)


async def handle(client: TrelloClient, arguments: dict) -> dict:
    """Handle trello_create_card tool call."""
    create_params = {
        "idList": arguments["listId"],
        "name": arguments["name"],
    }
    # An empty description is left out rather than sent as ""
    if arguments.get("desc"):
        create_params["desc"] = arguments["desc"]

    card = await client.call("/cards", method="POST", body=create_params)

    return {"id": card["id"], "url": card.get("shortUrl"), "name": card["name"]}
