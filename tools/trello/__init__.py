"""
Trello tools: boards, lists and card creation over the Trello REST API.
"""

from tools.trello import boards_list, lists_list, card_create


TOOLS = [
    boards_list.TOOL,
    lists_list.TOOL,
    card_create.TOOL,
]

HANDLERS = {
    "trello_list_boards": boards_list.handle,
    "trello_list_lists": lists_list.handle,
    "trello_create_card": card_create.handle,
}
