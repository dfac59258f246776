"""Trello REST boundary."""

from sitios.trello.client import TRELLO_API_BASE, TrelloClient
from sitios.trello.exceptions import TrelloAPIError, TrelloAuthError, TrelloError

__all__ = ["TRELLO_API_BASE", "TrelloAPIError", "TrelloAuthError", "TrelloClient", "TrelloError"]
