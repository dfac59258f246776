"""Centralized exceptions for the Sitios application."""


class SitiosError(Exception):
    """Base exception for all Sitios errors.

    Each package defines its own family in an ``exceptions`` module; the CLI
    maps those families to user-facing messages.
    """
