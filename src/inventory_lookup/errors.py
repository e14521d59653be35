"""Load-time errors surfaced to the user."""

from __future__ import annotations


class InventoryLookupError(Exception):
    """Base class for errors that end a load attempt."""


class FetchError(InventoryLookupError):
    """The spreadsheet could not be retrieved (bad status, network, missing file)."""


class ParseError(InventoryLookupError):
    """The bytes did not decode as a workbook, or the workbook has no sheet."""
