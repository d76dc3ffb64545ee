"""
Exceptions raised while harvesting.

A selector that matches nothing and an index entry without a link are
not errors: they become a None field and a dropped row respectively.
"""

from typing import Optional


class HarvestError(Exception):
    """Base class for harvester failures."""


class NetworkError(HarvestError):
    """Connection failure, timeout or non-success HTTP status."""

    def __init__(self, message: str, url: Optional[str] = None,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(HarvestError):
    """Body could not be parsed, or the document has an unexpected shape."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url
