"""Exception types raised by the wiki catalog library."""
from typing import List, Optional


class WikiError(Exception):
    """Base class for every error raised by wiki_lib."""


class FetchError(WikiError):
    """A request failed: transport error, timeout or non-success status."""

    def __init__(self, url: str, cause: BaseException):
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to fetch {url}: {cause}")


class ParseError(WikiError):
    """A fetched response could not be decoded into the expected structure."""


class CacheCorruptError(WikiError):
    """The cache file exists but does not hold a valid mod database."""

    def __init__(self, path, cause):
        self.path = path
        self.cause = cause
        super().__init__(f"Cache file {path} is corrupt: {cause}")


class NotFoundError(WikiError):
    """A category or mod name did not resolve against the catalog."""

    def __init__(self, kind: str, name: str, available: Optional[List[str]] = None):
        self.kind = kind
        self.name = name
        self.available = list(available or [])
        super().__init__(f"{kind.capitalize()} '{name}' not found")
