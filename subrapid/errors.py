from typing import Optional


class SubrapidError(Exception):
    """Base class for every error raised by subrapid."""


class ConfigError(SubrapidError):
    """Invalid input detected before any discovery runs."""


class FetchError(SubrapidError):
    def __init__(self, url: str, message: str, status: Optional[int] = None):
        super().__init__(f"{message} ({url})")
        self.url = url
        self.status = status


class NotFoundError(FetchError):
    def __init__(self, url: str):
        super().__init__(url, "request failed with status: 404", status=404)


class SourceError(SubrapidError):
    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
