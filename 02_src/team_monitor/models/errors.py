"""Errors raised while turning on-disk JSON into records."""


class RecordParseError(ValueError):
    """A record file could not be decoded into its model."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message if path is None else f"{path}: {message}")
        self.path = path
