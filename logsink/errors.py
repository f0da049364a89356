"""Error types raised inside the sink. None of them escape LogWriter."""


class LogSinkError(Exception):
    pass


class CompressError(LogSinkError):
    """The payload of a rotation could not be compressed."""


class NamingCorruptionError(LogSinkError):
    """A file in the archive directory does not follow the archive naming scheme."""

    def __init__(self, filename: str, reason: str):
        super().__init__(f"{filename!r}: {reason}")
        self.filename = filename
        self.reason = reason
