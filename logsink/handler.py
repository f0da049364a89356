"""logging.Handler that sends formatted records to a LogWriter."""

import logging

from logsink.config import SinkConfig
from logsink.writer import LogWriter


class ArchivingFileHandler(logging.Handler):
    def __init__(self, config: SinkConfig | None = None, writer: LogWriter | None = None,
                 level=logging.NOTSET):
        super().__init__(level)
        self.writer = writer or LogWriter(config or SinkConfig())

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record)
        except Exception:
            self.handleError(record)
            return
        if not self.writer.write(line):
            self.handleError(record)
