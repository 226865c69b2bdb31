"""logging.Handler that writes formatted records through a RollingWriter."""

import logging

from logroller.config import RollerConfig
from logroller.writer import RollingWriter


class RollerHandler(logging.Handler):
    terminator = "\n"

    def __init__(self, writer: RollingWriter | RollerConfig, level=logging.NOTSET):
        super().__init__(level)
        if isinstance(writer, RollerConfig):
            writer = RollingWriter(writer)
        self.writer = writer

    def emit(self, record):
        try:
            data = (self.format(record) + self.terminator).encode("utf-8")
            while data:
                n = self.writer.write(data)
                if n <= 0:
                    raise OSError(f"short write to {self.writer.config.filepath}")
                data = data[n:]
        except Exception:
            self.handleError(record)

    def close(self):
        try:
            self.writer.close()
        finally:
            super().close()
