"""Logging formatters and filters for stream routing."""

import logging


class StreamFormatter(logging.Formatter):
    """Logging formatter that prefixes warnings and errors with their level."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with a level prefix for warnings and above.

        Parameters
        ----------
        record : logging.LogRecord
            Log record to format

        Returns
        -------
        str
            Formatted log message
        """
        msg = super().format(record)

        if record.levelno >= logging.ERROR:
            return f"[err] {msg}"
        elif record.levelno >= logging.WARNING:
            return f"[warn] {msg}"

        return msg


class StreamRoutingFilter(logging.Filter):
    """Filter that routes log records based on stream extra parameter.

    Records logged with ``extra={"stream": "stdout"}`` go to stdout; all
    other records go to stderr.

    Parameters
    ----------
    stream_type : str
        Stream type to allow: "stdout" or "stderr"
    """

    def __init__(self, stream_type: str) -> None:
        super().__init__()
        self.stream_type = stream_type

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter log records by stream type.

        Parameters
        ----------
        record : logging.LogRecord
            Log record to filter

        Returns
        -------
        bool
            True if record should be emitted by this handler
        """
        record_stream = getattr(record, "stream", None)

        if record_stream is None:
            return self.stream_type == "stderr"

        return record_stream == self.stream_type
