from datetime import timedelta


class LogAlignerError(Exception):
    """Base class for errors raised while capturing or aligning log sources."""


class InvalidPrecision(LogAlignerError, ValueError):
    def __init__(self, precision: timedelta):
        millis = precision / timedelta(milliseconds=1)
        super().__init__(f"invalid precision {millis:g}ms - precision must be greater than 0")
        self.precision = precision


class NoDataForSource(LogAlignerError):
    def __init__(self, source_id: str):
        super().__init__(f"no lines were captured from {source_id!r}")
        self.source_id = source_id


class UnknownSource(LogAlignerError, KeyError):
    def __init__(self, source_id: str):
        super().__init__(f"line received from unregistered source {source_id!r}")
        self.source_id = source_id

    def __str__(self):
        # KeyError would repr() the message
        return self.args[0]


class DuplicateSource(LogAlignerError, ValueError):
    def __init__(self, source_id: str):
        super().__init__(f"source {source_id!r} is already registered")
        self.source_id = source_id
