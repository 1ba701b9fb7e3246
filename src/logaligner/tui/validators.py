from collections.abc import Callable
from datetime import datetime

from textual.validation import Validator, ValidationResult


class TimestampValidator(Validator):
    """
    Validates go-to-timestamp input, using the given parser to convert the entered
    string; any ValueError from the parser is reported as the failure message.
    """
    def __init__(self, timestamp_parser: Callable[[str], datetime]):
        super().__init__("Invalid timestamp")
        self.timestamp_parser = timestamp_parser

    def convert_time_str(self, s: str) -> datetime:
        return self.timestamp_parser(s.strip())

    def validate(self, value: str) -> ValidationResult:
        try:
            self.convert_time_str(value)
        except ValueError as ve:
            return self.failure(str(ve).capitalize())
        else:
            return self.success()
