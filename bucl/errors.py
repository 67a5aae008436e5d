from dataclasses import dataclass
from typing import Optional


PARSE_ERROR = 'ParseError'
BINDING_ERROR = 'BindingError'
EVALUATION_ERROR = 'EvaluationError'
IO_ERROR = 'IOError'


@dataclass
class ErrorVal:
    """Structured description of a BUCL failure.

    `name` is the error kind (one of the constants above), `message` the
    human readable text and `line` the 1-based source line of the statement
    that failed, when known.
    """
    name: str
    message: str
    line: Optional[int] = None

    def __str__(self) -> str:
        if self.line is not None:
            return f"{self.name}: line {self.line}: {self.message}"
        return f"{self.name}: {self.message}"


class BuclError(Exception):
    """Exception type used to propagate BUCL errors to the host."""
    def __init__(self, err: ErrorVal):
        super().__init__(str(err))
        self.err = err

    def __str__(self) -> str:
        # the line number may be attached after construction
        return str(self.err)
