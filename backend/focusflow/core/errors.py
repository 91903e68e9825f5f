"""Domain error taxonomy.

Services raise these; the HTTP layer translates them into status codes and
the background generation queue logs and drops them.
"""


class FocusFlowError(Exception):
    """Base class for all FocusFlow domain errors."""


class GenerationError(FocusFlowError):
    """The LLM call failed or returned content that could not be used."""


class StorageError(FocusFlowError):
    """A persistence read or write failed."""

    def __init__(self, message: str, *, not_found: bool = False) -> None:
        super().__init__(message)
        self.not_found = not_found


class ValidationError(FocusFlowError):
    """Malformed input to a service or orchestrator."""
