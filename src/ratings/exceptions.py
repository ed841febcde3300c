"""Error taxonomy for the ratings engine.

Validation failures reuse ``protean.exceptions.ValidationError`` so the HTTP
layer maps them to 400 without extra handlers. A missing aggregate is never
an error here: writes create on first use and reads return ``None``.
"""


class RatingsError(Exception):
    """Base class for ratings engine errors."""


class ConflictError(RatingsError):
    """A review event lost every optimistic-concurrency race it was allowed.

    Retryable: the caller should redeliver the event later.
    """

    retryable = True

    def __init__(self, entity_id: str, attempts: int) -> None:
        self.entity_id = entity_id
        self.attempts = attempts
        super().__init__(f"Conflicting writes to stats for entity {entity_id} after {attempts} attempts")


class PartialComputationError(RatingsError):
    """One entity could not be scored during a trending run.

    Recorded in the run summary; never raised out of the run.
    """

    def __init__(self, entity_id: str, cause: Exception) -> None:
        self.entity_id = entity_id
        self.cause = cause
        super().__init__(f"Skipped entity {entity_id}: {cause}")
