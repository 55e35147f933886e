"""Error taxonomy for sample aggregation."""


class AggregationError(Exception):
    pass


class SampleValidationError(AggregationError):
    """A sample lacks the brand or name needed to identify its record."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class MalformedFieldError(AggregationError):
    """A single field of an otherwise valid sample could not be merged."""

    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class StoreError(AggregationError):
    """The backing store failed to read or write a record."""
