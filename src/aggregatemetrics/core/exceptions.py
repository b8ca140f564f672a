"""Exceptions raised by the aggregation core."""


class InvalidMetric(ValueError):
    """Raised when a metric cannot be buffered.

    A metric without a non-empty string name is rejected rather than
    grouped under a degenerate key.
    """

    def __init__(
        self,
        metric: object,
        reason: str = "metric name must be a non-empty string",
    ) -> None:
        super().__init__(f"{reason}: {metric!r}")
        self.metric = metric
        self.reason = reason
