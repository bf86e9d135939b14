"""Error types raised by the playground commands."""


class PlaygroundError(Exception):
    """Base class for all errors raised by aws_playground."""


class ConfigError(PlaygroundError):
    """Invalid or missing configuration, detected before any network call."""


class AddressError(ConfigError):
    """A mail address could not be parsed."""


class AWSCallError(PlaygroundError):
    """An AWS API call failed.

    The message names the failing call, e.g. ``SQS.DeleteMessage: ...``;
    the original exception is chained as ``__cause__``.
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        self.operation = operation
        super().__init__(f"{operation}: {cause}")


class Interrupted(PlaygroundError):
    """A shutdown signal cut the work short before it finished."""
