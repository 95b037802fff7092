"""Exception hierarchy raised by the multi-agent engine."""


class OptiMAError(Exception):
    """Base class for every error raised by the engine."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class UnauthorizedAccessError(OptiMAError):
    """An agent tried an operation its type is not allowed to perform."""


class AgentLimitError(OptiMAError):
    """The maximum number of agents of a type would be exceeded."""


class AgentUnavailableError(OptiMAError):
    """No agent of the requested type is free."""


class PluginLimitError(OptiMAError):
    """A plugin cannot serve any more users."""


class InvalidModelParameterError(OptiMAError):
    """The model was configured with an invalid or missing parameter."""


class UserAbortError(OptiMAError):
    """User code aborted the running transaction."""