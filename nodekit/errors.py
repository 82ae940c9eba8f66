"""Error taxonomy shared across nodekit packages."""


class NodeKitError(Exception):
    """Base class for all nodekit errors."""

    pass


class ResolutionError(NodeKitError):
    """Raised when a requested dependency cannot be produced.

    Attributes:
        dependency: The type that could not be satisfied, if known.
        provider: Name of the provider involved in the failure, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        dependency: type | None = None,
        provider: str | None = None,
    ) -> None:
        super().__init__(message)
        self.dependency = dependency
        self.provider = provider


class EnhancementError(NodeKitError):
    """Raised when module commands cannot be bound onto the command tree."""

    pass


class ConfigurationError(NodeKitError):
    """Raised when persisted configuration cannot be parsed, validated or written."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class FlagParseError(NodeKitError):
    """Raised when persistent flags cannot be applied to the client context."""

    def __init__(self, message: str, *, flag: str | None = None) -> None:
        super().__init__(message)
        self.flag = flag


class KeyringError(NodeKitError):
    """Raised when a keyring operation fails."""

    pass


__all__ = [
    "ConfigurationError",
    "EnhancementError",
    "FlagParseError",
    "KeyringError",
    "NodeKitError",
    "ResolutionError",
]
