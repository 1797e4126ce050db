"""
Centralized exception hierarchy for extract-service errors.

Each class represents a specific failure of the extract lifecycle so the
HTTP boundary can map it to a status code without inspecting messages.
"""


class ExtractServiceError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ExtractNotFoundError(ExtractServiceError):
    """Raised when an extract (or its config) does not exist yet."""


class ExtractAlreadyExistsError(ExtractServiceError):
    """Raised when creating a directory or config that is already there."""


class InvalidConfigurationError(ExtractServiceError):
    """Raised when an extract's configuration cannot support an operation."""


class CorruptConfigError(ExtractServiceError):
    """Raised when a persisted config file cannot be decoded."""


class ArtifactMissingError(ExtractServiceError):
    """Raised when an extract exists but the requested file was never produced."""


class ExternalServiceError(ExtractServiceError):
    """Exception raised when a collaborator outside this process fails."""


class UpstreamFetchError(ExternalServiceError):
    """Raised when a remote download returned no usable content."""


class ExternalToolError(ExternalServiceError):
    """Raised when osmconvert or pyosmium exits non-zero or times out."""
