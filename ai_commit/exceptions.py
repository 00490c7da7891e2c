"""Exception classes for the commit message pipeline.

- AICommitError: base class for everything raised by ai_commit
- UnsupportedPromptVersion: prompt version outside the registered set
- EmptyDiff: nothing to describe, raised before any provider call
- EmptyResponse: provider returned blank text
- MalformedResponse: provider text could not be parsed into a record
- MissingRequiredField: parsed record has no usable subject
- SensitiveContentDetected: generated message looks like it leaks secrets
- ProviderError: transport/auth/rate-limit failure (the only retryable one)
- ConfigurationError: settings are incomplete for the chosen provider
- GitError: the diff source or commit sink failed
- DatasetError: an evaluation dataset is missing, empty or unusable
- GenerationFailed: single outward-facing wrapper raised by CommitEngine
"""

from typing import Iterable


class AICommitError(Exception):
    """Base exception for ai_commit."""

    pass


class UnsupportedPromptVersion(AICommitError):
    """Raised when a prompt version is not one of the registered templates."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Unsupported prompt version: '{version}'")


class EmptyDiff(AICommitError):
    """Raised when the diff is empty after trimming."""

    pass


class EmptyResponse(AICommitError):
    """Raised when the provider reply is empty after trimming."""

    pass


class MalformedResponse(AICommitError):
    """Raised when the provider reply cannot be parsed as a commit record."""

    pass


class MissingRequiredField(AICommitError):
    """Raised when the parsed record lacks a required field."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Model response is missing required field '{field}'")


class SensitiveContentDetected(AICommitError):
    """Raised when the generated message contains likely secrets."""

    def __init__(self, issues: Iterable[str]):
        self.issues = tuple(issues)
        super().__init__(
            f"Generated message contains sensitive content: {', '.join(self.issues)}"
        )


class ProviderError(AICommitError):
    """Raised when the text-generation provider call fails."""

    pass


class ConfigurationError(AICommitError):
    """Raised when required settings are missing."""

    pass


class GitError(AICommitError):
    """Raised when a git operation fails."""

    pass


class DatasetError(AICommitError):
    """Raised when an evaluation dataset cannot be used."""

    pass


class GenerationFailed(AICommitError):
    """Raised by CommitEngine.generate for any internal failure.

    The original exception is kept on ``cause`` (and chained as __cause__).
    """

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(str(cause) or type(cause).__name__)
