class AssistantError(Exception):
    """Base class for every error raised inside the assistant backend."""


class ConfigError(AssistantError):
    """Required configuration (credentials, policy file) is missing or invalid."""


class ContextFetchError(AssistantError):
    """One data slice could not be read from the business store."""

    def __init__(self, slice_name: str, cause: Exception):
        super().__init__(f"{slice_name}: {cause}")
        self.slice_name = slice_name
        self.cause = cause


class GenerationError(AssistantError):
    """The generative-language endpoint failed or returned no text."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
