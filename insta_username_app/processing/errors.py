"""
Error Types

Every failure the user can see is one of these.
"""

CONFIGURATION_ERROR_MESSAGE = "API Key is invalid or missing. Please ensure it is configured correctly."
UNKNOWN_ERROR_MESSAGE = "An unexpected error occurred while processing the images. Please try again."


class InstaExtractorError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(InstaExtractorError):
    """Missing or rejected API credential."""

    def __init__(self, message: str = CONFIGURATION_ERROR_MESSAGE):
        super().__init__(message)


class ExtractionError(InstaExtractorError):
    """A single image's extraction call failed."""


class UnknownError(InstaExtractorError):
    def __init__(self, message: str = UNKNOWN_ERROR_MESSAGE):
        super().__init__(message)


class BatchError(InstaExtractorError):
    """
    Wraps the first failure of a batch for display.

    Attributes:
        cause: The classified error (ConfigurationError, ExtractionError or UnknownError)
        image_index: Submission index of the image that failed
    """

    def __init__(self, cause: InstaExtractorError, image_index: int):
        super().__init__(cause.message)
        self.cause = cause
        self.image_index = image_index


class ClipboardError(InstaExtractorError):
    """Writing the link text failed. Never alters results."""
