"""
Error taxonomy shared by the presentation store, the generation adapter and the routes.
"""


class PresentationServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500


class InvalidRequestError(PresentationServiceError):
    """Raised when a request is missing fields or carries malformed values."""

    status_code = 400


class PresentationNotFoundError(PresentationServiceError):
    """Raised when a requested presentation cannot be found."""

    status_code = 404


class SlideIndexError(PresentationServiceError):
    """Raised when a slide, bullet or image index is outside the current bounds."""

    status_code = 400


class GenerationError(PresentationServiceError):
    """Base class for outline and reprompt generation failures."""


class GenerationConfigurationError(GenerationError):
    """Raised when no generation backend has a usable credential."""


class UpstreamGenerationError(GenerationError):
    """Raised when the generation backend is unreachable, times out or returns unusable content."""

