class AnalysisError(Exception):
    """Base exception for everything the analysis call can raise."""


class ConfigurationError(AnalysisError):
    """Required configuration (e.g. the API key) is missing."""


class MediaEncodingError(AnalysisError):
    """An image file could not be read for inline transport."""


class EmptyResponseError(AnalysisError):
    """The model call returned no text."""


class ResponseDecodeError(AnalysisError):
    """The model reply is not valid JSON."""


class ResponseSchemaError(ResponseDecodeError):
    """The model reply is JSON but does not match the analysis contract."""


class InvalidTransitionError(Exception):
    """A view transition was requested from a state that does not allow it."""
