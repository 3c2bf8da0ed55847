# backend/errors.py


class GenerationError(Exception):
    """Base error for the generate endpoint. Carries the HTTP status to report."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GenerationError):
    """Bad or missing client input."""

    status_code = 400


class ConfigurationError(GenerationError):
    """Required server configuration (e.g. the upstream token) is missing."""

    status_code = 500


class UpstreamError(GenerationError):
    """The generation service rejected the request or the prediction failed."""

    status_code = 500

    def __init__(self, message: str, prediction_id: str | None = None):
        super().__init__(message)
        self.prediction_id = prediction_id
