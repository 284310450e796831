"""
Error types raised while handling placeholder requests.

Each error carries the HTTP status it is reported with.
"""


class LqipError(Exception):
    """Base class for placeholder service errors"""
    status_code = 500


class ConfigError(LqipError):
    """The server is missing required configuration (e.g. its API key)"""
    status_code = 500


class AuthError(LqipError):
    """The client API key is missing or does not match"""
    status_code = 401


class BadRequestError(LqipError):
    """The request cannot be processed as sent"""
    status_code = 400


class InvalidFormatError(BadRequestError, ValueError):
    """The requested output format is not supported"""

    def __init__(self, output_format):
        self.output_format = output_format
        super().__init__(f'Invalid output format "{output_format}"')


class ImageProcessingError(LqipError):
    """Pillow failed to decode or encode the image"""
    status_code = 500
