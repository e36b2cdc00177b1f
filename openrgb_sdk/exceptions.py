"""
OpenRGB SDK library exceptions.

This module defines all custom exceptions used throughout the library.
"""


class OpenRGBError(Exception):
    """Base exception for OpenRGB protocol errors"""
    pass


class OpenRGBTimeoutError(OpenRGBError):
    """Raised when a request or connection attempt times out"""
    pass


class OpenRGBResponseError(OpenRGBError):
    """Raised when receiving an invalid or truncated response"""
    pass


class OpenRGBMalformedHeaderError(OpenRGBResponseError):
    """Raised by a strict framer when a header does not start with the ORGB magic"""
    pass


class OpenRGBConnectionError(OpenRGBError):
    """Raised when the connection to the server fails or is lost"""
    pass


class OpenRGBDisconnectedError(OpenRGBConnectionError):
    """Raised when reading or writing while not connected"""
    pass


class OpenRGBNegotiationError(OpenRGBConnectionError):
    """Raised when the protocol version could not be agreed with the server"""
    pass


class OpenRGBConfigurationError(OpenRGBError):
    """Raised when configuration is invalid"""
    pass
