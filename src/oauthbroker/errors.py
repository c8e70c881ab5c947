"""Exceptions raised by the authorization broker."""


class AuthorizationError(Exception):
    """Base class for authorization broker errors."""
    pass


class ConcurrentAuthorizationError(AuthorizationError):
    """Raised when an authorization is requested while another is pending."""
    pass


class AuthorizationCanceled(AuthorizationError):
    """Raised when the sign-in window closes before the redirect arrives."""
    pass
