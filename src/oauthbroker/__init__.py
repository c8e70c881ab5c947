"""OAuth Authorization Broker - interactive OAuth sign-in for GTK desktop apps."""

__version__ = '0.1.0'
__license__ = 'MIT'

from .broker import AuthorizationBroker, AuthorizeHandler, NavigationRequest
from .config import Config
from .errors import AuthorizationError, AuthorizationCanceled, ConcurrentAuthorizationError
from .params import decode_parameters, is_redirect

__all__ = [
    'AuthorizationBroker',
    'AuthorizeHandler',
    'NavigationRequest',
    'Config',
    'AuthorizationError',
    'AuthorizationCanceled',
    'ConcurrentAuthorizationError',
    'decode_parameters',
    'is_redirect',
]
