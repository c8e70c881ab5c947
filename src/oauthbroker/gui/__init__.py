"""GTK front end for the authorization broker."""

import gi
gi.require_version('Gtk', '3.0')

from .dispatcher import GtkDispatcher
from .signin_window import SignInWindow

__all__ = ['GtkDispatcher', 'SignInWindow']
