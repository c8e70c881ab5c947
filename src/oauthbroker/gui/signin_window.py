#!/usr/bin/env python3
"""Modal sign-in window hosting the provider's authorization page."""

import inspect
import logging
import weakref
from typing import Callable, Optional

import gi
gi.require_version('Gtk', '3.0')
try:
    gi.require_version('WebKit2', '4.1')
except ValueError:
    gi.require_version('WebKit2', '4.0')
from gi.repository import Gtk, GLib, WebKit2

from ..broker import NavigationRequest
from ..config import window_settings

logger = logging.getLogger(__name__)


def _weak_callback(callback: Callable) -> Callable:
    """Wrap a callback so the window does not keep its owner alive.

    Returns:
        Zero-argument callable returning the callback, or None once the
        bound object has been collected
    """
    if inspect.ismethod(callback):
        return weakref.WeakMethod(callback)
    return lambda: callback


class SignInWindow(Gtk.Window):
    """Browser window showing an OAuth authorization page.

    Every navigation of the embedded web view is reported to
    ``on_navigating(window, request)``; the browser skips the load when the
    callback sets ``request.cancel``. ``on_closed(window)`` is called once
    the window is destroyed.
    """

    WATCHED_DECISIONS = (
        WebKit2.PolicyDecisionType.NAVIGATION_ACTION,
        WebKit2.PolicyDecisionType.NEW_WINDOW_ACTION,
    )

    def __init__(self, authorize_url: str, on_navigating: Callable, on_closed: Callable,
                 parent: Optional[Gtk.Window] = None, config=None):
        """Initialize sign-in window.

        Args:
            authorize_url: Authorization endpoint to load
            on_navigating: Called with (window, NavigationRequest) per navigation
            on_closed: Called with (window) when the window is destroyed
            parent: Optional owner window
            config: Optional Config with window settings and timeout
        """
        super().__init__(type=Gtk.WindowType.TOPLEVEL)

        self.authorize_url = authorize_url
        self._on_navigating = _weak_callback(on_navigating)
        self._on_closed = _weak_callback(on_closed)
        self._parent = parent
        self._loop: Optional[GLib.MainLoop] = None
        self._timeout_id: Optional[int] = None
        self._destroyed = False

        settings = window_settings(config)
        self.timeout = settings['timeout']

        self.set_title(settings['title'])
        self.set_default_size(settings['width'], settings['height'])
        self.set_modal(True)

        if parent is not None:
            self.set_transient_for(parent)
            self.set_position(Gtk.WindowPosition.CENTER_ON_PARENT)
        else:
            self.set_position(Gtk.WindowPosition.CENTER)

        # Shown behind the page while it loads
        css_provider = Gtk.CssProvider()
        css_provider.load_from_data(
            f"window {{ background-color: {settings['background']}; }}".encode()
        )
        self.get_style_context().add_provider(
            css_provider,
            Gtk.STYLE_PROVIDER_PRIORITY_APPLICATION
        )

        self.web_view = WebKit2.WebView()
        self._policy_handler_id: Optional[int] = self.web_view.connect(
            'decide-policy', self._on_decide_policy
        )
        self.add(self.web_view)

        self.connect('destroy', self._on_destroy)

    def show_modal(self) -> None:
        """Show the window and block until it is destroyed."""
        self.show_all()
        self.web_view.load_uri(self.authorize_url)

        if self._destroyed:
            return

        if self.timeout:
            self._timeout_id = GLib.timeout_add_seconds(self.timeout, self._on_timeout)

        # Nested loop keeps the UI responsive while blocking the caller
        self._loop = GLib.MainLoop()
        self._loop.run()
        self._loop = None

    def stop_watching_navigation(self) -> None:
        """Stop reporting navigations to the navigation callback."""
        if self._policy_handler_id is not None:
            self.web_view.disconnect(self._policy_handler_id)
            self._policy_handler_id = None

    def close(self) -> None:
        """Close the window once the current signal emission has finished."""
        GLib.idle_add(self._close_now)

    def _close_now(self) -> bool:
        if not self._destroyed:
            Gtk.Window.close(self)
        return False

    def _on_decide_policy(self, web_view, decision, decision_type) -> bool:
        """Handle a WebKit policy decision.

        Returns:
            True if the decision was handled (navigation ignored)
        """
        if decision_type not in self.WATCHED_DECISIONS:
            return False

        callback = self._on_navigating()
        if callback is None:
            return False

        uri = decision.get_navigation_action().get_request().get_uri()
        request = NavigationRequest(uri)
        callback(self, request)

        if request.cancel:
            decision.ignore()
            return True
        return False

    def _on_timeout(self) -> bool:
        logger.warning(f"Sign-in not completed within {self.timeout} seconds, closing window")
        self._timeout_id = None
        self.close()
        return False

    def _on_destroy(self, widget) -> None:
        """Notify the owner and leave the modal loop."""
        self._destroyed = True

        if self._timeout_id is not None:
            GLib.source_remove(self._timeout_id)
            self._timeout_id = None

        self.stop_watching_navigation()

        callback = self._on_closed()
        if callback is not None:
            callback(self)

        if self._parent is not None:
            self._parent.present()

        if self._loop is not None and self._loop.is_running():
            self._loop.quit()
