#!/usr/bin/env python3
"""Interactive OAuth authorization broker.

The broker shows the provider's sign-in page in a modal browser window,
watches the window's navigation for the redirect back to the application's
callback URL and hands the decoded response parameters to the caller
through a future.

Only one authorization can be in flight at a time:

    Idle -> AwaitingRedirect -> Resolved | Canceled -> Idle

The slot returns to Idle when the sign-in window closes, whatever the
outcome. A canceled attempt is not retried; the caller starts a new one.
"""

import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future, InvalidStateError
from functools import partial
from typing import Any, Callable, Dict, Optional

from .errors import AuthorizationCanceled, ConcurrentAuthorizationError
from .params import decode_parameters, is_redirect, normalize_url

logger = logging.getLogger(__name__)


class NavigationRequest:
    """A pending navigation of the sign-in browser.

    Set ``cancel`` to True to keep the browser from loading ``uri``.
    """

    def __init__(self, uri: Optional[str]):
        self.uri = uri
        self.cancel = False


class AuthorizeHandler(ABC):
    """Interface an OAuth SDK calls to obtain an interactive authorization."""

    @abstractmethod
    def authorize_async(self, service_uri: Any, authorize_uri: Any, callback_uri: Any) -> Future:
        """Start an interactive authorization.

        Args:
            service_uri: URI of the secured service
            authorize_uri: Authorization endpoint to show the user
            callback_uri: Redirect URI registered for the application

        Returns:
            Future resolving to the response parameters
        """
        pass


class _PendingAuthorization:
    """The single in-flight authorization."""

    def __init__(self, callback_url: str):
        self.callback_url = callback_url
        self.future: Future = Future()
        self.window = None


def _settle(future: Future, result: Optional[Dict[str, str]] = None,
            error: Optional[BaseException] = None) -> bool:
    """Resolve or reject a future unless it is already done.

    Returns:
        True if this call settled the future
    """
    if future.done():
        return False
    try:
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)
    except InvalidStateError:
        # Canceled by the caller from another thread
        return False
    return True


class AuthorizationBroker(AuthorizeHandler):
    """Runs OAuth sign-in in a modal browser window.

    Args:
        dispatcher: Marshals calls onto the UI thread. Defaults to
            :class:`oauthbroker.gui.dispatcher.GtkDispatcher`.
        window_factory: Builds the sign-in window. Called as
            ``factory(authorize_url, on_navigating=..., on_closed=...,
            parent=..., config=...)``. Defaults to
            :class:`oauthbroker.gui.signin_window.SignInWindow`.
        parent: Optional owner window for the sign-in window
        config: Optional :class:`oauthbroker.config.Config` with window
            appearance and timeout settings
    """

    def __init__(self, dispatcher=None, window_factory: Optional[Callable] = None,
                 parent=None, config=None):
        self._dispatcher = dispatcher
        self._window_factory = window_factory
        self.parent = parent
        self.config = config

        self._lock = threading.Lock()
        self._pending: Optional[_PendingAuthorization] = None

    @property
    def is_pending(self) -> bool:
        """True while an authorization is in flight."""
        return self._pending is not None

    def _get_dispatcher(self):
        if self._dispatcher is None:
            from .gui.dispatcher import GtkDispatcher
            self._dispatcher = GtkDispatcher()
        return self._dispatcher

    def _get_window_factory(self) -> Callable:
        if self._window_factory is None:
            from .gui.signin_window import SignInWindow
            self._window_factory = SignInWindow
        return self._window_factory

    def authorize_async(self, service_uri: Any, authorize_uri: Any, callback_uri: Any) -> Future:
        """Show the sign-in window and wait for the redirect.

        When called on the UI thread the window is shown right away and this
        call returns once it has closed. From any other thread the window is
        scheduled on the UI thread and the future is returned immediately.

        Args:
            service_uri: URI of the secured service (not used by the broker)
            authorize_uri: Authorization endpoint to load in the browser
            callback_uri: Redirect URI registered for the application

        Returns:
            Future resolving to a dict of response parameters, or failing
            with AuthorizationCanceled if the user closes the window

        Raises:
            ConcurrentAuthorizationError: If an authorization is already pending
        """
        dispatcher = self._get_dispatcher()

        with self._lock:
            if self._pending is not None:
                raise ConcurrentAuthorizationError("An authorization is already in progress")
            pending = _PendingAuthorization(normalize_url(str(callback_uri)))
            self._pending = pending

        pending.future.add_done_callback(partial(self._on_future_done, pending))

        authorize_url = str(authorize_uri)
        logger.info(f"Starting authorization for service {service_uri}")
        logger.debug(f"Callback URL: {pending.callback_url}")

        if dispatcher.is_ui_thread():
            self._authorize_on_ui_thread(pending, authorize_url)
        else:
            dispatcher.invoke(self._authorize_on_ui_thread, pending, authorize_url)

        return pending.future

    def _authorize_on_ui_thread(self, pending: _PendingAuthorization, authorize_url: str) -> None:
        """Create the sign-in window and run it modally."""
        if pending.future.done():
            # Caller gave up before the window could be shown
            logger.info("Authorization canceled before sign-in window was shown")
            self._release(pending)
            return

        try:
            window = self._get_window_factory()(
                authorize_url,
                on_navigating=self._on_navigating,
                on_closed=self._on_window_closed,
                parent=self.parent,
                config=self.config,
            )
        except Exception as e:
            logger.error(f"Could not create sign-in window: {e}", exc_info=True)
            self._release(pending)
            _settle(pending.future, error=e)
            return

        pending.window = window
        if pending.future.cancelled():
            # Canceled while the window was being built
            window.close()

        logger.debug("Showing sign-in window")
        window.show_modal()

    def _on_navigating(self, window, request: NavigationRequest) -> None:
        """Check a navigation of the sign-in browser for the redirect."""
        pending = self._pending
        if pending is None or pending.future.done() or not request.uri:
            return

        if not is_redirect(request.uri, pending.callback_url):
            return

        logger.info("Redirect to callback URL detected")
        request.cancel = True

        params = decode_parameters(request.uri)
        _settle(pending.future, result=params)

        window.stop_watching_navigation()
        window.close()

    def _on_window_closed(self, window) -> None:
        """Reject the authorization if it is unfinished and free the slot."""
        with self._lock:
            pending, self._pending = self._pending, None

        if pending is None:
            return

        if _settle(pending.future, error=AuthorizationCanceled(
                "Sign-in window was closed before authorization completed")):
            logger.info("Sign-in window closed, authorization canceled")
        else:
            logger.debug("Sign-in window closed")

    def _on_future_done(self, pending: _PendingAuthorization, future: Future) -> None:
        """Close the window when the caller cancels the future."""
        if not future.cancelled():
            return

        logger.info("Authorization canceled by caller")
        if pending.window is not None:
            self._get_dispatcher().invoke(pending.window.close)

    def _release(self, pending: _PendingAuthorization) -> None:
        with self._lock:
            if self._pending is pending:
                self._pending = None
