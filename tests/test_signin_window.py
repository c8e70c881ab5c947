#!/usr/bin/env python3
"""Tests for the GTK sign-in window handlers.

The handlers are exercised on a stand-in object so no display is needed;
only the GObject introspection data for Gtk 3 and WebKit2 must be present.
"""

import gc
import tempfile
from pathlib import Path

import pytest

pytest.importorskip('gi')
try:
    from oauthbroker.gui import signin_window
    from oauthbroker.gui.signin_window import SignInWindow, _weak_callback, WebKit2
except (ImportError, ValueError) as e:
    pytest.skip(f"Gtk 3 / WebKit2 introspection data not available: {e}", allow_module_level=True)

from oauthbroker.config import Config


class FakeGLib:
    """Records the GLib calls the window makes."""
    
    def __init__(self):
        self.timeouts = []
        self.removed = []
        self.loops = []
    
    def timeout_add_seconds(self, seconds, func):
        self.timeouts.append((seconds, func))
        return 4242
    
    def source_remove(self, source_id):
        self.removed.append(source_id)
    
    def MainLoop(self):
        loop = FakeLoop()
        self.loops.append(loop)
        return loop


class FakeLoop:
    def __init__(self):
        self.running = False
        self.ran = False
        self.quit_called = False
    
    def run(self):
        self.ran = True
    
    def is_running(self):
        return self.running
    
    def quit(self):
        self.quit_called = True
        self.running = False


class FakeWebView:
    def __init__(self):
        self.loaded = []
        self.disconnected = []
    
    def load_uri(self, uri):
        self.loaded.append(uri)
    
    def disconnect(self, handler_id):
        self.disconnected.append(handler_id)


class FakeDecision:
    def __init__(self, uri):
        self.uri = uri
        self.ignored = False
    
    def get_navigation_action(self):
        return self
    
    def get_request(self):
        return self
    
    def get_uri(self):
        return self.uri
    
    def ignore(self):
        self.ignored = True


class FakeParent:
    def __init__(self):
        self.presented = False
    
    def present(self):
        self.presented = True


class WindowUnderTest:
    """Carries the SignInWindow handlers without creating a toolkit window."""
    
    WATCHED_DECISIONS = SignInWindow.WATCHED_DECISIONS
    show_modal = SignInWindow.show_modal
    stop_watching_navigation = SignInWindow.stop_watching_navigation
    _on_decide_policy = SignInWindow._on_decide_policy
    _on_timeout = SignInWindow._on_timeout
    _on_destroy = SignInWindow._on_destroy
    
    def __init__(self, on_navigating=None, on_closed=None, timeout=0, parent=None):
        self.authorize_url = "https://login.example.com/oauth2/authorize?client_id=abc"
        self._on_navigating = _weak_callback(on_navigating or (lambda window, request: None))
        self._on_closed = _weak_callback(on_closed or (lambda window: None))
        self._parent = parent
        self._loop = None
        self._timeout_id = None
        self._destroyed = False
        self._policy_handler_id = 7
        self.timeout = timeout
        self.web_view = FakeWebView()
        self.close_requests = 0
        self.destroy_on_show = False
    
    def show_all(self):
        if self.destroy_on_show:
            self._destroyed = True
    
    def close(self):
        self.close_requests += 1


@pytest.fixture
def fake_glib(monkeypatch):
    glib = FakeGLib()
    monkeypatch.setattr(signin_window, 'GLib', glib)
    return glib


NAVIGATION = WebKit2.PolicyDecisionType.NAVIGATION_ACTION


def test_canceled_navigation_is_ignored():
    """A navigation marked canceled is ignored by the web view."""
    seen = []
    
    def cancel_all(window, request):
        seen.append(request.uri)
        request.cancel = True
    
    window = WindowUnderTest(on_navigating=cancel_all)
    decision = FakeDecision("https://app.example.com/callback#access_token=abc")
    
    assert window._on_decide_policy(None, decision, NAVIGATION) is True
    assert decision.ignored
    assert seen == ["https://app.example.com/callback#access_token=abc"]


def test_allowed_navigation_proceeds():
    window = WindowUnderTest()
    decision = FakeDecision("https://login.example.com/oauth2/signin")
    
    assert window._on_decide_policy(None, decision, NAVIGATION) is False
    assert not decision.ignored


def test_new_window_navigation_is_checked():
    """Popup navigations go through the same callback."""
    seen = []
    window = WindowUnderTest(on_navigating=lambda w, r: seen.append(r.uri))
    decision = FakeDecision("https://login.example.com/help")
    
    window._on_decide_policy(None, decision, WebKit2.PolicyDecisionType.NEW_WINDOW_ACTION)
    
    assert seen == ["https://login.example.com/help"]


def test_response_decisions_not_reported():
    seen = []
    window = WindowUnderTest(on_navigating=lambda w, r: seen.append(r))
    decision = FakeDecision("https://login.example.com/")
    
    assert window._on_decide_policy(None, decision, WebKit2.PolicyDecisionType.RESPONSE) is False
    assert seen == []


def test_collected_owner_is_not_called():
    """The window holds its owner's callbacks weakly."""
    class Owner:
        def __init__(self):
            self.calls = 0
        
        def on_navigating(self, window, request):
            self.calls += 1
            request.cancel = True
    
    owner = Owner()
    window = WindowUnderTest(on_navigating=owner.on_navigating)
    del owner
    gc.collect()
    
    decision = FakeDecision("https://app.example.com/callback")
    assert window._on_decide_policy(None, decision, NAVIGATION) is False
    assert not decision.ignored


def test_show_modal_loads_page_and_arms_timeout(fake_glib):
    """Configured timeout is scheduled when the window is shown."""
    window = WindowUnderTest(timeout=30)
    
    window.show_modal()
    
    assert window.web_view.loaded == [window.authorize_url]
    assert fake_glib.timeouts == [(30, window._on_timeout)]
    assert window._timeout_id == 4242
    assert fake_glib.loops[0].ran


def test_show_modal_without_timeout(fake_glib):
    window = WindowUnderTest(timeout=0)
    
    window.show_modal()
    
    assert fake_glib.timeouts == []
    assert fake_glib.loops[0].ran


def test_show_modal_after_early_destroy(fake_glib):
    """No timeout and no modal loop when the window died while being shown."""
    window = WindowUnderTest(timeout=30)
    window.destroy_on_show = True
    
    window.show_modal()
    
    assert fake_glib.timeouts == []
    assert fake_glib.loops == []
    assert window._timeout_id is None


def test_timeout_closes_window():
    window = WindowUnderTest(timeout=30)
    window._timeout_id = 4242
    
    assert window._on_timeout() is False
    assert window.close_requests == 1
    assert window._timeout_id is None


def test_destroy_notifies_and_cleans_up(fake_glib):
    """Destroying the window reports closure, drops the timeout and ends the loop."""
    closed = []
    parent = FakeParent()
    window = WindowUnderTest(on_closed=closed.append, timeout=30, parent=parent)
    window._timeout_id = 4242
    loop = FakeLoop()
    loop.running = True
    window._loop = loop
    
    window._on_destroy(None)
    
    assert closed == [window]
    assert window._destroyed
    assert fake_glib.removed == [4242]
    assert window._timeout_id is None
    assert window.web_view.disconnected == [7]
    assert parent.presented
    assert loop.quit_called


def test_real_window_uses_config():
    """A real window picks up title and timeout from the config."""
    from gi.repository import Gdk
    if Gdk.Display.get_default() is None:
        pytest.skip("No display available")
    
    with tempfile.TemporaryDirectory() as tmpdir:
        config = Config(Path(tmpdir))
        config.set('timeout', 45)
        config.set('window_title', 'Sign in to ArcGIS')
        
        closed = []
        window = SignInWindow(
            "https://login.example.com/oauth2/authorize",
            on_navigating=lambda w, r: None,
            on_closed=closed.append,
            config=config,
        )
        assert window.timeout == 45
        assert window.get_title() == 'Sign in to ArcGIS'
        
        window.destroy()
        assert closed == [window]
