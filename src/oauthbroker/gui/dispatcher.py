"""Marshal calls onto the GTK UI thread."""

import threading
from typing import Callable, Optional

from gi.repository import GLib


class GtkDispatcher:
    """Runs callables on the thread that owns the GTK main loop."""
    
    def __init__(self, ui_thread: Optional[threading.Thread] = None):
        """Initialize dispatcher.
        
        Args:
            ui_thread: Thread running the GTK main loop (defaults to the main thread)
        """
        self.ui_thread = ui_thread or threading.main_thread()
    
    def is_ui_thread(self) -> bool:
        """Check whether the caller is already on the UI thread."""
        return threading.current_thread() is self.ui_thread
    
    def invoke(self, func: Callable, *args) -> None:
        """Schedule func(*args) on the UI thread.
        
        Args:
            func: Callable to run once from the GLib main loop
            *args: Positional arguments for func
        """
        def run_once():
            func(*args)
            return False  # Remove idle source
        
        GLib.idle_add(run_once)
