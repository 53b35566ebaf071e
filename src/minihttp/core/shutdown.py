"""
=============================================================================
SHUTDOWN CONTROLLER
=============================================================================

Signal-driven, cooperative shutdown BETWEEN connections.

SIGINT (2):   Ctrl+C in the terminal
SIGTERM (15): kill, systemd stop, docker stop

Both mean "stop serving". What happens next depends on where the main
loop is when the signal lands:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   blocked in accept()  (waiting = True)                             │
    │       └──► running = False                                          │
    │       └──► raise ShutdownRequested from the handler                 │
    │            accept() is abandoned, no further connection is served   │
    │                                                                      │
    │   handling a connection  (waiting = False)                          │
    │       └──► running = False                                          │
    │       └──► the current request finishes normally                    │
    │       └──► loop sees running == False and exits                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Python runs signal handlers in the main thread between bytecodes, so two
plain booleans are all the state the handler and the loop share. Nothing
else is touched from the handler.

=============================================================================
"""

import logging
import signal
import threading

from ..errors import ShutdownRequested


logger = logging.getLogger(__name__)


SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownController:
    """
    Holds the running / waiting flags and the signal handler that flips them.

    Usage:
        controller = ShutdownController()
        controller.install()
        try:
            while controller.running:
                with controller.accepting():
                    conn = sock.accept()
                handle(conn)
        except ShutdownRequested:
            pass
        finally:
            controller.restore()
    """

    def __init__(self):
        self.running = True
        self.waiting = False
        self.last_signal = None
        self._original_handlers: dict = {}

    def install(self) -> bool:
        """
        Register the handler for SIGINT and SIGTERM.

        Returns:
            False if not called from the main thread, where Python does not
            allow installing signal handlers. The server can still be
            stopped through request_shutdown() in that case.
        """
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not in main thread, signal handlers not installed")
            return False

        for sig in SHUTDOWN_SIGNALS:
            self._original_handlers[sig] = signal.signal(sig, self.handle_signal)
        return True

    def restore(self):
        """Put back whatever handlers were registered before install()."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def handle_signal(self, signum, frame):
        """
        Signal handler: stop the loop, and abort accept() if blocked in it.

        Raises:
            ShutdownRequested: If the main loop is blocked in accept().
        """
        self.last_signal = signum
        self.running = False

        signal_name = signal.Signals(signum).name
        logger.info(f"Received {signal_name}, shutting down")

        if self.waiting:
            raise ShutdownRequested(signal_name)

    def request_shutdown(self):
        """
        Ask the loop to stop at its next check.

        For callers outside signal context (another thread, tests).
        """
        self.running = False

    def accepting(self) -> "_Waiting":
        """Context manager marking the span spent blocked in accept()."""
        return _Waiting(self)


class _Waiting:
    def __init__(self, controller: ShutdownController):
        self._controller = controller

    def __enter__(self):
        self._controller.waiting = True
        return self._controller

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._controller.waiting = False
        return False
