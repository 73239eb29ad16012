"""
Clock offset between this machine and the API server.

Signed requests carry a ``Date`` header the server checks against its own
clock. The offset measured with ``RequestSigner.find_clock_diff`` is stored in
a ``ClockContext`` and subtracted from local time on every signature.
"""

import threading
import time


class ClockContext:
    """Holds a clock offset in seconds, shared by every signer that uses it."""

    def __init__(self, offset: int = 0):
        self._offset = int(offset)
        self._lock = threading.Lock()

    def get(self) -> int:
        return self._offset

    def set(self, seconds: int):
        with self._lock:
            self._offset = int(seconds)

    def now(self) -> int:
        """Current UNIX time corrected by the offset, in whole seconds."""
        return int(time.time()) - self._offset

    def __repr__(self):
        return f"ClockContext(offset={self._offset})"


# Process-wide context used by signers created without an explicit one.
default_clock = ClockContext()
