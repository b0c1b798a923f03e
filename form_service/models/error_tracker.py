"""
FORMCOACH Form Service - Error Tracker

Per-session debounce state: a violation only becomes visible feedback after
it has held continuously for the persist window.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional


ERROR_PERSIST_MS = 3000


def now_ms() -> float:
    """Host wall clock in epoch milliseconds."""
    return time.time() * 1000


@dataclass
class ErrorTracker:
    """
    Debounce timers plus the per-exercise "visited down" latch.

    violations maps a feedback key to the timestamp (ms) at which the
    violation was first seen in the current unbroken run.
    """
    violations: Dict[str, float] = field(default_factory=dict)
    was_down: bool = False
    persist_ms: float = ERROR_PERSIST_MS

    def track(self, key: str, active: bool, timestamp_ms: float, feedback: List[str]) -> bool:
        """
        Update the timer for one violation and append its key to feedback
        once it has persisted long enough.

        Returns True when the key was appended.
        """
        if not active:
            self.violations.pop(key, None)
            return False

        first_seen = self.violations.setdefault(key, timestamp_ms)
        if timestamp_ms - first_seen >= self.persist_ms:
            feedback.append(key)
            return True
        return False

    def active_since(self, key: str) -> Optional[float]:
        return self.violations.get(key)

    def is_empty(self) -> bool:
        return not self.violations and not self.was_down

    def clear(self):
        self.violations.clear()
        self.was_down = False
