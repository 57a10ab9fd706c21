"""Progress reporting for a comparison run."""

import time
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Callable, Any

from ..logger import get_logger

logger = get_logger('progress')

PROGRESS = 'progress'
RESULT = 'result'
ERROR = 'error'


@dataclass(frozen=True)
class ProgressEvent:
    """A single event on the progress channel."""
    type: str
    fraction: float = 0.0
    message: str = ''
    data: Optional[Dict[str, Any]] = None
    context: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.type in (RESULT, ERROR)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        if self.type == RESULT:
            return {'type': RESULT, 'data': self.data}
        if self.type == ERROR:
            return {'type': ERROR, 'message': self.message, 'context': self.context}
        return {
            'type': PROGRESS,
            'progress': int(round(self.fraction * 100)),
            'fraction': round(self.fraction, 4),
            'message': self.message
        }


class ProgressTracker:
    """One-way channel from a comparison run to its consumer.

    The run calls :meth:`report`; the consumer receives event dicts through
    ``callback``. Fractions never decrease, nothing is delivered after the
    100% event except the single terminal result/error event.
    """

    def __init__(self, callback: Optional[Callable[[Dict], None]] = None):
        """Initialize progress tracker.

        Args:
            callback: Function to call with each event dict
        """
        self.callback = callback
        self.start_time = time.time()
        self._last_fraction = 0.0
        self._completed = False
        self._lock = threading.Lock()
        self.history: List[ProgressEvent] = []

    @property
    def elapsed_seconds(self) -> float:
        """Get elapsed time in seconds."""
        return time.time() - self.start_time

    @property
    def fraction(self) -> float:
        """Last fraction delivered."""
        return self._last_fraction

    @property
    def terminated(self) -> bool:
        """Whether the result or error event has been delivered."""
        return bool(self.history) and self.history[-1].is_terminal

    def report(self, fraction: float, message: str = '') -> None:
        """Deliver a progress event.

        Args:
            fraction: Completion in [0, 1]; raised to the last value if lower
            message: Short status label
        """
        with self._lock:
            if self._completed or self.terminated:
                logger.debug("Dropping late progress event %r", message)
                return

            fraction = min(1.0, max(0.0, float(fraction), self._last_fraction))
            self._last_fraction = fraction
            if fraction >= 1.0:
                self._completed = True

            self._emit(ProgressEvent(type=PROGRESS, fraction=fraction, message=message))

    def complete(self, message: str = 'Comparison complete') -> None:
        """Deliver the final 100% event."""
        self.report(1.0, message)

    def send_result(self, data: Dict[str, Any]) -> None:
        """Deliver the terminal result event."""
        self._terminate(ProgressEvent(type=RESULT, fraction=1.0, data=data))

    def send_error(self, message: str, context: Optional[str] = None) -> None:
        """Deliver the terminal error event."""
        self._terminate(ProgressEvent(
            type=ERROR, fraction=self._last_fraction, message=message, context=context
        ))

    def _terminate(self, event: ProgressEvent) -> None:
        with self._lock:
            if self.terminated:
                logger.warning("Run already terminated, ignoring %s event", event.type)
                return
            self._emit(event)

    def _emit(self, event: ProgressEvent) -> None:
        self.history.append(event)
        if self.callback:
            self.callback(event.to_dict())
