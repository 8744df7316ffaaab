import threading
from datetime import date
from typing import Callable, Optional


class DailySequence:
    """Per-process counter behind titles like "Rummy Game 3".

    One counter is shared by every variant and restarts each calendar day.
    The first call on a new day seeds it with the number of games already
    stored for that day, so a restart keeps counting where it left off.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._day: Optional[date] = None
        self._value = 0

    def next_for(self, day: date, seed: Callable[[date], int]) -> int:
        with self._lock:
            if self._day != day:
                self._value = seed(day)
                self._day = day
            self._value += 1
            return self._value

    def reset(self) -> None:
        with self._lock:
            self._day = None
            self._value = 0
