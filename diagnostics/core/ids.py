"""
Time-ordered identifiers for diagnostic results.

Ids are UUIDv7 strings (RFC 9562): 48 bits of Unix milliseconds, a 12-bit
counter for ids minted within the same millisecond, and 62 random bits.
"""

import random
import threading
import time
import uuid
from typing import Callable

_MAX_SEQUENCE = 0xFFF


class IdGenerator:
    """
    Callable producing strictly increasing UUIDv7 strings.

    Example:
        new_id = IdGenerator()
        a, b = new_id(), new_id()
        assert a < b
    """

    def __init__(self, clock_ns: Callable[[], int] = time.time_ns):
        self._clock_ns = clock_ns
        self._lock = threading.Lock()
        self._last_ms = -1
        self._sequence = 0
        self._random = random.Random()

    def __call__(self) -> str:
        with self._lock:
            now_ms = self._clock_ns() // 1_000_000
            if now_ms > self._last_ms:
                self._last_ms = now_ms
                self._sequence = 0
            else:
                # clock stood still or stepped back: keep counting on the last millisecond
                self._sequence += 1
                if self._sequence > _MAX_SEQUENCE:
                    self._last_ms += 1
                    self._sequence = 0
            millis = self._last_ms
            sequence = self._sequence
            tail = self._random.getrandbits(62)

        value = (millis & 0xFFFF_FFFF_FFFF) << 80
        value |= 0x7 << 76
        value |= sequence << 64
        value |= 0b10 << 62
        value |= tail
        return str(uuid.UUID(int=value))


# Process-wide generator
new_id = IdGenerator()
