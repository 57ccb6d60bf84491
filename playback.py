"""
Server-side playback state.

One PlaybackController is created per application and handed to the playback
routes through ``app.extensions``. The state only lives in memory and starts
from defaults on every restart.
"""
import random
import threading
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class PlaybackState:
    isPlaying: bool = False
    currentSong: Optional[str] = None
    queue: List[Any] = field(default_factory=list)
    repeatMode: bool = False


class PlaybackController:
    """The six playback operations; each returns a snapshot of the new state."""

    def __init__(self, rng: random.Random | None = None):
        self._state = PlaybackState()
        self._lock = threading.Lock()
        self._rng = rng or random.Random()

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return self._snapshot()

    def play(self, song_id: Any) -> Dict[str, Any]:
        with self._lock:
            self._state.isPlaying = True
            self._state.currentSong = song_id
            return self._snapshot()

    def pause(self) -> Dict[str, Any]:
        with self._lock:
            self._state.isPlaying = False
            return self._snapshot()

    def skip(self) -> Dict[str, Any]:
        with self._lock:
            queue = self._state.queue
            self._state.currentSong = queue.pop(0) if queue else None
            return self._snapshot()

    def shuffle(self) -> Dict[str, Any]:
        with self._lock:
            # random.shuffle is Fisher-Yates, every ordering equally likely
            self._rng.shuffle(self._state.queue)
            return self._snapshot()

    def repeat(self) -> Dict[str, Any]:
        with self._lock:
            self._state.repeatMode = not self._state.repeatMode
            return self._snapshot()

    def enqueue(self, song_id: Any) -> Dict[str, Any]:
        with self._lock:
            self._state.queue.append(song_id)
            return self._snapshot()

    def _snapshot(self) -> Dict[str, Any]:
        return asdict(self._state)
