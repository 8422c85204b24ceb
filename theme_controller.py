import queue
import threading

from params import _pget
from theme import DEFAULT_THEME

IDLE = "IDLE"
COOLDOWN = "COOLDOWN"
REQUESTING = "REQUESTING"

STATUS_IDLE = "NEURAL LINK IDLE"
STATUS_REQUESTING = "CALCULATING GEOMETRY..."
STATUS_FAILED = "SIGNAL LOST // THEME HELD"


def _spawn_thread(fn):
    t = threading.Thread(target=fn, daemon=True)
    t.start()
    return t


class ThemeController:
    """
    Owns the current theme and rate-limits requests for a new one.

    - request_fn(hand_count, intensity, spread) -> VisualTheme | None runs off
      the frame loop (daemon thread by default)
    - its result lands in a one-slot inbox; poll() applies at most one per frame
    - the cooldown restarts when a request is issued, not when it returns
    - after close(), late results are dropped
    """

    def __init__(self, request_fn, params=None, theme=DEFAULT_THEME, spawn=_spawn_thread):
        self.request_fn = request_fn
        self.cooldown_ms = float(_pget(params, "theme_cooldown_ms", 4000.0))
        self.theme = theme
        self.status = STATUS_IDLE

        self._spawn = spawn
        self._inbox = queue.Queue(maxsize=1)
        self._last_update = None   # ms of the last issued request
        self._in_flight = False
        self._closed = False

    def state(self, now_ms) -> str:
        if self._in_flight:
            return REQUESTING
        if self._last_update is not None and now_ms - self._last_update < self.cooldown_ms:
            return COOLDOWN
        return IDLE

    def maybe_request(self, now_ms, hand_count, intensity, spread) -> bool:
        """Issue a theme request if hands are up and the cooldown has passed."""
        if self._closed or hand_count <= 0 or self._in_flight:
            return False
        if self._last_update is not None and now_ms - self._last_update < self.cooldown_ms:
            return False

        self._last_update = now_ms
        self._in_flight = True
        self.status = STATUS_REQUESTING

        def worker():
            try:
                result = self.request_fn(hand_count, intensity, spread)
            except Exception as e:
                print(f"⚠️  Theme worker error: {e}")
                result = None
            if not self._closed:
                self._inbox.put(result)

        self._spawn(worker)
        return True

    def poll(self):
        """Apply at most one finished request. Returns the new theme, or None."""
        try:
            result = self._inbox.get_nowait()
        except queue.Empty:
            return None

        self._in_flight = False
        if self._closed:
            return None
        if result is None:
            self.status = STATUS_FAILED
            return None

        self.theme = result
        self.status = result.description.upper()
        return result

    def close(self):
        self._closed = True
