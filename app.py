# app.py - GESTURE FIELD VISUAL CORE
import argparse
import time

import cv2

from gesture import MotionMeter, hand_points, hand_spread
from params import Params, _pget
from renderer import BG_LEVEL, draw_hud, new_canvas, render
from sim import Simulation
from theme_controller import ThemeController

WINDOW_NAME = "Gesture Field"

SHOW_HUD = True
STATUS_SENSOR_DOWN = "SENSOR MALFUNCTION"


def open_camera(max_index=6, start=0):
    for i in range(start, max_index):
        cap = cv2.VideoCapture(i)
        if cap.isOpened():
            ok, _ = cap.read()
            if ok:
                print(f"✅ Using camera index: {i}")
                return cap
        cap.release()
    raise RuntimeError(f"❌ No working camera found ({start}–{max_index-1}).")


def _init_tracker(params):
    try:
        from hands import Hands

        tracker = Hands(
            max_hands=_pget(params, "max_hands", 2),
            det_conf=_pget(params, "det_conf", 0.5),
            track_conf=_pget(params, "track_conf", 0.5),
        )
        print("✅ Hand tracker ready")
        return tracker
    except Exception as e:
        print(f"⚠️  Hand tracker init failed: {e}")
        return None


def _init_theme_client(params):
    from theme_service import GeminiThemeClient

    client = GeminiThemeClient(params)
    if not client.api_key:
        print("⚠️  GEMINI_API_KEY not set - theme requests will fail and the default theme stays")
    return client.request_theme


class Visualizer:
    """
    One frame = hands in -> theme bookkeeping -> forces -> integrate -> draw.

    Everything the frame loop mutates lives here; the only other writer is the
    theme worker, and it only ever touches the controller's inbox.
    """

    def __init__(self, params=None, request_fn=None, rng=None, spawn=None):
        self.params = params if params is not None else Params()
        self.sim = Simulation(self.params, rng=rng)

        kwargs = {} if spawn is None else {"spawn": spawn}
        self.controller = ThemeController(request_fn or (lambda *_: None), self.params, **kwargs)

        self.motion = MotionMeter(
            full_speed=_pget(self.params, "motion_full_speed", 1.5),
            smoothing=_pget(self.params, "motion_smoothing", 0.2),
        )
        self.canvas = new_canvas(self.sim.scale.width, self.sim.scale.height)
        self.sensor_ok = True
        self._last_ms = None

    @property
    def theme(self):
        return self.controller.theme

    @property
    def status(self):
        if not self.sensor_ok:
            return STATUS_SENSOR_DOWN
        return self.controller.status

    def resize(self, width, height, dpr=1.0):
        self.sim.resize(width, height, dpr)
        self.canvas = new_canvas(self.sim.scale.width, self.sim.scale.height)

    def intensity(self, hands, now_ms):
        level = self.motion.update(hands, now_ms / 1000.0)
        pinned = _pget(self.params, "motion_intensity", None)
        return float(pinned) if pinned is not None else level

    def frame(self, hands, now_ms):
        dt_ms = 0.0 if self._last_ms is None else now_ms - self._last_ms
        self._last_ms = now_ms

        hands = hands or []
        scale = self.sim.scale
        tips, skeleton = hand_points(hands, scale.width, scale.height)
        self.sim.set_hand_input(tips, skeleton)

        intensity = self.intensity(hands, now_ms)
        self.controller.poll()
        self.controller.maybe_request(now_ms, len(hands), intensity, hand_spread(hands))

        theme = self.controller.theme
        self.sim.step(theme, dt_ms, now_ms)
        return render(self.canvas, self.sim.store, self.sim.skeleton, theme, scale.dpr)

    def close(self):
        self.controller.close()


def read_hands(cap, tracker):
    """-> (hands, sensor_ok). A failed read or tracker error degrades to no hands."""
    ok, frame = cap.read()
    if not ok:
        print("⚠️  Camera stopped delivering frames - running without hands")
        return [], False
    try:
        return tracker.process(frame), True
    except Exception as e:
        print(f"⚠️  Hand tracking failed: {e} - running without hands")
        return [], False


def _window_size(name):
    try:
        _, _, w, h = cv2.getWindowImageRect(name)
    except cv2.error:
        return None
    if w <= 0 or h <= 0:
        return None
    return w, h


def parse_args(argv=None):
    p = Params()
    ap = argparse.ArgumentParser(description="Hand-gesture driven particle visualizer")
    ap.add_argument("--width", type=int, default=p.width)
    ap.add_argument("--height", type=int, default=p.height)
    ap.add_argument("--dpr", type=float, default=p.dpr)
    ap.add_argument("--camera", type=int, default=None, help="camera index (default: first working one)")
    ap.add_argument("--fullscreen", action="store_true", default=p.fullscreen)
    ap.add_argument("--intensity", type=float, default=None, help="pin kinetic energy (0..1) instead of measuring it")
    args = ap.parse_args(argv)

    p.width, p.height, p.dpr = args.width, args.height, args.dpr
    p.fullscreen = args.fullscreen
    p.motion_intensity = args.intensity
    return p, args.camera


def main(argv=None):
    params, cam_index = parse_args(argv)

    viz = Visualizer(params, request_fn=_init_theme_client(params))

    cap = None
    try:
        if cam_index is None:
            cap = open_camera(params.camera_max_index)
        else:
            cap = open_camera(cam_index + 1, start=cam_index)
    except RuntimeError as e:
        print(e)
    tracker = _init_tracker(params) if cap is not None else None
    viz.sensor_ok = cap is not None and tracker is not None

    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
    if params.fullscreen:
        cv2.setWindowProperty(WINDOW_NAME, cv2.WND_PROP_FULLSCREEN, cv2.WINDOW_FULLSCREEN)
    else:
        cv2.resizeWindow(WINDOW_NAME, int(viz.sim.scale.width), int(viz.sim.scale.height))

    prev = time.time()
    fps_smooth = 0.0

    print("\n" + "=" * 60)
    print("✨ GESTURE FIELD // VISUAL CORE")
    print("=" * 60)
    print("\n📋 CONTROLS:")
    print("   Show one or two hands to the camera")
    print("   R - Re-seed particles")
    print("   ESC / Q - Exit")
    print("\n" + "=" * 60 + "\n")

    while True:
        now = time.time()
        dt = max(1e-6, now - prev)
        prev = now
        fps = 1.0 / dt
        fps_smooth = fps if fps_smooth == 0 else 0.9 * fps_smooth + 0.1 * fps

        hands = []
        if viz.sensor_ok:
            hands, viz.sensor_ok = read_hands(cap, tracker)

        size = _window_size(WINDOW_NAME)
        if size is not None and size != viz.canvas.shape[1::-1]:
            dpr = viz.sim.scale.dpr
            viz.resize(size[0] / dpr, size[1] / dpr, dpr)

        canvas = viz.frame(hands, time.perf_counter() * 1000.0)

        shown = canvas.copy() if SHOW_HUD else canvas
        if SHOW_HUD:
            draw_hud(shown, viz.status, viz.theme, fps=fps_smooth, dpr=viz.sim.scale.dpr)
        cv2.imshow(WINDOW_NAME, shown)

        key = cv2.waitKey(1) & 0xFF
        if key in (27, ord("q"), ord("Q")):
            break
        if key in (ord("r"), ord("R")):
            viz.sim.reset()
            viz.canvas[:] = BG_LEVEL

    viz.close()
    if cap is not None:
        cap.release()
    if tracker is not None:
        tracker.close()
    cv2.destroyAllWindows()

    print("\n✅ GESTURE FIELD shutdown complete")


if __name__ == "__main__":
    main()
