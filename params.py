class Params:
    """
    All tunable knobs live here so you don't hunt through code.
    """
    def __init__(self):
        # Particle counts (fixed until the next resize)
        self.structure_count = 150
        self.stardust_count = 300

        # Display (logical size; canvas is width*dpr x height*dpr)
        self.width = 960
        self.height = 540
        self.dpr = 1.0
        self.fullscreen = False

        # Camera / hand tracking
        self.camera_max_index = 6
        self.max_hands = 2
        self.det_conf = 0.5
        self.track_conf = 0.5

        # Theme requests
        self.theme_cooldown_ms = 4000.0
        self.model_id = "gemini-2.5-flash"
        self.request_timeout = 20.0

        # Kinetic energy fed to the theme request.
        # None => estimate from fingertip motion, a float pins it (0..1)
        self.motion_intensity = None
        self.motion_full_speed = 1.5   # centroid speed (uv / s) that maps to 1.0
        self.motion_smoothing = 0.2    # EMA weight of the newest sample


def _pget(p, key, default=None):
    if isinstance(p, dict):
        return p.get(key, default)
    return getattr(p, key, default)
