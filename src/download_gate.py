import random
from typing import Optional

MAX_ATTEMPTS = 5
HOME_POSITION = {"x": "50%", "y": "50%"}

# viewport spots the button can run to
ESCAPE_POSITIONS = [
    {"x": "10%", "y": "20%"},
    {"x": "90%", "y": "15%"},
    {"x": "5%", "y": "80%"},
    {"x": "85%", "y": "85%"},
    {"x": "50%", "y": "10%"},
    {"x": "20%", "y": "50%"},
    {"x": "80%", "y": "60%"},
    {"x": "60%", "y": "90%"},
    {"x": "30%", "y": "30%"},
    {"x": "70%", "y": "70%"},
    {"x": "15%", "y": "60%"},
    {"x": "95%", "y": "40%"},
]

LABELS = [
    "DOWNLOAD GIF",
    "Catch me~",
    "Hey! Stop chasing me!",
    "You still can't catch me~",
    "Fine, I guess...",
    "Okay, here's your download!",
]

# (minimum attempts, css class), highest threshold first
COLOR_STEPS = [
    (MAX_ATTEMPTS, "gate-green"),
    (3, "gate-pink"),
    (2, "gate-red"),
    (1, "gate-orange"),
    (0, "gate-purple"),
]


def label_for(attempts: int) -> str:
    return LABELS[min(max(attempts, 0), len(LABELS) - 1)]


def color_for(attempts: int) -> str:
    for threshold, css_class in COLOR_STEPS:
        if attempts >= threshold:
            return css_class
    return COLOR_STEPS[-1][1]


def download_filename(motion: Optional[str], is_video: bool = False) -> str:
    ext = "mp4" if is_video else "gif"
    return f"funky-{motion or 'mystery'}-shake.{ext}"


class DownloadGate:
    """The download button that runs away a few times before it gives in.

    Reference model for the gate. `static/app.js` mirrors `click()` in the
    browser, driven by `client_config()`, so a rule change here has to be
    made there too. The tests pin both to the same attempts/labels/colours.
    """

    def __init__(self, max_attempts: int = MAX_ATTEMPTS, rng: Optional[random.Random] = None):
        self.max_attempts = max_attempts
        self.rng = rng or random.Random()
        self.attempts = 0
        self.position = dict(HOME_POSITION)

    @property
    def label(self) -> str:
        return label_for(self.attempts)

    @property
    def color(self) -> str:
        return color_for(self.attempts)

    def click(self, disabled: bool = False) -> str:
        """Register a click. Returns "ignored", "escaped" or "download"."""
        if disabled:
            return "ignored"
        if self.attempts < self.max_attempts:
            self.attempts += 1
            self.position = dict(self.rng.choice(ESCAPE_POSITIONS))
            return "escaped"
        self.attempts = 0
        self.position = dict(HOME_POSITION)
        return "download"

    @staticmethod
    def client_config() -> dict:
        return {
            "maxAttempts": MAX_ATTEMPTS,
            "positions": ESCAPE_POSITIONS,
            "home": HOME_POSITION,
            "labels": LABELS,
            "colors": [color_for(i) for i in range(len(LABELS))],
        }
