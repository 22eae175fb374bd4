"""Motion presets shared by the preview page, the local renderer and the AI providers.

Each preset carries three renditions of the same idea:
- `frames`: transform keyframes the browser plays on the preview image
- `ffmpeg_filter`: a filter chain used when the server renders locally
- `prompt`: the text sent to Kling / Veo
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

DEFAULT_PROMPT_KEY = "subtle-zoom"

# Prompts accepted since the first version of the API. Old clients still send these ids.
LEGACY_PROMPTS = {
    "subtle-zoom": "Create a short looping meme video with a gentle Ken Burns zoom and slight parallax, no text overlays.",
    "shake": "Create a short looping meme video with light camera shake and micro-zoom beats, no text overlays.",
    "slide": "Create a short looping meme video with a smooth horizontal pan and slight zoom, no text overlays.",
    "dramatic": "Create a dramatic meme trailer style: quick push-in, cut to micro-zoom and slight tilt, no text overlays.",
}

# crop window used by the shake filters; the frame is scaled up first so the window can move
_CROP = "scale=trunc(iw*1.1/2)*2:trunc(ih*1.1/2)*2,crop=trunc(iw/1.1/2)*2:trunc(ih/1.1/2)*2"


@dataclass(frozen=True)
class MotionPreset:
    id: str
    name: str
    icon: str
    description: str
    duration: float
    frames: List[Dict[str, float]] = field(default_factory=list)
    prompt: str = ""
    ffmpeg_filter: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "description": self.description,
            "duration": self.duration,
            "animation": f"shake-{self.id}",
        }


def _xs(values):
    return [{"x": v} for v in values]


def _ys(values):
    return [{"y": v} for v in values]


MOTIONS = [
    MotionPreset(
        id="earthquake",
        name="EARTHQUAKE VERTICAL",
        icon="\U0001F30D",
        description="Vertical seismic chaos!",
        duration=0.8,
        frames=_ys([0, -8, 8, -6, 6, -4, 4, -2, 2, 0]),
        prompt="Create a short looping meme video where the whole frame shakes violently up and down like an earthquake, no text overlays.",
        ffmpeg_filter=f"{_CROP}:(iw-ow)/2:(ih-oh)/2+8*sin(2*PI*t*5)",
    ),
    MotionPreset(
        id="sidewinder",
        name="SIDEWINDER",
        icon="\U0001F40D",
        description="Horizontal serpent slither!",
        duration=1.0,
        frames=_xs([0, -10, 10, -8, 8, -6, 6, -4, 4, 0]),
        prompt="Create a short looping meme video with a fast side-to-side slithering camera sway, no text overlays.",
        ffmpeg_filter=f"{_CROP}:(iw-ow)/2+10*sin(2*PI*t*4):(ih-oh)/2",
    ),
    MotionPreset(
        id="drunk",
        name="DRUNK TILT",
        icon="\U0001F37A",
        description="Wobbly party vibes!",
        duration=2.0,
        frames=[
            {"rotate": 0, "x": 0, "y": 0},
            {"rotate": 5, "x": 2, "y": 1},
            {"rotate": -3, "x": -1, "y": -2},
            {"rotate": 8, "x": 3, "y": 1},
            {"rotate": -6, "x": -2, "y": -1},
            {"rotate": 4, "x": 1, "y": 0},
            {"rotate": -2, "x": 0, "y": 0},
            {"rotate": 1, "x": 0, "y": 0},
            {"rotate": 0, "x": 0, "y": 0},
        ],
        prompt="Create a short looping meme video with a woozy tilting handheld camera, like a tipsy party cam, no text overlays.",
        ffmpeg_filter="rotate=0.12*sin(2*PI*t/2):fillcolor=black,scale=trunc(iw/2)*2:trunc(ih/2)*2",
    ),
    MotionPreset(
        id="mosquito",
        name="MOSQUITO MODE",
        icon="\U0001F99F",
        description="Annoying micro-jitters!",
        duration=0.1,
        frames=[
            {"x": 0, "y": 0},
            {"x": 1, "y": -1},
            {"x": -1, "y": 1},
            {"x": 2, "y": -2},
            {"x": -2, "y": 2},
            {"x": 1, "y": -1},
            {"x": -1, "y": 1},
            {"x": 0, "y": 0},
        ],
        prompt="Create a short looping meme video with tiny rapid camera jitters, like a buzzing insect, no text overlays.",
        ffmpeg_filter=f"{_CROP}:(iw-ow)/2+2*sin(2*PI*t*40):(ih-oh)/2+2*cos(2*PI*t*37)",
    ),
    MotionPreset(
        id="liquid",
        name="LIQUID FLOOR",
        icon="\U0001F30A",
        description="Flowing wave madness!",
        duration=1.5,
        frames=[
            {"y": 0, "scale": 1},
            {"y": -6, "scale": 1.02},
            {"y": 0, "scale": 1},
            {"y": 6, "scale": 0.98},
            {"y": 0, "scale": 1},
        ],
        prompt="Create a short looping meme video with a slow rolling wave motion, as if the floor were liquid, no text overlays.",
        ffmpeg_filter=f"{_CROP}:(iw-ow)/2:(ih-oh)/2+6*sin(2*PI*t/1.5)",
    ),
]

_BY_ID = {m.id: m for m in MOTIONS}


def get_motion(motion_id: Optional[str]) -> Optional[MotionPreset]:
    if not motion_id:
        return None
    return _BY_ID.get(motion_id)


def build_motion_prompt(motion_id: Optional[str]) -> str:
    """Return the provider prompt for a motion id, falling back to the gentle zoom."""
    preset = get_motion(motion_id)
    if preset is not None:
        return preset.prompt
    return LEGACY_PROMPTS.get(motion_id or "", LEGACY_PROMPTS[DEFAULT_PROMPT_KEY])


def motion_catalog() -> List[dict]:
    return [m.to_dict() for m in MOTIONS]


def _frame_transform(frame: Dict[str, float]) -> str:
    x = frame.get("x", 0)
    y = frame.get("y", 0)
    rotate = frame.get("rotate", 0)
    scale = frame.get("scale", 1)
    return f"translate({x}px, {y}px) rotate({rotate}deg) scale({scale})"


def css_keyframes(motion_id: str) -> str:
    """Render a preset's frames as a CSS @keyframes block (evenly spaced stops)."""
    preset = get_motion(motion_id)
    if preset is None:
        raise KeyError(motion_id)

    frames = preset.frames or [{}]
    last = max(len(frames) - 1, 1)
    lines = [f"@keyframes shake-{preset.id} {{"]
    for i, frame in enumerate(frames):
        pct = round(100 * i / last, 2)
        if pct == int(pct):
            pct = int(pct)
        lines.append(f"  {pct}% {{ transform: {_frame_transform(frame)}; }}")
    lines.append("}")
    return "\n".join(lines)


def stylesheet() -> str:
    """All preset keyframes plus one animation class per preset."""
    blocks = []
    for preset in MOTIONS:
        blocks.append(css_keyframes(preset.id))
        blocks.append(
            f".motion-{preset.id} {{ animation: shake-{preset.id} {preset.duration}s linear infinite; }}"
        )
    return "\n\n".join(blocks) + "\n"
