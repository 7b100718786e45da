"""
Video templates and animation styles.

A template describes camera motion or an effect; a style describes the
pacing and mood of the animation. Both append descriptive phrases to the
user's prompt before it is sent to a video provider. Entries flagged
``pro_only`` are hidden from the free tier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

CATEGORIES = ("motion", "transition", "effect", "storytelling")


@dataclass(frozen=True)
class VideoTemplate:
    id: str
    name: str
    description: str
    category: str
    prompt_modifier: str
    icon: str
    duration: Optional[str] = None
    pro_only: bool = False


@dataclass(frozen=True)
class AnimationStyle:
    id: str
    name: str
    description: str
    speed_modifier: str
    mood_tags: Tuple[str, ...]
    prompt_enhancer: str
    pro_only: bool = False


VIDEO_TEMPLATES: List[VideoTemplate] = [
    VideoTemplate(
        "cinematic-pan", "Cinematic Pan", "Smooth horizontal camera movement", "motion",
        "cinematic slow pan movement, smooth horizontal camera motion, professional cinematography",
        "🎬", "3-5s",
    ),
    VideoTemplate(
        "epic-zoom", "Epic Zoom", "Dramatic zoom in or out", "motion",
        "dramatic zoom motion, epic camera movement, slow zoom revealing details",
        "🔍", "3-5s",
    ),
    VideoTemplate(
        "orbital-rotation", "Orbital Rotation", "Camera rotating around subject", "motion",
        "orbital camera rotation, 360-degree rotating movement around subject, smooth circular motion",
        "🌀", "4-6s",
    ),
    VideoTemplate(
        "drone-flyover", "Drone Flyover", "Aerial perspective movement", "motion",
        "aerial drone shot, flyover perspective, smooth overhead camera movement",
        "🚁", "4-6s", pro_only=True,
    ),
    VideoTemplate(
        "tracking-shot", "Tracking Shot", "Following a moving subject", "motion",
        "smooth tracking shot following subject, professional camera tracking, dynamic following movement",
        "🎯", "3-5s",
    ),
    VideoTemplate(
        "slow-motion", "Slow Motion", "Dramatic slow-mo effect", "effect",
        "slow motion effect, time-slowed movement, dramatic slow-mo, high frame rate",
        "⏱️", "3-5s",
    ),
    VideoTemplate(
        "time-lapse", "Time-lapse", "Accelerated time progression", "effect",
        "time-lapse effect, accelerated time passage, fast-forward motion, compressed time",
        "⏩", "3-5s",
    ),
    VideoTemplate(
        "morphing", "Morphing", "Smooth transformation between forms", "transition",
        "smooth morphing transformation, fluid shape-shifting, seamless metamorphosis",
        "🦋", "3-4s", pro_only=True,
    ),
    VideoTemplate(
        "fade-transition", "Fade Through", "Elegant fade transition", "transition",
        "smooth fade transition, elegant dissolve effect, gradual scene change",
        "✨", "2-3s",
    ),
    VideoTemplate(
        "particle-explosion", "Particle Burst", "Explosive particle effects", "effect",
        "particle explosion effect, dynamic particle burst, energetic particles dispersing",
        "💥", "2-4s", pro_only=True,
    ),
    VideoTemplate(
        "liquid-motion", "Liquid Flow", "Fluid, flowing movement", "effect",
        "liquid flowing motion, fluid dynamics, smooth water-like movement, organic flow",
        "💧", "3-5s",
    ),
    VideoTemplate(
        "glitch-effect", "Digital Glitch", "Cyberpunk glitch aesthetic", "effect",
        "digital glitch effect, cyberpunk aesthetic, RGB split, scan lines, digital distortion",
        "⚡", "2-3s",
    ),
    VideoTemplate(
        "rising-reveal", "Rising Reveal", "Upward unveiling motion", "storytelling",
        "rising reveal shot, upward camera tilt revealing scene, dramatic vertical reveal",
        "⬆️", "3-5s",
    ),
    VideoTemplate(
        "narrative-sequence", "Story Sequence", "Beginning, middle, end progression", "storytelling",
        "narrative sequence, story progression from beginning to end, cinematic storytelling",
        "📖", "5-8s", pro_only=True,
    ),
    VideoTemplate(
        "day-to-night", "Day to Night", "Time of day transition", "transition",
        "day to night transition, lighting change from daylight to evening, time progression",
        "🌅", "4-6s",
    ),
    VideoTemplate(
        "parallax-layers", "Parallax Depth", "Multi-layer depth effect", "motion",
        "parallax depth effect, layered movement, multi-plane motion, depth-of-field animation",
        "🎨", "3-5s", pro_only=True,
    ),
    VideoTemplate(
        "kaleidoscope", "Kaleidoscope", "Symmetrical pattern evolution", "effect",
        "kaleidoscope effect, symmetrical patterns, rotating mandala, mirror-image animation",
        "🔮", "3-5s",
    ),
    VideoTemplate(
        "whip-pan", "Whip Pan", "Fast transitional camera whip", "transition",
        "whip pan transition, fast camera whip movement, rapid scene change, motion blur transition",
        "💨", "1-2s",
    ),
    VideoTemplate(
        "bokeh-focus", "Bokeh Focus", "Depth-of-field shift", "effect",
        "bokeh focus effect, depth-of-field shift, selective focus change, blurred background",
        "⭕", "3-4s",
    ),
    VideoTemplate(
        "retro-film", "Retro Film", "Vintage film aesthetic", "effect",
        "vintage film effect, retro 8mm aesthetic, film grain, color grading, nostalgic look",
        "📹", "3-5s",
    ),
]


ANIMATION_STYLES: List[AnimationStyle] = [
    AnimationStyle(
        "smooth-elegant", "Smooth & Elegant", "Graceful, flowing movements", "slow",
        ("elegant", "luxurious", "refined"),
        "smooth elegant motion, graceful flowing movements, refined animation, silk-like transitions",
    ),
    AnimationStyle(
        "energetic-dynamic", "Energetic & Dynamic", "Fast-paced, exciting action", "fast",
        ("energetic", "exciting", "vibrant"),
        "dynamic energetic motion, fast-paced action, exciting movements, high energy animation",
    ),
    AnimationStyle(
        "dreamlike-surreal", "Dreamlike & Surreal", "Ethereal, otherworldly motion", "slow",
        ("dreamy", "surreal", "mystical"),
        "dreamlike surreal motion, ethereal floating movements, otherworldly animation, mystical flow",
        pro_only=True,
    ),
    AnimationStyle(
        "mechanical-precise", "Mechanical & Precise", "Sharp, technical movements", "normal",
        ("precise", "technical", "industrial"),
        "mechanical precise motion, technical accuracy, robotic movements, engineered animation",
    ),
    AnimationStyle(
        "organic-natural", "Organic & Natural", "Nature-inspired, fluid motion", "variable",
        ("organic", "natural", "flowing"),
        "organic natural motion, nature-inspired movement, fluid biological animation, living flow",
    ),
    AnimationStyle(
        "cinematic-epic", "Cinematic & Epic", "Grand, movie-quality motion", "slow",
        ("cinematic", "epic", "dramatic"),
        "cinematic epic motion, movie-quality animation, dramatic movements, Hollywood-style cinematography",
        pro_only=True,
    ),
    AnimationStyle(
        "playful-bouncy", "Playful & Bouncy", "Fun, cartoon-like motion", "fast",
        ("playful", "fun", "cheerful"),
        "playful bouncy motion, cartoon-like animation, fun exaggerated movements, cheerful dynamics",
    ),
    AnimationStyle(
        "minimal-subtle", "Minimal & Subtle", "Understated, gentle motion", "slow",
        ("minimal", "subtle", "calm"),
        "minimal subtle motion, understated animation, gentle movements, calm transitions",
    ),
    AnimationStyle(
        "glitchy-digital", "Glitchy & Digital", "Tech-inspired, stuttered motion", "variable",
        ("digital", "futuristic", "glitchy"),
        "glitchy digital motion, tech-inspired animation, stuttered movements, cyberpunk aesthetic",
    ),
    AnimationStyle(
        "retro-vintage", "Retro & Vintage", "Classic, nostalgic motion", "normal",
        ("retro", "vintage", "nostalgic"),
        "retro vintage motion, classic animation style, nostalgic movements, old-school cinematography",
    ),
]

_TEMPLATES_BY_ID: Dict[str, VideoTemplate] = {t.id: t for t in VIDEO_TEMPLATES}
_STYLES_BY_ID: Dict[str, AnimationStyle] = {s.id: s for s in ANIMATION_STYLES}


def get_template(template_id: str) -> VideoTemplate:
    """Look up a template by id (KeyError if unknown)."""
    try:
        return _TEMPLATES_BY_ID[template_id]
    except KeyError:
        raise KeyError(
            f"Template '{template_id}' not found. "
            f"Available: [{', '.join(sorted(_TEMPLATES_BY_ID))}]"
        ) from None


def get_style(style_id: str) -> AnimationStyle:
    """Look up a style by id (KeyError if unknown)."""
    try:
        return _STYLES_BY_ID[style_id]
    except KeyError:
        raise KeyError(
            f"Style '{style_id}' not found. "
            f"Available: [{', '.join(sorted(_STYLES_BY_ID))}]"
        ) from None


def templates_by_category(category: str) -> List[VideoTemplate]:
    return [t for t in VIDEO_TEMPLATES if t.category == category]


def pro_templates() -> List[VideoTemplate]:
    return [t for t in VIDEO_TEMPLATES if t.pro_only]


def available_templates(tier: str = "free") -> List[VideoTemplate]:
    return [t for t in VIDEO_TEMPLATES if tier == "pro" or not t.pro_only]


def available_styles(tier: str = "free") -> List[AnimationStyle]:
    return [s for s in ANIMATION_STYLES if tier == "pro" or not s.pro_only]


def combine_template_and_style(
    template: Optional[VideoTemplate],
    style: Optional[AnimationStyle],
    user_prompt: str,
) -> str:
    """Append the template modifier and style enhancer to the prompt."""
    parts = [user_prompt]
    if template:
        parts.append(template.prompt_modifier)
    if style:
        parts.append(style.prompt_enhancer)
    return ", ".join(parts)
