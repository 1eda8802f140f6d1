"""Prosody — per-tone pauses, emphasis, breaths and a light Dutch humanizer.

Output uses a small markup vocabulary the synthesis service understands:
    <break time="400ms"/>                      pause
    <emphasis level="strong">Name</emphasis>   stressed proper noun
    <breath/>                                  audible breath between sentences
"""
import random
import re
from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True)
class ProsodyStyle:
    sentence_pause_ms: int
    comma_pause_ms: int
    breath_probability: float
    emphasis: str           # none | reduced | moderate | strong


STYLES = {
    "energetic": ProsodyStyle(250, 120, 0.15, "strong"),
    "chill": ProsodyStyle(600, 300, 0.0, "reduced"),
    "warm": ProsodyStyle(400, 200, 0.2, "moderate"),
    "smooth": ProsodyStyle(550, 280, 0.0, "moderate"),
    "edgy": ProsodyStyle(200, 100, 0.1, "strong"),
}

# Relaxed tones get no fillers and no breaths
_CALM_TONES = ("chill", "smooth")

FILLERS = ("eh", "nou", "zeg", "ja", "tja")


def style_for(tone: str) -> ProsodyStyle:
    return STYLES.get(tone, STYLES["warm"])


def pause(ms: int) -> str:
    return f'<break time="{ms}ms"/>'


def emphasize(text: str, names: Iterable[str], level: str) -> str:
    """Wrap each occurrence of the given names. Longest names first so
    "The Weeknd" wins over "Weeknd"."""
    if level == "none":
        return text
    names = sorted({n for n in names if n and n.strip()}, key=len, reverse=True)
    if not names:
        return text
    pattern = re.compile(r"(?<!\w)(?:" + "|".join(re.escape(n) for n in names) + r")(?!\w)")
    return pattern.sub(lambda m: f'<emphasis level="{level}">{m.group(0)}</emphasis>', text)


def humanize(text: str, tone: str, rng: Optional[random.Random] = None) -> str:
    """Roughly one in five later sentences gets a spoken filler in front."""
    if tone in _CALM_TONES:
        return text
    rng = rng or random
    sentences = text.split(". ")
    out = []
    for i, s in enumerate(sentences):
        if i > 0 and s and rng.random() < 0.2:
            filler = rng.choice(FILLERS)
            s = f"{filler.capitalize()}, {s[:1].lower()}{s[1:]}"
        out.append(s)
    return ". ".join(out)


def _breathe(text: str, style: ProsodyStyle, tone: str, rng) -> str:
    if tone in _CALM_TONES or style.breath_probability <= 0:
        return text
    sentences = text.split(". ")
    out = sentences[:1]
    for s in sentences[1:]:
        sep = ".<breath/>" if rng.random() < style.breath_probability else ". "
        out.append(sep + s)
    return "".join(out)


def render(
    parts: list[str],
    tone: str,
    names: Iterable[str] = (),
    rng: Optional[random.Random] = None,
) -> str:
    """Turn plain script parts into a single marked-up string."""
    rng = rng or random
    style = style_for(tone)
    names = list(names)
    rendered = []
    for part in parts:
        if not part:
            continue
        text = emphasize(part, names, style.emphasis)
        text = humanize(text, tone, rng)
        text = text.replace(", ", f", {pause(style.comma_pause_ms)}")
        text = _breathe(text, style, tone, rng)
        rendered.append(text)
    return pause(style.sentence_pause_ms).join(rendered)
