import os
import re
import json
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from brand_scout.exceptions import SummaryParseError
from brand_scout.services.heuristics import DEFAULT_HEURISTICS, Heuristics
from brand_scout.services.hover import FinalButton
from brand_scout.services.snapshot import PageStyle

logger = logging.getLogger(__name__)

Generate = Callable[[str], Awaitable[str]]

SUMMARY_TIMEOUT = float(os.getenv("SUMMARY_TIMEOUT", "20"))

_EASING_KEYS = ("easing_hint", "easingHint", "gsap_ease", "ease", "easing")
_ADVICE_KEYS = ("advice", "animation_advice", "recommendation")


@dataclass(frozen=True)
class Analysis:
    mood: str
    easing_hint: str
    advice: str
    degraded: bool = False

    def to_dict(self) -> dict:
        return {
            "mood": self.mood,
            "easingHint": self.easing_hint,
            "advice": self.advice,
            "degraded": self.degraded,
        }


FALLBACK_ANALYSIS = Analysis(
    mood="AI Error",
    easing_hint="power2.out",
    advice="AI summary unavailable. The scraped style data is real.",
    degraded=True,
)


@dataclass(frozen=True)
class BrandSummary:
    page_background: str
    buttons: tuple[FinalButton, ...] = ()
    body_font: str = ""
    heading_font: str = ""
    heading_color: str = ""
    font_families: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "siteBackground": self.page_background,
            "bodyFont": self.body_font,
            "headingFont": self.heading_font,
            "headingColor": self.heading_color,
            "fontFamilies": list(self.font_families),
            "buttons": [
                {
                    "text": b.text,
                    "defaultStyle": b.default_style.to_dict(),
                    "hoverStyle": b.hover_style.to_dict(),
                }
                for b in self.buttons
            ],
        }


def assemble(
    page: PageStyle,
    buttons: list[FinalButton],
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> BrandSummary:
    """Package the page background and the top buttons for the summary prompt."""
    return BrandSummary(
        page_background=page.background_color,
        buttons=tuple(buttons[: heuristics.summary_button_limit]),
        body_font=page.body_font,
        heading_font=page.heading_font,
        heading_color=page.heading_color,
        font_families=page.font_families[:8],
    )


def build_prompt(summary: BrandSummary) -> str:
    return (
        "Analyze this website design data.\n"
        f"Site background: {summary.page_background}\n"
        f"Design data: {json.dumps(summary.to_dict())}\n\n"
        "Return a JSON object with 3 fields:\n"
        '1. "mood": a 3-word description of the brand vibe.\n'
        '2. "gsap_ease": the GSAP easing curve that fits this mood (e.g. "power2.out", "elastic.out").\n'
        '3. "animation_advice": a one-sentence recommendation for the banner animation style.\n'
        "Output ONLY the JSON, nothing else."
    )


def _first_string(data: dict, keys: tuple[str, ...]) -> str:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def parse_reply(raw: str) -> Analysis:
    """Extract the analysis object from a text-generation reply.

    Markdown fences and prose around the JSON object are tolerated. Raises
    SummaryParseError when no object with all three fields can be found.
    """
    text = (raw or "").strip()
    text = re.sub(r'^```(?:json)?\s*\n?', '', text, flags=re.MULTILINE)
    text = re.sub(r'\n?```\s*$', '', text, flags=re.MULTILINE)

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise SummaryParseError("No JSON object in reply")

    try:
        data = json.loads(text[start:end + 1])
    except (json.JSONDecodeError, ValueError) as e:
        raise SummaryParseError(f"Invalid JSON in reply: {e}") from e
    if not isinstance(data, dict):
        raise SummaryParseError("Reply JSON is not an object")

    mood = _first_string(data, ("mood",))
    easing = _first_string(data, _EASING_KEYS)
    advice = _first_string(data, _ADVICE_KEYS)
    if not (mood and easing and advice):
        raise SummaryParseError(f"Reply missing fields (got keys: {sorted(data)})")

    return Analysis(mood=mood, easing_hint=easing, advice=advice)


async def summarize(
    summary: BrandSummary,
    generate: Generate | None,
    timeout: float = SUMMARY_TIMEOUT,
) -> Analysis:
    """Best-effort mood/easing/advice annotation; never raises."""
    if generate is None:
        return FALLBACK_ANALYSIS

    try:
        raw = await asyncio.wait_for(generate(build_prompt(summary)), timeout=timeout)
        analysis = parse_reply(raw)
    except asyncio.TimeoutError:
        logger.warning(f"[summary] Text generation timed out after {timeout}s, using fallback")
        return FALLBACK_ANALYSIS
    except SummaryParseError as e:
        logger.warning(f"[summary] Unusable reply: {e}, using fallback")
        return FALLBACK_ANALYSIS
    except Exception as e:
        logger.error(f"[summary] Text generation failed: {e}, using fallback")
        return FALLBACK_ANALYSIS

    logger.info(f"[summary] mood='{analysis.mood}' ease={analysis.easing_hint}")
    return analysis
