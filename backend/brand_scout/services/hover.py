import logging
from dataclasses import dataclass

from brand_scout.services.heuristics import DEFAULT_HEURISTICS, Heuristics
from brand_scout.services.paint import ResolvedStyle, resolve_paint
from brand_scout.services.ranking import ScoredCandidate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HoverStyle:
    background_color: str
    color: str

    @classmethod
    def from_resolved(cls, style: ResolvedStyle) -> "HoverStyle":
        return cls(background_color=style.background_color, color=style.color)

    def to_dict(self) -> dict:
        return {"bg": self.background_color, "color": self.color}


@dataclass(frozen=True)
class FinalButton:
    index: int
    text: str
    score: int
    x: float
    y: float
    default_style: ResolvedStyle
    hover_style: HoverStyle
    hover_sampled: bool = True

    @classmethod
    def from_scored(cls, scored: ScoredCandidate, hover: HoverStyle | None) -> "FinalButton":
        x, y = scored.center
        return cls(
            index=scored.candidate.index,
            text=scored.text,
            score=scored.score,
            x=x,
            y=y,
            default_style=scored.style,
            hover_style=hover or HoverStyle.from_resolved(scored.style),
            hover_sampled=hover is not None,
        )

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "text": self.text,
            "score": self.score,
            "x": self.x,
            "y": self.y,
            "defaultStyle": self.default_style.to_dict(),
            "hoverStyle": self.hover_style.to_dict(),
            "hoverSampled": self.hover_sampled,
        }


async def probe_hover(session, scored: ScoredCandidate, heuristics: Heuristics = DEFAULT_HEURISTICS) -> HoverStyle | None:
    """Move the pointer onto the candidate and re-resolve paint under it.

    If nothing under the pointer (or in its subtree) is painted, the hit's
    parent is tried, which covers wrappers that recolor on hover while a
    transparent label sits on top.
    """
    x, y = scored.center
    await session.move_cursor(x, y)
    await session.settle(heuristics.hover_settle_ms)

    probe = await session.probe_point(x, y, heuristics)
    if probe is None:
        return None

    style = resolve_paint(probe.hit)
    if style is None and probe.parent is not None:
        style = resolve_paint(probe.parent)
    if style is None:
        return None
    return HoverStyle.from_resolved(style)


async def sample_hover(session, scored: ScoredCandidate, heuristics: Heuristics = DEFAULT_HEURISTICS) -> FinalButton:
    """Sample one candidate's hover state; failures fall back to the default style."""
    try:
        hover = await probe_hover(session, scored, heuristics)
    except Exception as e:
        logger.warning(f"[hover] Probe failed for '{scored.text}': {e}, keeping default style")
        hover = None
    else:
        if hover is None:
            logger.info(f"[hover] Nothing painted under '{scored.text}', keeping default style")

    return FinalButton.from_scored(scored, hover)


async def sample_all(session, ranked: list[ScoredCandidate], heuristics: Heuristics = DEFAULT_HEURISTICS) -> list[FinalButton]:
    """Sample hover states one candidate at a time, in ranking order.

    The pointer is shared session state, so probes never overlap.
    """
    buttons = []
    for scored in ranked:
        buttons.append(await sample_hover(session, scored, heuristics))
    sampled = sum(1 for b in buttons if b.hover_sampled)
    logger.info(f"[hover] Sampled {sampled}/{len(buttons)} hover states")
    return buttons
