import time
import asyncio
import logging
from dataclasses import dataclass, field

from brand_scout.exceptions import RenderError
from brand_scout.services.browser import collect_font_urls, open_render_session
from brand_scout.services.heuristics import DEFAULT_HEURISTICS, Heuristics
from brand_scout.services.hover import FinalButton, sample_all
from brand_scout.services.ranking import build_candidates, score_and_rank
from brand_scout.services.snapshot import PageStyle
from brand_scout.services.summary import Analysis, Generate, assemble, summarize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    url: str
    fonts: list[str]
    buttons: list[FinalButton]
    analysis: Analysis
    site: PageStyle = field(default_factory=PageStyle)

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "fonts": list(self.fonts),
            "buttons": [b.to_dict() for b in self.buttons],
            "analysis": self.analysis.to_dict(),
            "site": {
                "backgroundColor": self.site.background_color,
                "bodyFont": self.site.body_font,
                "headingFont": self.site.heading_font,
                "headingColor": self.site.heading_color,
                "fontFamilies": list(self.site.font_families),
            },
        }


@dataclass(frozen=True)
class RenderedSite:
    """Everything read from the live page, before summarization."""
    buttons: list[FinalButton]
    page: PageStyle
    fonts: list[str]
    node_count: int = 0
    candidate_count: int = 0


async def render_site(
    url: str,
    heuristics: Heuristics = DEFAULT_HEURISTICS,
    session_factory=open_render_session,
) -> RenderedSite:
    async with session_factory(url) as session:
        nodes = await session.snapshot_candidates(heuristics)
        candidates = build_candidates(nodes, heuristics)
        ranked = score_and_rank(candidates, session.viewport_height, heuristics)
        buttons = await sample_all(session, ranked, heuristics)
        try:
            page = await session.page_style()
        except RenderError as e:
            # Buttons are already sampled; only the page-level block is lost
            logger.warning(f"[analyze] Page style unavailable for {url}: {e}")
            page = PageStyle(viewport_width=session.viewport_width, viewport_height=session.viewport_height)
        fonts = collect_font_urls(session.network_events())

    return RenderedSite(
        buttons=buttons,
        page=page,
        fonts=fonts,
        node_count=len(nodes),
        candidate_count=len(candidates),
    )


async def analyze_site(
    url: str,
    heuristics: Heuristics = DEFAULT_HEURISTICS,
    session_factory=open_render_session,
    generate: Generate | None = None,
    render_timeout: float | None = None,
) -> AnalysisResult:
    """Render ``url``, extract its call-to-action styling and summarize it.

    Render failures propagate to the caller. ``render_timeout`` bounds the
    render phase only (``asyncio.TimeoutError`` on expiry). The render session
    is closed before the text-generation call, which has its own timeout and
    fallback, so a slow summary never holds a browser or drops the buttons.
    """
    t0 = time.time()
    rendered = await asyncio.wait_for(
        render_site(url, heuristics, session_factory),
        timeout=render_timeout,
    )
    t_render = time.time() - t0

    if not rendered.buttons:
        logger.info(f"[analyze] No call-to-action found on {url}, summarizing page background only")

    analysis = await summarize(assemble(rendered.page, rendered.buttons, heuristics), generate)
    logger.info(
        f"[analyze] {url}: {rendered.node_count} nodes, {rendered.candidate_count} candidates, "
        f"{len(rendered.buttons)} buttons, {len(rendered.fonts)} font files "
        f"(render {t_render:.1f}s, total {time.time() - t0:.1f}s, rules v{heuristics.version})"
    )

    return AnalysisResult(
        url=url,
        fonts=rendered.fonts,
        buttons=rendered.buttons,
        analysis=analysis,
        site=rendered.page,
    )
