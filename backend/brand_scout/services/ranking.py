import logging
from dataclasses import dataclass

from brand_scout.services.consent import consent_signal
from brand_scout.services.heuristics import DEFAULT_HEURISTICS, Heuristics
from brand_scout.services.paint import ResolvedStyle, resolve_paint
from brand_scout.services.snapshot import BoundingBox, NodeSnapshot

logger = logging.getLogger(__name__)

DEFAULT_LABEL = "Button"


@dataclass(frozen=True)
class CandidateElement:
    index: int
    box: BoundingBox
    text: str
    full_text: str
    node: NodeSnapshot


@dataclass(frozen=True)
class ScoredCandidate:
    candidate: CandidateElement
    style: ResolvedStyle
    score: int

    @property
    def center(self) -> tuple[float, float]:
        return self.candidate.box.center

    @property
    def text(self) -> str:
        return self.candidate.text


def _visible_text(node: NodeSnapshot) -> str:
    text = " ".join((node.text or "").split())
    return text or (node.aria_label or "").strip()


def build_candidate(
    node: NodeSnapshot,
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> CandidateElement | None:
    """Turn a scanned node into a candidate, or None if it is too small or hidden."""
    box = node.box
    if box.width <= heuristics.min_width or box.height <= heuristics.min_height:
        return None
    if node.style.is_hidden:
        return None

    full_text = _visible_text(node)
    label = full_text[: heuristics.text_limit].strip() or DEFAULT_LABEL
    return CandidateElement(
        index=node.index,
        box=box,
        text=label,
        full_text=full_text,
        node=node,
    )


def build_candidates(
    nodes: list[NodeSnapshot],
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> list[CandidateElement]:
    candidates = []
    for node in nodes:
        candidate = build_candidate(node, heuristics)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def score_candidate(
    candidate: CandidateElement,
    style: ResolvedStyle,
    viewport_height: float,
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> int:
    """Additive relevance score; consent artifacts get the fixed sentinel."""
    signal = consent_signal(candidate.node, candidate.full_text, heuristics)
    if signal is not None:
        logger.debug(f"[rank] '{candidate.text}' flagged as consent artifact ({signal})")
        return heuristics.consent_score

    score = 0
    box = candidate.box

    if viewport_height > 0:
        low, high = heuristics.hero_band
        relative_y = box.y / viewport_height
        if low < relative_y < high:
            score += heuristics.hero_bonus

    if style.has_background:
        score += heuristics.painted_bonus

    if box.width > heuristics.wide_min_width:
        score += heuristics.wide_bonus
    if box.height > heuristics.tall_min_height:
        score += heuristics.tall_bonus

    lowered = candidate.full_text.lower()
    if lowered and any(word in lowered for word in heuristics.all_action_keywords()):
        score += heuristics.keyword_bonus

    return score


def score_and_rank(
    candidates: list[CandidateElement],
    viewport_height: float,
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> list[ScoredCandidate]:
    """Resolve paint, score, keep positive scores and return the top candidates.

    Candidates without any resolvable paint are dropped before scoring. The
    sort is stable, so equal scores keep their scan order.
    """
    scored: list[ScoredCandidate] = []
    unpainted = 0
    for candidate in candidates:
        style = resolve_paint(candidate.node)
        if style is None:
            unpainted += 1
            continue
        score = score_candidate(candidate, style, viewport_height, heuristics)
        if score > 0:
            scored.append(ScoredCandidate(candidate=candidate, style=style, score=score))

    ranked = sorted(scored, key=lambda s: s.score, reverse=True)[: heuristics.max_ranked]
    logger.info(
        f"[rank] {len(candidates)} candidates → {unpainted} unpainted, "
        f"{len(scored)} scored positive, {len(ranked)} kept"
    )
    return ranked
