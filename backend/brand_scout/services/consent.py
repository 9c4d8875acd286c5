"""
Cookie / consent banner detection.

Consent buttons look exactly like real calls-to-action (same size, same
saturated fill, prominent position), so geometry and color cannot tell them
apart. Three independent signals are checked instead: the button's words,
its own identity (markup, id, class) and the identity of its containers.
"""

from brand_scout.services.heuristics import DEFAULT_HEURISTICS, Heuristics
from brand_scout.services.snapshot import NodeSnapshot

SIGNAL_LEXICAL = "lexical"
SIGNAL_IDENTITY = "identity"
SIGNAL_ANCESTRY = "ancestry"


def _matches_provider(value: str, providers: tuple[str, ...]) -> bool:
    value = value.lower()
    return bool(value) and any(p in value for p in providers)


def consent_signal(
    node: NodeSnapshot,
    text: str,
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> str | None:
    """Name of the first consent signal that fires for ``node``, if any."""
    lowered = (text or "").lower()
    if lowered and any(term in lowered for term in heuristics.all_consent_terms()):
        return SIGNAL_LEXICAL

    providers = tuple(p.lower() for p in heuristics.consent_providers)
    if any(_matches_provider(v, providers) for v in (node.markup, node.element_id, node.class_name)):
        return SIGNAL_IDENTITY

    for ancestor in node.ancestors[: heuristics.ancestor_depth]:
        if _matches_provider(ancestor.element_id, providers) or _matches_provider(ancestor.class_name, providers):
            return SIGNAL_ANCESTRY

    return None


def is_consent_artifact(
    node: NodeSnapshot,
    text: str,
    heuristics: Heuristics = DEFAULT_HEURISTICS,
) -> bool:
    return consent_signal(node, text, heuristics) is not None
