"""
Tunable heuristics for candidate discovery, consent filtering and ranking.

Every threshold, bonus and word list used by the extraction pipeline lives on
the Heuristics object so that a rule set can be tuned (or loaded from a JSON
file) without touching control flow. Bump ``version`` whenever the defaults
change so results can be traced back to the rules that produced them.
"""

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

logger = logging.getLogger(__name__)

HEURISTICS_VERSION = "3"

CANDIDATE_SELECTOR = (
    'a, button, [role="button"], input[type="submit"], input[type="button"]'
)

ACTION_KEYWORDS = {
    "en": (
        "shop", "buy", "get", "start", "discover", "join", "try", "order",
        "book", "explore", "sign up", "subscribe",
    ),
    "pl": (
        "kup", "sklep", "zamów", "zamow", "odkryj", "dołącz", "dolacz",
        "zacznij", "sprawdź", "sprawdz", "wypróbuj", "zarejestruj",
    ),
}

CONSENT_TERMS = {
    "en": (
        "cookie", "accept", "agree", "consent", "privacy", "settings",
        "preferences", "close", "dismiss", "reject", "decline", "got it",
    ),
    "pl": (
        "ciastecz", "akceptuj", "zgoda", "zgadzam", "prywatno", "polityka",
        "ustawienia", "zamknij", "odrzuć", "odrzuc",
    ),
}

CONSENT_PROVIDERS = (
    "onetrust", "optanon", "cookiebot", "cybotcookiebot", "didomi", "trustarc",
    "truste", "usercentrics", "quantcast", "qc-cmp", "osano", "iubenda",
    "cmplz", "complianz", "cookieyes", "cky-consent", "termly", "borlabs",
    "klaro", "sp_message", "cookie-consent", "cookieconsent", "cookie-banner",
    "cookie-notice", "cookie-law", "cookielaw", "cc-banner", "cc-window",
    "gdpr", "consent-banner",
)


@dataclass(frozen=True)
class Heuristics:
    version: str = HEURISTICS_VERSION

    # Discovery
    candidate_selector: str = CANDIDATE_SELECTOR
    min_width: float = 30
    min_height: float = 15
    text_limit: int = 25
    max_descendants: int = 300
    ancestor_depth: int = 4
    markup_limit: int = 2000

    # Scoring
    hero_band: tuple[float, float] = (0.10, 0.60)
    hero_bonus: int = 50
    painted_bonus: int = 20
    wide_min_width: float = 100
    wide_bonus: int = 10
    tall_min_height: float = 35
    tall_bonus: int = 10
    keyword_bonus: int = 40
    consent_score: int = -1000
    max_ranked: int = 6

    # Hover + summary
    hover_settle_ms: int = 300
    summary_button_limit: int = 2

    action_keywords: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(ACTION_KEYWORDS))
    consent_terms: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(CONSENT_TERMS))
    consent_providers: tuple[str, ...] = CONSENT_PROVIDERS

    def __post_init__(self):
        low, high = self.hero_band
        if not 0 <= low < high <= 1:
            raise ValueError(f"hero_band must satisfy 0 <= low < high <= 1, got {self.hero_band}")
        if self.consent_score > -500:
            raise ValueError("consent_score must be -500 or lower so no bonus can offset it")
        if self.ancestor_depth < 3:
            raise ValueError("ancestor_depth must be at least 3")
        if self.max_ranked < 1:
            raise ValueError("max_ranked must be positive")

    def all_action_keywords(self) -> list[str]:
        return [w.lower() for words in self.action_keywords.values() for w in words]

    def all_consent_terms(self) -> list[str]:
        return [w.lower() for words in self.consent_terms.values() for w in words]


DEFAULT_HEURISTICS = Heuristics()


def load_heuristics(path: str | Path | None) -> Heuristics:
    """Apply JSON overrides from ``path`` on top of the default rule set.

    Unknown keys are ignored with a warning. Lists become tuples.
    """
    if not path:
        return DEFAULT_HEURISTICS

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Heuristics file {path} must contain a JSON object")

    known = {f.name for f in fields(Heuristics)}
    overrides = {}
    for key, value in raw.items():
        if key not in known:
            logger.warning(f"[heuristics] Ignoring unknown key '{key}' in {path}")
            continue
        if key in ("action_keywords", "consent_terms"):
            value = {locale: tuple(words) for locale, words in value.items()}
        elif isinstance(value, list):
            value = tuple(value)
        overrides[key] = value

    heuristics = replace(DEFAULT_HEURISTICS, **overrides)
    logger.info(f"[heuristics] Loaded {len(overrides)} overrides from {path} (version={heuristics.version})")
    return heuristics
