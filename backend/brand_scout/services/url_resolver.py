"""
Turn the user's input (a domain or a brand name) into a URL to render.

Domains are used as-is. Brand names are looked up through the text-generation
service; the suggested homepage is only trusted if it answers an HTTP probe.
Anything else falls back to a search-engine results URL for the name.
"""

import os
import re
import logging
from urllib.parse import quote_plus, urlparse

import httpx

from brand_scout.exceptions import InvalidClientInput
from brand_scout.services.summary import Generate

logger = logging.getLogger(__name__)

SEARCH_URL_TEMPLATE = os.getenv("SEARCH_URL_TEMPLATE", "https://www.google.com/search?q={query}")
URL_PROBE_TIMEOUT = float(os.getenv("URL_PROBE_TIMEOUT", "8"))

_URL_RE = re.compile(r"https?://[^\s\"'<>`)]+", re.IGNORECASE)

RESOLVE_PROMPT = (
    "What is the official homepage URL of the brand or company \"{name}\"? "
    "Reply with the URL only, starting with https://. If you do not know, reply UNKNOWN."
)


def looks_like_domain(text: str) -> bool:
    text = text.strip()
    return "." in text and " " not in text


def normalize_url(text: str) -> str:
    text = text.strip()
    if text.lower().startswith(("http://", "https://")):
        return text
    return "https://" + text


def search_url(name: str) -> str:
    return SEARCH_URL_TEMPLATE.format(query=quote_plus(name.strip()))


def extract_url(reply: str) -> str | None:
    match = _URL_RE.search(reply or "")
    if not match:
        return None
    url = match.group(0).rstrip(".,;")
    parsed = urlparse(url)
    if not parsed.netloc or "." not in parsed.netloc:
        return None
    return url


async def url_responds(url: str, timeout: float = URL_PROBE_TIMEOUT) -> bool:
    """True if ``url`` answers with a non-5xx status."""
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            resp = await client.get(url)
            return resp.status_code < 500
    except httpx.HTTPError as e:
        logger.info(f"[resolver] Probe of {url} failed: {e}")
        return False


async def resolve_client_input(text: str, generate: Generate | None = None) -> str:
    """Resolve ``text`` to a URL. Only empty input raises."""
    text = (text or "").strip()
    if not text:
        raise InvalidClientInput("Enter a website address or a brand name")

    if looks_like_domain(text):
        return normalize_url(text)

    if generate is not None:
        try:
            reply = await generate(RESOLVE_PROMPT.format(name=text))
            candidate = extract_url(reply)
            if candidate and await url_responds(candidate):
                logger.info(f"[resolver] '{text}' → {candidate}")
                return candidate
            logger.info(f"[resolver] No usable homepage for '{text}' in reply: {reply[:80]!r}")
        except Exception as e:
            logger.warning(f"[resolver] Lookup for '{text}' failed: {e}")

    fallback = search_url(text)
    logger.info(f"[resolver] Input is a name, defaulting to search for: {text}")
    return fallback
