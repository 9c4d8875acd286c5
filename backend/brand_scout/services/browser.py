import os
import logging
from contextlib import asynccontextmanager

from playwright.async_api import async_playwright, Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError
from playwright_stealth import Stealth

from brand_scout.exceptions import NavigationTimeout, RenderError, RenderSessionUnavailable
from brand_scout.services.heuristics import DEFAULT_HEURISTICS, Heuristics
from brand_scout.services.snapshot import NetworkEvent, NodeSnapshot, PageStyle, PointProbe

logger = logging.getLogger(__name__)

VIEWPORT_WIDTH = int(os.getenv("VIEWPORT_WIDTH", "1440"))
VIEWPORT_HEIGHT = int(os.getenv("VIEWPORT_HEIGHT", "900"))
NAVIGATION_TIMEOUT_MS = int(os.getenv("NAVIGATION_TIMEOUT_MS", "60000"))
HYDRATION_WAIT_MS = int(os.getenv("HYDRATION_WAIT_MS", "2500"))

BLOCKED_RESOURCE_TYPES = {"image", "media"}


# Shared helpers for serializing a DOM node into a style snapshot.
# Border width/color report the widest side.
SNAPSHOT_HELPERS_JS = """
    const styleOf = (el, pseudo) => {
        const s = window.getComputedStyle(el, pseudo || null);
        let borderWidth = 0;
        let borderColor = s.borderTopColor;
        for (const side of ['Top', 'Right', 'Bottom', 'Left']) {
            const w = parseFloat(s['border' + side + 'Width']) || 0;
            if (w > borderWidth) {
                borderWidth = w;
                borderColor = s['border' + side + 'Color'];
            }
        }
        return {
            backgroundColor: s.backgroundColor,
            color: s.color,
            borderWidth: borderWidth + 'px',
            borderColor: borderColor,
            borderRadius: s.borderRadius,
            fontFamily: s.fontFamily,
            display: s.display,
            visibility: s.visibility,
            opacity: s.opacity,
        };
    };
    const pseudoOf = (el, which) => {
        const content = window.getComputedStyle(el, which).content;
        if (!content || content === 'none' || content === 'normal') return null;
        return styleOf(el, which);
    };
    const boxOf = (el) => {
        const r = el.getBoundingClientRect();
        return { x: r.x, y: r.y, width: r.width, height: r.height };
    };
    const classOf = (el) => {
        const c = el.className;
        if (typeof c === 'string') return c;
        return (c && c.baseVal) || '';
    };
    const ancestorsOf = (el, depth) => {
        const out = [];
        let cur = el.parentElement;
        while (cur && out.length < depth) {
            out.push({ tag: cur.tagName.toLowerCase(), id: cur.id || '', className: classOf(cur) });
            cur = cur.parentElement;
        }
        return out;
    };
    const leafOf = (el) => ({
        tag: el.tagName.toLowerCase(),
        id: el.id || '',
        className: classOf(el),
        style: styleOf(el),
        box: boxOf(el),
    });
    const snapshotOf = (el, opts) => {
        const descendants = [];
        for (const child of el.querySelectorAll('*')) {
            if (descendants.length >= opts.maxDescendants) break;
            descendants.push(leafOf(child));
        }
        const markup = el.outerHTML || '';
        return {
            ...leafOf(el),
            before: pseudoOf(el, '::before'),
            after: pseudoOf(el, '::after'),
            descendants: descendants,
            ancestors: ancestorsOf(el, opts.ancestorDepth),
            markup: markup.slice(0, opts.markupLimit),
            text: (el.innerText || el.value || '').trim(),
            ariaLabel: el.getAttribute('aria-label') || el.getAttribute('title') || '',
        };
    };
"""

# JS to snapshot every clickable-looking element larger than the minimum size
SCAN_CANDIDATES_JS = "(opts) => {" + SNAPSHOT_HELPERS_JS + """
    const results = [];
    document.querySelectorAll(opts.selector).forEach((el, index) => {
        const r = el.getBoundingClientRect();
        if (r.width <= opts.minWidth || r.height <= opts.minHeight) return;
        const node = snapshotOf(el, opts);
        node.index = index;
        results.push(node);
    });
    return results;
}
"""

# JS to snapshot the element under a point plus its parent
PROBE_POINT_JS = "(opts) => {" + SNAPSHOT_HELPERS_JS + """
    const el = document.elementFromPoint(opts.x, opts.y);
    if (!el) return null;
    const parent = el.parentElement;
    const useParent = parent && parent !== document.body && parent !== document.documentElement;
    return {
        hit: snapshotOf(el, opts),
        parent: useParent ? snapshotOf(parent, opts) : null,
    };
}
"""

# JS to read page-level typography and background
PAGE_STYLE_JS = """
() => {
    const body = window.getComputedStyle(document.body);
    const heading = document.querySelector('h1') || document.querySelector('h2');
    const hs = heading ? window.getComputedStyle(heading) : null;
    const families = [];
    if (document.fonts) {
        document.fonts.forEach(f => {
            if (f.status === 'loaded') families.push(f.family.replace(/["']/g, ''));
        });
    }
    return {
        backgroundColor: body.backgroundColor,
        bodyFont: body.fontFamily,
        headingFont: hs ? hs.fontFamily : '',
        headingColor: hs ? hs.color : '',
        fontFamilies: [...new Set(families)],
    };
}
"""


def _snapshot_options(heuristics: Heuristics) -> dict:
    return {
        "selector": heuristics.candidate_selector,
        "minWidth": heuristics.min_width,
        "minHeight": heuristics.min_height,
        "maxDescendants": heuristics.max_descendants,
        "ancestorDepth": heuristics.ancestor_depth,
        "markupLimit": heuristics.markup_limit,
    }


def collect_font_urls(events: list[NetworkEvent]) -> list[str]:
    """Unique font URLs from the session's network responses, in load order."""
    return list(dict.fromkeys(e.url for e in events if e.resource_type == "font"))


class RenderSession:
    """One rendered page: style snapshots plus a virtual pointer."""

    def __init__(
        self,
        page,
        viewport_width: int = VIEWPORT_WIDTH,
        viewport_height: int = VIEWPORT_HEIGHT,
        url: str = "",
    ):
        self.page = page
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.url = url
        self._events: list[NetworkEvent] = []

    def record_response(self, response) -> None:
        self._events.append(NetworkEvent(resource_type=response.request.resource_type, url=response.url))

    def network_events(self) -> list[NetworkEvent]:
        return list(self._events)

    async def _evaluate(self, script: str, *args):
        # Late redirects or crashed targets surface here once the page is loaded
        try:
            return await self.page.evaluate(script, *args)
        except PlaywrightError as e:
            raise RenderError(self.url, f"Page script failed: {e.message}") from e

    async def snapshot_candidates(self, heuristics: Heuristics = DEFAULT_HEURISTICS) -> list[NodeSnapshot]:
        raw = await self._evaluate(SCAN_CANDIDATES_JS, _snapshot_options(heuristics))
        nodes = [NodeSnapshot.from_dict(item) for item in raw or []]
        logger.info(f"[render] Scanned {len(nodes)} clickable-looking nodes")
        return nodes

    async def page_style(self) -> PageStyle:
        raw = await self._evaluate(PAGE_STYLE_JS)
        return PageStyle.from_dict(raw or {}, self.viewport_width, self.viewport_height)

    async def move_cursor(self, x: float, y: float) -> None:
        await self.page.mouse.move(x, y)

    async def settle(self, ms: int) -> None:
        await self.page.wait_for_timeout(ms)

    async def probe_point(self, x: float, y: float, heuristics: Heuristics = DEFAULT_HEURISTICS) -> PointProbe | None:
        opts = _snapshot_options(heuristics)
        opts.update({"x": x, "y": y})
        raw = await self.page.evaluate(PROBE_POINT_JS, opts)
        return PointProbe.from_dict(raw)


async def _block_heavy_assets(route):
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


@asynccontextmanager
async def open_render_session(
    url: str,
    viewport_width: int = VIEWPORT_WIDTH,
    viewport_height: int = VIEWPORT_HEIGHT,
    timeout_ms: int = NAVIGATION_TIMEOUT_MS,
    hydration_wait_ms: int = HYDRATION_WAIT_MS,
):
    """Render ``url`` headlessly and yield a RenderSession.

    The browser is closed on every exit path, including errors raised by the
    caller's block and task cancellation.
    """
    async with async_playwright() as p:
        try:
            browser = await p.chromium.launch(
                headless=True,
                args=[
                    "--disable-blink-features=AutomationControlled",
                    "--disable-infobars",
                    "--no-first-run",
                    "--no-default-browser-check",
                    "--no-sandbox",
                    "--disable-dev-shm-usage",
                    "--disable-gpu",
                ],
            )
        except PlaywrightError as e:
            logger.error(f"[render] Could not launch browser: {e}")
            raise RenderSessionUnavailable(url, "Could not open a render session") from e

        try:
            try:
                context = await browser.new_context(
                    viewport={"width": viewport_width, "height": viewport_height},
                    user_agent="Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
                    locale="en-US",
                    color_scheme="light",
                )
                stealth = Stealth(
                    navigator_webdriver=True,
                    chrome_runtime=True,
                    navigator_plugins=True,
                    navigator_permissions=True,
                    webgl_vendor=True,
                )
                await stealth.apply_stealth_async(context)
                page = await context.new_page()
                session = RenderSession(page, viewport_width, viewport_height, url=url)

                await page.route("**/*", _block_heavy_assets)
                page.on("response", session.record_response)

                try:
                    await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
                except PlaywrightTimeoutError as e:
                    raise NavigationTimeout(url, timeout_ms) from e
                except PlaywrightError as e:
                    raise RenderError(url, f"Navigation failed: {e.message}") from e

                await page.wait_for_timeout(hydration_wait_ms)
            except PlaywrightError as e:
                raise RenderError(url, f"Page setup failed: {e.message}") from e

            logger.info(f"[render] Loaded {url} ({viewport_width}x{viewport_height})")
            yield session
        finally:
            await browser.close()
            logger.info(f"[render] Closed session for {url}")
