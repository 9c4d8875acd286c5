"""
Shared fixtures: synthetic DOM snapshots and an in-memory render session.
"""
from contextlib import asynccontextmanager

import pytest

from brand_scout.services.snapshot import (
    AncestorInfo,
    BoundingBox,
    NetworkEvent,
    NodeSnapshot,
    PageStyle,
    PointProbe,
    StyleRecord,
)

TRANSPARENT = "rgba(0, 0, 0, 0)"


def build_node(
    text="",
    box=(100, 360, 200, 48),
    bg=TRANSPARENT,
    color="rgb(255, 255, 255)",
    index=0,
    **kwargs,
) -> NodeSnapshot:
    style_kwargs = {
        key: kwargs.pop(key)
        for key in list(kwargs)
        if key in ("border_width", "border_color", "border_radius", "font_family", "display", "visibility", "opacity")
    }
    style = StyleRecord(background_color=bg, color=color, **style_kwargs)
    x, y, w, h = box
    return NodeSnapshot(
        tag=kwargs.pop("tag", "a"),
        style=style,
        box=BoundingBox(x, y, w, h),
        text=text,
        index=index,
        **kwargs,
    )


class FakeRenderSession:
    """Implements the render session interface over synthetic snapshots."""

    def __init__(self, nodes=None, probes=None, page=None, events=None, viewport_height=900):
        self.nodes = list(nodes or [])
        # probes: {(x, y): PointProbe | Exception | None}
        self.probes = dict(probes or {})
        self.page = page or PageStyle(background_color="rgb(255, 255, 255)")
        self.events = list(events or [])
        self.viewport_width = 1440
        self.viewport_height = viewport_height
        self.cursor_moves = []
        self.settle_calls = []
        self.probe_calls = []
        self.closed = False

    async def snapshot_candidates(self, heuristics):
        return list(self.nodes)

    async def page_style(self):
        return self.page

    async def move_cursor(self, x, y):
        self.cursor_moves.append((x, y))

    async def settle(self, ms):
        self.settle_calls.append(ms)

    async def probe_point(self, x, y, heuristics):
        self.probe_calls.append((x, y))
        outcome = self.probes.get((x, y))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def network_events(self):
        return list(self.events)

    def factory(self):
        @asynccontextmanager
        async def _open(url):
            try:
                yield self
            finally:
                self.closed = True

        return _open


@pytest.fixture
def make_node():
    return build_node


@pytest.fixture
def fake_session():
    return FakeRenderSession


@pytest.fixture
def probe_of():
    def _probe(hit, parent=None):
        return PointProbe(hit=hit, parent=parent)

    return _probe


@pytest.fixture
def consent_ancestors():
    return (
        AncestorInfo(tag="div", class_name="banner-actions"),
        AncestorInfo(tag="div", element_id="onetrust-banner-sdk"),
    )


@pytest.fixture
def font_events():
    return [
        NetworkEvent("document", "https://shop.example/"),
        NetworkEvent("font", "https://fonts.gstatic.com/s/inter.woff2"),
        NetworkEvent("stylesheet", "https://fonts.googleapis.com/css2?family=Inter"),
        NetworkEvent("font", "https://fonts.gstatic.com/s/inter.woff2"),
        NetworkEvent("font", "https://shop.example/fonts/brand.woff2"),
    ]
