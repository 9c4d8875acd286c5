import ast
import asyncio
import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from brand_scout.exceptions import SummaryParseError
from brand_scout.services.heuristics import Heuristics
from brand_scout.services.hover import FinalButton, HoverStyle
from brand_scout.services.paint import ResolvedStyle
from brand_scout.services import summary as summary_module
from brand_scout.services.snapshot import PageStyle
from brand_scout.services.summary import (
    FALLBACK_ANALYSIS,
    assemble,
    build_prompt,
    parse_reply,
    summarize,
)


def _button(i):
    style = ResolvedStyle("rgb(37, 99, 235)", "rgb(255, 255, 255)", "8px", "Inter")
    return FinalButton(
        index=i, text=f"CTA {i}", score=100 - i, x=10, y=10,
        default_style=style, hover_style=HoverStyle("rgb(29, 78, 216)", "rgb(255, 255, 255)"),
    )


@pytest.fixture
def page():
    return PageStyle(background_color="rgb(250, 250, 250)", body_font="Inter, sans-serif", heading_font="Fraunces")


class TestAssemble:
    def test_only_top_two_buttons_forwarded(self, page):
        summary = assemble(page, [_button(i) for i in range(5)])
        assert [b.text for b in summary.buttons] == ["CTA 0", "CTA 1"]
        assert summary.page_background == "rgb(250, 250, 250)"

    def test_limit_is_configurable(self, page):
        summary = assemble(page, [_button(i) for i in range(5)], Heuristics(summary_button_limit=1))
        assert len(summary.buttons) == 1

    def test_empty_button_list(self, page):
        summary = assemble(page, [])
        assert summary.buttons == ()
        assert "rgb(250, 250, 250)" in build_prompt(summary)

    def test_prompt_contains_button_styles(self, page):
        prompt = build_prompt(assemble(page, [_button(0)]))
        assert "CTA 0" in prompt
        assert "rgb(29, 78, 216)" in prompt
        assert "gsap_ease" in prompt


class TestParseReply:
    def test_plain_json(self):
        analysis = parse_reply(json.dumps({"mood": "Bold, playful, bright", "gsap_ease": "back.out(1.7)", "animation_advice": "Pop the CTA in last."}))
        assert analysis.mood == "Bold, playful, bright"
        assert analysis.easing_hint == "back.out(1.7)"
        assert analysis.advice == "Pop the CTA in last."
        assert analysis.degraded is False

    def test_fenced_json_with_prose(self):
        raw = 'Here you go:\n```json\n{"mood": "Calm minimal luxe", "easingHint": "power1.inOut", "advice": "Fade slowly."}\n```\nEnjoy!'
        analysis = parse_reply(raw)
        assert analysis.easing_hint == "power1.inOut"
        assert analysis.advice == "Fade slowly."

    @pytest.mark.parametrize("raw", [
        "",
        "I cannot help with that.",
        "{not json}",
        '["mood", "ease"]',
        '{"mood": "Bold"}',
        '{"mood": "", "gsap_ease": "power2.out", "animation_advice": "x"}',
    ])
    def test_malformed_replies_raise(self, raw):
        with pytest.raises(SummaryParseError):
            parse_reply(raw)


class TestSummarize:
    @pytest.mark.asyncio
    async def test_successful_reply(self, page):
        generate = AsyncMock(return_value='{"mood": "Warm", "gsap_ease": "sine.out", "animation_advice": "Ease in gently."}')
        analysis = await summarize(assemble(page, [_button(0)]), generate)
        assert analysis.mood == "Warm"
        generate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_service_error_uses_fallback(self, page):
        generate = AsyncMock(side_effect=RuntimeError("401 invalid api key"))
        assert await summarize(assemble(page, []), generate) == FALLBACK_ANALYSIS

    @pytest.mark.asyncio
    async def test_unparsable_reply_uses_fallback(self, page):
        generate = AsyncMock(return_value="Sure! The mood is bold.")
        analysis = await summarize(assemble(page, []), generate)
        assert analysis is FALLBACK_ANALYSIS
        assert analysis.degraded is True

    @pytest.mark.asyncio
    async def test_timeout_uses_fallback(self, page):
        async def slow(prompt):
            await asyncio.sleep(5)
            return "{}"

        assert await summarize(assemble(page, []), slow, timeout=0.01) == FALLBACK_ANALYSIS

    @pytest.mark.asyncio
    async def test_no_generator_configured(self, page):
        assert await summarize(assemble(page, []), None) == FALLBACK_ANALYSIS


class TestSummaryDependencies:
    def test_core_does_not_import_text_client(self):
        tree = ast.parse(Path(summary_module.__file__).read_text(encoding="utf-8"))
        modules = {node.module for node in ast.walk(tree) if isinstance(node, ast.ImportFrom)}
        modules |= {alias.name for node in ast.walk(tree) if isinstance(node, ast.Import) for alias in node.names}

        assert not any(m.startswith("openai") or m.endswith("text_generation") for m in modules if m)

    def test_timeout_is_configured_locally(self):
        assert summary_module.SUMMARY_TIMEOUT > 0
