import json

import pytest

from brand_scout.services.heuristics import DEFAULT_HEURISTICS, Heuristics, load_heuristics


class TestHeuristics:
    def test_defaults(self):
        h = DEFAULT_HEURISTICS
        assert h.consent_score <= -500
        assert h.max_ranked == 6
        assert h.ancestor_depth >= 3
        assert {"en", "pl"} <= set(h.consent_terms)
        assert "kup" in h.all_action_keywords()

    @pytest.mark.parametrize("kwargs", [
        {"consent_score": -100},
        {"hero_band": (0.7, 0.2)},
        {"hero_band": (0.1, 1.5)},
        {"ancestor_depth": 2},
        {"max_ranked": 0},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            Heuristics(**kwargs)

    def test_load_overrides(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({
            "version": "3-test",
            "hero_band": [0.15, 0.65],
            "action_keywords": {"de": ["kaufen", "jetzt"]},
            "not_a_setting": 1,
        }))

        h = load_heuristics(path)

        assert h.version == "3-test"
        assert h.hero_band == (0.15, 0.65)
        assert h.all_action_keywords() == ["kaufen", "jetzt"]
        assert h.consent_terms == DEFAULT_HEURISTICS.consent_terms

    def test_no_path_returns_defaults(self):
        assert load_heuristics(None) is DEFAULT_HEURISTICS
        assert load_heuristics("") is DEFAULT_HEURISTICS
