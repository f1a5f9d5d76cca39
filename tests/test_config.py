"""Tests for EngineOptions."""

import json

import pytest

from journey_circle._common import STYLE
from journey_circle.config import EngineOptions


class TestEngineOptions:
    def test_defaults(self):
        options = EngineOptions()

        assert options.logical_size == 700
        assert options.max_size == 700
        assert options.duration_ms == 600
        assert options.easing == "ease_out_cubic"
        assert options.circle_id is None
        assert options.style == STYLE

    def test_color_overrides_merge(self):
        options = EngineOptions(colors={"offer": "#00ff00"})

        assert options.style["offer"] == "#00ff00"
        assert options.style["problem"] == STYLE["problem"]

    @pytest.mark.parametrize("kwargs", [
        {"logical_size": -1},
        {"max_size": 0},
        {"duration_ms": -5},
        {"easing": "bounce"},
        {"colors": {"teal": "#008080"}},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            EngineOptions(**kwargs)

    def test_with_overrides_validates(self):
        options = EngineOptions().with_overrides(logical_size=300)
        assert options.logical_size == 300

        with pytest.raises(ValueError):
            options.with_overrides(easing="nope")

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ValueError, match="Unknown option keys: size"):
            EngineOptions.from_dict({"size": 300})

    def test_from_file(self, tmp_path):
        path = tmp_path / "options.json"
        path.write_text(json.dumps({"logical_size": 350, "circle_id": 9, "easing": "linear"}))

        options = EngineOptions.from_file(path)

        assert options.logical_size == 350
        assert options.circle_id == 9
        assert EngineOptions.from_dict(options.to_dict()) == options
