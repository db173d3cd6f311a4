"""
Unit tests for runtime settings.
"""

import pytest
from glazeup.settings import FullscreenMethod, Settings


@pytest.mark.unit
class TestSettings:
    """Test defaults, validation and environment overrides."""

    def test_defaults(self):
        settings = Settings()

        assert settings.url == "ws://localhost:6123"
        assert settings.tolerance == 0.002
        assert settings.max_resize_iterations == 80
        assert settings.max_direction_toggles == 5
        assert settings.window_timeout == 60.0
        assert settings.fullscreen_method == FullscreenMethod.WM

    def test_fullscreen_method_from_string(self):
        assert Settings(fullscreen_method="F11").fullscreen_method == FullscreenMethod.F11

    def test_invalid_fullscreen_method(self):
        with pytest.raises(ValueError, match="Invalid fullscreen method"):
            Settings(fullscreen_method="keyboard")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"tolerance": 0},
            {"min_resize_step": 0},
            {"min_resize_step": 5, "max_resize_step": 2},
            {"max_resize_iterations": -1},
        ],
    )
    def test_invalid_bounds(self, kwargs):
        with pytest.raises(ValueError):
            Settings(**kwargs)

    def test_from_env(self):
        environ = {
            "GLAZEUP_PORT": "7000",
            "GLAZEUP_LAYOUT_DELAY": "0.2",
            "GLAZEUP_FULLSCREEN_METHOD": "f11",
            "UNRELATED": "x",
        }

        settings = Settings.from_env(environ)

        assert settings.port == 7000
        assert settings.layout_delay == 0.2
        assert settings.fullscreen_method == FullscreenMethod.F11
        assert settings.url == "ws://localhost:7000"

    def test_overrides_win_over_env(self):
        settings = Settings.from_env({"GLAZEUP_HOST": "example"}, host="127.0.0.1")

        assert settings.host == "127.0.0.1"

    def test_invalid_env_value(self):
        with pytest.raises(ValueError):
            Settings.from_env({"GLAZEUP_MAX_RESIZE_ITERATIONS": "many"})
