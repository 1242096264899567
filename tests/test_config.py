"""Tests for host-side configuration, materials and lights."""

import pytest


class TestRenderConfig:
    """Tests for RenderConfig validation."""

    def test_defaults(self):
        """Test the default configuration values."""
        from src.pathtracer.core.config import (
            DEFAULT_MAX_LIGHT_CANDIDATES,
            PDF_EPSILON,
            SHADOW_EPSILON,
            FrameState,
            RenderConfig,
        )

        config = RenderConfig()
        assert config.max_light_candidates == DEFAULT_MAX_LIGHT_CANDIDATES == 2
        assert config.rows_per_task == 1
        assert config.num_threads == 0
        assert config.shadow_epsilon == SHADOW_EPSILON
        assert config.pdf_epsilon == PDF_EPSILON

        state = FrameState()
        assert state.accumulate is True
        assert state.reset is False

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"max_light_candidates": 0}, "max_light_candidates"),
            ({"rows_per_task": 0}, "rows_per_task"),
            ({"num_threads": -1}, "num_threads"),
            ({"shadow_epsilon": 0.0}, "shadow_epsilon"),
            ({"pdf_epsilon": -1e-5}, "pdf_epsilon"),
        ],
    )
    def test_invalid_values(self, kwargs, message):
        """Test that invalid settings raise ValueError."""
        from src.pathtracer.core.config import RenderConfig

        with pytest.raises(ValueError, match=message):
            RenderConfig(**kwargs)

    @pytest.mark.parametrize("rows_per_task", [1, 3, 7, 17, 64])
    def test_any_positive_rows_per_task(self, rows_per_task):
        """Test that row ranges need not be powers of two."""
        from src.pathtracer.core.config import RenderConfig

        assert RenderConfig(rows_per_task=rows_per_task).rows_per_task == rows_per_task


class TestMaterial:
    """Tests for Material validation."""

    def test_defaults(self):
        """Test the default material is a non-emissive grey diffuse."""
        from src.pathtracer.materials import Material

        material = Material()
        assert material.albedo == (0.8, 0.8, 0.8)
        assert material.emission == 0.0

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"albedo": (1.5, 0.0, 0.0)}, "albedo"),
            ({"albedo": (0.5, 0.5)}, "albedo"),
            ({"roughness": 1.5}, "roughness"),
            ({"specular_chance": -0.1}, "specular_chance"),
            ({"emission": -1.0}, "emission"),
            ({"emission_color": (-1.0, 0.0, 0.0)}, "emission_color"),
        ],
    )
    def test_invalid_values(self, kwargs, message):
        """Test that out-of-range fields raise ValueError."""
        from src.pathtracer.materials import Material

        with pytest.raises(ValueError, match=message):
            Material(**kwargs)

    def test_emission_color_may_exceed_one(self):
        """Test that HDR emission colors are accepted."""
        from src.pathtracer.materials import Material

        assert Material(emission=1.0, emission_color=(4.0, 2.0, 1.0)).emission_color[0] == 4.0


class TestPointLight:
    """Tests for PointLight."""

    def test_sample(self):
        """Test that a point light emits color * strength."""
        from src.pathtracer.materials import LightKind, PointLight

        light = PointLight(position=(0.0, 1.0, 0.0), color=(1.0, 0.5, 0.25), strength=2.0)
        assert light.sample() == (2.0, 1.0, 0.5)
        assert light.kind == LightKind.POINT

    def test_invalid_light(self):
        """Test validation of color and strength."""
        from src.pathtracer.materials import PointLight

        with pytest.raises(ValueError, match="color"):
            PointLight(position=(0.0, 0.0, 0.0), color=(-1.0, 0.0, 0.0))
        with pytest.raises(ValueError, match="strength"):
            PointLight(position=(0.0, 0.0, 0.0), strength=-0.5)
