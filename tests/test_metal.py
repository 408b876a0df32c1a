"""Unit tests for the Metal material module.

Tests cover:
- Perfect mirror reflection (fuzz=0)
- Fuzzy reflection (fuzz>0)
- Ray absorption when scattered at or below the surface
- Attenuation = albedo
- Material registry operations and fuzz validation
"""

import math

import numpy as np
import pytest
import taichi as ti


def _make_scatter_kernel(n=1):
    """Build a kernel that scatters n rays off a metal surface."""
    from zharko.core.sampler import seed_state
    from zharko.materials.metal import scatter_metal, vec3

    directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
    attenuations = ti.Vector.field(3, dtype=ti.f32, shape=n)
    scattered = ti.field(dtype=ti.i32, shape=n)

    @ti.kernel
    def run(albedo: vec3, fuzz: ti.f32, incident: vec3, normal: vec3):
        for i in range(n):
            state = seed_state(ti.cast(17, ti.u32), i, 0, 0)
            d, att, did, state = scatter_metal(albedo, fuzz, incident, normal, state)
            directions[i] = d
            attenuations[i] = att
            scattered[i] = did

    def call(incident, normal=(0.0, 1.0, 0.0), fuzz=0.0, albedo=(1.0, 1.0, 1.0)):
        run(vec3(*albedo), fuzz, vec3(*incident), vec3(*normal))
        return directions.to_numpy(), attenuations.to_numpy(), scattered.to_numpy()

    return call


class TestPerfectReflection:
    """Tests for mirror reflection (fuzz=0)."""

    def test_normal_incidence(self):
        """A ray straight down reflects straight up."""
        scatter = _make_scatter_kernel()
        dirs, _, did = scatter((0.0, -1.0, 0.0))
        assert did[0] == 1
        assert np.allclose(dirs[0], (0.0, 1.0, 0.0), atol=1e-5)

    def test_45_degrees(self):
        """Angle of incidence equals angle of reflection."""
        scatter = _make_scatter_kernel()
        s = 1.0 / math.sqrt(2.0)
        dirs, _, did = scatter((s, -s, 0.0))
        assert did[0] == 1
        assert np.allclose(dirs[0], (s, s, 0.0), atol=1e-5)

    def test_unnormalized_incident(self):
        """The incident direction is normalized before reflecting."""
        scatter = _make_scatter_kernel()
        dirs, _, _ = scatter((0.0, -5.0, 0.0))
        assert np.allclose(dirs[0], (0.0, 1.0, 0.0), atol=1e-5)

    def test_attenuation_is_albedo(self):
        scatter = _make_scatter_kernel()
        _, att, _ = scatter((0.0, -1.0, 0.0), albedo=(0.8, 0.6, 0.2))
        assert np.allclose(att[0], (0.8, 0.6, 0.2), atol=1e-6)


class TestFuzzyReflection:
    """Tests for fuzzy reflection (fuzz>0)."""

    def test_fuzz_spreads_directions(self):
        """Scattered directions stay within fuzz of the mirror direction."""
        scatter = _make_scatter_kernel(n=500)
        fuzz = 0.3
        dirs, _, did = scatter((0.0, -1.0, 0.0), fuzz=fuzz)

        assert np.all(did == 1)
        offsets = np.linalg.norm(dirs - np.array([0.0, 1.0, 0.0]), axis=1)
        assert np.all(offsets <= fuzz + 1e-5)
        # Not all identical
        assert offsets.max() > 0.01

    def test_grazing_fuzzy_rays_are_sometimes_absorbed(self):
        """Near-grazing reflection with large fuzz pushes some rays below the surface."""
        scatter = _make_scatter_kernel(n=500)
        incident = (1.0, -0.05, 0.0)
        dirs, _, did = scatter(incident, fuzz=1.0)

        assert 0 < did.sum() < len(did)
        # Absorbed rays carry no direction
        assert np.all(dirs[did == 0] == 0.0)


class TestAbsorption:
    """Tests for the below-surface absorption rule."""

    def test_reflection_into_surface_is_absorbed(self):
        """A reflected direction with dot(d, n) <= 0 does not scatter."""
        scatter = _make_scatter_kernel()
        # Incident travelling along the normal reflects into the surface
        dirs, _, did = scatter((0.0, 1.0, 0.0))
        assert did[0] == 0
        assert np.allclose(dirs[0], 0.0)

    def test_exactly_tangent_is_absorbed(self):
        """A tangent reflection has dot(d, n) == 0 and is absorbed."""
        scatter = _make_scatter_kernel()
        _, _, did = scatter((1.0, 0.0, 0.0))
        assert did[0] == 0


class TestMetalRegistry:
    """Tests for the metal material registry."""

    def test_add_and_read_back(self):
        from zharko.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
            get_metal_material_count,
        )

        add_metal_material((0.9, 0.9, 0.9))
        idx = add_metal_material((0.8, 0.6, 0.2), fuzz=0.4)
        assert idx == 1
        assert get_metal_material_count() == 2

        albedo = ti.Vector.field(3, dtype=ti.f32, shape=())
        fuzz = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            albedo[None] = get_metal_albedo(1)
            fuzz[None] = get_metal_fuzz(1)

        test_kernel()
        assert abs(albedo[None][2] - 0.2) < 1e-6
        assert abs(fuzz[None] - 0.4) < 1e-6

    def test_default_fuzz_is_mirror(self):
        from zharko.materials.metal import add_metal_material, get_metal_fuzz

        add_metal_material((0.5, 0.5, 0.5))
        fuzz = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            fuzz[None] = get_metal_fuzz(0)

        test_kernel()
        assert fuzz[None] == 0.0

    @pytest.mark.parametrize("fuzz", [-0.01, 1.01])
    def test_fuzz_validation(self, fuzz):
        from zharko.errors import ConfigurationError
        from zharko.materials.metal import add_metal_material, get_metal_material_count

        with pytest.raises(ConfigurationError):
            add_metal_material((0.5, 0.5, 0.5), fuzz=fuzz)
        assert get_metal_material_count() == 0

    def test_albedo_validation(self):
        from zharko.errors import ConfigurationError
        from zharko.materials.metal import add_metal_material

        with pytest.raises(ConfigurationError):
            add_metal_material((0.5, 1.5, 0.5))
