"""Unit tests for scene-level intersection.

Tests cover:
- SceneHitRecord with material_id
- Sphere storage, validation and clearing
- Closest hit selection independent of insertion order
- Empty scene and t range handling
"""

import pytest
import taichi as ti


def _make_query():
    """Build a kernel that intersects one ray with the whole scene."""
    from zharko.scene.intersection import intersect_scene, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def run(origin: vec3, direction: vec3, t_min: ti.f32, t_max: ti.f32):
        # Nested so the scan over spheres runs serially
        for _ in range(1):
            rec = intersect_scene(origin, direction, t_min, t_max)
            hit[None] = rec.hit
            t_val[None] = rec.t
            normal[None] = rec.normal
            material_id[None] = rec.material_id

    def query(origin, direction, t_min=0.001, t_max=1e10):
        run(vec3(*origin), vec3(*direction), t_min, t_max)
        return {
            "hit": int(hit[None]),
            "t": float(t_val[None]),
            "normal": tuple(float(normal[None][k]) for k in range(3)),
            "material_id": int(material_id[None]),
        }

    return query


class TestSceneHitRecordBasics:
    """Tests for SceneHitRecord dataclass."""

    def test_miss_record_has_negative_material_id(self):
        """Miss records have hit = 0 and material_id = -1."""
        from zharko.scene.intersection import _make_miss_record

        result_hit = ti.field(dtype=ti.i32, shape=())
        result_material_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = _make_miss_record()
            result_hit[None] = rec.hit
            result_material_id[None] = rec.material_id

        test_kernel()
        assert result_hit[None] == 0
        assert result_material_id[None] == -1


class TestSceneSphereStorage:
    """Tests for sphere storage and management."""

    def test_add_sphere(self):
        """Spheres are indexed in insertion order."""
        from zharko.scene.intersection import add_sphere, get_sphere_count

        assert get_sphere_count() == 0
        assert add_sphere((1.0, 2.0, 3.0), 0.5, material_id=1) == 0
        assert add_sphere((0.0, 0.0, 0.0), 1.0, material_id=0) == 1
        assert get_sphere_count() == 2

    def test_clear_scene(self):
        """Clearing resets the sphere count."""
        from zharko.scene.intersection import add_sphere, clear_scene, get_sphere_count

        add_sphere((0.0, 0.0, 0.0), 1.0)
        clear_scene()
        assert get_sphere_count() == 0

    @pytest.mark.parametrize("radius", [0.0, -1.0, float("inf"), float("nan")])
    def test_invalid_radius_rejected(self, radius):
        """Radius must be a positive finite number."""
        from zharko.errors import ConfigurationError
        from zharko.scene.intersection import add_sphere, get_sphere_count

        with pytest.raises(ConfigurationError):
            add_sphere((0.0, 0.0, 0.0), radius)
        assert get_sphere_count() == 0

    def test_invalid_center_rejected(self):
        """Center must be a finite 3D point."""
        from zharko.errors import ConfigurationError
        from zharko.scene.intersection import add_sphere

        with pytest.raises(ConfigurationError):
            add_sphere((0.0, float("nan"), 0.0), 1.0)
        with pytest.raises(ConfigurationError):
            add_sphere((0.0, 0.0), 1.0)


class TestSceneIntersection:
    """Tests for closest-hit queries."""

    def test_empty_scene_misses(self):
        """No spheres: every ray misses."""
        query = _make_query()
        rec = query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 0
        assert rec["material_id"] == -1

    def test_hit_single_sphere(self):
        """A sphere straight ahead is hit with its material ID."""
        from zharko.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.5, material_id=7)
        query = _make_query()
        rec = query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert rec["hit"] == 1
        assert abs(rec["t"] - 0.5) < 1e-5
        assert rec["material_id"] == 7
        assert abs(rec["normal"][2] - 1.0) < 1e-5

    @pytest.mark.parametrize("near_first", [True, False])
    def test_closest_hit_independent_of_order(self, near_first):
        """The nearer of two overlapping spheres wins in either insertion order."""
        from zharko.scene.intersection import add_sphere

        near = ((0.0, 0.0, -2.0), 0.5, 1)
        far = ((0.0, 0.0, -5.0), 0.5, 2)
        for center, radius, mat in (near, far) if near_first else (far, near):
            add_sphere(center, radius, material_id=mat)

        query = _make_query()
        rec = query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 1
        assert rec["material_id"] == 1
        assert abs(rec["t"] - 1.5) < 1e-5

    def test_hit_rejected_by_t_max(self):
        """A sphere beyond t_max is not reported."""
        from zharko.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -10.0), 1.0)
        query = _make_query()
        rec = query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=5.0)
        assert rec["hit"] == 0

    def test_inside_sphere_reports_exit(self):
        """A ray starting inside a sphere hits its far wall."""
        from zharko.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 0.0), 2.0, material_id=3)
        query = _make_query()
        rec = query((0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.0) < 1e-5
        assert abs(rec["normal"][0] + 1.0) < 1e-5
