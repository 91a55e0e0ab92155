"""Unit tests for the SceneManager.

Tests cover:
- Material registration and validation
- Sphere and light addition with validation
- Checkerboard configuration
- Scene serialization (to_config, from_config, dict and JSON)
- Scene clearing
- The default scene
"""

import json

import pytest


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from tinytracer.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestMaterialRegistration:
    """Tests for material registration."""

    def test_add_material(self, fresh_scene):
        """Test adding presets assigns sequential ids."""
        from tinytracer.materials.material import GLASS, IVORY

        assert fresh_scene.add_material(IVORY) == 0
        assert fresh_scene.add_material(GLASS) == 1
        assert fresh_scene.get_material_count() == 2
        assert fresh_scene.get_material_info(1).params is GLASS
        assert fresh_scene.get_material_info(5) is None

    def test_invalid_material(self, fresh_scene):
        """Test invalid parameters raise ValueError."""
        from tinytracer.materials.material import MaterialParams

        with pytest.raises(ValueError):
            fresh_scene.add_material(
                MaterialParams(0.0, (1.0, 0.0, 0.0, 0.0), (1.0, 1.0, 1.0), 10.0)
            )
        assert fresh_scene.get_material_count() == 0


class TestPrimitives:
    """Tests for spheres and lights."""

    def test_add_sphere(self, fresh_scene):
        """Test adding spheres with a valid material."""
        from tinytracer.materials.material import IVORY

        ivory = fresh_scene.add_material(IVORY)
        assert fresh_scene.add_sphere((-3, 0, -16), 2, ivory) == 0
        assert fresh_scene.add_sphere((1.5, -0.5, -18), 3, ivory) == 1
        assert fresh_scene.get_sphere_count() == 2
        assert fresh_scene.spheres[0].center == (-3.0, 0.0, -16.0)

    def test_add_sphere_invalid_material(self, fresh_scene):
        """Test unknown material ids are rejected."""
        with pytest.raises(ValueError):
            fresh_scene.add_sphere((0, 0, -10), 1.0, 0)

    def test_add_sphere_invalid_radius(self, fresh_scene):
        """Test non-positive radii are rejected."""
        from tinytracer.materials.material import IVORY

        ivory = fresh_scene.add_material(IVORY)
        with pytest.raises(ValueError):
            fresh_scene.add_sphere((0, 0, -10), 0.0, ivory)
        with pytest.raises(ValueError):
            fresh_scene.add_sphere((0, 0, -10), -1.0, ivory)
        assert fresh_scene.get_sphere_count() == 0

    def test_add_light(self, fresh_scene):
        """Test adding lights."""
        assert fresh_scene.add_light((-20, 20, 20), 1.5) == 0
        assert fresh_scene.get_light_count() == 1
        assert fresh_scene.lights[0].intensity == 1.5

        with pytest.raises(ValueError):
            fresh_scene.add_light((0, 0, 0), -0.1)

    def test_set_checkerboard(self, fresh_scene):
        """Test the floor can be reconfigured and removed."""
        from tinytracer.geometry.checkerboard import CheckerboardConfig

        assert fresh_scene.get_checkerboard().enabled

        fresh_scene.set_checkerboard(CheckerboardConfig(parity="floor"))
        assert fresh_scene.get_checkerboard().parity == "floor"

        fresh_scene.set_checkerboard(None)
        assert not fresh_scene.get_checkerboard().enabled

    def test_clear(self, fresh_scene):
        """Test clear removes everything and restores the floor."""
        from tinytracer.materials.material import IVORY

        ivory = fresh_scene.add_material(IVORY)
        fresh_scene.add_sphere((0, 0, -10), 1.0, ivory)
        fresh_scene.add_light((0, 10, 0), 1.0)
        fresh_scene.set_checkerboard(None)

        fresh_scene.clear()
        assert fresh_scene.get_material_count() == 0
        assert fresh_scene.get_sphere_count() == 0
        assert fresh_scene.get_light_count() == 0
        assert fresh_scene.get_checkerboard().enabled
        assert fresh_scene.materials == []

    def test_capacity_info(self):
        """Test capacity getters."""
        from tinytracer.scene.manager import SceneManager

        assert SceneManager.get_max_spheres() == 1024
        assert SceneManager.get_max_lights() == 64
        assert SceneManager.get_max_materials() == 256


class TestSerialization:
    """Tests for config, dict and JSON round trips."""

    def test_config_round_trip(self, fresh_scene):
        """Test to_config / from_config reproduce the scene."""
        from tinytracer.geometry.checkerboard import CheckerboardConfig
        from tinytracer.materials.material import GLASS, MIRROR

        glass = fresh_scene.add_material(GLASS)
        mirror = fresh_scene.add_material(MIRROR)
        fresh_scene.add_sphere((-1, -1.5, -12), 2, glass)
        fresh_scene.add_sphere((7, 5, -18), 4, mirror)
        fresh_scene.add_light((30, 50, -25), 1.8)
        fresh_scene.set_checkerboard(CheckerboardConfig(parity="floor"))

        config = fresh_scene.to_config()
        assert len(config.materials) == 2
        assert config.spheres[1] == {"center": [7.0, 5.0, -18.0], "radius": 4.0, "material_id": 1}
        assert config.lights == [{"position": [30.0, 50.0, -25.0], "intensity": 1.8}]
        assert config.checkerboard["parity"] == "floor"

        fresh_scene.from_config(config)
        assert fresh_scene.get_material_count() == 2
        assert fresh_scene.get_sphere_count() == 2
        assert fresh_scene.get_light_count() == 1
        assert fresh_scene.materials[1].params == MIRROR
        assert fresh_scene.get_checkerboard().parity == "floor"
        assert fresh_scene.to_config() == config

    def test_disabled_floor_exports_none(self, fresh_scene):
        """Test a scene without floor exports checkerboard=None."""
        fresh_scene.set_checkerboard(None)
        assert fresh_scene.to_config().checkerboard is None

    def test_from_dict_presets(self, fresh_scene):
        """Test materials can be given by preset name."""
        from tinytracer.materials.material import RED_RUBBER

        fresh_scene.from_dict(
            {
                "materials": [{"preset": "red_rubber"}],
                "spheres": [{"center": [0, 0, -10], "radius": 1, "material_id": 0}],
                "lights": [{"position": [0, 10, 0], "intensity": 1.0}],
            }
        )
        assert fresh_scene.materials[0].params == RED_RUBBER
        # Missing "checkerboard" key keeps the default floor
        assert fresh_scene.get_checkerboard().enabled

    def test_from_dict_null_floor(self, fresh_scene):
        """Test an explicit null checkerboard removes the floor."""
        fresh_scene.from_dict({"checkerboard": None})
        assert not fresh_scene.get_checkerboard().enabled

    @pytest.mark.parametrize(
        "data",
        [
            {"materials": [{"preset": "gold"}]},
            {"materials": [{"refractive_index": 1.0}]},
            {"materials": [{"preset": "ivory"}], "spheres": [{"center": [0, 0], "material_id": 0}]},
            {"materials": [{"preset": "ivory"}], "spheres": [{"center": [0, 0, -10], "material_id": 0}]},
            {"materials": [{"preset": "ivory"}], "spheres": [{"center": [0, 0, -10], "radius": 1}]},
            {"materials": [{"preset": "ivory"}], "spheres": [{"radius": 1, "material_id": 0}]},
            {"spheres": [{"center": [0, 0, -10], "radius": 1, "material_id": 0}]},
            {"lights": [{"position": [0, 0, 0]}]},
            {"checkerboard": {"parity": "round"}},
        ],
    )
    def test_from_dict_invalid(self, fresh_scene, data):
        """Test malformed scene dictionaries raise ValueError."""
        with pytest.raises(ValueError):
            fresh_scene.from_dict(data)

    def test_json_round_trip(self, fresh_scene, tmp_path):
        """Test save_json / load_json."""
        from tinytracer.scene.default_scene import default_scene_config

        fresh_scene.from_config(default_scene_config())
        path = tmp_path / "scene.json"
        fresh_scene.save_json(path)

        data = json.loads(path.read_text())
        assert set(data) == {"materials", "spheres", "lights", "checkerboard"}

        exported = fresh_scene.to_dict()
        fresh_scene.clear()
        fresh_scene.load_json(path)
        assert fresh_scene.to_dict() == exported

    def test_load_invalid_json(self, fresh_scene, tmp_path):
        """Test unreadable scene files raise ValueError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            fresh_scene.load_json(path)

        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError):
            fresh_scene.load_json(path)


class TestUpload:
    """Tests for restoring a manager's scene into the shared fields."""

    def test_upload_after_other_manager(self, fresh_scene):
        """Test upload() brings back spheres, lights and floor state."""
        from tinytracer.geometry.checkerboard import is_checkerboard_enabled
        from tinytracer.scene.default_scene import default_scene_config
        from tinytracer.scene.intersection import get_sphere_count
        from tinytracer.scene.lights import get_light_count
        from tinytracer.scene.manager import SceneManager

        fresh_scene.from_config(default_scene_config())
        fresh_scene.set_checkerboard(None)

        # A second manager clears the fields and restores the default floor
        SceneManager()
        assert get_sphere_count() == 0
        assert is_checkerboard_enabled()

        fresh_scene.upload()
        assert get_sphere_count() == 4
        assert get_light_count() == 3
        assert not is_checkerboard_enabled()
        assert fresh_scene.get_sphere_count() == 4

    def test_checkerboard_tracked_per_manager(self, fresh_scene):
        """Test each manager reports its own floor configuration."""
        from tinytracer.geometry.checkerboard import CheckerboardConfig
        from tinytracer.scene.manager import SceneManager

        fresh_scene.set_checkerboard(CheckerboardConfig(parity="floor"))
        other = SceneManager()

        assert fresh_scene.get_checkerboard().parity == "floor"
        assert other.get_checkerboard().parity == "legacy"
        assert fresh_scene.to_config().checkerboard["parity"] == "floor"


class TestDefaultScene:
    """Tests for the default four-sphere scene."""

    def test_default_scene_contents(self):
        """Test the default scene has four spheres, three lights and a floor."""
        from tinytracer.materials.material import GLASS, IVORY, MIRROR, RED_RUBBER
        from tinytracer.scene.default_scene import create_default_scene

        scene, camera = create_default_scene()
        assert scene.get_sphere_count() == 4
        assert scene.get_light_count() == 3
        assert scene.get_checkerboard().enabled
        assert scene.get_checkerboard().parity == "legacy"
        assert [m.params for m in scene.materials] == [IVORY, GLASS, RED_RUBBER, MIRROR]
        assert [s.radius for s in scene.spheres] == [2.0, 2.0, 3.0, 4.0]
        assert scene.spheres[3].center == (7.0, 5.0, -18.0)
        assert [light.intensity for light in scene.lights] == [1.5, 1.8, 1.7]

        assert camera.width == 1024
        assert camera.height == 768

    def test_default_scene_parity_option(self):
        """Test the parity rule can be chosen."""
        from tinytracer.scene.default_scene import default_scene_config

        assert default_scene_config(parity="floor").checkerboard["parity"] == "floor"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
