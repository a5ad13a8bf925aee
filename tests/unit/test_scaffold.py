"""Tests for project directory scaffolding."""

from jetson_passthrough.scaffold import MARKER, init_project_structure


class TestInitProjectStructure:
    def test_creates_missing_directories(self, config, tmp_path):
        created = init_project_structure(config)

        assert created == [tmp_path / "src", tmp_path / "models", tmp_path / "data"]
        for name in ("src", "models", "data"):
            assert (tmp_path / name).is_dir()

    def test_empty_directories_get_marker(self, config, tmp_path):
        init_project_structure(config)
        for name in ("src", "models", "data"):
            assert (tmp_path / name / MARKER).is_file()

    def test_idempotent(self, config, tmp_path):
        init_project_structure(config)
        before = sorted(p.relative_to(tmp_path) for p in tmp_path.rglob("*"))

        created = init_project_structure(config)
        after = sorted(p.relative_to(tmp_path) for p in tmp_path.rglob("*"))

        assert created == []
        assert before == after

    def test_existing_content_is_untouched(self, config, tmp_path):
        (tmp_path / "models").mkdir()
        (tmp_path / "models" / "yolo.onnx").write_bytes(b"\x00")

        created = init_project_structure(config)

        assert tmp_path / "models" not in created
        assert not (tmp_path / "models" / MARKER).exists()
        assert (tmp_path / "models" / "yolo.onnx").exists()
