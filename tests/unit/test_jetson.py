"""Tests for Jetson host discovery."""

from collections import namedtuple
from unittest.mock import patch

from jetson_passthrough import jetson
from jetson_passthrough.jetson import JetsonInfo, discover_jetson, parse_l4t_release

Usage = namedtuple("Usage", "total used free percent")
Memory = namedtuple("Memory", "total available")

GB = 1024 ** 3


class TestParseL4tRelease:
    def test_jetpack_512(self):
        text = "# R35 (release), REVISION: 4.1, GCID: 33958178, BOARD: t186ref, EABI: aarch64\n"
        assert parse_l4t_release(text) == (35, "4.1")

    def test_garbage(self):
        assert parse_l4t_release("not a tegra release") is None
        assert parse_l4t_release("") is None


class TestJetsonInfo:
    def test_detected_from_release(self):
        info = JetsonInfo(model=None, l4t_release=(35, "4.1"))
        assert info.is_jetson
        assert info.l4t_version == "R35.4.1"

    def test_detected_from_model(self):
        info = JetsonInfo(model="NVIDIA Jetson AGX Orin", l4t_release=None)
        assert info.is_jetson
        assert info.l4t_version is None

    def test_desktop(self):
        assert not JetsonInfo(model=None, l4t_release=None).is_jetson


class TestDiscoverJetson:
    def test_reads_release_devices_and_host_metrics(self, config, tmp_path):
        release = tmp_path / "nv_tegra_release"
        release.write_text("# R35 (release), REVISION: 4.1, GCID: 1\n")
        model = tmp_path / "model"
        model.write_text("NVIDIA Jetson Orin NX\x00")
        present = tmp_path / "nvmap"
        present.touch()
        config.device_nodes = (str(present), str(tmp_path / "nvhost-gpu"))

        with patch.object(jetson, "TEGRA_RELEASE_FILE", release), \
             patch.object(jetson, "DEVICE_MODEL_FILE", model), \
             patch("psutil.virtual_memory", return_value=Memory(16 * GB, 8 * GB)), \
             patch("psutil.disk_usage", return_value=Usage(100 * GB, 40 * GB, 60 * GB, 40.0)):
            info = discover_jetson(config)

        assert info.model == "NVIDIA Jetson Orin NX"
        assert info.l4t_release == (35, "4.1")
        assert info.device_nodes_present == [str(present)]
        assert info.device_nodes_missing == [str(tmp_path / "nvhost-gpu")]
        assert info.total_memory_gb == 16.0
        assert info.free_disk_gb == 60.0

    def test_non_jetson_host(self, config, tmp_path):
        with patch.object(jetson, "TEGRA_RELEASE_FILE", tmp_path / "missing"), \
             patch.object(jetson, "DEVICE_MODEL_FILE", tmp_path / "missing-model"), \
             patch("psutil.disk_usage", side_effect=OSError("no such path")):
            info = discover_jetson(config)

        assert info.is_jetson is False
        assert info.free_disk_gb is None
