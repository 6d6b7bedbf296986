# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Unit tests for the volume provisioner.
"""
import logging
import os
import stat
from so2local.MANAGERS.volume_manager import VolumeProvisioner
from fakes import FakeRuntime


def mode(path):
    return stat.S_IMODE(os.stat(path).st_mode)


class TestVolumeProvisioner:
    """Tests for VolumeProvisioner."""

    def test_existing_volume_untouched(self, volume_dir):
        runtime = FakeRuntime(volumes=["SO2_DOCKER_VOLUME"], mountpoint=str(volume_dir))
        os.chmod(volume_dir, 0o755)
        assert VolumeProvisioner(runtime).ensure("SO2_DOCKER_VOLUME") is False
        assert runtime.call_names() == ["volume_exists"]
        assert mode(volume_dir) == 0o755

    def test_create_volume(self, volume_dir):
        runtime = FakeRuntime(mountpoint=str(volume_dir))
        assert VolumeProvisioner(runtime).ensure("SO2_DOCKER_VOLUME") is True
        assert runtime.call_names() == ["volume_exists", "create_volume", "volume_mountpoint"]

    def test_create_makes_tree_world_writable(self, volume_dir):
        runtime = FakeRuntime(mountpoint=str(volume_dir))
        VolumeProvisioner(runtime).ensure("SO2_DOCKER_VOLUME")
        assert mode(volume_dir) == 0o777
        assert mode(volume_dir / "tools" / "labs") == 0o777
        assert mode(volume_dir / "README") == 0o777

    def test_second_ensure_is_noop(self, volume_dir):
        runtime = FakeRuntime(mountpoint=str(volume_dir))
        provisioner = VolumeProvisioner(runtime)
        provisioner.ensure("SO2_DOCKER_VOLUME")
        assert provisioner.ensure("SO2_DOCKER_VOLUME") is False
        assert runtime.call_names().count("create_volume") == 1

    def test_missing_mountpoint_is_logged(self, tmp_path, caplog):
        runtime = FakeRuntime(mountpoint=str(tmp_path / "gone"))
        with caplog.at_level(logging.WARNING, logger="so2local"):
            assert VolumeProvisioner(runtime).ensure("SO2_DOCKER_VOLUME") is True
        assert "permissions left unchanged" in caplog.text
        assert "1 entries" in caplog.text

    def test_chmod_failures_summarised(self, volume_dir, monkeypatch, caplog):
        def refuse(path, mode):
            raise PermissionError(1, "Operation not permitted", path)

        monkeypatch.setattr(os, "chmod", refuse)
        runtime = FakeRuntime(mountpoint=str(volume_dir))
        with caplog.at_level(logging.WARNING, logger="so2local"):
            assert VolumeProvisioner(runtime).ensure("SO2_DOCKER_VOLUME") is True
        # Root, tools, tools/labs and README
        assert "4 entries" in caplog.text
