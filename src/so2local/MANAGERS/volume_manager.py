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
Provisioning of the persistent data volume.
"""
import logging
import os
from ..RUNTIME.docker_client import ContainerRuntime

logger = logging.getLogger(__name__)

WORLD_WRITABLE = 0o777

class VolumeProvisioner:
    """
    Creates the named data volume on first use and opens up its permissions
    so the unprivileged user inside the container can write to it.
    """
    def __init__(self, runtime: ContainerRuntime):
        """
        Initializes the volume provisioner.

        :param runtime: Container runtime that owns the volume.
        """
        self.runtime = runtime

    def ensure(self, name: str) -> bool:
        """
        Creates the volume if it does not exist yet.

        :param name: Volume name.
        :return: True if the volume was created by this call.
        """
        if self.runtime.volume_exists(name):
            logger.debug("Volume %s already exists", name)
            return False

        logger.info("Creating volume %s", name)
        self.runtime.create_volume(name)
        mountpoint = self.runtime.volume_mountpoint(name)
        failures = self.make_world_writable(mountpoint)
        if failures:
            logger.warning("Volume %s created, but %d entries under %s are not world-writable", name, failures, mountpoint)
        return True

    def make_world_writable(self, path: str) -> int:
        """
        Recursively sets mode 0777 on a directory tree.

        Failures are logged and skipped; nothing is rolled back.

        :param path: Root of the tree, usually the volume mountpoint.
        :return: Number of entries whose mode could not be changed.
        """
        if not path or not os.path.exists(path):
            logger.warning("Volume mountpoint %r not found, permissions left unchanged", path)
            return 1

        failures = 0
        entries = [path]
        for root, dirs, files in os.walk(path):
            entries.extend(os.path.join(root, name) for name in dirs + files)

        for entry in entries:
            if os.path.islink(entry):
                continue
            try:
                os.chmod(entry, WORLD_WRITABLE)
            except OSError as e:
                failures += 1
                logger.warning("Could not change permissions of %s: %s", entry, e)
        return failures
