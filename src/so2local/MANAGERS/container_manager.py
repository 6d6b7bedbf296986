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
Lifecycle of the single launcher container: stale cleanup and fresh start.
"""
import logging
from ..MODELS.container_spec import ContainerSpec
from ..RUNTIME.docker_client import ContainerRuntime

logger = logging.getLogger(__name__)

class ContainerLifecycleManager:
    """
    Replaces any container with the launcher's name by a fresh one.
    """
    def __init__(self, runtime: ContainerRuntime):
        self.runtime = runtime

    def remove_stale(self, name: str) -> bool:
        """
        Force removes an existing container with exactly this name.

        :param name: Container name.
        :return: True if a container was removed.
        """
        if name not in self.runtime.list_containers():
            return False

        logger.info("Removing existing container: %s", name)
        self.runtime.remove_container(name)
        return True

    def start(self, spec: ContainerSpec) -> str:
        """
        Creates and starts the container.

        :param spec: The container to run.
        :return: Id of the new container.
        """
        logger.info("Starting container %s...", spec.name)
        container_id = self.runtime.run_container(spec)
        logger.info("Container is running. Use 'docker exec -it %s bash' to enter.", spec.name)
        return container_id
