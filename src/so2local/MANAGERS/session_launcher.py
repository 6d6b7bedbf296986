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
The session launcher: the fixed sequence that turns launch options into one
running container.
"""
import logging
from typing import Optional
from ..MODELS.container_spec import ContainerSpec, RestartPolicyCondition, RunOptions, VolumeMount
from ..MODELS.launch_config import LaunchOptions, LauncherSettings
from ..RUNTIME.docker_client import ContainerRuntime
from .container_manager import ContainerLifecycleManager
from .environment_manager import EnvironmentConfigurator
from .image_manager import ImageResolver
from .volume_manager import VolumeProvisioner

logger = logging.getLogger(__name__)

class SessionLauncher:
    """
    Image -> volume -> stale cleanup -> environment -> run.

    Every step blocks on the runtime; nothing is rolled back when a later
    step fails.
    """
    def __init__(self,
                 settings: LauncherSettings,
                 runtime: ContainerRuntime,
                 configurator: Optional[EnvironmentConfigurator] = None):
        """
        Initializes the launcher.

        :param settings: Names and paths for the launch.
        :param runtime: Container runtime client.
        :param configurator: GUI/network configurator; built from settings when omitted.
        """
        self.settings = settings
        self.runtime = runtime
        self.images = ImageResolver(runtime)
        self.volumes = VolumeProvisioner(runtime)
        self.containers = ContainerLifecycleManager(runtime)
        self.configurator = configurator or EnvironmentConfigurator(settings)

    def build_spec(self, options: LaunchOptions, run_options: RunOptions) -> ContainerSpec:
        """
        Assembles the container definition.

        :param options: Launch options (privileged flag).
        :param run_options: Output of the environment configurator.
        :return: The container to run.
        """
        settings = self.settings
        return ContainerSpec(
            name=settings.container_name,
            image=settings.image.full_name,
            command=[settings.executable],
            working_dir=settings.workspace,
            volumes=[VolumeMount(source=settings.volume_name, target=settings.volume_mount)],
            restart_policy=RestartPolicyCondition.NO,
            privileged=options.privileged,
            options=run_options,
        )

    def launch(self, options: LaunchOptions) -> str:
        """
        Provisions everything and starts a fresh container.

        :param options: Launch options.
        :return: Id of the started container.
        """
        settings = self.settings

        # 1. Image
        self.images.ensure(settings.image)

        # 2. Volume
        self.volumes.ensure(settings.volume_name)

        # 3. Stale container
        self.containers.remove_stale(settings.container_name)

        # 4. GUI or networking
        run_options = self.configurator.configure(options)

        # 5. Start
        spec = self.build_spec(options, run_options)
        return self.containers.start(spec)
