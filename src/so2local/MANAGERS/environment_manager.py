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
Chooses the container's GUI or networking configuration.
"""
import logging
from typing import Optional
from ..MODELS.container_spec import NetworkMode, RunOptions, VolumeMount
from ..MODELS.launch_config import LaunchOptions, LauncherSettings
from ..RUNNERS.command_runner import CommandRunner
from ..X11.display import DisplayResolver
from ..X11.xauth import XAuthority
from .network_manager import NET_ADMIN_CAPABILITY, tun_device

logger = logging.getLogger(__name__)

class EnvironmentConfigurator:
    """
    Produces the extra run options for exactly one of two modes:

    - GUI: host networking, DISPLAY/XAUTHORITY passed in, auth file mounted.
    - Non-GUI: NET_ADMIN and the TUN device, own network namespace.
    """
    def __init__(self,
                 settings: LauncherSettings,
                 runner: Optional[CommandRunner] = None,
                 resolver: Optional[DisplayResolver] = None,
                 xauthority: Optional[XAuthority] = None):
        """
        Initializes the environment configurator.

        :param settings: Launcher settings (auth file path, host introspection paths).
        :param runner: Runner for the X11 helper tools.
        :param resolver: Display resolver; built from settings when omitted.
        :param xauthority: Auth file builder; built from settings when omitted.
        """
        self.settings = settings
        self.resolver = resolver or DisplayResolver(
            proc_version_path=settings.proc_version_path,
            route_table_path=settings.route_table_path,
            display_suffix=settings.display_suffix,
        )
        self.xauthority = xauthority or XAuthority(settings.xauth_path, runner=runner)

    def configure(self, options: LaunchOptions) -> RunOptions:
        """
        Builds the run options for the requested mode.

        :param options: Launch options; allow_gui selects the mode.
        :return: Extra arguments for the container run.
        """
        if options.allow_gui:
            return self.configure_gui(options.display)
        return self.configure_network()

    def configure_gui(self, display: Optional[str]) -> RunOptions:
        """
        Prepares X11 forwarding. Raises DisplayError when no display is known.
        """
        logger.info("Configuring GUI environment...")
        display = self.resolver.resolve(display)

        auth_path = self.xauthority.build(display)
        self.xauthority.grant_local_root()

        return RunOptions(
            network_mode=NetworkMode.HOST,
            environment={"DISPLAY": display, "XAUTHORITY": auth_path},
            volumes=[VolumeMount(source=auth_path, target=auth_path)],
        )

    def configure_network(self) -> RunOptions:
        """
        Allows virtual network interfaces inside the container.
        """
        return RunOptions(
            cap_add=[NET_ADMIN_CAPABILITY],
            devices=tun_device(),
        )
