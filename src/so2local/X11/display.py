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
X display address resolution, including the WSL case where the X server
runs on the Windows host and is reached through the default gateway.
"""

import logging
from typing import Optional

from ..errors import DisplayError
from ..MANAGERS.network_manager import default_gateway

logger = logging.getLogger(__name__)

WSL_MARKER = "microsoft"


def is_wsl(proc_version_path: str = "/proc/version") -> bool:
    """
    Detect whether we run under the Windows Subsystem for Linux.

    Args:
        proc_version_path: Kernel version string source.

    Returns:
        True if the kernel version mentions Microsoft.
    """
    try:
        with open(proc_version_path, "r") as f:
            version = f.read()
    except OSError as e:
        logger.debug("Could not read %s: %s", proc_version_path, e)
        return False
    return WSL_MARKER in version.lower()


class DisplayResolver:
    """
    Resolves the X display address the container should connect to.
    """

    def __init__(
        self,
        proc_version_path: str = "/proc/version",
        route_table_path: str = "/proc/net/route",
        display_suffix: str = ":0.0",
    ):
        """
        Args:
            proc_version_path: Used to detect WSL.
            route_table_path: Routing table used to find the Windows host under WSL.
            display_suffix: Display/screen number appended to the gateway address.
        """
        self.proc_version_path = proc_version_path
        self.route_table_path = route_table_path
        self.display_suffix = display_suffix

    def resolve(self, display: Optional[str]) -> str:
        """
        Resolve the display address.

        Under WSL the address is always derived from the default gateway,
        overriding any DISPLAY value that was passed in.

        Args:
            display: DISPLAY value read at startup, possibly None.

        Returns:
            The display address, e.g. 'localhost:0.0' or '172.20.0.1:0.0'.

        Raises:
            DisplayError: If no address can be resolved.
        """
        if is_wsl(self.proc_version_path):
            gateway = default_gateway(self.route_table_path)
            if gateway:
                display = f"{gateway}{self.display_suffix}"
                logger.debug("WSL detected, using display %s", display)
            else:
                logger.debug("WSL detected but no default gateway found")

        if not display:
            raise DisplayError("DISPLAY is not set. GUI cannot start.")
        return display
