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
X authority handling for containers.

The container's user differs from the host user, so the host's cookie for
the display is copied into a separate, world-readable file with its address
family set to FamilyWild. Any client presenting the cookie is then accepted,
whatever hostname the container reports.
"""
import logging
import os
from typing import List, Optional

from ..errors import AuthFileError, CommandError
from ..RUNNERS.command_runner import CommandRunner

logger = logging.getLogger(__name__)

FAMILY_WILD = "ffff"
AUTH_FILE_MODE = 0o644


def wildcard_entries(nlist_output: str) -> str:
    """
    Rewrites 'xauth nlist' entries so they match any address.

    :param nlist_output: Output of 'xauth nlist DISPLAY'.
    :return: The same entries with the family field replaced by ffff.
    """
    lines: List[str] = []
    for line in nlist_output.splitlines():
        if len(line) < 4:
            continue
        lines.append(FAMILY_WILD + line[4:])
    return "".join(f"{line}\n" for line in lines)


class XAuthority:
    """
    Builds the auth file mounted into the container and opens the X server
    to local root clients.
    """
    def __init__(self, path: str, runner: Optional[CommandRunner] = None,
                 xauth_binary: str = "xauth", xhost_binary: str = "xhost"):
        """
        :param path: Auth file path on the host (and inside the container).
        :param runner: Runner for the xauth/xhost calls.
        """
        self.path = path
        self.runner = runner or CommandRunner()
        self.xauth_binary = xauth_binary
        self.xhost_binary = xhost_binary

    def build(self, display: str) -> str:
        """
        Recreates the auth file with the cookie of the given display.

        :param display: Resolved display address.
        :return: Path of the auth file.
        """
        try:
            if os.path.lexists(self.path):
                os.remove(self.path)
            open(self.path, 'w').close()
        except OSError as e:
            raise AuthFileError(f"Could not create {self.path}: {e}") from e

        try:
            listed = self.runner.run([self.xauth_binary, "nlist", display], check=False)
            if not listed.ok:
                logger.debug("xauth nlist %s failed: %s", display, listed.stderr.strip())
            merged = self.runner.run(
                [self.xauth_binary, "-f", self.path, "nmerge", "-"],
                input_text=wildcard_entries(listed.stdout),
                check=False,
            )
            if not merged.ok:
                logger.debug("xauth nmerge into %s failed: %s", self.path, merged.stderr.strip())
        except CommandError as e:
            logger.warning("Could not copy the X authority cookie: %s", e)

        try:
            os.chmod(self.path, AUTH_FILE_MODE)
        except OSError as e:
            raise AuthFileError(f"Could not change permissions of {self.path}: {e}") from e
        return self.path

    def grant_local_root(self) -> None:
        """
        Runs 'xhost +local:root'. Never raises.
        """
        try:
            result = self.runner.run([self.xhost_binary, "+local:root"], check=False)
        except CommandError as e:
            logger.debug("xhost unavailable: %s", e)
            return
        if not result.ok:
            logger.debug("xhost +local:root failed: %s", result.stderr.strip())
