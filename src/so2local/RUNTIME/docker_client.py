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
Container runtime client.

ContainerRuntime is the capability interface the managers depend on;
DockerClient implements it by calling the docker CLI.
"""
import logging
from typing import List, Optional, Protocol

from ..MODELS.container_spec import ContainerSpec
from ..RUNNERS.command_runner import CommandRunner

logger = logging.getLogger(__name__)


class ContainerRuntime(Protocol):
    """
    Operations the launcher needs from a container runtime.
    """

    def image_exists(self, image: str) -> bool:
        """Check whether an image matching the reference is present locally."""
        ...

    def pull_image(self, image: str) -> None:
        """Pull the exact reference. Raises CommandError on failure."""
        ...

    def volume_exists(self, name: str) -> bool:
        """Check whether a named volume exists."""
        ...

    def create_volume(self, name: str) -> None:
        """Create a named volume."""
        ...

    def volume_mountpoint(self, name: str) -> str:
        """Host path backing a named volume."""
        ...

    def list_containers(self) -> List[str]:
        """Names of all containers, running or stopped."""
        ...

    def remove_container(self, name: str) -> None:
        """Force remove a container, stopping it first if needed."""
        ...

    def run_container(self, spec: ContainerSpec) -> str:
        """Create and start a container, returning its id."""
        ...


def build_run_args(spec: ContainerSpec) -> List[str]:
    """
    Render a container spec as 'docker run' arguments (without 'docker run').

    Args:
        spec: The container to create.

    Returns:
        Argument list, image and command last.
    """
    args: List[str] = []
    if spec.privileged:
        args.append("--privileged")

    flags = ""
    if spec.interactive:
        flags += "i"
    if spec.tty:
        flags += "t"
    if spec.detach:
        flags += "d"
    if flags:
        args.append(f"-{flags}")

    args.extend(["--name", spec.name])
    args.extend(["--restart", spec.restart_policy.value])

    options = spec.options
    if options.network_mode is not None:
        args.append(f"--net={options.network_mode.value}")
    for capability in options.cap_add:
        args.append(f"--cap-add={capability}")
    for device in options.devices:
        args.extend(["--device", device.as_arg()])
    for key, value in options.environment.items():
        args.append(f"--env={key}={value}")
    for mount in options.volumes:
        args.extend(["-v", mount.as_arg()])

    for mount in spec.volumes:
        args.extend(["-v", mount.as_arg()])
    if spec.working_dir:
        args.extend(["--workdir", spec.working_dir])

    args.append(spec.image)
    args.extend(spec.command)
    return args


class DockerClient:
    """
    ContainerRuntime backed by the docker command line tool.
    """

    def __init__(self, runner: Optional[CommandRunner] = None, binary: str = "docker"):
        """
        Args:
            runner: Command runner used for every docker call.
            binary: Name or path of the docker executable.
        """
        self.runner = runner or CommandRunner()
        self.binary = binary

    def _docker(self, *args: str, check: bool = True, capture: bool = True):
        return self.runner.run([self.binary, *args], check=check, capture=capture)

    def image_exists(self, image: str) -> bool:
        result = self._docker("images", "-q", image, check=False)
        return result.ok and bool(result.stdout.strip())

    def pull_image(self, image: str) -> None:
        # Progress output goes straight to the terminal
        self._docker("pull", image, capture=False)

    def volume_exists(self, name: str) -> bool:
        return self._docker("volume", "inspect", name, check=False).ok

    def create_volume(self, name: str) -> None:
        self._docker("volume", "create", name)

    def volume_mountpoint(self, name: str) -> str:
        result = self._docker("volume", "inspect", name, "--format", "{{.Mountpoint}}")
        return result.stdout.strip()

    def list_containers(self) -> List[str]:
        result = self._docker("ps", "-a", "--format", "{{.Names}}")
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def remove_container(self, name: str) -> None:
        self._docker("rm", "-f", name)

    def run_container(self, spec: ContainerSpec) -> str:
        result = self._docker("run", *build_run_args(spec))
        return result.stdout.strip()
