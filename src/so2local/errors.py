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
Exceptions raised by the launcher.

Managers raise these; only the CLI turns them into FATAL log lines and a
non-zero exit status.
"""
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .RUNNERS.command_runner import CommandResult


class LauncherError(Exception):
    """Base class for every error the launcher reports as fatal."""


class PrivilegeError(LauncherError):
    """The launcher was started without superuser rights."""


class ConfigError(LauncherError):
    """A configuration value could not be loaded or validated."""


class DisplayError(LauncherError):
    """GUI mode was requested but no X display address could be resolved."""


class AuthFileError(LauncherError):
    """The X authority file for the container could not be written."""


class CommandError(LauncherError):
    """
    An external command failed to start or exited with a non-zero status.
    """

    def __init__(self, message: str, result: Optional["CommandResult"] = None):
        super().__init__(message)
        self.result = result

