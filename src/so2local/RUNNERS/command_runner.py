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
Execution of external commands (docker, xauth, xhost) with captured output.
"""
import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..errors import CommandError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of a finished command."""

    command: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """
    Runs one external command at a time and waits for it to finish.
    """

    def run(self,
            command: Sequence[str],
            input_text: Optional[str] = None,
            check: bool = True,
            capture: bool = True) -> CommandResult:
        """
        Runs a command to completion.

        Args:
            command (Sequence[str]): Executable and arguments.
            input_text (Optional[str]): Data written to the command's stdin.
            check (bool): Raise CommandError when the command exits non-zero.
            capture (bool): Capture stdout/stderr instead of passing them through
                to the terminal (used for long-running commands such as pulls).

        Returns:
            CommandResult: Exit status and captured output.
        """
        argv = [str(part) for part in command]
        logger.debug("Running command: %s", " ".join(argv))

        try:
            completed = subprocess.run(
                argv,
                input=input_text,
                capture_output=capture,
                text=True,
                errors="replace",
                # Avoid shell=True for security reasons (CWE-78)
                shell=False,
            )
        except OSError as e:
            raise CommandError(f"Failed to start {argv[0]}: {e}") from e

        result = CommandResult(
            command=argv,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        if check and not result.ok:
            detail = result.stderr.strip() or result.stdout.strip()
            message = f"Command '{' '.join(argv)}' exited with status {result.returncode}"
            if detail:
                message = f"{message}: {detail}"
            raise CommandError(message, result)
        return result
