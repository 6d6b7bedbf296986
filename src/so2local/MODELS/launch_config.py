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
Launcher configuration: fixed names and paths, overridable through SO2_*
environment variables or a .env file, plus the per-invocation options.
"""
import os
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values
from pydantic import BaseModel, ValidationError, field_validator, model_validator

from ..errors import ConfigError
from ..REGISTRY.image_reference import ImageReference

ENV_PREFIX = "SO2_"
DEFAULT_ENV_FILE = ".env"


class LauncherSettings(BaseModel):
    """
    Names and paths used for every launch.
    """
    registry: str = "gitlab.cs.pub.ro:5050"
    image_name: str = "so2/so2-assignments"
    tag: str = "latest"

    volume_name: str = "SO2_DOCKER_VOLUME"
    volume_mount: str = "/linux"
    workspace: str = "/linux/tools/labs"

    container_name: str = "so2-lab"
    executable: str = "/bin/bash"

    # X11 forwarding
    xauth_path: str = "/tmp/.docker.xauth"
    display_suffix: str = ":0.0"

    # Host introspection
    proc_version_path: str = "/proc/version"
    route_table_path: str = "/proc/net/route"

    docker_binary: str = "docker"

    @field_validator("*")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @model_validator(mode="after")
    def _valid_image(self) -> "LauncherSettings":
        # Raises ValueError for a reference with an empty component
        self.image
        return self

    @property
    def image(self) -> ImageReference:
        """
        The image reference composed from registry, image name and tag.
        """
        return ImageReference.compose(self.registry, self.image_name, self.tag)

    @classmethod
    def load(cls,
             env_file: Optional[str] = None,
             environ: Optional[Mapping[str, str]] = None) -> "LauncherSettings":
        """
        Builds settings from defaults, then a dotenv file, then the environment.

        :param env_file: Path of the dotenv file. Defaults to ./.env when present.
        :param environ: Environment to read SO2_* overrides from. Defaults to os.environ.
        :return: Validated settings.
        """
        overrides: Dict[str, str] = {}

        path = env_file or DEFAULT_ENV_FILE
        if env_file or os.path.exists(path):
            if not os.path.isfile(path):
                raise ConfigError(f"Settings file {path} not found")
            overrides.update(cls._from_mapping(dotenv_values(path)))

        overrides.update(cls._from_mapping(os.environ if environ is None else environ))

        try:
            return cls(**overrides)
        except ValidationError as e:
            raise ConfigError(f"Invalid launcher settings: {e}") from e

    @classmethod
    def _from_mapping(cls, values: Mapping[str, Optional[str]]) -> Dict[str, str]:
        fields = cls.model_fields
        found = {}
        for key, value in values.items():
            if not key.startswith(ENV_PREFIX) or value is None:
                continue
            name = key[len(ENV_PREFIX):].lower()
            if name in fields:
                found[name] = value
        return found


class LaunchOptions(BaseModel):
    """
    Options of a single 'docker interactive' invocation.
    """
    privileged: bool = False
    allow_gui: bool = False
    # DISPLAY as read once at startup; the process environment is never modified.
    display: Optional[str] = None
