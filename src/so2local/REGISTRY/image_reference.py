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
Image reference handling.
Builds and parses references like 'gitlab.cs.pub.ro:5050/so2/so2-assignments:latest'.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ImageReference:
    """
    A fully qualified image reference: registry host, repository and tag.

    Examples:
        - gitlab.cs.pub.ro:5050/so2/so2-assignments:latest
        - localhost:5000/so2:dev
    """

    registry: str
    repository: str
    tag: str = "latest"

    DEFAULT_TAG = "latest"

    def __post_init__(self):
        for field_name in ("registry", "repository", "tag"):
            if not getattr(self, field_name):
                raise ValueError(f"Image reference is missing its {field_name}")

    @classmethod
    def compose(cls, registry: str, name: str, tag: str = DEFAULT_TAG) -> "ImageReference":
        """
        Build a reference from its three components.

        Args:
            registry: Registry host, optionally with a port.
            name: Repository path inside the registry.
            tag: Image tag.
        """
        return cls(registry=registry.strip("/"), repository=name.strip("/"), tag=tag)

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        """
        Parse a 'registry/repository[:tag]' string.

        The first path component is always the registry; references without
        one are rejected since the launcher never pulls from an implicit
        default registry.

        Args:
            reference: Image reference string.

        Returns:
            Parsed ImageReference object.
        """
        if not reference:
            raise ValueError("Empty image reference")

        tag = cls.DEFAULT_TAG
        last_colon = reference.rfind(":")
        # A colon followed by a slash belongs to the registry port
        if last_colon != -1 and "/" not in reference[last_colon + 1:]:
            tag = reference[last_colon + 1:]
            reference = reference[:last_colon]

        registry, _, repository = reference.partition("/")
        if not repository:
            raise ValueError(f"Image reference '{reference}' has no registry")

        return cls(registry=registry, repository=repository, tag=tag)

    @property
    def full_name(self) -> str:
        """Get full image name with registry and tag."""
        return f"{self.registry}/{self.repository}:{self.tag}"

    def __str__(self) -> str:
        return self.full_name
