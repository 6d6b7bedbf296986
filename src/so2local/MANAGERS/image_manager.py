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
Makes sure the assignment image is available locally.
"""
import logging
from ..REGISTRY.image_reference import ImageReference
from ..RUNTIME.docker_client import ContainerRuntime

logger = logging.getLogger(__name__)

class ImageResolver:
    """
    Pulls an image only when no local copy matches its reference.
    """
    def __init__(self, runtime: ContainerRuntime):
        """
        :param runtime: Container runtime used for the query and the pull.
        """
        self.runtime = runtime

    def ensure(self, image: ImageReference) -> bool:
        """
        Pulls the image if it is not present.

        A failed pull raises CommandError; there is no retry.

        :param image: Fully qualified image reference.
        :return: True if the image had to be pulled.
        """
        if self.runtime.image_exists(image.full_name):
            logger.debug("Image %s already present", image.full_name)
            return False

        logger.info("Pulling image %s...", image.full_name)
        self.runtime.pull_image(image.full_name)
        return True
