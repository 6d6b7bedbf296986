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
Shared fixtures: a recording container runtime and a scripted command runner,
so launches can be checked without docker or an X server.
"""
import logging
import pytest

from so2local.MANAGERS.environment_manager import EnvironmentConfigurator
from so2local.MODELS.launch_config import LauncherSettings
from fakes import FakeRunner, FakeRuntime, LINUX_VERSION, ROUTE_HEADER, XAUTH_ENTRY


@pytest.fixture(autouse=True)
def reset_launcher_logger():
    """Drop handlers installed by the CLI so later tests don't write to closed streams."""
    yield
    logger = logging.getLogger("so2local")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def volume_dir(tmp_path):
    path = tmp_path / "volume" / "_data"
    (path / "tools" / "labs").mkdir(parents=True)
    (path / "README").write_text("so2")
    return path


@pytest.fixture
def settings(tmp_path):
    proc_version = tmp_path / "version"
    proc_version.write_text(LINUX_VERSION)
    route_table = tmp_path / "route"
    route_table.write_text(ROUTE_HEADER)
    return LauncherSettings(
        xauth_path=str(tmp_path / ".docker.xauth"),
        proc_version_path=str(proc_version),
        route_table_path=str(route_table),
    )


@pytest.fixture
def xrunner():
    return FakeRunner(responses={
        ("xauth", "nlist"): (0, XAUTH_ENTRY + "\n"),
    })


@pytest.fixture
def configurator(settings, xrunner):
    return EnvironmentConfigurator(settings, runner=xrunner)


@pytest.fixture
def runtime(volume_dir):
    return FakeRuntime(mountpoint=str(volume_dir))
