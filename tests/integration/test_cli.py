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

import os
import pytest
from click.testing import CliRunner
from so2local.CLI import main as cli_main
from so2local.CLI.main import cli
from so2local.RUNTIME.docker_client import build_run_args
from fakes import FakeRuntime

@pytest.fixture
def as_root(monkeypatch):
    monkeypatch.setattr(cli_main, "_is_root", lambda: True)

@pytest.fixture
def obj(settings, runtime, configurator):
    return {'settings': settings, 'runtime': runtime, 'configurator': configurator}

def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert 'docker' in result.output

def test_cli_short_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['docker', 'interactive', '-h'])
    assert result.exit_code == 0
    assert '--privileged' in result.output
    assert '--allow-gui' in result.output

@pytest.mark.parametrize('args', [
    [],
    ['docker'],
    ['podman'],
    ['docker', 'batch'],
    ['docker', 'interactive', '--gui'],
    ['docker', 'interactive', 'extra'],
    ['docker', 'interactive', '--privileged', '--net'],
])
def test_cli_usage_errors(args, as_root, obj, runtime):
    runner = CliRunner()
    result = runner.invoke(cli, args, obj=obj)
    assert result.exit_code == 1
    assert 'Usage:' in result.output
    assert runtime.calls == []

def test_cli_requires_root(monkeypatch, obj, runtime):
    monkeypatch.setattr(cli_main, "_is_root", lambda: False)
    runner = CliRunner()
    result = runner.invoke(cli, ['docker', 'interactive'], obj=obj)
    assert result.exit_code == 1
    assert '[FATAL] Please run as root (or use sudo)' in result.output
    assert runtime.calls == []

def test_cli_interactive(as_root, obj, runtime):
    runner = CliRunner()
    result = runner.invoke(cli, ['docker', 'interactive'], obj=obj, env={'DISPLAY': None})
    assert result.exit_code == 0, result.output
    assert '[INFO] Pulling image gitlab.cs.pub.ro:5050/so2/so2-assignments:latest...' in result.output
    assert "docker exec -it so2-lab bash" in result.output
    args = build_run_args(runtime.specs[0])
    assert '--cap-add=NET_ADMIN' in args
    assert '--privileged' not in args

def test_cli_interactive_privileged(as_root, obj, runtime):
    runner = CliRunner()
    result = runner.invoke(cli, ['docker', 'interactive', '--privileged'], obj=obj)
    assert result.exit_code == 0, result.output
    assert build_run_args(runtime.specs[0])[0] == '--privileged'

def test_cli_gui_with_display(as_root, obj, runtime, settings):
    runner = CliRunner()
    result = runner.invoke(cli, ['docker', 'interactive', '--allow-gui'], obj=obj,
                           env={'DISPLAY': 'localhost:0.0'})
    assert result.exit_code == 0, result.output
    args = build_run_args(runtime.specs[0])
    assert '--net=host' in args
    assert '--env=DISPLAY=localhost:0.0' in args
    assert f'--env=XAUTHORITY={settings.xauth_path}' in args
    assert f'{settings.xauth_path}:{settings.xauth_path}' in args

def test_cli_gui_without_display(as_root, obj, runtime):
    runner = CliRunner()
    result = runner.invoke(cli, ['docker', 'interactive', '--allow-gui'], obj=obj,
                           env={'DISPLAY': None})
    assert result.exit_code == 1
    assert '[FATAL] DISPLAY is not set. GUI cannot start.' in result.output
    assert 'run_container' not in runtime.call_names()

def test_cli_twice(as_root, obj, runtime):
    runner = CliRunner()
    for _ in range(2):
        result = runner.invoke(cli, ['docker', 'interactive'], obj=obj)
        assert result.exit_code == 0, result.output
    assert 'Removing existing container: so2-lab' in result.output
    assert runtime.containers == ['so2-lab']

def test_cli_pull_failure(as_root, settings, volume_dir, configurator):
    runtime = FakeRuntime(mountpoint=str(volume_dir), pull_fails=True)
    runner = CliRunner()
    result = runner.invoke(cli, ['docker', 'interactive'],
                           obj={'settings': settings, 'runtime': runtime, 'configurator': configurator})
    assert result.exit_code == 1
    assert '[FATAL]' in result.output
    assert runtime.specs == []

def test_cli_bad_settings(as_root, tmp_path, runtime, configurator):
    env_file = tmp_path / 'so2.env'
    env_file.write_text('SO2_TAG=\n')
    runner = CliRunner()
    result = runner.invoke(cli, ['--env-file', str(env_file), 'docker', 'interactive'],
                           obj={'runtime': runtime, 'configurator': configurator})
    assert result.exit_code == 1
    assert 'Invalid launcher settings' in result.output
    assert runtime.calls == []

def test_cli_verbose_logs_debug(as_root, obj, runtime):
    runtime.images.add('gitlab.cs.pub.ro:5050/so2/so2-assignments:latest')
    runner = CliRunner()
    result = runner.invoke(cli, ['-v', 'docker', 'interactive'], obj=obj)
    assert result.exit_code == 0, result.output
    assert '[DEBUG] Image gitlab.cs.pub.ro:5050/so2/so2-assignments:latest already present' in result.output

def test_cli_gui_auth_file_unwritable(as_root, obj, runtime, settings):
    os.mkdir(settings.xauth_path)
    runner = CliRunner()
    result = runner.invoke(cli, ['docker', 'interactive', '--allow-gui'], obj=obj,
                           env={'DISPLAY': 'localhost:0.0'})
    assert result.exit_code == 1
    assert f'[FATAL] Could not create {settings.xauth_path}' in result.output
    assert runtime.specs == []

def test_cli_bad_image_reference(as_root, tmp_path, runtime, configurator, monkeypatch):
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    result = runner.invoke(cli, ['docker', 'interactive'],
                           obj={'runtime': runtime, 'configurator': configurator},
                           env={'SO2_REGISTRY': '/'})
    assert result.exit_code == 1
    assert '[FATAL] Invalid launcher settings' in result.output
    assert runtime.calls == []
