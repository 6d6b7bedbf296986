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
Command Line Interface for so2local.

    so2local docker interactive [--privileged] [--allow-gui]
"""
import click
import logging
import os
from ..errors import LauncherError, PrivilegeError
from ..MANAGERS.session_launcher import SessionLauncher
from ..MODELS.launch_config import LaunchOptions, LauncherSettings
from ..RUNTIME.docker_client import DockerClient
from ..UTILS.logger import LOGGER_NAME, configure_logging

logger = logging.getLogger(LOGGER_NAME)

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])

def _usage_failure(error: click.UsageError) -> click.UsageError:
    """
    Prints the full help for a usage error and makes it exit with status 1.
    """
    if error.ctx is not None:
        click.echo(error.ctx.get_help())
    error.exit_code = 1
    return error

class LauncherCommand(click.Command):
    """
    Command that reports bad options with the help text and exit status 1.
    """
    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            raise _usage_failure(e)

class LauncherGroup(click.Group):
    """
    Group with the same usage error handling, including unknown subcommands.
    """
    command_class = LauncherCommand
    group_class = type

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            raise _usage_failure(e)

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            raise _usage_failure(e)

def _is_root() -> bool:
    return os.geteuid() == 0

def _require_subcommand(ctx):
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(1)

@click.group(cls=LauncherGroup, context_settings=CONTEXT_SETTINGS, invoke_without_command=True)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.option('--env-file', default=None, type=click.Path(dir_okay=False),
              help='File with SO2_* setting overrides (default: ./.env if present)')
@click.pass_context
def cli(ctx, verbose, env_file):
    """
    so2local - launcher for the SO2 assignment container.
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj['env_file'] = env_file
    _require_subcommand(ctx)

@cli.group(invoke_without_command=True)
@click.pass_context
def docker(ctx):
    """Manage the assignment container with docker."""
    _require_subcommand(ctx)

@docker.command()
@click.option('--privileged', is_flag=True,
              help='Run a privileged container. This allows the use of KVM (if available)')
@click.option('--allow-gui', is_flag=True,
              help='Run the container such that it can open GUI apps')
@click.pass_context
def interactive(ctx, privileged, allow_gui):
    """Start a fresh interactive container, replacing any previous one."""
    try:
        if not _is_root():
            raise PrivilegeError("Please run as root (or use sudo)")

        settings = ctx.obj.get('settings') or LauncherSettings.load(env_file=ctx.obj.get('env_file'))
        runtime = ctx.obj.get('runtime') or DockerClient(binary=settings.docker_binary)
        launcher = SessionLauncher(settings, runtime, configurator=ctx.obj.get('configurator'))

        options = LaunchOptions(
            privileged=privileged,
            allow_gui=allow_gui,
            display=os.environ.get('DISPLAY'),
        )
        launcher.launch(options)
    except LauncherError as e:
        logger.critical(str(e))
        ctx.exit(1)

def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})

if __name__ == '__main__':
    main()
