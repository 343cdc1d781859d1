"""
ScriptGuard command line entry point.

Evaluates a single guard command on the local node and reports the
result through the exit status: 0 for true, 1 for false, 2 when the
guard could not be evaluated.
"""

import logging
from typing import Dict, Optional, Tuple

import click
from dotenv import load_dotenv
from pydantic import ValidationError

from scriptguard.config.provider import EnvConfigProvider
from scriptguard.logging_config import configure_logging
from scriptguard.modules.api.exceptions import ScriptGuardError
from scriptguard.modules.api.models import Architecture, ExecutionOptions, Node
from scriptguard.modules.executor.script_guard import GuardCommandExecutor
from scriptguard.modules.registry.registry import get_default_registry
from scriptguard.modules.resolver.resolver import GuardStrategyResolver

logger = logging.getLogger("scriptguard.cli")

EXIT_TRUE = 0
EXIT_FALSE = 1
EXIT_ERROR = 2


def _parse_env(pairs: Tuple[str, ...]) -> Optional[Dict[str, str]]:
    if not pairs:
        return None
    environment = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{pair}'", param_hint="--env")
        environment[key] = value
    return environment


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]):
    """Evaluate configuration-management guard commands."""
    load_dotenv()

    try:
        config = EnvConfigProvider().get_guard_config()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_ERROR)

    configure_logging(log_level or config.log_level, config.log_child_output)

    registry = get_default_registry()
    if config.registry_config_path:
        try:
            registry.load_from_yaml(config.registry_config_path)
        except ScriptGuardError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(EXIT_ERROR)

    ctx.obj = {"config": config, "registry": registry}


@cli.command("eval")
@click.argument("command")
@click.option("--interpreter", default="script", show_default=True, help="Guard interpreter")
@click.option("--parent", "parent_name", default="cli", show_default=True, help="Parent resource name")
@click.option("--cwd", default=None, help="Working directory")
@click.option("--user", default=None, help="User to run as")
@click.option("--group", default=None, help="Group to run as")
@click.option("--env", "env", multiple=True, help="Environment variable as KEY=VALUE")
@click.option("--timeout", type=float, default=None, help="Timeout in seconds")
@click.option(
    "--architecture",
    type=click.Choice([a.value for a in Architecture]),
    default=None,
    help="Architecture to evaluate under",
)
@click.pass_context
def evaluate(
    ctx: click.Context,
    command: str,
    interpreter: str,
    parent_name: str,
    cwd: Optional[str],
    user: Optional[str],
    group: Optional[str],
    env: Tuple[str, ...],
    timeout: Optional[float],
    architecture: Optional[str],
):
    """Run COMMAND as a guard and print true or false."""
    config = ctx.obj["config"]
    environment = _parse_env(env)
    node = Node.detect()

    try:
        executor = GuardCommandExecutor.for_interpreter(
            node,
            interpreter,
            parent_name,
            command,
            architecture=Architecture(architecture) if architecture else None,
            resolver=GuardStrategyResolver(ctx.obj["registry"]),
        )
        options = ExecutionOptions(
            user=user,
            cwd=cwd,
            group=group,
            environment=environment,
            timeout=timeout if timeout is not None else config.default_timeout,
        )
        result = executor.run_command(options)
    except (ScriptGuardError, ValidationError) as e:
        logger.error(f"Guard could not be evaluated: {e}")
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_ERROR)

    click.echo("true" if result else "false")
    ctx.exit(EXIT_TRUE if result else EXIT_FALSE)


@cli.command("strategies")
@click.pass_context
def strategies(ctx: click.Context):
    """List the strategies registered for this node."""
    node = Node.detect()
    registry = ctx.obj["registry"]
    entries = registry.entries(node.platform, node.platform_family)

    click.echo(f"Node: {node.name} ({node.platform} {node.platform_version or ''})".rstrip())
    if not entries:
        click.echo("No strategies registered for this platform")
        return
    for entry in entries:
        info = entry.to_dict()
        version = f" {info['version']}" if info["version"] else ""
        click.echo(f"  {info['interpreter']:<20} {info['platform']}{version} -> {info['strategy']}")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
