"""Registry publishing."""

from __future__ import annotations

from pubz.config import PublishConfig
from pubz.execution import CommandRunner, ExecutionResult
from pubz.workspace.package import Package


def build_publish_args(config: PublishConfig, registry: str, otp: str | None = None) -> list[str]:
    """Arguments for the publish command."""
    args = [*config.args, "--registry", registry]
    if config.access:
        args.extend(["--access", config.access])
    if otp:
        args.extend(["--otp", otp])
    return args


async def publish_package(
    runner: CommandRunner,
    package: Package,
    config: PublishConfig,
    registry: str,
    otp: str | None = None,
) -> ExecutionResult:
    """Publish one package from its own directory, streaming output."""
    args = build_publish_args(config, registry, otp)
    return await runner.run(config.command, args, package.path, echo=True)
