"""CLI entry point for the SSRP client.

    ssrp list-all 255.255.255.255
    ssrp --timeout 5 list 192.168.1.10 SQLEXPRESS
    ssrp dac-port 192.168.1.10 SQLEXPRESS

Output is a single JSON object:
    {"success": bool, "command": str, "data": {...}, "message": str}
"""

import json
import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional

import click

from .config import ClientConfig, load_config, validate_config
from .discovery.client import SSRPClient
from .errors import ArgumentError, EncodingError
from .reporting import JsonReporter

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@dataclass
class CliState:
    """Settings shared by all commands."""
    config: ClientConfig
    pretty: bool = False
    report_path: Optional[str] = None


@click.group()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="YAML config file.")
@click.option("--timeout", type=float, help="Seconds to wait for replies (default: 1).")
@click.option("--hops", type=int, help="Multicast hop limit (default: 1).")
@click.option("--port", type=int, help="Server UDP port (default: 1434).")
@click.option("--encoding", help="Wire codepage (default: cp1252).")
@click.option("-v", "--verbose", count=True, help="Log warnings, -vv for trace.")
@click.option("--pretty", is_flag=True, help="Pretty print output.")
@click.option("--save-report", "report_path", type=click.Path(dir_okay=False),
              help="Also save the report to this file.")
@click.version_option(package_name="ssrp-client")
@click.pass_context
def cli(ctx, config_path, timeout, hops, port, encoding, verbose, pretty, report_path):
    """SQL Server Resolution Protocol client."""
    _setup_logging(verbose)

    try:
        config = load_config(config_path) if config_path else ClientConfig()
    except ValueError as e:
        output_error("config", f"Failed to load config: {e}")
        ctx.exit(1)

    overrides = {
        "timeout": timeout,
        "multicast_hops": hops,
        "port": port,
        "encoding": encoding,
    }
    config = replace(config, **{k: v for k, v in overrides.items() if v is not None})

    validation = validate_config(config)
    if not validation.valid:
        errors_str = "; ".join(f"{e.path}: {e.message}" for e in validation.errors)
        output_error("config", f"Invalid config: {errors_str}")
        ctx.exit(1)
    for warning in validation.warnings:
        logging.getLogger(__name__).warning("%s: %s", warning.path, warning.message)

    ctx.obj = CliState(config=config, pretty=pretty, report_path=report_path)


@cli.command("list-all")
@click.argument("address")
@click.pass_context
def list_all(ctx, address):
    """List instances on the network (IPv4 broadcast or IPv6 multicast ADDRESS)."""
    _execute(ctx, "list-all", address, None,
             lambda client: client.list_all_instances(address))


@cli.command("list")
@click.argument("server")
@click.argument("instance", required=False)
@click.pass_context
def list_server(ctx, server, instance):
    """List instances installed on SERVER, or only INSTANCE."""
    _execute(ctx, "list", server, instance,
             lambda client: client.list_instances(server, instance))


@cli.command("dac-port")
@click.argument("server")
@click.argument("instance")
@click.pass_context
def dac_port(ctx, server, instance):
    """Get the DAC TCP port of INSTANCE on SERVER."""
    _execute(ctx, "dac-port", server, instance,
             lambda client: client.get_dac_port(server, instance))


def _execute(
    ctx: click.Context,
    command: str,
    target: str,
    instance: Optional[str],
    operation: Callable[[SSRPClient], object],
) -> None:
    state: CliState = ctx.obj
    client = SSRPClient(config=state.config)
    reporter = JsonReporter()

    start_time = time.time()
    try:
        result = operation(client)
    except (ArgumentError, EncodingError) as e:
        output_error(command, f"Invalid argument: {e}")
        ctx.exit(1)
    except OSError as e:
        duration_ms = int((time.time() - start_time) * 1000)
        output_error(command, f"Network error: {e}", duration_ms=duration_ms)
        ctx.exit(1)
    duration_ms = int((time.time() - start_time) * 1000)

    report = reporter.generate(
        command=command,
        target=target,
        result=result,
        duration_ms=duration_ms,
        instance=instance,
    )
    if state.report_path:
        reporter.save(report, state.report_path)

    output = reporter.generate_flow_output(report)
    click.echo(reporter.to_json_string(output, pretty=state.pretty))

    if not output["success"]:
        ctx.exit(1)


def output_error(command: str, message: str, **extra) -> None:
    """Output error in the CLI JSON format."""
    output = {
        "success": False,
        "command": command,
        "data": extra or None,
        "message": message,
    }
    click.echo(json.dumps(output, ensure_ascii=False))


def _setup_logging(verbose: int) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.WARNING
    else:
        level = logging.ERROR
    logging.basicConfig(level=level, format=LOG_FORMAT)


def main():
    """Main CLI entry point."""
    cli(prog_name="ssrp")


if __name__ == "__main__":
    main()
