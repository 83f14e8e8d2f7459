"""Command line interface for inspecting containers.

Usage:
    servicescan --container myapp.bootstrap:container list --filter mail
    servicescan --container myapp.bootstrap:build_container inspect mailer -i --show-hidden-deps
    servicescan --config servicescan.yaml scan

The container target is ``module:attr``. It may name a container object or a
zero-argument callable returning one. It can also be configured through the
``container`` setting or the ``SERVICESCAN_CONTAINER`` environment variable.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any

import click
from loguru import logger

from servicescan.core.adapters import adapt
from servicescan.core.config import ScannerSettings, import_string, load_settings
from servicescan.core.errors import AliasUnresolvedError, ConfigurationError, ServiceLookupError
from servicescan.core.reader import ServiceReader
from servicescan.core.types import (
    HiddenDependencyFinding,
    HiddenDependencyReport,
    ServiceDescriptor,
    ServiceKind,
    is_structured,
    qualified_name,
)

LOG_FORMAT = "<level>{level: <8}</level> | {name}:{line} - {message}"


def configure_logging(level: str) -> None:
    """Route servicescan's log records to stderr at ``level``."""
    logger.remove()
    logger.add(lambda message: click.echo(message, err=True, nl=False), level=level, format=LOG_FORMAT)
    logger.enable("servicescan")


def load_container(target: str) -> Any:
    """Import the container named by ``module:attr``, calling factories."""
    obj = import_string(target)
    if callable(obj) and (inspect.isfunction(obj) or inspect.isclass(obj)):
        obj = obj()
    return adapt(obj)


@dataclass
class CLIState:
    """Settings and container target shared by all commands."""

    settings: ScannerSettings
    container_target: str | None

    def reader(self) -> ServiceReader:
        if not self.container_target:
            raise click.UsageError(
                "No container configured. Pass --container module:attr "
                "or set SERVICESCAN_CONTAINER."
            )
        try:
            container = load_container(self.container_target)
        except ConfigurationError as e:
            raise click.ClickException(str(e)) from e
        return ServiceReader(
            container,
            walker=self.settings.build_walker(),
            scanner=self.settings.build_scanner(),
        )


# Rendering helpers


def title(text: str) -> None:
    click.echo()
    click.secho(text, fg="green", bold=True)
    click.secho("=" * len(text), fg="green")
    click.echo()


def section(text: str) -> None:
    click.echo()
    click.secho(text, fg="yellow", bold=True)
    click.secho("-" * len(text), fg="yellow")


def definition_list(items: dict[str, Any]) -> None:
    width = max((len(key) for key in items), default=0)
    for key, value in items.items():
        click.echo(f"  {click.style(key.ljust(width), fg='cyan')}  {value}")


def table(headers: list[str], rows: list[list[Any]]) -> None:
    cells = [[str(cell) for cell in row] for row in rows]
    widths = [len(header) for header in headers]
    for row in cells:
        widths = [max(width, len(cell)) for width, cell in zip(widths, row)]

    separator = "+" + "+".join("-" * (width + 2) for width in widths) + "+"

    def line(values: list[str]) -> str:
        return "| " + " | ".join(value.ljust(width) for value, width in zip(values, widths)) + " |"

    click.echo(separator)
    click.echo(line(headers))
    click.echo(separator)
    for row in cells:
        click.echo(line(row))
    click.echo(separator)


def success(text: str) -> None:
    click.secho(f"[OK] {text}", fg="green")


def warning(text: str) -> None:
    click.secho(f"[WARNING] {text}", fg="yellow")


def error(text: str) -> None:
    click.secho(f"[ERROR] {text}", fg="red", err=True)


def yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def service_details(descriptor: ServiceDescriptor) -> dict[str, Any]:
    details = {
        "Type": descriptor.kind.value,
        "Class/Value": descriptor.resolved_type,
        "Shared": yes_no(descriptor.is_shared),
    }
    if descriptor.factory_ref:
        details["Factory"] = descriptor.factory_ref
    if descriptor.invokable_class:
        details["Invokable Class"] = descriptor.invokable_class
    if descriptor.aliases:
        details["Aliases"] = ", ".join(descriptor.aliases)
    if descriptor.has_error():
        details["Error"] = descriptor.error
    return details


def findings_table(findings: tuple[HiddenDependencyFinding, ...] | list[HiddenDependencyFinding]) -> None:
    table(
        ["Service", "File", "Line", "Context"],
        [[f.lookup_key, f.source_file, f.line_number, f.context] for f in findings],
    )


def show_report(report: HiddenDependencyReport) -> None:
    if report.has_error():
        error(f"Cannot scan service: {report.error}")
    elif not report.uses_hidden_lookup:
        click.echo("Service does not use hidden dependency lookups.")
    elif not report.findings:
        click.echo("No hidden dependencies found.")
    else:
        findings_table(report.findings)


# Commands


@click.group()
@click.option("--container", "container_target", help="Container to inspect, as module:attr.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="YAML or JSON settings file.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(package_name="servicescan")
@click.pass_context
def cli(ctx: click.Context, container_target: str | None, config_path: str | None, verbose: bool):
    """Inspect dependency-injection containers and find hidden dependencies."""
    try:
        settings = load_settings(config_path)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = CLIState(settings=settings, container_target=container_target or settings.container)


@cli.command("list")
@click.option("-f", "--filter", "name_filter", help="Only services whose name contains TEXT.")
@click.option(
    "-t",
    "--type",
    "kind",
    type=click.Choice([kind.value for kind in ServiceKind]),
    help="Only services of this type.",
)
@click.option("-d", "--detailed", is_flag=True, help="Show detailed information about each service.")
@click.pass_obj
def list_command(state: CLIState, name_filter: str | None, kind: str | None, detailed: bool):
    """List all registered services."""
    reader = state.reader()
    services = reader.list_services(filter=name_filter, type=kind)

    if not services:
        warning("No services found matching the criteria.")
        return

    if detailed:
        title("Detailed Service Information")
        for descriptor in services:
            section(descriptor.name)
            definition_list(service_details(descriptor))
    else:
        title("Registered Services")
        table(
            ["Service Name", "Type", "Class/Value"],
            [[d.name, d.kind.value, d.resolved_type] for d in services],
        )

    click.echo()
    success(f"Found {len(services)} service(s)")


@cli.command("inspect")
@click.argument("service")
@click.option("-i", "--instantiate", is_flag=True, help="Instantiate the service to show its class.")
@click.option("--show-hidden-deps", is_flag=True, help="Scan the service for hidden dependencies.")
@click.pass_obj
def inspect_command(state: CLIState, service: str, instantiate: bool, show_hidden_deps: bool):
    """Inspect a specific service in detail."""
    reader = state.reader()

    descriptor = reader.get_service(service)
    if descriptor is None:
        error(f'Service "{service}" is not registered in the container.')
        raise click.exceptions.Exit(1)

    title(f"Service: {service}")
    details = {"Name": service, "Registered": "Yes"}
    if descriptor.is_alias():
        details["Type"] = "Alias"
        details["Target"] = descriptor.resolved_type
    else:
        details.update(service_details(descriptor))
        details.pop("Aliases", None)
    definition_list(details)

    if descriptor.is_alias():
        try:
            reader.check_alias(service)
        except AliasUnresolvedError as e:
            warning(str(e))

    if instantiate and not descriptor.is_alias():
        section("Service Instance")
        try:
            instance = reader.get_service_instance(service)
        except ServiceLookupError as e:
            error(f"Failed to instantiate service: {e}")
        else:
            show_instance(reader, instance)

    if descriptor.aliases:
        section("Aliases")
        for alias in descriptor.aliases:
            click.echo(f"  * {alias}")

    if show_hidden_deps:
        section("Hidden Dependencies")
        show_report(reader.scan_service(service))


def show_instance(reader: ServiceReader, instance: Any) -> None:
    if not is_structured(instance):
        definition_list({"Type": type(instance).__name__, "Value": repr(instance)})
        return

    methods = sorted(
        name for name, _ in inspect.getmembers(type(instance), callable) if not name.startswith("_")
    )
    definition_list({
        "Class": qualified_name(type(instance)),
        "Methods": ", ".join(methods) or "-",
    })

    chain = reader.walker.chain_for(instance)
    leaf = chain[0]
    info = {
        "Module": type(instance).__module__,
        "Short Name": leaf.short_name,
        "Is Abstract": yes_no(inspect.isabstract(type(instance))),
        "Source File": leaf.source_file or "built-in",
    }
    if leaf.parent is not None:
        info["Parent Class"] = leaf.parent.name
    if leaf.mixins:
        info["Mixins"] = ", ".join(sorted(leaf.mixins))
    info["Hierarchy"] = " -> ".join(t.short_name for t in chain)
    info["Uses Hidden Lookups"] = yes_no(reader.walker.uses_hidden_lookup(chain))

    section("Reflection Information")
    definition_list(info)


@cli.command("scan")
@click.option("-f", "--filter", "name_filter", help="Only services whose name contains TEXT.")
@click.pass_obj
def scan_command(state: CLIState, name_filter: str | None):
    """Scan every service for hidden dependencies."""
    reader = state.reader()
    reports = reader.scan_services(filter=name_filter)

    title("Hidden Dependencies")
    total = 0
    affected = 0
    for report in reports:
        if report.has_error():
            warning(f"{report.service}: {report.error}")
            continue
        if not report.findings:
            continue
        affected += 1
        total += len(report.findings)
        section(report.service)
        findings_table(report.findings)

    click.echo()
    if total:
        success(f"Found {total} hidden dependenc{'y' if total == 1 else 'ies'} in {affected} service(s)")
    else:
        success(f"No hidden dependencies found in {len(reports)} service(s)")


def main() -> None:
    cli(prog_name="servicescan")
