"""
gradleforge CLI.

Command-line interface for resolving, rendering and importing Android build
configurations. Each resolution failure exits with its own status code.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .core.config import get_config
from .core.exceptions import ConfigError, DeclarationError, GradleForgeError
from .core.logging import bind_context, setup_logging
from .models.build import BuildConfig
from .services.declaration import dump_declaration, load_declaration
from .services.gradle_script import GradleScriptReader
from .services.release_metadata import ReleaseMetadataProvider
from .services.renderer import BuildScriptRenderer
from .services.resolver import ConfigResolver
from .storage import LocalArtifactStore

app = typer.Typer(
    name="gradleforge",
    help="Validate and normalize Android application build configuration",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from . import __version__
        console.print(f"gradleforge v{__version__}")
        raise typer.Exit()


def _report_error(error: GradleForgeError) -> None:
    """Print the error kind, the field involved and the violated constraint."""
    err_console.print(f"[bold red]✗ {type(error).__name__}[/bold red]")
    err_console.print(escape(str(error)))
    if isinstance(error, ConfigError):
        err_console.print(f"  field: {escape(error.field_name)}")
        if error.constraint:
            err_console.print(f"  constraint: {escape(error.constraint)}")
    elif isinstance(error, DeclarationError) and error.field_name:
        err_console.print(f"  field: {escape(error.field_name)}")


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """gradleforge: declarative Android build configuration resolver."""
    pass


@app.command()
def resolve(
    declaration_path: Path = typer.Argument(
        ...,
        help="Declaration file (.json, .yaml or build.gradle.kts)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    version_code: Optional[int] = typer.Option(
        None,
        "--version-code",
        help="versionCode, overrides local.properties and pubspec.yaml",
    ),
    version_name: Optional[str] = typer.Option(
        None,
        "--version-name",
        help="versionName, overrides local.properties and pubspec.yaml",
    ),
    pubspec: Optional[Path] = typer.Option(
        None,
        "--pubspec",
        help="pubspec.yaml to read the release version from",
        exists=True,
        dir_okay=False,
    ),
    local_properties: Optional[Path] = typer.Option(
        None,
        "--local-properties",
        help="local.properties holding flutter.versionCode/flutter.versionName",
        exists=True,
        dir_okay=False,
    ),
    discover: bool = typer.Option(
        True,
        "--discover/--no-discover",
        help="Look for local.properties and pubspec.yaml next to the declaration",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write build-config.json and build.gradle.kts here instead of printing JSON",
    ),
    write: bool = typer.Option(
        False,
        "--write",
        "-w",
        help="Write artifacts to the configured output path (GF_OUTPUT_PATH)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging",
    ),
) -> None:
    """Resolve a declaration into a validated build configuration.

    Prints the configuration as JSON, or writes it (with the rendered build
    script) to the output directory.
    """
    config = get_config()
    if verbose:
        config.log_level = "DEBUG"
    setup_logging(config)
    bind_context(declaration=declaration_path.name)

    try:
        declaration = load_declaration(declaration_path, config.gradle)

        if pubspec is not None or local_properties is not None or not discover:
            provider = ReleaseMetadataProvider(local_properties=local_properties, pubspec=pubspec)
        else:
            provider = ReleaseMetadataProvider.discover(declaration_path.parent, declaration.source_root)
        version_info = provider.load(version_code=version_code, version_name=version_name)

        build_config = ConfigResolver(config.resolver).resolve(declaration, version_info)
    except GradleForgeError as e:
        _report_error(e)
        raise typer.Exit(e.exit_code)

    target_dir = output_dir or (config.output.base_path if write else None)
    if target_dir is None:
        typer.echo(build_config.to_json(indent=config.output.indent or None))
        return

    script = BuildScriptRenderer(config.gradle).render(build_config)

    async def write_artifacts() -> list[Path | None]:
        store = LocalArtifactStore(target_dir, indent=config.output.indent)
        source = {"declaration": str(declaration_path)}
        config_key = await store.store_model(config.output.config_file_name, build_config, source)
        script_key = await store.store_text(config.output.script_file_name, script, source)
        return [store.get_local_path(config_key), store.get_local_path(script_key)]

    written = asyncio.run(write_artifacts())

    console.print("\n[bold green]✓ Build configuration resolved[/bold green]\n")
    table = Table(title="Build Configuration")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Application ID", build_config.application_id)
    table.add_row("Namespace", build_config.namespace)
    table.add_row("Version", f"{build_config.version_name} ({build_config.version_code})")
    table.add_row("SDK (min/target/compile)", "/".join(str(level) for level in build_config.sdk_range))
    table.add_row("Language Level", build_config.language_compatibility.source)
    table.add_row("NDK", build_config.native_toolchain_version)
    table.add_row(
        "Signing",
        ", ".join(f"{v} → {c}" for v, c in build_config.signing_assignment.items()) or "None",
    )
    table.add_row("Forced Dependencies", ", ".join(build_config.forced_notations) or "None")
    console.print(table)

    for path in written:
        console.print(f"[bold]Wrote:[/bold] {path}")


@app.command()
def render(
    config_path: Path = typer.Argument(
        ...,
        help="Resolved build-config.json",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
) -> None:
    """Render a resolved configuration as build.gradle.kts."""
    config = get_config()
    setup_logging(config)

    try:
        build_config = BuildConfig.from_json(config_path.read_text(encoding="utf-8"))
    except PydanticValidationError as e:
        error = DeclarationError(message="Not a resolved build configuration", source=str(config_path), cause=e)
        _report_error(error)
        raise typer.Exit(error.exit_code)

    typer.echo(BuildScriptRenderer(config.gradle).render(build_config), nl=False)


@app.command("import-gradle")
def import_gradle(
    script_path: Path = typer.Argument(
        ...,
        help="App module build.gradle.kts",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    fmt: str = typer.Option(
        "json",
        "--format",
        "-f",
        help="Output format: json or yaml",
    ),
) -> None:
    """Convert a build.gradle.kts into a declaration document."""
    config = get_config()
    setup_logging(config)

    if fmt not in ("json", "yaml"):
        err_console.print(f"[red]Unknown format: {escape(fmt)}[/red]")
        raise typer.Exit(DeclarationError.exit_code)

    try:
        declaration = GradleScriptReader(config.gradle).read_file(script_path)
    except GradleForgeError as e:
        _report_error(e)
        raise typer.Exit(e.exit_code)

    typer.echo(dump_declaration(declaration, fmt), nl=fmt == "json")


@app.command("config")
def show_config() -> None:
    """Show current configuration."""
    cfg = get_config()

    table = Table(title="Current Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Log Level", cfg.log_level)
    table.add_row("Required Plugins", ", ".join(cfg.resolver.required_plugins) or "None")
    table.add_row(
        "Plugin Aliases",
        ", ".join(f"{k} = {v}" for k, v in cfg.resolver.plugin_aliases.items()) or "None",
    )
    for key, value in cfg.gradle.flutter_defaults.items():
        table.add_row(f"flutter.{key}", value)
    table.add_row("Implicit Signing Configs", ", ".join(cfg.gradle.implicit_signing_configs))
    table.add_row("Output Path", str(cfg.output.base_path))

    console.print(table)

    console.print("\n[dim]Configure via environment variables:[/dim]")
    console.print("  GF_LOG_LEVEL, GF_REQUIRED_PLUGINS, GF_OUTPUT_PATH")
    console.print("  GF_FLUTTER_COMPILE_SDK, GF_FLUTTER_TARGET_SDK, GF_FLUTTER_MIN_SDK, GF_FLUTTER_NDK_VERSION")


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
