"""pacconf Command Line Interface.

Entry point for the pacconf CLI tool.
"""

import json
from pathlib import Path
from typing import Any, NoReturn

import typer
from pydantic import ValidationError

from pacconf import __version__
from pacconf.contracts.enums import LogFormat, ValidationPolicy
from pacconf.contracts.errors import (
    PacconfError,
    SchemaValidationError,
    TypeMismatchError,
    VersionIncompatibleError,
    format_error,
)
from pacconf.core.canonical import CANONICAL_VERSION
from pacconf.core.config import PacconfSettings, StoreSettings, load_settings
from pacconf.core.embedding import extract_payload
from pacconf.core.logging import configure_logging
from pacconf.core.merge import find_conflicts
from pacconf.core.storage import FilesystemOverlayStorage
from pacconf.core.store import ConfigStore
from pacconf.plugins.descriptor import PluginDescriptor

app = typer.Typer(
    name="pacconf",
    help="pacconf: layered, schema-checked configuration for PAC scripts.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pacconf version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings file (YAML, TOML or JSON).",
    ),
    log_json: bool = typer.Option(
        False,
        "--log-json",
        help="Emit log events as JSON lines.",
    ),
) -> None:
    """pacconf: layered, schema-checked configuration for PAC scripts."""
    if settings is None:
        loaded = PacconfSettings()
    else:
        try:
            loaded = load_settings(Path(settings))
        except FileNotFoundError:
            typer.echo(f"Error: Settings file not found: {settings}", err=True)
            raise typer.Exit(1) from None
        except ValidationError as e:
            typer.echo("Settings errors:", err=True)
            for error in e.errors():
                loc = ".".join(str(x) for x in error["loc"])
                typer.echo(f"  - {loc}: {error['msg']}", err=True)
            raise typer.Exit(1) from None

    configure_logging(
        loaded.logging.level,
        json_output=log_json or loaded.logging.format is LogFormat.JSON,
    )
    ctx.obj = loaded


# === Loading helpers ===


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        typer.echo(f"Error: {what} not found: {path}", err=True)
        raise typer.Exit(1) from None
    except json.JSONDecodeError as e:
        typer.echo(f"Error: {what} {path} is not valid JSON: {e}", err=True)
        raise typer.Exit(1) from None


def _load_default(path: Path, settings: PacconfSettings, from_script: bool) -> Any:
    if not from_script:
        return _read_json(path, "Default file")
    try:
        script = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        typer.echo(f"Error: Script not found: {path}", err=True)
        raise typer.Exit(1) from None
    return extract_payload(
        script,
        settings.embedding.start_marker,
        settings.embedding.end_marker,
    )


def _load_plugins(paths: list[Path] | None) -> list[PluginDescriptor]:
    return [
        PluginDescriptor.from_dict(_read_json(path, "Plugin file"))
        for path in paths or []
    ]


def _failure_document(e: Exception) -> dict[str, Any]:
    """Machine-readable failure report for ``--json`` output."""
    violations = e.errors if isinstance(e, SchemaValidationError) else []
    if isinstance(e, VersionIncompatibleError):
        errors = [str(mismatch) for mismatch in e.mismatches]
    elif isinstance(e, SchemaValidationError):
        errors = []
    else:
        errors = [format_error(e)]
    return {
        "valid": False,
        "violations": [violation.to_dict() for violation in violations],
        "errors": errors,
    }


def _report(e: PacconfError, heading: str, *, as_json: bool = False) -> NoReturn:
    """Print every detail an error carries, then exit 1."""
    if as_json:
        typer.echo(json.dumps(_failure_document(e), indent=2))
    elif isinstance(e, SchemaValidationError):
        typer.echo(f"{heading}:", err=True)
        for violation in e.errors:
            typer.echo(f"  - {violation}", err=True)
    elif isinstance(e, VersionIncompatibleError):
        typer.echo(f"{heading}:", err=True)
        for mismatch in e.mismatches:
            typer.echo(f"  - {mismatch}", err=True)
    else:
        typer.echo(f"{heading}: {format_error(e)}", err=True)
    raise typer.Exit(1)


def _build_store(
    settings: PacconfSettings,
    default: Path,
    plugins: list[Path] | None,
    from_script: bool,
    store_settings: StoreSettings | None = None,
    *,
    as_json: bool = False,
) -> ConfigStore:
    try:
        default_tree = _load_default(default, settings, from_script)
        descriptors = _load_plugins(plugins)
        return ConfigStore.initialize(
            default_tree,
            descriptors,
            settings=store_settings or settings.store,
        )
    except PacconfError as e:
        _report(e, "Default configuration errors", as_json=as_json)
    except TypeError as e:
        if as_json:
            typer.echo(json.dumps(_failure_document(e), indent=2))
        else:
            typer.echo(f"Default configuration errors: {e}", err=True)
    raise typer.Exit(1)


def _load_overlay(store: ConfigStore, custom: Path | None) -> None:
    if custom is None:
        return
    try:
        store.load_custom(FilesystemOverlayStorage(custom).load())
    except (ValueError, TypeError) as e:
        typer.echo(f"Error: Custom overlay {custom}: {e}", err=True)
        raise typer.Exit(1) from None


# === Commands ===

DEFAULT_OPTION = typer.Option(..., "--default", "-d", help="Default configuration (JSON).")
CUSTOM_OPTION = typer.Option(None, "--custom", "-c", help="Custom overlay (JSON).")
PLUGIN_OPTION = typer.Option(None, "--plugin", "-p", help="Plugin descriptor (JSON). Repeatable.")
SCRIPT_OPTION = typer.Option(
    False,
    "--script",
    help="Read the default from the payload embedded in a host script.",
)


@app.command()
def validate(
    ctx: typer.Context,
    default: Path = DEFAULT_OPTION,
    custom: Path | None = CUSTOM_OPTION,
    plugin: list[Path] | None = PLUGIN_OPTION,
    script: bool = SCRIPT_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the result as a JSON document."),
) -> None:
    """Validate the default tree and, if given, the overlay merged onto it."""
    settings: PacconfSettings = ctx.obj
    store = _build_store(settings, default, plugin, script, as_json=as_json)
    _load_overlay(store, custom)

    try:
        store.get()
    except TypeMismatchError:
        # merge stops at the first mismatch; list all of them
        conflicts = find_conflicts(store.default_tree(), store.custom_tree())
        if as_json:
            document = {
                "valid": False,
                "violations": [],
                "errors": [format_error(conflict) for conflict in conflicts],
            }
            typer.echo(json.dumps(document, indent=2))
        else:
            typer.echo("Merged configuration errors:", err=True)
            for conflict in conflicts:
                typer.echo(f"  - {format_error(conflict)}", err=True)
        raise typer.Exit(1) from None
    except PacconfError as e:
        _report(e, "Merged configuration errors", as_json=as_json)

    if as_json:
        document = {
            "valid": True,
            "default": default.name,
            "plugins": store.registry.names(),
            "fingerprint": store.fingerprint(),
            "canonicalVersion": CANONICAL_VERSION,
        }
        typer.echo(json.dumps(document, indent=2))
        return

    typer.echo(f"Configuration valid: {default.name}")
    typer.echo(f"  Plugins: {', '.join(store.registry.names())}")
    typer.echo(f"  Fingerprint: {store.fingerprint()} ({CANONICAL_VERSION})")


@app.command()
def get(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Dotted path, e.g. proxies.exceptions."),
    default: Path = DEFAULT_OPTION,
    custom: Path | None = CUSTOM_OPTION,
    plugin: list[Path] | None = PLUGIN_OPTION,
    script: bool = SCRIPT_OPTION,
    strict: bool = typer.Option(False, "--strict", help="Fail if the path is absent."),
) -> None:
    """Print the merged value at PATH as JSON."""
    settings: PacconfSettings = ctx.obj
    store = _build_store(settings, default, plugin, script)
    _load_overlay(store, custom)

    try:
        value = store.get(path, strict=strict)
    except PacconfError as e:
        _report(e, "Error")
    typer.echo(json.dumps(value, indent=2, ensure_ascii=False))


def _reject_constant(name: str) -> NoReturn:
    raise ValueError(f"{name} is not valid JSON")


def _parse_value(raw: str) -> Any:
    """JSON if it parses, otherwise the raw string.

    NaN and Infinity are not JSON, so they are taken as plain words.
    """
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except ValueError:
        return raw


@app.command("set")
def set_value(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Dotted path to assign."),
    value: str = typer.Argument(..., help="JSON value (bare words are strings)."),
    default: Path = DEFAULT_OPTION,
    custom: Path = typer.Option(..., "--custom", "-c", help="Custom overlay file to update."),
    plugin: list[Path] | None = PLUGIN_OPTION,
    script: bool = SCRIPT_OPTION,
) -> None:
    """Assign VALUE at PATH in the overlay and save it if the result validates.

    The overlay file is left untouched when validation fails.
    """
    settings: PacconfSettings = ctx.obj
    store = _build_store(
        settings,
        default,
        plugin,
        script,
        store_settings=StoreSettings(validation_policy=ValidationPolicy.EAGER),
    )

    storage = FilesystemOverlayStorage(custom)
    try:
        store.load_custom(storage.load())
    except (ValueError, TypeError) as e:
        typer.echo(f"Error: Custom overlay {custom}: {e}", err=True)
        raise typer.Exit(1) from None
    except PacconfError as e:
        _report(e, "Existing overlay errors")

    try:
        store.set(path, _parse_value(value))
    except PacconfError as e:
        _report(e, f"Rejected {path}")

    storage.save(store.custom_tree())
    typer.echo(f"Set {path} in {custom}")


# Plugins subcommand group
plugins_app = typer.Typer(help="Plugin commands.")
app.add_typer(plugins_app, name="plugins")


@plugins_app.command("list")
def plugins_list(
    plugin: list[Path] | None = PLUGIN_OPTION,
) -> None:
    """List the registry: the built-in entry plus any given descriptors."""
    from pacconf.plugins.registry import PluginRegistry

    registry = PluginRegistry()
    try:
        for descriptor in _load_plugins(plugin):
            registry.register(descriptor)
    except PacconfError as e:
        _report(e, "Plugin errors")

    for descriptor in registry.descriptors():
        flag = "required" if descriptor.required else "optional"
        typer.echo(f"  {descriptor.name:16} {descriptor.version:12} {flag}")


if __name__ == "__main__":
    app()
