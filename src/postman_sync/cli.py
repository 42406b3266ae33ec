"""CLI entry point for postman-sync."""

import logging
from pathlib import Path

import click

from postman_sync.collection import add_variables, count_requests, override_base_url
from postman_sync.converter import convert_spec
from postman_sync.errors import MalformedInputError, MissingInputError, SyncError
from postman_sync.loader import (
    load_collection,
    load_openapi,
    load_value_map,
    read_json,
    spec_version,
    write_json,
)
from postman_sync.merger.diff import calculate_diff
from postman_sync.merger.merge import merge_collections
from postman_sync.models import ConversionOptions, DiffReport, MergeOptions
from postman_sync.sanitizer.sanitize import Sanitizer


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _build_collection(
    spec_source: str,
    name: str | None,
    folder_strategy: str,
    include_auth: bool,
    base_url: str | None,
    env_file: Path | None,
    values_map: Path | None,
    skip_sanitize: bool,
) -> dict:
    """Load spec -> convert -> customize -> sanitize."""
    click.echo(f"Reading OpenAPI spec from {spec_source}...")
    spec = load_openapi(spec_source)
    click.echo(f"Detected OpenAPI version: {spec_version(spec)}")

    click.echo("Converting OpenAPI spec to Postman collection...")
    options = ConversionOptions(folder_strategy=folder_strategy, include_auth=include_auth)
    collection = convert_spec(spec, options)

    if name:
        collection.setdefault("info", {})["name"] = name
    if base_url:
        override_base_url(collection, base_url)
    if env_file:
        env_vars = read_json(env_file)
        if not isinstance(env_vars, dict):
            raise MalformedInputError(f"Environment file must contain a JSON object: {env_file}")
        add_variables(collection, env_vars)

    if skip_sanitize:
        click.echo("Value sanitization skipped (--skip-sanitize)")
        return collection

    click.echo("Sanitizing generated values with realistic defaults...")
    value_map = load_value_map(values_map) if values_map else None
    if value_map is not None:
        click.echo(f"Loaded custom values map from {values_map}")
    sanitizer = Sanitizer(spec, value_map)
    sanitizer.run(collection)
    click.echo(f"Replaced {sanitizer.stats.replaced} generated values.")
    return collection


def _print_diff(diff: DiffReport, verbose: bool) -> None:
    click.echo("")
    click.echo("=== Merge Summary ===")
    if not diff.has_changes:
        click.echo("No endpoints added or removed.")
    if diff.added:
        click.secho(f"\n+ Added ({len(diff.added)}):", fg="green")
        for entry in diff.added:
            click.secho(f"  + {entry}", fg="green")
    if diff.removed:
        click.secho(f"\n- Removed ({len(diff.removed)}):", fg="red")
        for entry in diff.removed:
            click.secho(f"  - {entry}", fg="red")
    if diff.preserved:
        click.secho(f"\n○ Preserved ({len(diff.preserved)}):", fg="blue")
        if verbose:
            for entry in diff.preserved:
                click.secho(f"  ○ {entry}", fg="blue")
        else:
            click.secho("  (use --verbose to see all)", fg="bright_black")
    click.echo("")


def _merge_with_existing(
    candidate: dict, existing_path: Path, options: MergeOptions, verbose: bool
) -> dict:
    try:
        previous = load_collection(existing_path)
    except MissingInputError:
        click.secho("Existing collection not found. Using new collection as-is.", fg="yellow")
        previous = None
    else:
        click.echo(f"Existing collection: {previous.get('info', {}).get('name', '')}")

    merged = merge_collections(candidate, previous, options)
    _print_diff(calculate_diff(previous, merged), verbose)
    return merged


conversion_options = [
    click.option("-n", "--name", default=None, help="Collection name (defaults to the OpenAPI title)."),
    click.option("--folder-strategy", default="tags", type=click.Choice(["tags", "paths"]), help="Folder organization."),
    click.option("--include-auth/--no-include-auth", default=True, help="Include authentication from security schemes."),
    click.option("--base-url", default=None, help="Override base URL for requests."),
    click.option("--env-file", default=None, type=click.Path(exists=True, path_type=Path), help="JSON file of variables to add to the collection."),
    click.option("--values-map", default=None, type=click.Path(path_type=Path), help="JSON file with realistic value overrides for generated fields."),
    click.option("--skip-sanitize", is_flag=True, default=False, help="Keep the generator's random values."),
]

preserve_options = [
    click.option("--preserve-tests/--no-preserve-tests", default=True, help="Preserve collection-level test scripts."),
    click.option("--preserve-prerequest/--no-preserve-prerequest", default=True, help="Preserve collection-level pre-request scripts."),
    click.option("--preserve-variables/--no-preserve-variables", default=True, help="Preserve collection variables."),
]


def _apply(options):
    def decorator(func):
        for option in reversed(options):
            func = option(func)
        return func
    return decorator


@click.group()
def main():
    """Keep Postman collections in sync with OpenAPI specs."""
    pass


@main.command()
@click.argument("spec_source")
@click.option("-o", "--output", default="postman-collection.json", type=click.Path(path_type=Path), help="Output collection file path.")
@_apply(conversion_options)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable verbose logging.")
def convert(spec_source: str, output: Path, name: str | None, folder_strategy: str, include_auth: bool,
            base_url: str | None, env_file: Path | None, values_map: Path | None, skip_sanitize: bool, verbose: bool):
    """Convert an OpenAPI spec (file or URL) to a Postman collection."""
    _configure_logging(verbose)
    try:
        collection = _build_collection(
            spec_source, name, folder_strategy, include_auth, base_url, env_file, values_map, skip_sanitize
        )
        write_json(output, collection)
    except SyncError as e:
        raise click.ClickException(str(e)) from e

    click.echo("Conversion complete!")
    click.echo(f"  Collection: {collection.get('info', {}).get('name', '')}")
    click.echo(f"  Endpoints: {count_requests(collection.get('item', []))}")
    click.echo(f"  Output: {output}")


@main.command()
@click.argument("collection_path", type=click.Path(path_type=Path))
@click.option("--spec", "spec_source", required=True, help="OpenAPI spec file path or URL.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file (defaults to overwriting the input).")
@click.option("--values-map", default=None, type=click.Path(path_type=Path), help="JSON file with realistic value overrides.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable verbose logging.")
def sanitize(collection_path: Path, spec_source: str, output: Path | None, values_map: Path | None, verbose: bool):
    """Replace generated placeholder values in an existing collection."""
    _configure_logging(verbose)
    try:
        collection = load_collection(collection_path)
        spec = load_openapi(spec_source)
        value_map = load_value_map(values_map) if values_map else None
        sanitizer = Sanitizer(spec, value_map)
        sanitizer.run(collection)
        write_json(output or collection_path, collection)
    except SyncError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Replaced {sanitizer.stats.replaced} generated values "
               f"({sanitizer.stats.unresolved} unresolved) in {output or collection_path}")


@main.command()
@click.option("-n", "--new", "new_path", required=True, type=click.Path(path_type=Path), help="Newly generated collection file path.")
@click.option("-e", "--existing", "existing_path", required=True, type=click.Path(path_type=Path), help="Existing collection file path.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output merged collection file path.")
@_apply(preserve_options)
@click.option("--dry-run", is_flag=True, default=False, help="Show changes without writing output.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable verbose logging.")
def merge(new_path: Path, existing_path: Path, output: Path | None, preserve_tests: bool,
          preserve_prerequest: bool, preserve_variables: bool, dry_run: bool, verbose: bool):
    """Merge a generated collection into an existing one, preserving scripts."""
    _configure_logging(verbose)
    options = MergeOptions(
        preserve_tests=preserve_tests,
        preserve_prerequest=preserve_prerequest,
        preserve_variables=preserve_variables,
    )
    try:
        candidate = load_collection(new_path)
        click.echo(f"New collection: {candidate.get('info', {}).get('name', '')}")
        merged = _merge_with_existing(candidate, existing_path, options, verbose)
        if dry_run:
            click.echo("Dry run - no files written")
            return
        target = output or existing_path
        write_json(target, merged)
    except SyncError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Merged collection written to {target}")


@main.command()
@click.argument("spec_source")
@click.option("-e", "--existing", "existing_path", required=True, type=click.Path(path_type=Path), help="Existing collection file path.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file (defaults to overwriting the existing collection).")
@_apply(conversion_options)
@_apply(preserve_options)
@click.option("--dry-run", is_flag=True, default=False, help="Show changes without writing output.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable verbose logging.")
def sync(spec_source: str, existing_path: Path, output: Path | None, name: str | None, folder_strategy: str,
         include_auth: bool, base_url: str | None, env_file: Path | None, values_map: Path | None,
         skip_sanitize: bool, preserve_tests: bool, preserve_prerequest: bool, preserve_variables: bool,
         dry_run: bool, verbose: bool):
    """Full pipeline: convert spec -> sanitize -> merge into the existing collection."""
    _configure_logging(verbose)
    options = MergeOptions(
        preserve_tests=preserve_tests,
        preserve_prerequest=preserve_prerequest,
        preserve_variables=preserve_variables,
    )
    try:
        # Step 1: Convert + sanitize
        candidate = _build_collection(
            spec_source, name, folder_strategy, include_auth, base_url, env_file, values_map, skip_sanitize
        )
        # Step 2: Merge
        merged = _merge_with_existing(candidate, existing_path, options, verbose)
        if dry_run:
            click.echo("Dry run - no files written")
            return
        target = output or existing_path
        write_json(target, merged)
    except SyncError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Done! {count_requests(merged.get('item', []))} endpoints written to {target}")
