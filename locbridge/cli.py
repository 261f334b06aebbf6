"""Command-line interface for the localization converter."""

import click
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import config
from .errors import FormatError, LocalizationError
from .formats.android_writer import AndroidResources
from .formats.xcstrings_parser import XCStringsParser
from .logging_config import setup_logging
from .models.language_file import LanguageFile, guess_language_code
from .services.catalog_merge_service import CatalogFile, CatalogMergeService, prefer_file
from .services.catalog_stats import find_duplicate_values, get_catalog_stats
from .services.conversion_service import ConversionService
from .validation.catalog_validator import validate_catalog

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Convert between .strings, .xcstrings and Android strings.xml."""
    errors = config.validate()
    if errors:
        console.print("[red]Configuration errors:[/red]")
        for error in errors:
            console.print(f"  - {error}")
        raise click.Abort()

    setup_logging("DEBUG" if verbose else config.log_level, Console(stderr=True))


def _fail(error: LocalizationError, file_name: Optional[str] = None):
    """Print a library error and abort."""
    if file_name and isinstance(error, FormatError):
        error.with_context(file_name=file_name)
    console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False, soft_wrap=True)
    raise click.Abort()


def _parse_lang_overrides(values: Tuple[str, ...]) -> Dict[str, str]:
    overrides = {}
    for value in values:
        name, sep, code = value.partition("=")
        if not sep or not name or not code:
            raise click.BadParameter(f"Expected NAME=CODE, got '{value}'", param_hint="--lang")
        overrides[name] = code
    return overrides


def _read_language_files(paths: Tuple[str, ...], overrides: Dict[str, str]) -> List[LanguageFile]:
    """Read input files and attach a language code to each."""
    files = []
    for path in paths:
        file_path = Path(path)
        lang_code = overrides.get(path) or overrides.get(file_path.name) or guess_language_code(path)
        if not lang_code:
            raise click.BadParameter(
                f"Cannot guess the language of '{path}', pass --lang {file_path.name}=CODE",
                param_hint="FILES",
            )
        files.append(LanguageFile(
            name=path,
            content=file_path.read_text(encoding="utf-8"),
            lang_code=lang_code,
        ))
    return files


def _write_outputs(output_dir: Path, outputs: Dict[str, str]) -> None:
    for relative, content in outputs.items():
        target = output_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        console.print(f"  [green]wrote[/green] {target}")


def _print_renames(android: AndroidResources) -> None:
    if not android.renamed_keys:
        return
    table = Table(title="Renamed Android resource names")
    table.add_column("Key", style="dim", max_width=40)
    table.add_column("Resource name", style="cyan")
    for key, name in android.renamed_keys.items():
        table.add_row(escape(key), name)
    console.print(table)


def _print_warnings(warnings: List[str]) -> None:
    for warning in warnings:
        console.print(f"[yellow]Warning:[/yellow] {escape(warning)}", soft_wrap=True)


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output-dir", "-o",
    "output_dir",
    required=True,
    type=click.Path(file_okay=False),
    help="Directory for Localizable.xcstrings and the Android values-* folders"
)
@click.option(
    "--lang",
    "lang_overrides",
    multiple=True,
    help="Language for a file as NAME=CODE (repeatable); guessed from xx.lproj otherwise"
)
@click.option(
    "--source-language", "-s",
    default=None,
    help="Source language (default: 'en' if present, else the first file's language)"
)
@click.option("--strict/--no-strict", default=None, help="Fail on duplicate languages and conflicts")
@click.option("--no-android", is_flag=True, help="Skip Android output")
def combine(
    files: Tuple[str, ...],
    output_dir: str,
    lang_overrides: Tuple[str, ...],
    source_language: Optional[str],
    strict: Optional[bool],
    no_android: bool,
):
    """Combine per-language .strings/.stringsdict FILES into a String Catalog."""
    language_files = _read_language_files(files, _parse_lang_overrides(lang_overrides))
    for file in language_files:
        console.print(f"[blue]Reading:[/blue] {file.name} [dim]({file.lang_code})[/dim]")

    try:
        result = ConversionService(strict=strict).combine(language_files, source_language)
    except LocalizationError as e:
        _fail(e)

    _print_warnings(result.warnings)
    console.print(
        f"[green]Found:[/green] {len(result.catalog)} keys, "
        f"source language [bold]{result.source_language}[/bold], "
        f"languages {', '.join(result.languages)}"
    )

    out = Path(output_dir)
    outputs = {config.catalog_file_name: result.xcstrings + "\n"}
    if not no_android:
        outputs.update({f"android/{path}": xml for path, xml in result.android.paths().items()})
    _write_outputs(out, outputs)
    _print_renames(result.android)
    console.print("[green]Done![/green]")


@cli.command()
@click.option(
    "--input", "-i",
    "input_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the .xcstrings file"
)
@click.option(
    "--output-dir", "-o",
    "output_dir",
    required=True,
    type=click.Path(file_okay=False),
    help="Directory for the xx.lproj folders and the Android values-* folders"
)
@click.option("--no-android", is_flag=True, help="Skip Android output")
def extract(input_path: str, output_dir: str, no_android: bool):
    """Extract a String Catalog into .strings/.stringsdict files."""
    console.print(f"[blue]Reading:[/blue] {input_path}")
    try:
        result = ConversionService().extract(Path(input_path).read_text(encoding="utf-8"))
    except LocalizationError as e:
        _fail(e, input_path)

    console.print(
        f"[green]Found:[/green] {len(result.catalog)} keys in {len(result.languages)} languages"
    )
    outputs = {f"ios/{path}": content for path, content in result.strings_files.items()}
    if not no_android:
        outputs.update({f"android/{path}": xml for path, xml in result.android.paths().items()})
    _write_outputs(Path(output_dir), outputs)
    _print_renames(result.android)
    console.print("[green]Done![/green]")


@cli.command()
@click.option(
    "--input", "-i",
    "input_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the .xcstrings file to merge into"
)
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    help="Path to the output .xcstrings file (defaults to input path)"
)
@click.option("--lang", "lang_overrides", multiple=True, help="Language for a file as NAME=CODE")
@click.option("--strict/--no-strict", default=None, help="Fail instead of overwriting translations")
def merge(
    input_path: str,
    files: Tuple[str, ...],
    output_path: Optional[str],
    lang_overrides: Tuple[str, ...],
    strict: Optional[bool],
):
    """Merge .strings/.stringsdict FILES into an existing String Catalog."""
    language_files = _read_language_files(files, _parse_lang_overrides(lang_overrides))
    console.print(f"[blue]Reading:[/blue] {input_path}")
    try:
        result = ConversionService(strict=strict).merge_into_catalog(
            Path(input_path).read_text(encoding="utf-8"),
            language_files,
        )
    except LocalizationError as e:
        _fail(e)

    _print_warnings(result.warnings)
    output = Path(output_path or input_path)
    output.write_text(result.xcstrings + "\n", encoding="utf-8")
    console.print(f"[blue]Writing:[/blue] {output}")
    console.print("[green]Done![/green]")


def _input_file(paths: Tuple[str, ...], name: str, param_hint: str) -> str:
    """Match a file given by path or base name against the input files."""
    for path in paths:
        if name == path or name == Path(path).name:
            return path
    raise click.BadParameter(f"'{name}' is not one of the input files", param_hint=param_hint)


def _parse_resolutions(values: Tuple[str, ...], paths: Tuple[str, ...]) -> Dict[str, str]:
    resolutions = {}
    for value in values:
        key, sep, name = value.rpartition("=")
        if not sep or not key or not name:
            raise click.BadParameter(f"Expected KEY=FILE, got '{value}'", param_hint="--resolve")
        resolutions[key] = _input_file(paths, name, "--resolve")
    return resolutions


@cli.command("merge-catalogs")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output", "-o",
    "output_path",
    required=True,
    type=click.Path(dir_okay=False),
    help="Path to the merged .xcstrings file"
)
@click.option(
    "--resolve",
    "resolve_values",
    multiple=True,
    help="Take a conflicting key from one file as KEY=FILE (repeatable)"
)
@click.option("--prefer", default=None, help="Take every conflicting key this file has from it")
@click.option("--strict/--no-strict", default=None, help="Fail on conflicts without a resolution")
def merge_catalogs(
    files: Tuple[str, ...],
    output_path: str,
    resolve_values: Tuple[str, ...],
    prefer: Optional[str],
    strict: Optional[bool],
):
    """Merge several .xcstrings FILES into one String Catalog."""
    catalog_files = []
    for path in files:
        console.print(f"[blue]Reading:[/blue] {path}")
        catalog_files.append(CatalogFile(name=path, content=Path(path).read_text(encoding="utf-8")))

    resolutions: Dict[str, str] = {}
    try:
        if prefer:
            conflicts, _ = CatalogMergeService().analyze(catalog_files)
            resolutions.update(prefer_file(conflicts, _input_file(files, prefer, "--prefer")))
        resolutions.update(_parse_resolutions(resolve_values, files))
        result = ConversionService(strict=strict).merge_catalogs(catalog_files, resolutions)
    except LocalizationError as e:
        _fail(e)

    _print_warnings(result.warnings)
    if result.conflicts:
        table = Table(title="Conflicts")
        table.add_column("Key", style="dim", max_width=40)
        table.add_column("Languages")
        table.add_column("Kept", style="cyan")
        for conflict in result.conflicts:
            kept = resolutions.get(conflict.key, conflict.file_names[-1])
            table.add_row(escape(conflict.key), ", ".join(conflict.languages), escape(kept))
        console.print(table)

    console.print(
        f"[green]Merged:[/green] {len(result.catalog)} keys from {len(result.files)} files "
        f"({result.shared_keys} shared, {len(result.conflicts)} conflicts)"
    )
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(result.xcstrings + "\n", encoding="utf-8")
    console.print(f"[blue]Writing:[/blue] {output}")
    console.print("[green]Done![/green]")


def _load_catalog(input_path: str):
    try:
        catalog, _ = XCStringsParser().parse_string(Path(input_path).read_text(encoding="utf-8"))
    except LocalizationError as e:
        _fail(e, input_path)
    return catalog


@cli.command()
@click.option(
    "--input", "-i",
    "input_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to .xcstrings file"
)
@click.option("--duplicates", is_flag=True, help="Also list values shared by several keys")
def stats(input_path: str, duplicates: bool):
    """Show statistics for an .xcstrings file."""
    catalog = _load_catalog(input_path)
    file_stats = get_catalog_stats(catalog)

    table = Table(title=f"Statistics for {Path(input_path).name}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total strings", str(file_stats["total_keys"]))
    table.add_row("Source language", file_stats["source_language"])
    table.add_row("Plural strings", str(file_stats["plural_keys"]))
    table.add_row("Languages", ", ".join(file_stats["languages"]) or "None")

    for lang, coverage in file_stats["coverage"].items():
        if lang == catalog.source_language:
            continue
        table.add_row(
            f"  {lang} coverage",
            f"{coverage['translated']}/{coverage['total']} ({coverage['percent']:.1f}%)",
        )

    console.print(table)

    if duplicates:
        found = find_duplicate_values(catalog)
        if not found:
            console.print("[green]No duplicate values[/green]")
            return
        dup_table = Table(title="Duplicate values")
        dup_table.add_column("Value", max_width=40)
        dup_table.add_column("Keys", style="dim", max_width=60)
        for duplicate in found:
            dup_table.add_row(escape(duplicate.value), escape(", ".join(duplicate.keys)))
        console.print(dup_table)


@cli.command()
@click.option(
    "--input", "-i",
    "input_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to .xcstrings file"
)
def validate(input_path: str):
    """Check an .xcstrings file for invalid entries and placeholder mismatches."""
    catalog = _load_catalog(input_path)
    issues = validate_catalog(catalog)

    errors = [issue for issue in issues if issue.severity == "error"]
    warnings = [issue for issue in issues if issue.severity != "error"]

    if issues:
        table = Table(show_header=True)
        table.add_column("Key", style="dim", max_width=30)
        table.add_column("Language", width=8)
        table.add_column("Severity", width=8)
        table.add_column("Issue", max_width=60)
        for issue in issues:
            color = "red" if issue.severity == "error" else "yellow"
            table.add_row(
                escape(issue.key or ""),
                issue.language or "",
                f"[{color}]{issue.severity}[/{color}]",
                escape(issue.message),
            )
        console.print(table)

    panel_content = (
        f"[bold]Keys checked:[/bold] {len(catalog)}\n"
        f"[red]Errors:[/red] {len(errors)}\n"
        f"[yellow]Warnings:[/yellow] {len(warnings)}"
    )
    console.print(Panel(panel_content, title="Validation Summary"))

    if errors:
        raise click.exceptions.Exit(1)


if __name__ == "__main__":
    cli()
