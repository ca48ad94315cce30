"""CLI entry point for paam-studio."""

import json
from pathlib import Path

import click
import yaml

from paam_studio.compiler.registry import COMPILERS, compile_paam
from paam_studio.errors import GenerationError, PaamError
from paam_studio.generator.paam import PaamGenerator
from paam_studio.log import setup_logging
from paam_studio.model.loader import dump_paam, load_document, load_paam
from paam_studio.model.utils import create_empty
from paam_studio.validation.schema import is_ready_for_generation, validate, validate_references
from paam_studio.verifier.framework import FrameworkAgnosticismVerifier


def _parse_options(pairs: tuple[str, ...]) -> dict:
    """Turn ``key=value`` pairs into compiler options; values are read as YAML scalars."""
    options = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--option")
        options[key.strip().replace("-", "_")] = yaml.safe_load(value)
    return options


@click.group()
@click.option("--log-level", default=None,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
              help="Override the configured log level.")
def main(log_level: str | None):
    """PAAM Studio: compile Platform-Agnostic Application Models into app source."""
    setup_logging(level=log_level.upper() if log_level else None)


@main.command()
@click.argument("name")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output PAAM file (.json, .yaml).")
@click.option("-d", "--description", default="", help="Application description.")
def new(name: str, output: Path, description: str):
    """Create an empty PAAM document."""
    dump_paam(create_empty(name, description), output)
    click.echo(f"Created {output}")


@main.command("validate")
@click.argument("paam_path", type=click.Path(exists=True, path_type=Path))
@click.option("--references/--no-references", default=True, help="Also check cross-references between sections.")
def validate_cmd(paam_path: Path, references: bool):
    """Validate a PAAM document and report whether it is ready to compile."""
    try:
        document = load_document(paam_path)
    except PaamError as e:
        raise click.ClickException(str(e)) from e

    errors = list(validate(document).errors)
    if references and not errors:
        errors += validate_references(document).errors
    if errors:
        for error in errors:
            click.echo(f"  - {error}")
        raise click.ClickException(f"{paam_path} is invalid: {len(errors)} errors")

    click.echo(f"{paam_path} is valid.")
    try:
        readiness = is_ready_for_generation(load_paam(paam_path))
    except PaamError as e:
        raise click.ClickException(str(e)) from e
    if readiness.ready:
        click.echo("Ready for generation.")
    else:
        click.echo("Not ready for generation:")
        for issue in readiness.issues:
            click.echo(f"  - {issue}")


@main.command("compile")
@click.argument("paam_path", type=click.Path(exists=True, path_type=Path))
@click.option("-t", "--target", required=True, type=click.Choice(list(COMPILERS)), help="Compilation target.")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output directory for generated files.")
@click.option("--option", "option_pairs", multiple=True, help="Compiler option as key=value. Repeatable.")
@click.option("--strict", is_flag=True, help="Fail when the document is not ready for generation.")
def compile_cmd(paam_path: Path, target: str, output: Path, option_pairs: tuple[str, ...], strict: bool):
    """Compile a PAAM document for one target and write the files."""
    try:
        paam = load_paam(paam_path)
    except PaamError as e:
        raise click.ClickException(str(e)) from e

    options = _parse_options(option_pairs)
    options["strict"] = strict
    click.echo(f"Compiling {paam.metadata.name} for {target}...")
    result = compile_paam(paam, target, options)

    for warning in result.warnings:
        click.echo(f"  warning: {warning}")
    if not result.success:
        raise click.ClickException("Compilation failed:\n" + "\n".join(f"  - {e}" for e in result.errors))

    root = output.resolve()
    for generated in result.files:
        file_path = (output / generated.path).resolve()
        if root not in file_path.parents:
            raise click.ClickException(f"Refusing to write {generated.path}: outside {output}")

    output.mkdir(parents=True, exist_ok=True)
    for generated in result.files:
        file_path = output / generated.path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(generated.content, encoding="utf-8")
        click.echo(f"  Created {file_path}")

    click.echo(f"Generated {len(result.files)} files in {output}")


@main.command()
@click.argument("paam_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write the report to a file.")
@click.option("--json", "as_json", is_flag=True, help="Print per-target results as JSON instead of the report.")
def verify(paam_path: Path, output: Path | None, as_json: bool):
    """Check that the document compiles across every supported framework."""
    try:
        paam = load_paam(paam_path)
    except PaamError as e:
        raise click.ClickException(str(e)) from e

    outcome = FrameworkAgnosticismVerifier().verify(paam)
    if as_json:
        text = json.dumps([r.model_dump(mode="json") for r in outcome.results], indent=2)
    else:
        text = outcome.report

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        click.echo(f"Report saved to {output}")
    else:
        click.echo(text)


@main.command()
@click.argument("description")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output PAAM file (.json, .yaml).")
@click.option("--name", default=None, help="Application name; the model picks one when omitted.")
@click.option("--model", default=None, help="LLM model to use.")
def generate(description: str, output: Path, name: str | None, model: str | None):
    """Generate a PAAM document from a natural-language description."""
    click.echo("Generating PAAM document...")
    gen = PaamGenerator(model=model)
    try:
        paam = gen.generate(description, name=name)
    except GenerationError as e:
        details = "\n".join(f"  - {error}" for error in e.errors)
        raise click.ClickException(f"{e}\n{details}" if details else str(e)) from e

    dump_paam(paam, output)
    click.echo(f"{paam.metadata.name}: {len(paam.entities)} entities, {len(paam.flows)} flows")
    click.echo(f"PAAM saved to {output}")
