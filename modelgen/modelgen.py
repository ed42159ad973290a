import json
import logging
import sys

import click

from .pipeline import GeneratorConfig, ModelGenerator, ModelgenError, OutputMode


@click.command()
@click.option("--output", "-o", required=True, type=click.Path(dir_okay=False), help="Generated module path")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--package", "-p", default=None, type=str, help="Package the generated module belongs to")
@click.option(
    "--import-path",
    "-I",
    multiple=True,
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Directory searched for the modules of TYPE_REFS",
)
@click.option("--force", is_flag=True, default=False, help="Overwrite the output file if it exists")
@click.option("--no-format", is_flag=True, default=False, help="Skip black/ruff formatting")
@click.option("--verbose", "-v", is_flag=True, default=False)
@click.argument("type_refs", nargs=-1, type=str)
def modelgen(output, config, package, import_path, force, no_format, verbose, type_refs):
    """Generate local models for TYPE_REFS, given as package.module:Type."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if config is not None:
        with open(config) as f:
            config = GeneratorConfig.from_dict(json.load(f))
    else:
        config = GeneratorConfig()

    # CLI flags override the config file
    if package is not None:
        config.target_package = package
    if force:
        config.output.mode = OutputMode.FORCE
    if no_format:
        config.formatter.enabled = False

    if not type_refs and not config.mappings:
        raise click.UsageError("Nothing to generate: pass TYPE_REFS or declare mappings in --config")

    for path in reversed(import_path):
        if path not in sys.path:
            sys.path.insert(0, path)

    generator = ModelGenerator(config)
    try:
        for spec in config.mappings:
            builder = generator.register(spec.type).omit(*spec.omit)
            for source_name, target_name in spec.rename.items():
                builder.rename(source_name, target_name)
            builder.build()
        for ref in type_refs:
            generator.map(ref)
        written = generator.write(output)
    except (ModelgenError, FileExistsError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Generated {written}")
