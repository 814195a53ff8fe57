import json
import logging
import sys
from pathlib import Path

import click

from . import __version__
from .cli_utils import generation_comment
from .cue_ast import CueSerializer, File
from .errors import MultiError
from .jsonschema import ExtractConfig, GenerateConfig, extract, generate
from .jsonschema.version import Version, parse_version
from .values import ExprValue

VERSION_NAMES = [v.cli_name for v in Version if v != Version.UNKNOWN]


def load_extract_config(config: str | None, **overrides) -> ExtractConfig:
    """Build the extraction config from an optional JSON file and command line options."""
    if config is not None:
        with open(config) as f:
            cfg = ExtractConfig.from_dict(json.load(f))
    else:
        cfg = ExtractConfig()
    for k, v in overrides.items():
        # Options left unset keep the value from the config file.
        if v is None or v is False or v == "":
            continue
        if k == "default_version":
            v = parse_version(v)
        setattr(cfg, k, v)
    return cfg


def fail(err: MultiError) -> None:
    for e in err.errors:
        click.echo(str(e), err=True)
    sys.exit(1)


@click.group()
@click.version_option(__version__, prog_name="cue_jsonschema")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log extraction passes and generation steps")
def cue_jsonschema(verbose):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")


extract_options = [
    click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True)),
    click.option("--pkg", "-p", "pkg_name", default="", type=str, help="Package name of the generated CUE file"),
    click.option("--id", "schema_id", default="", type=str, help="Base URI of the schema"),
    click.option("--root", default="", type=str, help="JSON Pointer fragment of the schemas to extract, e.g. #/components/schemas"),
    click.option("--single-root", is_flag=True, default=False, help="Treat the value at --root as a single schema"),
    click.option("--version", "default_version", default=None, type=click.Choice(VERSION_NAMES), help="Version assumed when $schema is absent"),
    click.option("--strict", is_flag=True, default=False, help="Report unknown keywords and unsupported features as errors"),
    click.option("--strict-keywords", is_flag=True, default=False, help="Report unknown keywords as errors"),
    click.option("--strict-features", is_flag=True, default=False, help="Report unsupported features as errors"),
    click.option("--open-only-when-explicit", is_flag=True, default=False, help="Only close structs when additionalProperties is false"),
]


def with_extract_options(f):
    for option in reversed(extract_options):
        f = option(f)
    return f


def extract_file(path, config, **options) -> File:
    with open(path) as f:
        schema = json.load(f)
    cfg = load_extract_config(config, source=Path(path).name, **options)
    try:
        return extract(schema, cfg)
    except MultiError as e:
        fail(e)


@cue_jsonschema.command("extract")
@with_extract_options
@click.argument("path", default=None, type=click.Path(exists=True, resolve_path=True))
@click.argument("output", default=None, required=False, type=click.Path(resolve_path=True))
def extract_command(
    config,
    pkg_name,
    schema_id,
    root,
    single_root,
    default_version,
    strict,
    strict_keywords,
    strict_features,
    open_only_when_explicit,
    path,
    output,
):
    """Translate the JSON Schema at PATH to CUE, writing to OUTPUT or stdout."""
    f = extract_file(
        path,
        config,
        pkg_name=pkg_name,
        id=schema_id,
        root=root,
        single_root=single_root,
        default_version=default_version,
        strict=strict,
        strict_keywords=strict_keywords,
        strict_features=strict_features,
        open_only_when_explicit=open_only_when_explicit,
    )
    out = CueSerializer().serialize(f, generation_comment(extract_command, __version__))
    if output is None:
        click.echo(out, nl=False)
    else:
        with open(output, "w") as fh:
            fh.write(out)


@cue_jsonschema.command("roundtrip")
@with_extract_options
@click.option("--explicit-open", is_flag=True, default=False, help="Keep open structs open in the generated schema")
@click.argument("path", default=None, type=click.Path(exists=True, resolve_path=True))
@click.argument("output", default=None, required=False, type=click.Path(resolve_path=True))
def roundtrip_command(
    config,
    pkg_name,
    schema_id,
    root,
    single_root,
    default_version,
    strict,
    strict_keywords,
    strict_features,
    open_only_when_explicit,
    explicit_open,
    path,
    output,
):
    """Translate the JSON Schema at PATH to CUE and back to JSON Schema 2020-12."""
    f = extract_file(
        path,
        config,
        pkg_name=pkg_name,
        id=schema_id,
        root=root,
        single_root=single_root,
        default_version=default_version,
        strict=strict,
        strict_keywords=strict_keywords,
        strict_features=strict_features,
        open_only_when_explicit=open_only_when_explicit,
    )
    try:
        schema = generate(ExprValue.from_file(f), GenerateConfig(explicit_open=explicit_open))
    except MultiError as e:
        fail(e)
    out = json.dumps(schema, indent=2) + "\n"
    if output is None:
        click.echo(out, nl=False)
    else:
        with open(output, "w") as fh:
            fh.write(out)
