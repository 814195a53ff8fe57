"""
Helpers for the comment at the top of generated files.
"""

from pathlib import Path

import click

PROGRAM_NAME = "cue_jsonschema"


def _display_value(value) -> str:
    # Existing files are shown by name only, so the comment does not
    # depend on where the command was run.
    if isinstance(value, (str, Path)) and Path(str(value)).exists():
        return Path(str(value)).name
    return str(value)


def _option_words(option: click.Option, value) -> list[str]:
    if value == option.default:
        return []
    flag = option.opts[0] if option.opts else f"--{option.name}"
    if option.is_flag:
        return [flag]
    return [flag, _display_value(value)]


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Rebuild the command line of the running subcommand from its Click context.

    Positional arguments come first, in declaration order, followed by the
    options that differ from their defaults. Unset values are left out.

    Args:
        click_command: the subcommand being run

    Returns:
        The command line, or just the program name outside of a Click context
    """
    try:
        params = click.get_current_context().params
    except RuntimeError:
        return PROGRAM_NAME

    words = [PROGRAM_NAME, click_command.name] if click_command.name else [PROGRAM_NAME]
    options: list[str] = []
    for param in click_command.params:
        value = params.get(param.name)
        if not value:
            continue
        if isinstance(param, click.Argument):
            words.append(_display_value(value))
        elif isinstance(param, click.Option):
            options.extend(_option_words(param, value))
    return " ".join(words + options)


def generation_comment(click_command: click.Command, version: str) -> str:
    """Return the comment placed at the top of generated files."""
    return f"Generated by {PROGRAM_NAME} v{version} : {reconstruct_command_line(click_command)}"
