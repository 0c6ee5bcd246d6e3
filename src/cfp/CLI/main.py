# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Command Line Interface for CFP.
"""
import logging

import click
import yaml
from pydantic import ValidationError

from ..BUILDERS.build_planner import BuildPlanner
from ..MODELS.containerfile_ast import ParseResult
from ..MODELS.parser_settings import ParserSettings
from ..PARSERS.containerfile_parser import ContainerfileParser
from ..READERS.text_file_reader import InputUnavailable


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Log parser diagnostics to stderr')
@click.option('--encoding', default='utf-8-sig', show_default=True, help='Encoding of the Containerfiles')
@click.option('--strict', is_flag=True, help='Fail on bytes that cannot be decoded')
@click.pass_context
def cli(ctx, verbose, encoding, strict):
    """
    CFP - Containerfile multi-stage target parser.

    Lists the build stages of Containerfiles and checks the references
    between them, without running a container engine.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')
    ctx.ensure_object(dict)
    try:
        settings = ParserSettings(
            encoding=encoding,
            decode_errors='strict' if strict else 'replace',
        )
    except ValidationError as e:
        raise click.BadParameter(e.errors()[0]['msg'], param_hint='--encoding')
    ctx.obj['parser'] = ContainerfileParser(settings)


def _parse(ctx, path: str) -> ParseResult:
    try:
        return ctx.obj['parser'].parse(path)
    except InputUnavailable as e:
        raise click.ClickException(str(e))


@cli.command()
@click.argument('files', nargs=-1, required=True)
@click.pass_context
def targets(ctx, files):
    """List the build stages of each Containerfile."""
    for path in files:
        result = _parse(ctx, path)
        if len(files) > 1:
            click.echo(f"{path}:")
        click.echo(f"{'INDEX':6} {'NAME':20} {'BASE IMAGE':30} DEPENDS ON")
        click.echo("-" * 68)
        for stage in result.targets:
            depends = ", ".join(str(i) for i in sorted(stage.depends_on)) or "-"
            click.echo(f"{stage.index:<6} {stage.name or '-':20} {stage.base_image:30} {depends}")


@cli.command()
@click.argument('file')
@click.option('--format', '-f', 'output_format', type=click.Choice(['json', 'yaml']), default='json')
@click.pass_context
def show(ctx, file, output_format):
    """Print the full parse result."""
    result = _parse(ctx, file)
    if output_format == 'yaml':
        click.echo(yaml.safe_dump(result.to_dict(), sort_keys=False), nl=False)
    else:
        click.echo(result.to_json())


@cli.command()
@click.argument('files', nargs=-1, required=True)
@click.pass_context
def check(ctx, files):
    """Report stage references that do not match an earlier stage."""
    failed = False
    for path in files:
        result = _parse(ctx, path)
        for ref in result.unresolved_references:
            failed = True
            click.echo(f"{path}:{ref.source_line}: stage {ref.stage_index} "
                       f"references unknown stage '{ref.reference}'")
        for name, indices in result.duplicate_names.items():
            click.echo(f"{path}: warning: stage name '{name}' used by stages "
                       f"{', '.join(str(i) for i in indices)}")
        if not result.unresolved_references:
            click.echo(f"{path}: {len(result.targets)} stage(s), all references resolved")
    if failed:
        ctx.exit(1)


@cli.command()
@click.argument('file')
@click.argument('target')
@click.pass_context
def plan(ctx, file, target):
    """Show the stages built for TARGET, in build order."""
    result = _parse(ctx, file)
    try:
        order = BuildPlanner().resolve_order(result, target)
    except ValueError as e:
        raise click.ClickException(str(e))
    for index in order:
        stage = result.targets[index]
        click.echo(f"{index}: {stage.name or '-'} ({stage.base_image})")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
