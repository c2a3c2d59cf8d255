"""
Concourse Slack Resource CLI

Speaks the Concourse resource protocol: a JSON request on stdin, a JSON
response on stdout, logs on stderr.

Usage:
    concourse-slack [OPTIONS] COMMAND [ARGS]...

Commands:
    check     List versions (always empty)
    in        Fetch a version (no-op)
    out       Send a notification
"""

import json
import logging
import sys

import click
from dotenv import load_dotenv

from src.notify.message import MessageFileError
from src.resource import InRequest, OutRequest, SlackResource

# Load .env file
load_dotenv()


def setup_logging(verbose: bool):
    """Configure logging to output to stderr (stdout carries the response)."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(message)s',  # Simple format for build logs
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def _read_request() -> dict:
    """Read the JSON request Concourse writes to stdin."""
    raw = click.get_text_stream('stdin').read()
    if not raw.strip():
        return {}
    try:
        request = json.loads(raw)
    except ValueError as e:
        raise click.ClickException(f"invalid JSON request on stdin: {e}")
    if not isinstance(request, dict):
        raise click.ClickException("request on stdin must be a JSON object")
    return request


def _write_response(response) -> None:
    click.echo(json.dumps(response))


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Verbose output (show DEBUG logs)')
@click.pass_context
def cli(ctx, verbose):
    """Concourse resource posting build notifications to Slack."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj['resource'] = SlackResource()


@cli.command()
@click.pass_context
def check(ctx):
    """Report available versions (always none)."""
    request = _read_request()
    _write_response(ctx.obj['resource'].check(request.get('source'), request.get('version')))


@cli.command('in')
@click.argument('dest', type=click.Path())
@click.pass_context
def in_(ctx, dest):
    """Fetch a version into DEST (nothing to fetch)."""
    request = _read_request()
    output = ctx.obj['resource'].in_(
        InRequest(
            source=request.get('source'),
            version=request.get('version'),
            params=request.get('params'),
        ),
        dest,
    )
    _write_response(output.to_dict())


@cli.command()
@click.argument('build_dir', type=click.Path())
@click.pass_context
def out(ctx, build_dir):
    """Send a notification; message files are read relative to BUILD_DIR."""
    request = _read_request()
    try:
        output = ctx.obj['resource'].out(
            OutRequest(source=request.get('source'), params=request.get('params')),
            build_dir,
        )
    except MessageFileError as e:
        raise click.ClickException(str(e))
    _write_response(output.to_dict())


if __name__ == '__main__':
    cli()
