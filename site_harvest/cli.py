#!/usr/bin/env python3
"""
Command line entry point of SiteHarvest.

Commands:
  crawl URL    Crawl a site and store the text of its pages under a project
  pages        List the pages stored for a project (stdout, JSON or HTML)
  purge        Delete stored pages of a project
  config       Show the effective configuration

Common options:
  --config PATH       YAML/JSON settings (default: configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only when omitted)
  --log-format FORMAT logging.Formatter format string

Example:
  site-harvest crawl https://example.com --project demo --limit 20 --pretty
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from jinja2 import TemplateError
from pydantic import ValidationError

from site_harvest import __version__
from site_harvest.config import clamp_page_limit, load_config
from site_harvest.crawler.models import CrawlTarget, InvalidSeedError
from site_harvest.logger import DEFAULT_FORMAT, init_logging
from site_harvest.report.html_report import DEFAULT_TEMPLATE_DIR, render_html
from site_harvest.report.json_report import render_json
from site_harvest.scanner import start_crawl
from site_harvest.store import JsonPageStore, StoreError

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def open_store(cfg) -> JsonPageStore:
    try:
        return JsonPageStore(cfg.store_path)
    except StoreError as e:
        print_error(f'Page store error: {e}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteHarvest, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON settings file.'
)
@click.option(
    '--store', '-s', 'store_path',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Page store JSON file (overrides store_path).'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file path (stderr only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    help='Format string for log records'
)
@click.pass_context
def cli(ctx, config_path, store_path, log_level, log_file, log_format):
    """SiteHarvest command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format,
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        # pydantic.ValidationError is a ValueError
        print_error(f'Failed to load configuration: {e}')
    if store_path is not None:
        cfg = cfg.model_copy(update={'store_path': store_path})
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--project', '-p', 'project_id', required=True, help='Identifier of the owning project')
@click.option(
    '--limit', '-l', 'limit',
    type=int,
    default=None,
    help='Max pages to visit, clamped to 1..50 (overrides page_limit)'
)
@click.option('--timeout', '-t', 'timeout', type=float, default=None, help='Per-request timeout (seconds)')
@click.option('--pretty', is_flag=True, help='Indent the JSON summary')
@click.pass_context
def crawl(ctx, url, project_id, limit, timeout, pretty):
    """Crawl URL and store the visible text of every page."""
    cfg = ctx.obj['config']
    if timeout is not None:
        try:
            cfg = cfg.model_validate({**cfg.model_dump(), 'timeout': timeout})
        except ValidationError as e:
            print_error(f'Invalid timeout: {e}')
    page_limit = clamp_page_limit(limit) if limit is not None else cfg.page_limit
    target = CrawlTarget(seed_url=url, project_id=project_id, page_limit=page_limit)
    store = open_store(cfg)

    try:
        result = asyncio.run(start_crawl(cfg, target, store))
    except InvalidSeedError as e:
        print_error(str(e))

    click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2 if pretty else None))


@cli.command('pages', context_settings=CONTEXT_SETTINGS)
@click.option('--project', '-p', 'project_id', required=True, help='Identifier of the owning project')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save a JSON report to this file'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save an HTML report to this file'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=DEFAULT_TEMPLATE_DIR,
    show_default=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Directory with the Jinja2 template'
)
@click.option('--pretty', is_flag=True, help='Indent JSON printed to stdout')
@click.pass_context
def pages(ctx, project_id, json_output, html_output, template_dir, pretty):
    """List the pages stored for a project, newest first."""
    stored = open_store(ctx.obj['config']).list_pages(project_id)

    if not json_output and not html_output:
        indent = 2 if pretty else None
        click.echo(json.dumps({'pages': [p.to_dict() for p in stored]}, ensure_ascii=False, indent=indent))
        return

    if json_output:
        try:
            saved_json = render_json(stored, json_output)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Failed to save JSON report: {e}')

    if html_output:
        try:
            saved_html = render_html(stored, template_dir, html_output, project_id=project_id)
            click.echo(f'HTML report: {saved_html}')
        except (OSError, TemplateError) as e:
            print_error(f'Failed to save HTML report: {e}')


@cli.command('purge', context_settings=CONTEXT_SETTINGS)
@click.option('--project', '-p', 'project_id', required=True, help='Identifier of the owning project')
@click.option('--url', 'url', default=None, help='Delete only this page')
@click.pass_context
def purge(ctx, project_id, url):
    """Delete stored pages of a project."""
    store = open_store(ctx.obj['config'])
    try:
        removed = store.delete(project_id, url)
    except StoreError as e:
        print_error(f'Page store error: {e}')
    click.echo(f'Deleted {removed} page(s)')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
