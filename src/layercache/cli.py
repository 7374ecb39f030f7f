import click
import functools
import json
import logging
import traceback

from pydantic import ValidationError

from .config import Config
from .cache import CacheManager
from .datacls import CallContext
from .utils import setup_logger, parse_module_levels
from .exceptions import (
    LayerCacheError,
    ConfigurationError,
    CacheError,
)
from . import __version__


def setup_logging(debug: bool, log_levels: str = None, log_file: str = None, config: Config = None):
    """Setup logger with debug and module-level configuration"""
    module_levels = dict(config.logging.levels) if config else {}
    module_levels.update(parse_module_levels(log_levels))
    debug = debug or bool(config and config.logging.debug)
    log_file = log_file or (config.logging.file if config else None)
    setup_logger(debug=debug, module_levels=module_levels or None, log_file=log_file)


def handle_errors(func):
    """Decorator to handle common exceptions"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigurationError as e:
            logging.error(f"Configuration error: {e}")
        except CacheError as e:
            logging.error(f"Cache error: {e}")
        except LayerCacheError as e:
            logging.error(f"An unexpected application error occurred: {e}")
        except ValidationError as e:
            logging.error(f"Invalid layer entry: {e}")
        except FileNotFoundError as e:
            logging.error(f"A required file was not found: {e}")
        ctx = click.get_current_context()
        if ctx.obj.get('debug'):
            traceback.print_exc()
        raise click.Abort()
    return wrapper


def open_cache(ctx: click.Context) -> CacheManager:
    """Build a CacheManager from the group's configuration"""
    return CacheManager.from_config(ctx.obj['config'])


def call_context(timeout: float = None) -> CallContext:
    return CallContext.with_timeout(timeout) if timeout else CallContext()


@handle_errors
def do_manifest_get(ctx: click.Context, key: str, timeout: float):
    with open_cache(ctx) as cache:
        payload, found = cache.fetch_manifest(key, call_context(timeout))
    if not found:
        logging.info(f"Manifest '{key}' is not cached.")
        ctx.exit(1)
    click.echo(payload.decode("utf-8"))


@handle_errors
def do_manifest_put(ctx: click.Context, key: str, source, timeout: float):
    payload = source.read()
    # Manifests are stored opaque, but refuse to cache something that isn't JSON
    try:
        json.loads(payload)
    except ValueError as e:
        logging.error(f"Manifest for '{key}' is not valid JSON: {e}")
        raise click.Abort()
    with open_cache(ctx) as cache:
        cache.store_manifest(key, payload, call_context(timeout))
    logging.info(f"Stored manifest '{key}' ({len(payload)} bytes).")


@handle_errors
def do_layer_get(ctx: click.Context, key: str, timeout: float):
    with open_cache(ctx) as cache:
        entry, found = cache.fetch_layer(key, call_context(timeout))
    if not found:
        logging.info(f"Layer '{key}' is not cached.")
        ctx.exit(1)
    click.echo(entry.model_dump_json(by_alias=True, exclude_none=True, indent=2))


@handle_errors
def do_layer_put(ctx: click.Context, key: str, entry_json: str, timeout: float):
    try:
        entry = json.loads(entry_json)
    except ValueError as e:
        logging.error(f"Layer entry for '{key}' is not valid JSON: {e}")
        raise click.Abort()
    with open_cache(ctx) as cache:
        cache.store_layer(key, entry, call_context(timeout))
    logging.info(f"Stored layer '{key}'.")


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('-l', '--log-levels', help="Comma-separated per-module log levels (e.g., 'cache=DEBUG,fs=INFO')")
@click.option('-f', '--log-file', help='Path to log file')
@click.option('-c', '--config', 'config_file', type=click.Path(dir_okay=False), help='Path to the cache YAML config')
@click.version_option(version=__version__, prog_name='layercache')
@click.pass_context
def cli(ctx, debug, log_levels, log_file, config_file):
    """layercache - inspect and populate a manifest/layer cache

    \b
    Examples:
      layercache -c cache.yml manifest get 3f1c...     Print a cached manifest
      layercache -c cache.yml layer put L1 '{"hash": "deadbeef", "size": 42}'
    """
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug
    try:
        config = Config(config_file) if config_file else Config()
    except ConfigurationError as e:
        setup_logging(debug, log_levels, log_file)
        logging.error(f"Configuration error: {e}")
        raise click.Abort()
    ctx.obj['config'] = config
    setup_logging(debug, log_levels, log_file, config)


@cli.group()
def manifest():
    """Read or write cached manifests"""


@manifest.command('get')
@click.argument('key')
@click.option('-t', '--timeout', type=float, help='Deadline in seconds for durable-store calls')
@click.pass_context
def manifest_get(ctx, key, timeout):
    """Print the manifest cached under KEY"""
    do_manifest_get(ctx, key, timeout)


@manifest.command('put')
@click.argument('key')
@click.argument('source', type=click.File('rb'), default='-')
@click.option('-t', '--timeout', type=float, help='Deadline in seconds for durable-store calls')
@click.pass_context
def manifest_put(ctx, key, source, timeout):
    """Cache the manifest read from SOURCE (default: stdin) under KEY"""
    do_manifest_put(ctx, key, source, timeout)


@cli.group()
def layer():
    """Read or write cached layer entries"""


@layer.command('get')
@click.argument('key')
@click.option('-t', '--timeout', type=float, help='Deadline in seconds for durable-store calls')
@click.pass_context
def layer_get(ctx, key, timeout):
    """Print the layer entry cached under KEY"""
    do_layer_get(ctx, key, timeout)


@layer.command('put')
@click.argument('key')
@click.argument('entry_json')
@click.option('-t', '--timeout', type=float, help='Deadline in seconds for durable-store calls')
@click.pass_context
def layer_put(ctx, key, entry_json, timeout):
    """Cache ENTRY_JSON as the layer entry for KEY"""
    do_layer_put(ctx, key, entry_json, timeout)


@cli.command('show-config')
@click.pass_context
def show_config(ctx):
    """Print the effective configuration"""
    click.echo(ctx.obj['config'].model.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
