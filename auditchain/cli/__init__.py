"""
AuditChain CLI Tool

This module provides a command-line interface for running the block controller
and inspecting its output. It can run the periodic block scheduler against a
JSON-lines spool file or a Redis list, show the persisted chain state, and verify
the hash chain of a directory of sealed blocks.
"""

import json
import logging
import zlib

import click
import redis

from auditchain import __version__
from auditchain.adapters.sinks.directory_sink import DirectoryBlockSink
from auditchain.adapters.sources.queue_source import QueueEventSource
from auditchain.adapters.sources.redis_source import RedisListEventSource
from auditchain.adapters.storage import create_state_store
from auditchain.config.settings import STATE_BACKENDS, BlockConfig, get_settings, resolve_timezone
from auditchain.core.controller import BlockController
from auditchain.core.exceptions import AuditChainError
from auditchain.core.linker import GENESIS_HASH, parse_block, verify_chain
from auditchain.core.state import ChainState
from auditchain.runtime.scheduler import BlockScheduler

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(__version__, prog_name="auditchain")
@click.option('--state-backend', type=click.Choice(STATE_BACKENDS), default=None,
              help='Chain state backend (defaults to settings)')
@click.option('--state-file', default=None, help='State file for the file backend')
@click.option('--scope', default=None, help='Chain state scope')
@click.option('--log-level', default=None, help='Logging level')
@click.pass_context
def cli(ctx, state_backend, state_file, scope, log_level):
    """AuditChain - seal audit events into hash-chained blocks"""
    settings = get_settings()
    logging.basicConfig(level=(log_level or settings.LOG_LEVEL).upper(), format=settings.LOG_FORMAT)

    storage_config = settings.get_storage_config()
    if state_backend:
        storage_config["backend"] = state_backend
    if state_file:
        storage_config["state_file"] = state_file
    if scope:
        storage_config["scope"] = scope

    ctx.ensure_object(dict)
    ctx.obj['settings'] = settings
    ctx.obj['storage_config'] = storage_config


def _open_store(ctx):
    try:
        return create_state_store(ctx.obj['storage_config'])
    except (AuditChainError, redis.RedisError) as e:
        raise click.ClickException(f"Cannot open chain state store: {e}")


@cli.command()
@click.option('--events', 'events_file', type=click.Path(exists=True, dir_okay=False),
              help='JSON-lines file with one event attribute map per line')
@click.option('--redis-events', is_flag=True, help='Drain events from the configured Redis list')
@click.option('--output-dir', default=None, help='Directory receiving block files')
@click.option('--interval', type=int, default=None, help='Minutes between blocks')
@click.option('--blocksize', type=int, default=None, help='Pending events that force a block')
@click.option('--timezone', 'timezone_name', default=None, help='Time zone for block timestamps')
@click.option('--once', is_flag=True, help='Run a single invocation')
@click.option('--cycles', type=int, default=None, help='Stop after this many invocations')
@click.option('--period', type=float, default=None, help='Seconds between invocations')
@click.option('--compare-and-set', is_flag=True, help='Refuse to overwrite state changed by another writer')
@click.option('--halt-on-error', is_flag=True, help='Stop at the first failed invocation')
@click.pass_context
def run(ctx, events_file, redis_events, output_dir, interval, blocksize, timezone_name,
        once, cycles, period, compare_and_set, halt_on_error):
    """Run the block scheduler"""
    settings = ctx.obj['settings']

    try:
        config = BlockConfig(
            interval_minutes=interval if interval is not None else settings.BLOCK_INTERVAL_MINUTES,
            block_size=blocksize if blocksize is not None else settings.BLOCK_SIZE,
            timezone=resolve_timezone(timezone_name or settings.TIMEZONE)
        )
    except AuditChainError as e:
        raise click.BadParameter(str(e))

    if events_file and redis_events:
        raise click.UsageError("Use either --events or --redis-events, not both")

    store = None
    try:
        if events_file:
            source = QueueEventSource.from_jsonl(events_file)
        elif redis_events:
            client = redis.Redis(host=settings.REDIS_HOST, port=settings.REDIS_PORT,
                                 db=settings.REDIS_DB, decode_responses=True)
            source = RedisListEventSource(client, key=settings.REDIS_EVENTS_KEY)
        else:
            raise click.UsageError("An event source is required: --events FILE or --redis-events")

        store = _open_store(ctx)
        sink = DirectoryBlockSink(output_dir or settings.OUTPUT_DIR)
        controller = BlockController(store, sink, use_compare_and_set=compare_and_set)
        scheduler = BlockScheduler(
            controller,
            source,
            config,
            period_seconds=period if period is not None else settings.SCHEDULER_PERIOD_SECONDS,
            halt_on_error=halt_on_error
        )
        stats = scheduler.run(max_cycles=1 if once else cycles)
    except AuditChainError as e:
        raise click.ClickException(str(e))
    except KeyboardInterrupt:
        click.echo("Interrupted")
        return
    finally:
        if store is not None:
            store.close()

    click.echo(json.dumps(stats.to_dict(), indent=2))
    if stats.failures:
        ctx.exit(1)


@cli.command()
@click.pass_context
def state(ctx):
    """Show the persisted chain state"""
    store = _open_store(ctx)
    try:
        chain_state = ChainState.from_map(store.get())
    except AuditChainError as e:
        raise click.ClickException(str(e))
    finally:
        store.close()

    click.echo(json.dumps(chain_state.to_map(), indent=2))


@cli.command()
@click.argument('directory', type=click.Path(exists=True, file_okay=False))
@click.option('--check-state', is_flag=True, help='Also compare the chain head with the persisted state')
@click.pass_context
def verify(ctx, directory, check_state):
    """Verify the hash chain of the blocks in DIRECTORY"""
    try:
        blocks = DirectoryBlockSink(directory).read_blocks()
    except (OSError, EOFError, zlib.error) as e:
        raise click.ClickException(f"Cannot read blocks: {e}")

    report = verify_chain(blocks).to_dict()

    if report["valid"] and check_state:
        store = _open_store(ctx)
        try:
            chain_state = ChainState.from_map(store.get())
        except AuditChainError as e:
            raise click.ClickException(str(e))
        finally:
            store.close()

        head_hash = parse_block(blocks[-1]).content_hash if blocks else GENESIS_HASH
        if chain_state.block_number != len(blocks) or chain_state.last_hash != head_hash:
            report["valid"] = False
            report["error"] = (
                f"Persisted state (block {chain_state.block_number}) does not match "
                f"chain head (block {len(blocks)})"
            )

    click.echo(json.dumps(report, indent=2))
    if not report["valid"]:
        ctx.exit(1)


if __name__ == '__main__':
    cli()
