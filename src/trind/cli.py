import asyncio
import time

import click
from rich.console import Console
from rich.table import Table

from trind.address import is_native_address, to_internal, to_native
from trind.core.config import load_config
from trind.core.errors import TrindError
from trind.decoding.decoder import decode_transfer
from trind.logging_config import configure_logging

console = Console()


@click.group()
def cli() -> None:
    """TronInd — TRC-20 transfer indexer."""


@cli.command("index")
@click.option("--blocks", "blocks_path", type=click.Path(exists=True, dir_okay=False), required=True,
              help="NDJSON block dump (one block per line)")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
              help="JSON config file")
@click.option("--contract", default=None, help="Token contract (Tron base58 address)")
@click.option("--from-block", type=int, default=None, help="First block to index")
@click.option("--batch-blocks", type=int, default=None, help="Blocks per batch")
@click.option("--out", "out_root", type=click.Path(file_okay=False), default=None, help="Output root directory")
@click.option(
    "--skip-malformed/--no-skip-malformed",
    default=None,
    help="Skip and log undecodable logs instead of failing the batch",
)
@click.option("--log-level", default="INFO", show_default=True,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
def index_cmd(
    blocks_path: str,
    config_path: str | None,
    contract: str | None,
    from_block: int | None,
    batch_blocks: int | None,
    out_root: str | None,
    skip_malformed: bool | None,
    log_level: str,
) -> None:
    """Index Transfer events from a block dump into Parquet shards."""
    from pathlib import Path

    from trind.orchestration.orchestrator import open_parquet_outputs, run_indexer, setup_layout
    from trind.sources.blocks import NdjsonBlockSource

    configure_logging(log_level)
    try:
        config = load_config(
            config_path,
            contract_address=contract,
            start_block=from_block,
            batch_blocks=batch_blocks,
            out_root=Path(out_root) if out_root else None,
            skip_malformed=skip_malformed,
        )
    except TrindError as e:
        raise click.ClickException(str(e)) from e

    layout = setup_layout(config)
    sink, manifest = open_parquet_outputs(layout)
    source = NdjsonBlockSource(blocks_path, batch_blocks=config.batch_blocks)

    t0 = time.time()
    try:
        out = asyncio.run(run_indexer(config=config, source=source, sink=sink, layout=layout, manifest=manifest))
    except (TrindError, ValueError, LookupError) as e:
        raise click.ClickException(str(e)) from e

    s = out.stats
    console.print(f"[bold]done[/]: {s.records} transfers • {time.time() - t0:.2f}s")
    console.print(
        f"[bold]summary[/]: "
        f"[green]batches_ok[/]={s.batches_ok}  "
        f"[green]stored[/]={s.stored}  "
        f"[yellow]skipped_malformed[/]={s.skipped_malformed}  "
        f"[red]skipped_mismatch[/]={s.skipped_mismatch}  "
        f"(logs={s.total_logs}, from_block={out.from_block}, last_block={s.last_block})"
    )
    console.print(f"[bold]shards[/]: {layout.shards_dir.shards_dir}")


@cli.command("decode-log")
@click.option("--topic", "topics", multiple=True, required=True, help="Log topic; repeat in order")
@click.option("--data", required=True, help="Log data (hex)")
def decode_log_cmd(topics: tuple[str, ...], data: str) -> None:
    """Decode one Transfer log and print it with native addresses."""
    try:
        decoded = decode_transfer(topics=list(topics), data=data)
        from_native, to_native_ = to_native(decoded.from_), to_native(decoded.to)
    except TrindError as e:
        raise click.ClickException(str(e)) from e

    table = Table(title="Transfer")
    table.add_column("field")
    table.add_column("value")
    table.add_row("from", from_native)
    table.add_row("to", to_native_)
    table.add_row("amount", str(decoded.value))
    console.print(table)


@cli.command("convert-address")
@click.argument("address")
def convert_address_cmd(address: str) -> None:
    """Convert between Tron base58 and 0x hex address forms."""
    try:
        out = to_internal(address) if is_native_address(address) else to_native(address)
    except TrindError as e:
        raise click.ClickException(str(e)) from e
    click.echo(out)


if __name__ == "__main__":
    cli()
