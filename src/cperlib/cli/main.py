"""cperlib CLI - decode generic error status blocks captured from firmware."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from cperlib.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.pass_context
def cli(ctx: click.Context, debug: bool, json_output: bool) -> None:
    """cperlib - UEFI CPER error record decoder."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["json_output"] = json_output
    setup_logging(level="DEBUG" if debug else "INFO", json_output=json_output)


def _read_blob(path: Path, hex_input: bool) -> bytes:
    """Read a raw blob, or a hex dump when *hex_input* is set."""
    if not hex_input:
        return path.read_bytes()
    text = "".join(path.read_text().split())
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise click.BadParameter(f"Invalid hex input: {exc}", param_hint="FILE") from exc


def _load_dimm_map(path: Path) -> dict[int, tuple[str, str]]:
    """Load a ``{"<handle>": ["<bank>", "<device>"]}`` JSON map.

    Handles may be written in hex ("0x0010") or decimal.
    """
    try:
        raw = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"Invalid DIMM map: {exc}", param_hint="--dimm-map") from exc
    if not isinstance(raw, dict):
        raise click.BadParameter(
            f"Invalid DIMM map: expected a JSON object, got {type(raw).__name__}",
            param_hint="--dimm-map",
        )
    try:
        return {int(handle, 0): (bank, device) for handle, (bank, device) in raw.items()}
    except (TypeError, ValueError) as exc:
        raise click.BadParameter(f"Invalid DIMM map: {exc}", param_hint="--dimm-map") from exc


@cli.command()
@click.argument("path", metavar="FILE", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--hex", "hex_input", is_flag=True, help="FILE holds a hex dump, not raw bytes")
@click.option("--prefix", default="", help="Text put in front of every output line")
@click.option(
    "--dimm-map",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON file mapping memory device handles to [bank, device] names",
)
@click.pass_context
def decode(
    ctx: click.Context, path: Path, hex_input: bool, prefix: str, dimm_map: Path | None
) -> None:
    """Validate and decode a generic error status block."""
    from cperlib.estatus import check
    from cperlib.exceptions import ValidationError
    from cperlib.render import decode as decode_status
    from cperlib.render import report_lines

    blob = _read_blob(path, hex_input)
    dimm_lookup = _load_dimm_map(dimm_map).get if dimm_map else None

    try:
        status = check(blob)
    except ValidationError as exc:
        logger.warning("estatus_rejected", path=str(path), error=str(exc), offset=exc.offset)
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    report = decode_status(status, dimm_lookup=dimm_lookup)
    if ctx.obj.get("json_output"):
        click.echo(report.model_dump_json(indent=2))
    else:
        for line in report_lines(report, prefix):
            click.echo(line)


@cli.command("record-id")
@click.option("--count", type=click.IntRange(min=1), default=1, help="Number of IDs to allocate")
@click.pass_context
def record_id(ctx: click.Context, count: int) -> None:
    """Allocate fresh CPER record IDs."""
    from cperlib.record_id import next_record_id

    ids = [next_record_id() for _ in range(count)]
    if ctx.obj.get("json_output"):
        click.echo(json.dumps(ids))
    else:
        for rid in ids:
            click.echo(f"0x{rid:016X}")


if __name__ == "__main__":
    cli()
