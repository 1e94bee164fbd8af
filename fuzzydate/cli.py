"""Command-line front end: resolve a phrase and print the timestamp."""

import json
import logging
from datetime import datetime, tzinfo
from typing import List, Optional

import typer

from .api import aware_parse, debug_parse, parse
from .clock import get_timezone
from .config import FuzzyDateConfig
from .errors import FuzzyDateError

app = typer.Typer(help="Turn phrases like 'five days after this friday' into timestamps")


def _parse_relative_to(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"expected an ISO 8601 timestamp, got {value!r}")


def _output_zone(output_timezone: Optional[str], config: FuzzyDateConfig, anchor: Optional[datetime]) -> tzinfo:
    """Zone to print in: explicit, else the input zone, else the anchor's own or local."""
    if output_timezone or config.timezone:
        return get_timezone(output_timezone or config.timezone)
    if anchor is not None and anchor.tzinfo is not None:
        return anchor.tzinfo
    return get_timezone(None)


def _report(phrase: str, error: FuzzyDateError) -> None:
    typer.echo(f"error: {error}", err=True)
    if error.position is not None:
        typer.echo(f"  {phrase}", err=True)
        typer.echo(f"  {' ' * error.position}^", err=True)


@app.command()
def main(
    phrase: Optional[List[str]] = typer.Argument(None, help="Phrase to resolve (default: today)"),
    output_format: Optional[str] = typer.Option(
        None, "--format", "-f", help="strftime format for the result (default: ISO 8601)"
    ),
    relative_to: Optional[str] = typer.Option(
        None, "--relative-to", "-r", help="ISO 8601 instant to treat as the current time"
    ),
    input_timezone: Optional[str] = typer.Option(
        None, "--input-timezone", help="Zone for inferred and relative values (default: local zone)"
    ),
    output_timezone: Optional[str] = typer.Option(
        None, "--output-timezone", help="Zone to convert the result to (default: input zone, else the anchor's)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Report every parsing stage"),
) -> None:
    """Resolve PHRASE and print the resulting timestamp."""
    text = " ".join(phrase or ["today"])
    if debug:
        logging.basicConfig(level=logging.DEBUG)

    try:
        config = FuzzyDateConfig.from_env()
        if input_timezone:
            config.timezone = input_timezone
        anchor = _parse_relative_to(relative_to)
        out_zone = _output_zone(output_timezone, config, anchor)
    except ValueError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1)

    if debug:
        trace = debug_parse(text, anchor, config.timezone, config)
        typer.echo(json.dumps(trace.model_dump(mode="json"), indent=2), err=True)

    try:
        if anchor is not None:
            result = aware_parse(text, anchor, config.timezone, config)
        else:
            result = parse(text, config=config)
    except FuzzyDateError as e:
        _report(text, e)
        raise typer.Exit(code=1)

    result = result.astimezone(out_zone)
    typer.echo(result.strftime(output_format) if output_format else result.isoformat())


if __name__ == "__main__":
    app()
