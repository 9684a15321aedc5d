from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from .config import load_config
from .core.methods import default_statistics
from .core.processor import StatisticsProcessor
from .data.csv_source import read_csv
from .utils.logging import setup_logging


app = typer.Typer(add_completion=False)
logger = logging.getLogger(__name__)


@app.command()
def process(
    csv_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV of namespace,timestamp,value rows"),
    config: Optional[Path] = typer.Option(None, help="YAML runtime configuration"),
    log_level: Optional[str] = typer.Option(None, help="Overrides LOG_LEVEL"),
) -> None:
    """Replay samples from a CSV file and print emitted statistics as JSON lines."""
    cfg = load_config(config)
    setup_logging(log_level or cfg.env.LOG_LEVEL)

    processor = StatisticsProcessor(cfg.runtime)
    emitted = 0
    for record in processor.process(read_csv(csv_path)):
        typer.echo(json.dumps(record.as_dict()))
        emitted += 1
    logger.info("Processing finished", extra={"records": emitted, "streams": len(processor.router)})


@app.command()
def vocabulary() -> None:
    """List the default statistic names."""
    for name in default_statistics():
        typer.echo(name)


if __name__ == "__main__":
    app()
