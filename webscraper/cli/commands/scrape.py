import asyncio
import traceback
from pathlib import Path
from typing import Optional

import typer

from webscraper.core.config import ScraperSettings, SettingsManager
from webscraper.core.errors import ConfigurationError, ScraperError
from webscraper.core.logging import log, Logger
from webscraper.engine.controller import ScrapeCycleController
from webscraper.engine.scheduler import Scheduler
from webscraper.model.config import ScrapeConfig, load_config
from webscraper.model.records import Snapshot
from webscraper.utils.ux import UX, console


def _prepare(
    config_path: Path,
    settings_file: Optional[Path],
    log_dir: Optional[Path],
    verbose: bool,
    **overrides,
) -> tuple:
    Logger.setup_logging(log_dir=log_dir, verbose=verbose)
    try:
        settings = SettingsManager.load_settings(settings_file, **overrides)
        config = load_config(config_path)
    except ConfigurationError as e:
        UX.print_error(str(e))
        console.print(UX.messages_table(e.errors, e.warnings))
        raise typer.Exit(code=1)
    return settings, config


def run(
    config: Path = typer.Argument(..., help="Scrape configuration JSON file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Snapshot file to overwrite each cycle"),
    interval: Optional[float] = typer.Option(None, "--interval", "-i", help="Seconds between cycles"),
    settings_file: Optional[Path] = typer.Option(None, "--settings", help="Scraper settings JSON file"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Directory for master.log and events.json"),
    headless: Optional[bool] = typer.Option(None, "--headless/--headed", help="Run browser in headless mode"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """
    Scrape the configured pages now and then on a fixed interval until interrupted.
    """
    settings, scrape_config = _prepare(
        config, settings_file, log_dir, verbose,
        output=output, scrape_interval=interval, headless=headless,
    )
    scheduler = Scheduler(settings)
    try:
        asyncio.run(scheduler.run_forever(scrape_config))
    except KeyboardInterrupt:
        log("Scraper interrupted by user.", level="warning")
        raise typer.Exit(code=0)


async def _run_once(settings: ScraperSettings, config: ScrapeConfig) -> Snapshot:
    controller = ScrapeCycleController(settings)
    try:
        return await controller.run_cycle(config)
    finally:
        await controller.close()


def once(
    config: Path = typer.Argument(..., help="Scrape configuration JSON file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Snapshot file to write"),
    settings_file: Optional[Path] = typer.Option(None, "--settings", help="Scraper settings JSON file"),
    headless: Optional[bool] = typer.Option(None, "--headless/--headed", help="Run browser in headless mode"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """
    Run a single scrape cycle and print the snapshot.
    """
    settings, scrape_config = _prepare(
        config, settings_file, None, verbose,
        output=output, headless=headless,
    )
    try:
        with UX.spinner(f"Scraping {scrape_config.observer_count} pages..."):
            snapshot = asyncio.run(_run_once(settings, scrape_config))
    except ScraperError as e:
        UX.print_error(f"Cycle failed: {e}")
        log(f"Cycle failed: {traceback.format_exc()}", level="debug")
        raise typer.Exit(code=1)

    console.print(UX.snapshot_table(snapshot))
    UX.print_success(f"Saved {snapshot.item_count} items to {settings.output}")
