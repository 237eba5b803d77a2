import platform
import shutil
import sys
from pathlib import Path

import typer
from rich import print as rprint

from webscraper.core.errors import ConfigurationError
from webscraper.model.config import build_config
from webscraper.model.validator import ConfigValidator
from webscraper.utils.file_io import read_json
from webscraper.utils.ux import UX, console


def validate(config: Path = typer.Argument(..., help="Scrape configuration JSON file")):
    """Check a scrape configuration without visiting any page."""
    try:
        scrape_config = build_config(read_json(config))
    except ConfigurationError as e:
        console.print(UX.messages_table(e.errors, e.warnings))
        UX.print_error(str(e))
        raise typer.Exit(code=1)

    result = ConfigValidator(scrape_config).check()
    if result.errors or result.warnings:
        console.print(UX.messages_table(result.errors, result.warnings))
    if not result.ok:
        UX.print_error(f"{len(result.errors)} errors in {config}")
        raise typer.Exit(code=1)

    UX.print_success(
        f"Valid configuration: {len(scrape_config.groups)} groups, {scrape_config.observer_count} observers ({config})"
    )


def doctor():
    """Check environment health."""
    rprint("[bold cyan]Checking scraper environment...[/bold cyan]")
    rprint(f"• OS: {platform.system()} {platform.release()}")
    rprint(f"• Python: {sys.version.split()[0]}")

    playwright = shutil.which("playwright")
    rprint(f"• Playwright CLI: {'[green]OK[/green]' if playwright else '[red]MISSING[/red]'}")
    if not playwright:
        rprint("  Install browsers with: [bold]playwright install chromium[/bold]")

    rprint("\n[bold green]System check complete.[/bold green]")
