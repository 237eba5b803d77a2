import typer

from webscraper.cli.commands import scrape, utils

app = typer.Typer(
    name="webscraper",
    help="Configuration-driven price scraper",
    add_completion=False
)

# Register commands
app.command()(scrape.run)
app.command()(scrape.once)
app.command()(utils.validate)
app.command()(utils.doctor)

VERSION = "0.1.0"


@app.command()
def version():
    """Show the scraper version."""
    typer.echo(f"webscraper {VERSION}")


def version_callback(value: bool):
    if value:
        typer.echo(f"webscraper {VERSION}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", callback=version_callback, is_eager=True),
):
    """
    Scrape configured pages into a JSON snapshot on a fixed interval.
    """
    pass


if __name__ == "__main__":
    app()
