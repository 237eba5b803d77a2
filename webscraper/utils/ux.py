from typing import List

from rich.console import Console
from rich.table import Table
from yaspin import yaspin

from webscraper.model.records import Snapshot

console = Console()


class UX:
    """
    Centralized console output for the CLI.
    Wraps Yaspin for spinners and consolidates Rich output.
    """

    @staticmethod
    def spinner(text: str):
        """Returns a configured yaspin spinner."""
        return yaspin(text=text, color="cyan", spinner="dots")

    @staticmethod
    def print_success(message: str):
        console.print(f"[green]✓ {message}[/green]")

    @staticmethod
    def print_error(message: str):
        console.print(f"[red]✗ {message}[/red]")

    @staticmethod
    def snapshot_table(snapshot: Snapshot) -> Table:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Group")
        table.add_column("Item")
        table.add_column("Price", justify="right")
        table.add_column("Icon", style="dim")
        for group in snapshot.groups:
            if not group.items:
                table.add_row(group.name, "[red]no data[/red]", "-", "-")
            for item in group.items:
                icon = item.icon if len(item.icon) <= 40 else item.icon[:37] + "..."
                table.add_row(group.name, item.name, item.price, icon)
        return table

    @staticmethod
    def messages_table(errors: List[str], warnings: List[str]) -> Table:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Level")
        table.add_column("Message")
        for message in errors:
            table.add_row("[red]error[/red]", message)
        for message in warnings:
            table.add_row("[yellow]warning[/yellow]", message)
        return table

