from rich.console import Console
from rich.table import Table
from typing import List

console = Console()
err_console = Console(stderr=True)


def success(message: str):
    """Display success message"""
    console.print(f"✔ {message}", style="bold green")


def error(message: str):
    """Display error message"""
    err_console.print(f"✖ {message}", style="bold red")


def warning(message: str):
    """Display warning message"""
    console.print(f"⚠  {message}", style="bold yellow")


def info(message: str):
    """Display info message"""
    console.print(f"{message}", style="cyan")


def hint(message: str):
    """Display a dimmed follow-up hint"""
    err_console.print(f"  {message}", style="dim")


def create_table(title: str, columns: List[str]) -> Table:
    """Create a rich table"""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    for column in columns:
        table.add_column(column)
    return table
