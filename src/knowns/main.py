import typer
from knowns.commands import imports, logs
from knowns.logging import setup_logging, get_logger

app = typer.Typer(
    help="[bold blue]Knowns[/bold blue] - import and sync shared templates and docs",
    rich_markup_mode="rich",
)

app.add_typer(imports.app, name="import")
app.add_typer(logs.app, name="logs")


@app.callback(invoke_without_command=True)
def callback(ctx: typer.Context):
    """
    [bold blue]Knowns[/bold blue] - import and sync shared templates and docs

    Pull knowledge from git repositories, npm packages and local folders
    into your project and keep it up to date.
    """
    if not ctx.invoked_subcommand:
        print("Welcome to Knowns! Type knowns --help to see the available commands.")


def main():
    setup_logging()
    logger = get_logger("knowns.main")
    logger.info("Knowns CLI started")

    try:
        app()
    except Exception as e:
        logger.error(f"Unhandled exception in main: {str(e)}")
        raise
    finally:
        logger.info("Knowns CLI finished")


if __name__ == "__main__":
    main()
