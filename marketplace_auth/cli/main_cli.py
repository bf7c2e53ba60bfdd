# marketplace_auth/cli/main_cli.py
import typer
from . import admin_cli

app = typer.Typer(
    name="marketplace-auth",
    help="Marketplace Auth Command Line Interface.",
    no_args_is_help=True
)

app.add_typer(admin_cli.app, name="admin")


@app.callback()
def main_callback():
    """
    Marketplace Auth CLI.
    Use 'marketplace-auth admin --help' for admin commands.
    """
    pass


def cli_entry_point():
    """Entry point for the console script declared in pyproject.toml"""
    app()


if __name__ == "__main__":
    cli_entry_point()
