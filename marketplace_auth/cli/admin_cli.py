# marketplace_auth/cli/admin_cli.py
import typer
from . import marketplace_cli

app = typer.Typer(
    name="admin",
    help="Marketplace Auth administrative commands.",
    no_args_is_help=True
)

app.add_typer(marketplace_cli.app, name="marketplace")


@app.callback()
def admin_callback():
    """Admin commands. Requires ADMIN_API_KEY in .env."""
    pass


if __name__ == "__main__":
    app()
