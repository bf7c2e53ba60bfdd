# marketplace_auth/cli/marketplace_cli.py
import typer
from typing_extensions import Annotated

from .utils_cli import make_api_request

app = typer.Typer(
    name="marketplace",
    help="Inspect stored marketplace records via the Admin API.",
    no_args_is_help=True
)


@app.command("list")
def list_records(
    skip: Annotated[
        int,
        typer.Option("--skip", help="Number of records to skip.", min=0)
    ] = 0,
    limit: Annotated[
        int,
        typer.Option("--limit", help="Maximum number of records to return.", min=1, max=100)
    ] = 100
):
    """List marketplace records, most recently updated first."""
    make_api_request("GET", "/admin/marketplace/", params_payload={"skip": skip, "limit": limit})


@app.command("get")
def get_records(
    account_id: Annotated[
        int,
        typer.Argument(help="GitHub account id.")
    ]
):
    """Show the records stored for one account."""
    make_api_request("GET", f"/admin/marketplace/{account_id}")


if __name__ == "__main__":
    app()
