import typer

from tokengate_cli.core.session import load_token
from tokengate_cli.core.api import api_expired_tokens, api_revoke_user_token

app = typer.Typer(help="Token administration commands (Admin only).")


def _require_token() -> str:
    token = load_token()
    if not token:
        typer.echo("No active session. Please login first.")
        raise typer.Exit(code=1)
    return token


@app.command("expired")
def expired(
    as_of: str = typer.Option(None, "--as-of", help="ISO-8601 timestamp, defaults to now on the server"),
):
    """
    Report tokens expired as of a point in time. Nothing is deleted.
    """
    token = _require_token()

    records = api_expired_tokens(token, as_of)
    if records is None:
        typer.echo("Failed to retrieve expired tokens. Check permissions.")
        raise typer.Exit(code=1)

    if not records:
        typer.echo("No expired tokens.")
        return

    typer.echo(f"{len(records)} expired token(s):")
    for record in records:
        flag = " [revoked]" if record.get("revoked") else ""
        typer.echo(f"  user {record['user_id']}: issued {record['issued_at']}, expired {record['expires_at']}{flag}")


@app.command("revoke")
def revoke(user_id: int = typer.Argument(..., help="User whose latest token is revoked")):
    """
    Revoke the most recently issued token of a user.
    """
    token = _require_token()

    if not api_revoke_user_token(token, user_id):
        typer.echo(f"Could not revoke token for user {user_id}.")
        raise typer.Exit(code=1)

    typer.echo(f"Token of user {user_id} revoked.")
