import getpass
import typer

from tokengate_cli.core.session import save_token, load_token, clear_token, is_logged_in
from tokengate_cli.core.api import api_login, api_logout, api_register, api_whoami
from tokengate_cli.core.utils import USERNAME_REGEX, validate_password


app = typer.Typer(help="Authentication commands (login, logout, whoami, register)")


@app.command("login")
def login(
    username: str = typer.Option(None, "--username", "-u", help="Username"),
):
    """
    Login to the backend. Only allowed if no session is active.
    """
    if is_logged_in():
        typer.echo("Session already active. Logout first to remove current session token.")
        raise typer.Exit(code=1)

    if username is None:
        username = typer.prompt("Username")

    if not USERNAME_REGEX.match(username):
        typer.echo(
            "Invalid username.\n"
            "Use only letters, numbers, '.', '_' or '-', with 3 to 64 characters."
        )
        raise typer.Exit(code=1)

    password = getpass.getpass("Password: ")

    body = api_login(username, password)

    if body is None:
        typer.echo("Login failed (invalid credentials or API error).")
        raise typer.Exit(code=1)

    save_token(body["access_token"], body.get("expires_at"))
    typer.echo(f"Login successful as '{username}'. Token expires at {body.get('expires_at')}.")


@app.command("logout")
def logout():
    """
    Revoke the session token and delete it locally.
    """
    token = load_token()
    if token:
        if api_logout(token):
            typer.echo("Token revoked on backend.")
        else:
            typer.echo("Warning: backend did not accept the token. It may have already expired or been revoked.")

    clear_token()
    typer.echo("Session ended.")


@app.command("whoami")
def whoami():
    """
    Show the user owning the current session token.
    """
    token = load_token()
    if not token:
        typer.echo("No active session. Please login first.")
        raise typer.Exit(code=1)

    user = api_whoami(token)
    if user is None:
        typer.echo("Session token rejected. Login again.")
        raise typer.Exit(code=1)

    typer.echo(f"{user['username']} (id {user['id']}) roles: {', '.join(user.get('roles', []))}")


@app.command("register")
def register(
    username: str = typer.Option(None, "--username", "-u", help="Username"),
    email: str = typer.Option(None, "--email", help="Optional e-mail address"),
):
    """
    Create a regular user account.
    """
    if username is None:
        username = typer.prompt("Username")

    if not USERNAME_REGEX.match(username):
        typer.echo("Invalid username. Use only letters, numbers, '.', '_' or '-', with 3 to 64 characters.")
        raise typer.Exit(code=1)

    password = getpass.getpass("Password: ")
    password_confirm = getpass.getpass("Confirm password: ")

    if password != password_confirm:
        typer.echo("Passwords do not match.")
        raise typer.Exit(code=1)

    if not validate_password(password):
        raise typer.Exit(code=1)

    user_data = {"username": username, "password": password}
    if email:
        user_data["email"] = email

    if not api_register(user_data):
        typer.echo("Registration failed. The username may already be taken.")
        raise typer.Exit(code=1)

    typer.echo("Account created. You can now login.")
