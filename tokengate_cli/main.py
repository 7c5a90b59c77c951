# tokengate_cli/main.py


import typer
from tokengate_cli.auth.commands import app as auth_app
from tokengate_cli.admin.commands import app as admin_app

app = typer.Typer()
app.add_typer(auth_app, name="auth")
app.add_typer(admin_app, name="admin")

if __name__ == "__main__":
    app()
