import re
import typer

USERNAME_REGEX = re.compile(r"^[a-zA-Z0-9_.-]{3,64}$")

def validate_password(password: str) -> bool:
    """
    Validates password strength:
    - Between 8 and 64 characters
    - At least one letter
    - At least one number
    """
    if len(password) < 8 or len(password) > 64:
        typer.echo("Password must be between 8 and 64 characters long.")
        return False

    if not re.search(r"[a-zA-Z]", password):
        typer.echo("Password must contain at least one letter.")
        return False

    if not re.search(r"\d", password):
        typer.echo("Password must contain at least one number.")
        return False

    return True
