"""Initialize the messaging client for one user."""

import typer
from rich.console import Console

from dmrelay.cli.output import format_error, format_success, json_output
from dmrelay.cli.utils import ConfigManager, validate_api_url, validate_role, validate_user_id

console = Console()


def init_command(
    api_url: str,
    user_id: str,
    role: str,
    token: str,
    timeout: float,
    force: bool,
    json_flag: bool,
) -> None:
    """Initialize client configuration and store the bearer token.

    Creates ~/.dmrelay/config.yaml with the connection settings and
    ~/.dmrelay/token with the credential. The token file is chmod 600.
    """
    try:
        api_url = validate_api_url(api_url)
        user_id = validate_user_id(user_id)
        scope = validate_role(role)
        if timeout <= 0:
            raise ValueError("Timeout must be positive")
    except ValueError as e:
        format_error(console, str(e))
        raise typer.Exit(code=2)

    config = ConfigManager()

    if config.exists() and not force:
        format_error(
            console,
            f"Configuration already exists at {config.config_path}",
            hint="Use --force to overwrite existing configuration",
        )
        raise typer.Exit(code=1)

    config.save(api_url, user_id, scope, token, timeout)

    if json_flag:
        json_output(
            console,
            {
                "status": "initialized",
                "api_url": api_url,
                "user_id": user_id,
                "role": scope.value,
                "config_path": str(config.config_path),
            },
        )
    else:
        format_success(console, "Client initialized successfully")
        console.print(f"[cyan]API URL:[/cyan]  {api_url}")
        console.print(f"[cyan]User ID:[/cyan]  {user_id}")
        console.print(f"[cyan]Role:[/cyan]     {scope.value}")
        console.print(f"[cyan]Config:[/cyan]   {config.config_path}")
