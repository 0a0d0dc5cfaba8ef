"""Command line interface for the point-of-sale console."""

from __future__ import annotations

from typing import Optional

import typer
import uvicorn

from . import crud
from .config import Settings, get_settings
from .database import init_database, session_scope

app = typer.Typer(help="Manage and run the point-of-sale console service.")


def _print_header(title: str) -> None:
    typer.secho(title, bold=True, fg=typer.colors.CYAN)


def _resolve_settings() -> Settings:
    settings = get_settings()
    init_database()
    return settings


@app.command()
def run(
    host: Optional[str] = typer.Option(None, help="Hostname to bind"),
    port: Optional[int] = typer.Option(None, help="Port to expose"),
    reload: Optional[bool] = typer.Option(None, help="Enable auto-reload"),
    log_level: Optional[str] = typer.Option(None, help="Uvicorn log level"),
) -> None:
    """Start the FastAPI service using Uvicorn."""

    settings = _resolve_settings()

    uvicorn.run(
        "pos_console.app:create_app",
        host=host or settings.host,
        port=port or settings.port,
        reload=settings.reload if reload is None else reload,
        log_level=(log_level or settings.log_level).lower(),
        factory=True,
    )


@app.command()
def init_db() -> None:
    """Create the database tables."""

    settings = _resolve_settings()
    typer.echo(f"Database initialised at {settings.database_url}")


@app.command()
def create_admin(
    email: str = typer.Argument(..., help="Login email"),
    name: str = typer.Option("Administrator", help="Display name"),
    password: Optional[str] = typer.Option(
        None,
        "--password",
        prompt=True,
        hide_input=True,
        confirmation_prompt=True,
        help="Password for the new administrator",
    ),
    branch_id: Optional[int] = typer.Option(None, help="Home branch"),
) -> None:
    """Create an administrator login in the database."""

    settings = _resolve_settings()
    if not password:
        typer.secho("Password is required", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    with session_scope() as session:
        try:
            user = crud.create_user(
                session,
                settings.org_id,
                {"name": name, "email": email, "type": "admin", "branch_id": branch_id},
                password,
            )
        except crud.DuplicateEmailError as exc:
            typer.secho(str(exc), fg=typer.colors.RED)
            raise typer.Exit(code=1) from exc
        typer.secho(f"Created administrator {user.email} (id={user.id})", fg=typer.colors.GREEN)


@app.command("list-users")
def list_users_cmd() -> None:
    """Display staff logins stored in the database."""

    settings = _resolve_settings()
    with session_scope() as session:
        users = crud.UserRepository(session, settings.org_id).all()
        if not users:
            typer.echo("No users found.")
            return
        _print_header("Existing users")
        for user in users:
            typer.echo(f"- #{user.id} {user.email} | {user.name} | type={user.type} | active={user.is_active}")


@app.command()
def show_paths() -> None:
    """Print out where the service keeps its data."""

    settings = _resolve_settings()
    typer.echo(f"Database: {settings.database_url}")
    typer.echo(f"Log file: {settings.log_file or '(console only)'}")
    typer.echo(f"API prefix: {settings.base_url.rstrip('/')}{settings.api_v1_prefix}")


def main() -> None:
    """Entry-point for console scripts."""

    app()


if __name__ == "__main__":  # pragma: no cover
    main()
