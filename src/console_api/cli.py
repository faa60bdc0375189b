"""console-api: CLI for the team console API."""

from __future__ import annotations

import typer
import uvicorn

from console_api.settings import get_settings

app = typer.Typer(
    add_completion=False,
    invoke_without_command=True,
    help="Team console API CLI (start, migrate, bootstrap, routes).",
)


@app.callback()
def _main(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


@app.command(name="start")
def start(
    host: str | None = typer.Option(None, help="Bind host (defaults to CONSOLE_API_HOST)."),
    port: int | None = typer.Option(None, help="Bind port (defaults to CONSOLE_API_PORT)."),
    reload: bool = typer.Option(False, help="Reload on code changes (development only)."),
) -> None:
    """Start the API server (requires migrations to be applied)."""

    settings = get_settings()
    uvicorn.run(
        "console_api.asgi:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.effective_api_log_level.lower(),
        log_config=None,
    )


@app.command(name="migrate")
def migrate(
    revision: str = typer.Argument("head", help="Alembic revision to upgrade to."),
) -> None:
    """Run Alembic migrations (default upgrade to head)."""

    from console_db.migrations_runner import run_migrations

    run_migrations(get_settings(), revision=revision)
    typer.echo(f"Database upgraded to {revision}.")


@app.command(name="bootstrap")
def bootstrap(
    admin_password: str | None = typer.Option(
        None,
        "--admin-password",
        envvar="CONSOLE_BOOTSTRAP_ADMIN_PASSWORD",
        help="Password for a newly created administrator.",
        hide_input=True,
    ),
) -> None:
    """Seed the administrator, default menus and the root team."""

    from sqlalchemy.orm import sessionmaker

    from console_api.common.logging import setup_logging
    from console_api.features.bootstrap.service import BootstrapService
    from console_db.engine import build_engine, session_scope

    settings = get_settings()
    setup_logging(settings)
    engine = build_engine(settings)
    try:
        with session_scope(sessionmaker(bind=engine, expire_on_commit=False)) as session:
            result = BootstrapService(session=session, settings=settings).run(
                admin_password=admin_password
            )
    except ValueError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    finally:
        engine.dispose()

    created = ", ".join(result.created) if result.created else "nothing (already seeded)"
    typer.echo(f"Bootstrap complete; created {created}.")


@app.command(name="routes")
def routes() -> None:
    """Print the HTTP route table."""

    from fastapi.routing import APIRoute

    from console_api.main import create_app

    for route in create_app().routes:
        if isinstance(route, APIRoute):
            methods = ",".join(sorted(route.methods or ()))
            typer.echo(f"{methods:<12} {route.path}")


if __name__ == "__main__":
    app()
