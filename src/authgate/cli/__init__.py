"""CLI commands using Typer."""

import typer

from authgate.cli.db import app as db_app
from authgate.cli.users import app as users_app

app = typer.Typer(name="authgate", help="Authgate CLI")

app.add_typer(db_app, name="db")
app.add_typer(users_app, name="users")


@app.command()
def version():
    """Show version information."""
    from authgate import __version__

    typer.echo(f"Authgate v{__version__}")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8084, help="Port to bind to"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
):
    """Run the API server."""
    import uvicorn

    from authgate.logging import get_log_config

    uvicorn.run(
        "authgate.main:app",
        host=host,
        port=port,
        reload=reload,
        log_config=get_log_config(),
    )


@app.command()
def worker():
    """Run the background job worker."""
    from authgate.worker import main

    main()


if __name__ == "__main__":
    app()
