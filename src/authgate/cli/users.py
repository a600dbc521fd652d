"""User management CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table
from sqlmodel import select

from authgate.database import get_session_context
from authgate.errors import AuthError
from authgate.models import Account, User
from authgate.services.email import build_verification_url
from authgate.services.identity import SQLIdentityRepository
from authgate.services.passwords import get_password_hasher
from authgate.services.verification import VerificationTokenStore

console = Console()
app = typer.Typer(help="User management commands")


@app.command("list")
def list_users():
    """List all users with their verification state and linked providers."""

    async def _list():
        async with get_session_context() as session:
            users = (await session.execute(select(User).order_by(User.email))).scalars().all()
            accounts = (await session.execute(select(Account))).scalars().all()

            providers: dict[str, list[str]] = {}
            for account in accounts:
                providers.setdefault(account.user_id, []).append(account.provider.value)

            table = Table(title="Users")
            table.add_column("ID", style="cyan")
            table.add_column("Email", style="green")
            table.add_column("Verified", style="magenta")
            table.add_column("Password", style="magenta")
            table.add_column("Providers")
            table.add_column("Created", style="dim")

            for user in users:
                table.add_row(
                    user.id,
                    user.email or "-",
                    "[green]Yes[/green]" if user.email_verified else "No",
                    "Yes" if user.password_hash else "No",
                    ", ".join(providers.get(user.id, [])) or "-",
                    user.created_at.strftime("%Y-%m-%d") if user.created_at else "-",
                )

            console.print(table)

    asyncio.run(_list())


@app.command("create")
def create_user(
    email: str = typer.Argument(..., help="User email"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
    verified: bool = typer.Option(False, "--verified", help="Mark the email as already verified"),
):
    """Create a password user."""

    async def _create():
        async with get_session_context() as session:
            identities = SQLIdentityRepository(session)
            if await identities.find_user_by_email(email):
                console.print(f"[red]Error:[/red] User {email} already exists")
                raise typer.Exit(1)

            password_hash = get_password_hasher().hash(password)
            try:
                user = await identities.create_user(
                    email=email,
                    password_hash=password_hash,
                    email_verified=verified,
                )
            except AuthError as e:
                console.print(f"[red]Error:[/red] {e.message}")
                raise typer.Exit(1) from e
            await session.commit()
            console.print(f"[green]Created user:[/green] {email} ({user.id}, verified={verified})")

    asyncio.run(_create())


@app.command("verify")
def verify_user(email: str = typer.Argument(..., help="User email")):
    """Mark a user's email as verified without a verification link."""

    async def _verify():
        async with get_session_context() as session:
            identities = SQLIdentityRepository(session)
            user = await identities.find_user_by_email(email)

            if not user:
                console.print(f"[red]Error:[/red] User {email} not found")
                raise typer.Exit(1)

            if user.email_verified:
                console.print(f"[yellow]Warning:[/yellow] {email} is already verified")
                return

            await identities.update_user(user.id, email_verified=True)
            await session.commit()
            console.print(f"[green]Verified:[/green] {email}")

    asyncio.run(_verify())


@app.command("verification-url")
def verification_url(email: str = typer.Argument(..., help="User email")):
    """Issue a verification link for a user without sending an email."""

    async def _generate():
        async with get_session_context() as session:
            user = await SQLIdentityRepository(session).find_user_by_email(email)

            if not user:
                console.print(f"[red]Error:[/red] User {email} not found")
                raise typer.Exit(1)

            if user.email_verified:
                console.print(f"[yellow]Warning:[/yellow] {email} is already verified")
                return

            verification = await VerificationTokenStore(session).issue(email)
            await session.commit()

            console.print(f"[green]Verification URL:[/green] {build_verification_url(verification.token)}")
            console.print(f"[dim]Expires: {verification.expires_at}[/dim]")

    asyncio.run(_generate())
