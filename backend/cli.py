"""
DECUBE CLI.

Command-line interface for common operations: schema, seed data, admin
accounts, stock checks and service health.
"""

import asyncio
import sys
import time

import typer
from rich.console import Console
from rich.table import Table

from rest_api.models import Base
from rest_api.seed import seed
from rest_api.services.domain import InventoryService, StaffService
from shared.config.settings import settings
from shared.infrastructure.db import SessionLocal, engine
from shared.utils.exceptions import AppException
from shared.utils.schemas import StaffCreate

app = typer.Typer(
    name="decube",
    help="DECUBE Restaurant POS CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def db_init():
    """Create all database tables."""
    console.print(f"[blue]Creating tables on: {engine.url.render_as_string(hide_password=True)}[/blue]")
    Base.metadata.create_all(bind=engine)
    console.print("[green]✓ Tables created[/green]")


@app.command()
def db_seed(
    force: bool = typer.Option(False, "--force", "-f", help="Allow seeding in production"),
):
    """Seed admin, demo staff, tables and menu into empty tables."""
    if settings.environment == "production" and not force:
        console.print("[red]Cannot seed production without --force[/red]")
        raise typer.Exit(1)

    with SessionLocal() as db:
        seed(db)
    console.print("[green]✓ Seed complete[/green]")


@app.command()
def create_admin(
    email: str = typer.Option(..., help="Login email"),
    name: str = typer.Option("Administrator", help="Display name"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Create an ADMIN account."""
    try:
        data = StaffCreate(name=name, email=email, password=password, role="ADMIN")
    except ValueError as e:
        console.print(f"[red]✗ Invalid input: {e}[/red]")
        raise typer.Exit(1)

    with SessionLocal() as db:
        try:
            user = StaffService(db).create(data, None, None)
        except AppException as e:
            console.print(f"[red]✗ {e.detail}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]✓ Admin created (id {user.id})[/green]")


# =============================================================================
# Inventory Commands
# =============================================================================

@app.command()
def low_stock():
    """List inventory items at or below their minimum stock."""
    with SessionLocal() as db:
        items = InventoryService(db).list_low_stock()

        if not items:
            console.print("[green]✓ All stock above minimum[/green]")
            return

        table = Table(title="Low Stock")
        table.add_column("Item", style="cyan")
        table.add_column("Quantity", style="red")
        table.add_column("Minimum", style="yellow")

        for item in items:
            table.add_row(item.name, f"{item.quantity} {item.unit}", f"{item.min_stock} {item.unit}")

        console.print(table)


# =============================================================================
# Health Commands
# =============================================================================

@app.command()
def health(
    host: str = typer.Option("localhost", help="Host running both services"),
):
    """Check REST API, WebSocket gateway and Redis."""
    import httpx

    async def _health():
        services = [
            ("REST API", f"http://{host}:{settings.rest_api_port}/api/health"),
            ("WS Gateway", f"http://{host}:{settings.ws_gateway_port}/ws/health"),
        ]

        table = Table(title="Service Health")
        table.add_column("Service", style="cyan")
        table.add_column("Status", style="green")
        table.add_column("Response Time", style="yellow")

        async with httpx.AsyncClient(timeout=5.0) as client:
            for name, url in services:
                start = time.time()
                try:
                    response = await client.get(url)
                except httpx.HTTPError as e:
                    table.add_row(name, f"✗ {type(e).__name__}", "-")
                    continue
                elapsed = (time.time() - start) * 1000
                if response.status_code == 200:
                    table.add_row(name, "✓ Healthy", f"{elapsed:.0f}ms")
                else:
                    table.add_row(name, f"✗ Status {response.status_code}", f"{elapsed:.0f}ms")

        from shared.infrastructure.events import close_redis_pool, get_redis_pool

        start = time.time()
        try:
            redis = await get_redis_pool()
            await redis.ping()
            table.add_row("Redis", "✓ Healthy", f"{(time.time() - start) * 1000:.0f}ms")
        except Exception as e:
            table.add_row("Redis", f"✗ {type(e).__name__}", "-")
        finally:
            await close_redis_pool()

        console.print(table)

    asyncio.run(_health())


@app.command()
def ws_test(
    email: str = typer.Option(..., help="Staff email to log in with"),
    password: str = typer.Option(..., prompt=True, hide_input=True),
    host: str = typer.Option("localhost", help="Host running both services"),
):
    """Log in and print the first order snapshot from the live feed."""
    import httpx
    import websockets

    async def _test():
        async with httpx.AsyncClient(timeout=5.0) as client:
            response = await client.post(
                f"http://{host}:{settings.rest_api_port}/api/auth/login",
                json={"email": email, "password": password},
            )
        if response.status_code != 200:
            console.print(f"[red]✗ Login failed: {response.status_code}[/red]")
            raise typer.Exit(1)

        token = response.json()["access_token"]
        url = f"ws://{host}:{settings.ws_gateway_port}/ws/orders?token={token}"
        console.print(f"[blue]Connecting to ws://{host}:{settings.ws_gateway_port}/ws/orders[/blue]")

        try:
            async with websockets.connect(url, close_timeout=5) as ws:
                message = await asyncio.wait_for(ws.recv(), timeout=5)
        except asyncio.TimeoutError:
            console.print("[red]✗ No snapshot received[/red]")
            raise typer.Exit(1)
        except (OSError, websockets.WebSocketException) as e:
            console.print(f"[red]✗ Connection failed: {e}[/red]")
            raise typer.Exit(1)

        console.print(f"[green]✓ Connected! First message: {message[:200]}[/green]")

    asyncio.run(_test())


@app.command()
def version():
    """Show version information."""
    from rest_api.main import app as rest_app
    from ws_gateway.main import app as ws_app

    table = Table(title="DECUBE Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("REST API", rest_app.version)
    table.add_row("WS Gateway", ws_app.version)
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
