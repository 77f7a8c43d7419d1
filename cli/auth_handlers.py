"""Authentication handlers for CLI"""

import logging

from rich.table import Table

import settings
from cli.context import CommandContext
from oauth import LoginFlow, validate_token_format

logger = logging.getLogger(__name__)


async def login(ctx: CommandContext, args, console):
    """Run the browser-based OAuth login"""

    def browser_failed(url: str):
        console.print("[yellow]Could not open a browser automatically.[/yellow]")
        console.print("Open this URL to authorize td:")
        console.print(url, markup=False, soft_wrap=True)

    def waiting(url: str):
        console.print(
            f"[dim]Waiting for authorization (up to {settings.CALLBACK_TIMEOUT:g}s)... "
            f"Press Ctrl+C to cancel.[/dim]"
        )

    console.print("[cyan]Opening Todoist in your browser to authorize td...[/cyan]")
    flow = LoginFlow(
        ctx.storage,
        timeout=settings.CALLBACK_TIMEOUT,
        on_browser_failure=browser_failed,
        on_waiting=waiting,
    )
    await flow.run()
    ctx.invalidate()

    console.print("[green]✓ Logged in. Token saved to[/green] " + str(ctx.storage.config_file))


async def save_token(ctx: CommandContext, args, console):
    """Store a personal API token given on the command line"""
    token = args.token.strip()
    if not validate_token_format(token):
        raise ValueError("Invalid token: Token must be at least 10 characters with no spaces")

    ctx.storage.save(token)
    ctx.invalidate()
    console.print(f"[green]✓ Token saved to[/green] {ctx.storage.config_file}")


async def status(ctx: CommandContext, args, console):
    """Show where the token comes from and who it belongs to"""
    token_status = ctx.storage.get_status()

    if not token_status["has_token"]:
        console.print(
            f"[yellow]Not logged in.[/yellow] Run [bold]td auth login[/bold] "
            f"or set {token_status['env_var']}."
        )
        return

    user = await ctx.current_user()

    if getattr(args, "json", False):
        console.print_json(data={
            "source": token_status["source"],
            "token_type": token_status["token_type"],
            "config_file": token_status["config_file"],
            "user": user.model_dump(),
        })
        return

    table = Table(title="Authentication Status")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    source = token_status["env_var"] if token_status["source"] == "environment" else token_status["config_file"]
    table.add_row("Logged in as", f"{user.full_name} <{user.email}>" if user.full_name else user.email)
    table.add_row("User ID", user.id)
    table.add_row("Token type", token_status["token_type"])
    table.add_row("Token source", source)

    console.print(table)


async def logout(ctx: CommandContext, args, console):
    """Remove the stored token"""
    token_status = ctx.storage.get_status()
    ctx.storage.clear()
    ctx.invalidate()
    console.print("[green]✓ Logged out.[/green] Token removed from " + str(ctx.storage.config_file))

    if token_status["source"] == "environment":
        console.print(
            f"[yellow]{token_status['env_var']} is still set and will keep being used.[/yellow]"
        )
