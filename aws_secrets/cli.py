"""Command-line interface for syncing AWS secrets with .env files."""

import logging
import re

import click
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import ConfigManager, StoreConfig
from .core import SecretsManager
from .envfile import DEFAULT_ENV_FILE, DEFAULT_ENVIRONMENT, write_env_file
from .errors import SecretsError
from .store import SecretStoreAdapter
from .sync import SyncMode

app = typer.Typer(
    name="aws-secrets",
    help="AWS Secrets Manager CLI with .env integration",
    add_completion=False,
)
console = Console()

REGION_PATTERN = re.compile(r"^[a-z]{2}-[a-z]+-\d$")
SECRET_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9/_+=.@-]+$")


def _fail(message: str) -> None:
    console.print(f"[red]✗ Error:[/red] {escape(message)}", style="bold red", soft_wrap=True)
    raise typer.Exit(code=1)


def _write_local(secrets) -> None:
    """Refresh the default .env file after a remote change has already succeeded."""
    try:
        write_env_file(secrets, DEFAULT_ENVIRONMENT, DEFAULT_ENV_FILE)
    except SecretsError as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] Updated {DEFAULT_ENV_FILE} file")


def _get_manager() -> SecretsManager:
    """Build a manager from the saved configuration, or exit if there is none."""
    try:
        config = ConfigManager().read()
    except SecretsError as e:
        _fail(str(e))

    if not config.is_complete:
        console.print(
            "[red]Configuration not found. Please run: aws-secrets init[/red]", style="bold red"
        )
        raise typer.Exit(code=1)

    return SecretsManager(config)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """AWS Secrets Manager CLI with .env integration."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )


def _prompt_matching(text: str, pattern: re.Pattern, error: str, **kwargs) -> str:
    while True:
        value = typer.prompt(text, **kwargs).strip()
        if pattern.match(value):
            return value
        console.print(f"[yellow]![/yellow] {error}")


@app.command()
def init():
    """
    Initialize AWS Secrets Manager configuration.

    Asks for a region and credentials, checks the connection, then selects an
    existing secret or creates a new one and saves the configuration.
    """
    console.print("[cyan]AWS Secrets Manager CLI Configuration[/cyan]\n")

    config_manager = ConfigManager()
    try:
        current = config_manager.read()
    except SecretsError as e:
        console.print(
            f"[yellow]![/yellow] Ignoring unreadable configuration: {escape(str(e))}",
            soft_wrap=True,
        )
        current = StoreConfig()

    region = _prompt_matching(
        "AWS Region",
        REGION_PATTERN,
        "Please enter a valid AWS region (e.g., us-east-1)",
        default=current.region or "us-east-1",
    )

    auth_method = typer.prompt(
        "How would you like to authenticate with AWS? (cli = AWS CLI credentials, manual = enter keys)",
        type=click.Choice(["cli", "manual"]),
        default="cli",
    )

    access_key_id = None
    secret_access_key = None
    if auth_method == "manual":
        access_key_id = typer.prompt("AWS Access Key ID").strip()
        secret_access_key = typer.prompt("AWS Secret Access Key", hide_input=True).strip()

    config = StoreConfig(
        region=region,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
    )
    manager = SecretsManager(store=SecretStoreAdapter(config))

    try:
        with console.status("[bold green]Testing AWS connection..."):
            existing = manager.list_remote_secrets()
        console.print("[green]✓[/green] AWS connection successful")
    except SecretsError as e:
        console.print("[red]✗[/red] AWS connection failed")
        _fail(str(e))

    secret_action = typer.prompt(
        "Use an existing secret or create a new one?",
        type=click.Choice(["existing", "new"]),
        default="existing",
    )

    secret_name = None
    if secret_action == "existing":
        if not existing:
            console.print("\n[yellow]No existing secrets found. Creating new secret...[/yellow]")
            secret_action = "new"
        else:
            table = Table(title="Available Secrets")
            table.add_column("Secret Name", style="cyan")
            for descriptor in existing:
                table.add_row(descriptor.name)
            console.print(table)
            secret_name = typer.prompt(
                "Select a secret",
                type=click.Choice([descriptor.name for descriptor in existing]),
                show_choices=False,
            )

    if secret_action == "new":
        secret_name = _prompt_matching(
            "Enter name for new secret",
            SECRET_NAME_PATTERN,
            "Secret name can only contain alphanumeric characters and /_+=.@-",
        )
        try:
            with console.status("[bold green]Creating new secret..."):
                manager.store.create(secret_name)
            console.print("[green]✓[/green] New secret created successfully")
        except SecretsError as e:
            console.print("[red]✗[/red] Failed to create secret")
            _fail(str(e))

    config = config.model_copy(update={"secret_name": secret_name})
    try:
        config_manager.write(config)
    except SecretsError as e:
        _fail(str(e))

    console.print("\n[green]Configuration saved successfully![/green]")
    console.print("\n[bold]Configuration Summary:[/bold]")
    console.print(f"  Region: {config.region}")
    console.print(f"  Secret Name: {escape(config.secret_name or '')}")
    console.print(
        f"  Auth Method: {'AWS CLI' if auth_method == 'cli' else 'Manual Credentials'}"
    )

    console.print("\n[cyan]You can now use the following commands:[/cyan]")
    for example in ["list", "add KEY VALUE", "get KEY", "remove KEY", "write", "sync"]:
        console.print(f"  aws-secrets {example}")


@app.command()
def add(
    key: str = typer.Argument(..., help="Secret key"),
    value: str = typer.Argument(..., help="Secret value"),
    write: bool = typer.Option(False, "--write", "-w", help="Write to .env after adding"),
):
    """
    Add or update a secret.

    Examples:
        \b
        aws-secrets add API_KEY sk-123456
        aws-secrets add API_KEY sk-123456 --write
    """
    manager = _get_manager()
    try:
        with console.status("[bold green]Adding secret..."):
            secrets = manager.add_secret(key, value)
    except SecretsError as e:
        _fail(f"Failed to add secret: {e}")

    console.print(f"[green]✓[/green] Successfully added secret: [bold]{escape(key)}[/bold]")
    if write:
        _write_local(secrets)


@app.command()
def get(key: str = typer.Argument(..., help="Secret key")):
    """Get a secret value."""
    manager = _get_manager()
    try:
        with console.status("[bold green]Fetching secret..."):
            value = manager.get_secret(key)
    except SecretsError as e:
        _fail(f"Failed to get secret: {e}")

    if value is None:
        console.print(f"[yellow]![/yellow] Secret '{escape(key)}' not found", style="bold yellow")
        raise typer.Exit(code=1)

    console.print("\n[cyan]Secret Value:[/cyan]")
    console.print(escape(value), highlight=False, soft_wrap=True)


@app.command()
def remove(
    key: str = typer.Argument(..., help="Secret key"),
    write: bool = typer.Option(False, "--write", "-w", help="Write to .env after removing"),
):
    """Remove a secret."""
    manager = _get_manager()
    try:
        with console.status("[bold green]Removing secret..."):
            secrets = manager.remove_secret(key)
    except SecretsError as e:
        _fail(f"Failed to remove secret: {e}")

    if secrets is None:
        console.print(f"[yellow]![/yellow] Secret '{escape(key)}' not found", style="bold yellow")
        return

    console.print(f"[green]✓[/green] Successfully removed secret: [bold]{escape(key)}[/bold]")
    if write:
        _write_local(secrets)


@app.command(name="list")
def list_secrets(
    values: bool = typer.Option(False, "--values", "-v", help="Show secret values"),
):
    """List all secrets."""
    manager = _get_manager()
    try:
        with console.status("[bold green]Fetching secrets..."):
            secrets = manager.list_secrets()
    except SecretsError as e:
        _fail(f"Failed to list secrets: {e}")

    table = Table(title=f"Secrets - {escape(manager.store.secret_name or '')}")
    table.add_column("Key", style="cyan")
    if values:
        table.add_column("Value", style="green")

    for key, value in secrets.items():
        if values:
            table.add_row(escape(key), escape(value))
        else:
            table.add_row(escape(key))

    console.print(table)
    console.print(f"\nTotal: {len(secrets)} secrets")


@app.command()
def write(
    environment: str = typer.Option(
        DEFAULT_ENVIRONMENT, "--environment", "-e", help="Environment name"
    ),
    filename: str = typer.Option(DEFAULT_ENV_FILE, "--filename", "-f", help="Output filename"),
):
    """
    Write secrets to a .env file.

    Examples:
        \b
        aws-secrets write
        aws-secrets write --environment staging --filename .env.staging
    """
    manager = _get_manager()
    try:
        with console.status(f"[bold green]Writing secrets to {escape(filename)}..."):
            secrets = manager.write_env(environment, filename)
    except SecretsError as e:
        _fail(f"Failed to write secrets: {e}")

    console.print(
        f"[green]✓[/green] Successfully wrote {len(secrets)} secrets to {escape(filename)}"
    )


@app.command()
def sync(
    filename: str = typer.Option(DEFAULT_ENV_FILE, "--filename", "-f", help="Input filename"),
    mode: SyncMode = typer.Option(SyncMode.MERGE, "--mode", "-m", help="Sync mode"),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-d", help="Show what would be updated without making changes"
    ),
):
    """
    Sync secrets from a .env file to AWS.

    merge keeps remote-only keys; overwrite removes them.

    Examples:
        \b
        aws-secrets sync --dry-run
        aws-secrets sync --filename .env.prod --mode overwrite
    """
    manager = _get_manager()
    try:
        with console.status("[bold green]Syncing secrets..."):
            plan = manager.sync(filename, mode=mode, dry_run=dry_run)
    except SecretsError as e:
        _fail(f"Sync failed: {e}")

    console.print("\n[cyan]Changes to be made:[/cyan]")
    for key in plan.added:
        console.print(
            f"[green]+ {escape(key)}: {escape(plan.target[key])}[/green]", soft_wrap=True
        )
    for key in plan.changed:
        console.print(
            f"[yellow]~ {escape(key)}: {escape(plan.target[key])}[/yellow]", soft_wrap=True
        )
    for key in plan.removed:
        console.print(f"[red]- {escape(key)}[/red]")
    if not plan.has_changes:
        console.print("  (none)")

    if dry_run:
        console.print("\n[yellow]Dry run - no changes made[/yellow]")
        return

    console.print("[green]✓[/green] Successfully synced secrets to AWS")
    console.print("\n[cyan]Sync Summary:[/cyan]")
    console.print(f"  Total secrets: {len(plan.target)}")
    console.print(f"  [green]Added/Modified: {plan.modified_count}[/green]")
    if plan.mode == SyncMode.OVERWRITE:
        console.print(f"  [red]Removed: {len(plan.removed)}[/red]")


@app.command()
def version():
    """Show version information."""
    from . import __version__

    console.print(f"AWS Secrets CLI v{__version__}")


if __name__ == "__main__":
    app()
