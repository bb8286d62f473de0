"""
aispend CLI - Command line interface for AI spend tracking.
"""

import asyncio
import json
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from aispend.config import list_prices, load_settings
from aispend.connect import PROVIDER_NAMES, SUPPORTED_PROVIDERS
from aispend.connect.unsupported import UNSUPPORTED_MESSAGES
from aispend.see import SpendAggregator, SpendSummary, Subscription

app = typer.Typer(
    name="aispend",
    help="AI API Spend Tracker - usage from every provider plus subscriptions",
    add_completion=False,
)
console = Console()


def parse_pairs(values: list[str], option: str) -> dict[str, str]:
    """Parse repeated NAME=VALUE options."""
    pairs = {}
    for value in values:
        name, sep, rest = value.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"expected NAME=VALUE, got {value!r}", param_hint=option)
        pairs[name.strip()] = rest.strip()
    return pairs


def parse_amounts(values: list[str], option: str) -> dict[str, float]:
    amounts = {}
    for name, raw in parse_pairs(values, option).items():
        try:
            amounts[name] = float(raw)
        except ValueError:
            raise typer.BadParameter(f"{raw!r} is not a number", param_hint=option) from None
    return amounts


def select_credentials(
    credentials: dict[str, str],
    providers: str,
) -> dict[str, str]:
    """Restrict credentials to a comma-separated provider list (or 'all')."""
    if providers == "all":
        return credentials

    provider_list = [p.strip().lower() for p in providers.split(",") if p.strip()]
    unknown = [p for p in provider_list if p not in SUPPORTED_PROVIDERS]
    if unknown:
        raise typer.BadParameter(
            f"unsupported provider(s): {', '.join(unknown)}",
            param_hint="--providers",
        )
    return {p: k for p, k in credentials.items() if p in provider_list}


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log provider requests"),
):
    """Configure logging for all commands."""
    level = "INFO" if verbose else load_settings().log_level
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def usage(
    providers: str = typer.Option(
        "all",
        "--providers", "-p",
        help="Comma-separated list of providers (anthropic,openai,...) or 'all'",
    ),
    key: list[str] = typer.Option(
        [],
        "--key", "-k",
        help="Provider key as provider=KEY; overrides the environment",
    ),
    subscription: list[str] = typer.Option(
        [],
        "--subscription", "-s",
        help="Monthly subscription as 'Name=20'",
    ),
    manual: list[str] = typer.Option(
        [],
        "--manual", "-m",
        help="Manually tracked API spend as label=amount",
    ),
    json_output: bool = typer.Option(
        False,
        "--json", "-j",
        help="Output as JSON",
    ),
):
    """Fetch the last 30 days of API usage and show total AI spend."""
    settings = load_settings()

    credentials = dict(settings.credentials)
    credentials.update({p.lower(): k for p, k in parse_pairs(key, "--key").items()})
    credentials = select_credentials(credentials, providers)

    subscriptions = [
        Subscription(name, cost, enabled=True)
        for name, cost in parse_amounts(subscription, "--subscription").items()
    ]
    manual_spend = parse_amounts(manual, "--manual")

    aggregator = SpendAggregator(timeout=settings.http_timeout)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
        disable=json_output,
    ) as progress:
        progress.add_task("Fetching usage...", total=None)
        results = asyncio.run(aggregator.aggregate(credentials))

    summary = aggregator.get_summary(results, subscriptions, manual_spend)

    if json_output:
        output = {
            "usage": [r.to_dict() for r in results],
            "summary": summary.to_dict(),
        }
        typer.echo(json.dumps(output, indent=2))
        return

    if not results:
        console.print("[yellow]No API keys provided.[/] Set e.g. ANTHROPIC_ADMIN_KEY or pass --key.")

    print_usage(summary)


def print_usage(summary: SpendSummary) -> None:
    """Render provider, model, daily and total panels."""
    if summary.results:
        table = Table(title="Spend by Provider (30 days)")
        table.add_column("Provider", style="magenta")
        table.add_column("Cost", justify="right")
        table.add_column("Tokens", justify="right")
        table.add_column("Note")

        for r in summary.results:
            table.add_row(
                PROVIDER_NAMES.get(r.provider, r.provider),
                f"${r.total_cost:,.2f}" if r.ok else "-",
                f"{r.total_tokens:,}" if r.by_model else "-",
                f"[yellow]{r.error}[/]" if r.error else "",
            )

        console.print(table)

    for r in summary.results:
        if not r.by_model:
            continue

        table = Table(title=f"{PROVIDER_NAMES.get(r.provider, r.provider)} by Model")
        table.add_column("Model", style="cyan")
        table.add_column("Cost", justify="right")
        table.add_column("Tokens", justify="right")

        for m in r.by_model:
            table.add_row(m.model, f"${m.cost:,.2f}", f"{m.tokens:,}")

        console.print(table)

    rows = summary.daily_rows()
    if rows:
        table = Table(title="Daily Spend")
        table.add_column("Date")
        for provider in summary.daily_providers:
            table.add_column(PROVIDER_NAMES.get(provider, provider), justify="right")
        table.add_column("Total", justify="right", style="green")

        for row in rows:
            table.add_row(
                row.date,
                *(f"${cost:,.2f}" for cost in row.by_provider.values()),
                f"${row.total:,.2f}",
            )

        console.print(table)

    console.print(Panel(
        f"[bold]Total AI Spend:[/] [yellow]${summary.total_cost:,.2f}[/]\n\n"
        f"[bold]API Usage:[/] ${summary.api_cost:,.2f} "
        f"(fetched ${summary.fetched_api_cost:,.2f}, manual ${summary.manual_api_cost:,.2f})\n"
        f"[bold]Subscriptions:[/] ${summary.subscription_cost:,.2f}/mo",
        title="Summary",
    ))


@app.command()
def pricing(
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="Only this provider"),
    json_output: bool = typer.Option(False, "--json", "-j"),
):
    """Show the per-1K-token pricing reference."""
    prices = list_prices(provider)

    if json_output:
        output = {
            name: {m: {"input": p.input, "output": p.output} for m, p in models.items()}
            for name, models in prices.items()
        }
        typer.echo(json.dumps(output, indent=2))
        return

    table = Table(title="Model Pricing (USD per 1K tokens)")
    table.add_column("Provider", style="magenta")
    table.add_column("Model", style="cyan")
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")

    for name, models in prices.items():
        for model, price in models.items():
            table.add_row(name, model, f"${price.input:.6f}", f"${price.output:.6f}")

    console.print(table)


@app.command()
def providers():
    """List supported providers."""
    table = Table(title="Supported Providers")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Usage API")

    for provider in SUPPORTED_PROVIDERS:
        note = UNSUPPORTED_MESSAGES.get(provider)
        table.add_row(
            provider,
            PROVIDER_NAMES[provider],
            f"[yellow]{note}[/]" if note else "[green]yes[/]",
        )

    console.print(table)


@app.command()
def version():
    """Show version information."""
    from aispend import __version__
    console.print(f"aispend v{__version__}")
    console.print("AI API Spend Tracker")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
