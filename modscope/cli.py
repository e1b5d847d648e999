"""modscope CLI -- run the moderation engine over a window file."""

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from modscope import __version__

console = Console()

_STATUS_STYLES = {"safe": "green", "suspicious": "yellow", "dangerous": "red"}


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", default=None, help="Engine config YAML file")
@click.option("--verbose", "-v", count=True, help="-v for info, -vv for debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: int):
    """modscope -- community risk and moderation analytics.

    Profiles users, classifies links and assembles moderation reports
    from a window of chat messages.
    """
    level = logging.WARNING - 10 * min(verbose, 2)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )

    from modscope.config import EngineConfig, load_config
    from modscope.errors import ModscopeError

    try:
        config = load_config(config_path) if config_path else EngineConfig()
    except ModscopeError as e:
        _fail(e)
    ctx.obj = config


def _fail(error: Exception):
    console.print(f"[red]Error:[/] {error}")
    sys.exit(1)


def _assembler(config, window_path: str):
    """Load the window and wire an assembler around it."""
    from dataclasses import replace

    from modscope.analyzers.profiler import UserProfiler
    from modscope.errors import ModscopeError
    from modscope.loader import load_window
    from modscope.reports.assembler import ReportAssembler

    try:
        window = load_window(window_path, neutral_health=config.neutral_channel_health)
        tables = config.load_tables()
    except ModscopeError as e:
        _fail(e)

    if window.rules:
        tables = replace(tables, rules=window.rules)

    assembler = ReportAssembler(
        profiler=UserProfiler(tables=tables, config=config),
        channel_analyzer=window.channel_health,
    )
    return window, assembler


# ── Profile ──────────────────────────────────────────────────────────


@main.command()
@click.argument("window_path")
@click.option("--user", "-u", "user_ids", multiple=True, help="User id to profile (default: every author)")
@click.pass_obj
def profile(config, window_path: str, user_ids: tuple[str, ...]):
    """Profile users in a window file, riskiest first."""
    window, assembler = _assembler(config, window_path)
    profiler = assembler.profiler

    console.print(f"\n[bold blue]modscope[/] — Profiling {window.summary()}\n")

    ids = list(user_ids) or list(dict.fromkeys(m.user for m in window.messages))
    profiles = profiler.analyze_multiple_users(ids, window.messages, window.users)

    if not profiles:
        console.print("[yellow]No users to profile.[/]")
        return

    table = Table(title=f"User Risk Profiles ({len(profiles)})")
    table.add_column("Rank", style="dim", width=4)
    table.add_column("User", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Messages", justify="right")
    table.add_column("Violations", justify="right")
    table.add_column("Action")
    table.add_column("Reason")

    for i, p in enumerate(profiles):
        style = "red" if p.risk_score >= config.high_risk_threshold else "green"
        table.add_row(
            str(i + 1),
            p.username,
            f"[{style}]{p.risk_score}[/]",
            str(p.message_count),
            str(len(p.violations)),
            f"{p.recommended_action.action.value} ({p.recommended_action.priority.value})",
            p.recommended_action.reason,
        )

    console.print(table)


# ── Report ───────────────────────────────────────────────────────────


@main.command()
@click.argument("window_path")
@click.option(
    "--type",
    "-t",
    "report_type",
    default="comprehensive",
    type=click.Choice(["user_safety", "channel_optimization", "server_health", "comprehensive"]),
)
@click.option("--query", "-q", default="", help="Moderator question that narrows the report")
@click.option("--json", "as_json", is_flag=True, help="Print the full report as JSON")
@click.pass_obj
def report(config, window_path: str, report_type: str, query: str, as_json: bool):
    """Generate a moderation report for a window file."""
    import json

    window, assembler = _assembler(config, window_path)

    if report_type == "user_safety":
        result = assembler.generate_user_safety_report(window.messages, window.users, query=query)
    elif report_type == "channel_optimization":
        result = assembler.generate_channel_optimization_report(window.server, query=query)
    elif report_type == "server_health":
        result = assembler.generate_server_health_report(window.messages, window.users)
    else:
        result = assembler.generate_comprehensive_report(
            window.server, window.messages, window.users, query=query
        )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    console.print(Panel(assembler.format_report_for_ai(result, query), title="Moderation Report"))


# ── Links ────────────────────────────────────────────────────────────


@main.command()
@click.argument("text")
@click.option("--query", "-q", default="", help="Rank the links for this question")
@click.pass_obj
def links(config, text: str, query: str):
    """Classify every link found in TEXT."""
    from modscope.errors import ModscopeError
    from modscope.links.classifier import classify_link_purpose, classify_link_safety, extract_links
    from modscope.links.responder import generate_smart_link_response

    try:
        tables = config.load_tables()
    except ModscopeError as e:
        _fail(e)

    urls = extract_links(text)
    if not urls:
        console.print("[yellow]No links found.[/]")
        return

    table = Table(title=f"Links ({len(urls)} found)")
    table.add_column("URL", style="cyan")
    table.add_column("Safety")
    table.add_column("Confidence", justify="right")
    table.add_column("Category")
    table.add_column("Reason")

    for url in urls:
        safety = classify_link_safety(url, tables)
        purpose = classify_link_purpose(url, tables)
        style = _STATUS_STYLES[safety.status.value]
        table.add_row(
            url,
            f"[{style}]{safety.status.value}[/]",
            f"{safety.confidence:.2f}",
            purpose.category.value,
            safety.reasons[0] if safety.reasons else "",
        )

    console.print(table)

    if query:
        console.print(Panel(generate_smart_link_response(query, urls, tables), title="Link Answer"))


# ── Tables ───────────────────────────────────────────────────────────


@main.command("check-tables")
@click.argument("tables_path")
def check_tables(tables_path: str):
    """Validate a lexicon/pattern tables file."""
    from modscope.errors import ModscopeError
    from modscope.lexicon.tables import load_tables

    console.print(f"\n[bold blue]modscope[/] — Checking tables: {tables_path}\n")

    try:
        tables = load_tables(tables_path)
    except ModscopeError as e:
        console.print(f"  [red]x[/] {e.message}")
        sys.exit(1)

    console.print(f"  [green]v[/] Tables v{tables.version} loaded")
    console.print(
        f"    {len(tables.toxicity_keywords)} toxicity keywords, "
        f"{len(tables.harassment_patterns)} harassment patterns, "
        f"{len(tables.spam_patterns)} spam patterns"
    )
    console.print(
        f"    {len(tables.links.malicious)} malicious and {len(tables.links.trusted)} trusted domains, "
        f"{len(tables.purposes)} purpose rules, {len(tables.intents)} intents, "
        f"{len(tables.rules)} server rules"
    )


if __name__ == "__main__":
    main()
