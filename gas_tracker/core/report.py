"""Rich console rendering of gas and wallet stats"""

from datetime import datetime, timezone

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from gas_tracker.core.access import WalletStats
from gas_tracker.core.cooldown import CooldownStatus
from gas_tracker.core.formatting import format_approx_supra, format_compact_balance, format_usd_approx
from gas_tracker.core.tracker import TrackerState

console = Console()


def short_address(address: str) -> str:
    if len(address) <= 22:
        return address
    return f"{address[:12]}...{address[-10:]}"


def format_sync_time(ms: int | None) -> str:
    if not ms:
        return "never"
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def _with_usd(supra: str | None, price: float | None) -> str:
    if supra is None:
        return "[dim]n/a[/dim]"
    usd = format_usd_approx(supra, price)
    if usd is None:
        return f"{supra} SUPRA"
    return f"{supra} SUPRA [green](~${usd})[/green]"


def build_gas_table(
    state: TrackerState, cooldown: CooldownStatus | None = None, price: float | None = None
) -> Table:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="cyan", width=22)
    table.add_column(style="white")

    if not state.has_stats or state.result is None:
        table.add_row("Status", "[yellow]Sync for data[/yellow]")
    else:
        result = state.result
        table.add_row("Transactions", f"[blue]{result.tx_count}[/blue]")
        table.add_row("Lifetime Gas", _with_usd(result.total_fee_display, price))
        table.add_row("Avg Gas / Tx", _with_usd(result.avg_fee_display, price))
        table.add_row("Monthly Avg Gas", _with_usd(result.monthly_avg_fee_display, price))
        table.add_row("Last Sync", format_sync_time(state.last_sync_ms))

    if state.error:
        table.add_row("Error", f"[red]{state.error}[/red]")

    if cooldown is not None:
        if cooldown.active:
            table.add_row(
                "Re-sync",
                f"[yellow]recharging {cooldown.remaining_seconds}s "
                f"({cooldown.progress_ratio * 100:.0f}%)[/yellow]",
            )
        else:
            table.add_row("Re-sync", "[green]ready[/green]")

    return table


def print_gas_stats(
    state: TrackerState, cooldown: CooldownStatus | None = None, price: float | None = None
):
    """Print the gas stats panel for the tracked address"""
    title = Text()
    title.append("⛽ Lifetime Gas ", style="bold cyan")
    if state.address:
        title.append(short_address(state.address), style="bold white")

    panel = Panel(build_gas_table(state, cooldown, price), title=title, border_style="cyan", expand=False)
    console.print(panel)
    console.print()


def print_wallet_stats(stats: WalletStats):
    """Print balances, access requirement and holder rank"""
    table = Table(title="👛 Wallet", show_header=True)
    table.add_column("Metric", style="cyan", width=24)
    table.add_column("Value", style="white", justify="right")

    table.add_row("Address", short_address(stats.address))
    table.add_row("SUPRA", f"{format_compact_balance(stats.supra_balance_display)}")
    if stats.supra_usd_price is not None:
        table.add_row("SUPRA Price", f"${stats.supra_usd_price:.6f}")
        table.add_row(
            "SUPRA Value",
            f"[green]${format_usd_approx(stats.supra_balance_display, stats.supra_usd_price) or '0.00'}[/green]",
        )
    table.add_row("SUPRAWR", f"{format_approx_supra(stats.suprawr_balance_display)}")

    access = "[green]yes[/green]" if stats.meets_requirement else "[red]no[/red]"
    table.add_row("Meets Requirement", access)

    rank = stats.rank
    table.add_row("Holder Rank", f"[bold]{rank.label}[/bold] (tier {rank.tier})" if rank else "[dim]none[/dim]")

    console.print(table)
    console.print()
