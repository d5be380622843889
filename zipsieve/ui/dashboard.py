# zipsieve/ui/dashboard.py
# -------------------------------------------------------------------
# Dashboard live untuk progress worker & monitoring CPU/RAM,
# plus ringkasan akhir (show_summary).
# -------------------------------------------------------------------

from __future__ import annotations

import math
from datetime import timedelta
from typing import Any, Dict, Optional

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from zipsieve.ui.theming import get_style
from zipsieve.utils.sysinfo import get_sysinfo

console = Console()


def format_eta(seconds: Optional[float]) -> str:
    if seconds is None or math.isinf(seconds):
        return "—"
    if seconds > 10**8:
        return "∞"
    return str(timedelta(seconds=int(max(0, seconds))))


def render_dashboard(zip_name: str, wordlist_name: str, workers: int,
                     progress: Dict[str, Any], status: str = "Running",
                     engine: str = "thread") -> Panel:
    done = progress.get("done", 0)
    total = progress.get("total")
    rate = progress.get("rate") or 0.0
    sysinfo = get_sysinfo()

    table = Table(title=f"ZIPSIEVE – {engine} engine", title_style=get_style("title"),
                  show_header=False, expand=True)
    table.add_row("📦 ZIP", zip_name)
    table.add_row("📝 Wordlist", wordlist_name)
    table.add_row("🧠 Worker", str(workers))
    if total:
        table.add_row("✅ Tested", f"{done:,} / {total:,} ({progress.get('pct') or 0:.1f}%)")
    else:
        table.add_row("✅ Tested", f"{done:,}")
    table.add_row("🎯 Header hit", f"{progress.get('header_hits', 0):,}")
    table.add_row("⚡ Rate", f"{rate:,.0f} pw/s (sekarang {progress.get('rate_now') or 0.0:,.0f})")
    table.add_row("⏳ ETA", format_eta(progress.get("eta")))
    table.add_row("🖥 CPU", f"{sysinfo['cpu_percent']:.1f}%")
    table.add_row("🧩 RAM", f"{sysinfo['ram_percent']:.1f}%")
    if sysinfo["temp"] is not None:
        table.add_row("🌡 Suhu", f"{sysinfo['temp']:.0f}°C")
    table.add_row("📈 Status", status)
    return Panel(Align.center(table), border_style=get_style("attention"),
                 title=f"[{get_style('panel')}]Live Dashboard[/]")


def summary_table(result: Dict[str, Any]) -> Table:
    table = Table(title="Ringkasan", title_style=get_style("title"), show_header=False)
    table.add_row("Engine", str(result.get("engine")))
    table.add_row("Entry", str(result.get("entry")))
    table.add_row("Status", str(result.get("status")))
    table.add_row("Password", result.get("password") or "—")
    table.add_row("Tested", f"{result.get('tested', 0):,}")
    table.add_row("Header hit", f"{result.get('header_hits', 0):,}")
    table.add_row("Waktu", f"{result.get('elapsed') or 0.0:.2f}s")
    table.add_row("Rate", f"{result.get('rate') or 0.0:,.0f} pw/s")
    if result.get("log_file"):
        table.add_row("Log", str(result["log_file"]))
    return table


def show_summary(result: Dict[str, Any]) -> None:
    console.print(Panel(summary_table(result), border_style=get_style("info")))
