from rich.console import Console
from rich.panel import Panel

from zipsieve.ui.theming import get_style

console = Console()


def info(msg, title="INFO"):
    console.print(Panel(msg, border_style=get_style("info"), title=title))


def attention(msg, title="ATTENTION"):
    console.print(Panel(msg, border_style=get_style("attention"), title=title))


def success(msg, title="SUCCESS"):
    console.print(Panel(msg, border_style=get_style("success"), title=title))


def warning(msg, title="WARNING"):
    console.print(Panel(msg, border_style=get_style("warning"), title=title))


def error(msg, title="ERROR"):
    console.print(Panel(msg, border_style=get_style("error"), title=title))


def _stats(elapsed, rate, tested):
    extra = []
    if elapsed is not None:
        extra.append(f"⏳ {elapsed:.2f}s")
    if rate is not None:
        extra.append(f"⚡ {rate:,.0f} pw/s")
    if tested is not None:
        extra.append(f"🔢 {tested:,} kandidat")
    return "\n[cyan]" + " · ".join(extra) + "[/]" if extra else ""


# === Shortcut khusus untuk zipsieve ===
def password_found(password, elapsed=None, rate=None, tested=None, source=""):
    msg = f"[{get_style('success')}]✅ Password ditemukan: [bold]{password}[/bold][/]"
    msg += _stats(elapsed, rate, tested)
    title = f"FOUND ({source})" if source else "FOUND"
    success(msg, title=title)


def password_not_found(elapsed=None, rate=None, tested=None, source=""):
    msg = f"[{get_style('error')}]❌ Password tidak ditemukan di wordlist[/]"
    msg += _stats(elapsed, rate, tested)
    title = f"FAILED ({source})" if source else "FAILED"
    error(msg, title=title)


def search_cancelled(elapsed=None, rate=None, tested=None):
    msg = f"[{get_style('warning')}]⚠️ Search dihentikan sebelum selesai[/]"
    msg += _stats(elapsed, rate, tested)
    warning(msg, title="CANCELLED")


def setup_failed(step, message):
    error(f"[{get_style('error')}]❌ Setup gagal di tahap [bold]{step}[/bold]:[/]\n{message}",
          title="SETUP ERROR")
