#!/usr/bin/env python3
# zipsieve/cli.py – ZIPSIEVE Main Entrypoint
# --------------------------------------------------------------------
# CLI Options:
#   ZIP -w WORDLIST [-t TARGET] [--smallest]
#   --engine {thread,process,sequential}
#   --threads, --chunk-size, --prefetch, --start-at, --timeout
#   --extract [DIR], --info, --benchmark
#   --no-live, --log-dir, --no-log, --theme
#
# Exit code:
#   0 = password ditemukan, 1 = wordlist habis, 2 = setup/opsi salah,
#   3 = worker crash, 130 = dibatalkan (CTRL+C / timeout)
# --------------------------------------------------------------------

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from rich.markup import escape
from rich.table import Table

from zipsieve import __version__
from zipsieve.engines import DEFAULT_CHUNK_SIZE, ENGINES, get_engine
from zipsieve.errors import SetupError, WordlistError, WorkerError
from zipsieve.models import SearchStatus
from zipsieve.ui import dashboard
from zipsieve.ui import messages as ui
from zipsieve.ui.theming import THEMES, set_theme
from zipsieve.utils.archive import (
    PICK_FIRST,
    PICK_SMALLEST,
    extract_with_password,
    get_zip_metadata,
    load_target_entry,
)
from zipsieve.utils.logger import DEFAULT_LOG_DIR, Logger, mk_log_file
from zipsieve.utils.sysinfo import format_sysinfo
from zipsieve.utils.wordlist import CandidateSource

EXIT_FOUND = 0
EXIT_EXHAUSTED = 1
EXIT_SETUP = 2
EXIT_WORKER = 3
EXIT_CANCELLED = 130

_EXIT_BY_STATUS = {
    SearchStatus.FOUND: EXIT_FOUND,
    SearchStatus.EXHAUSTED: EXIT_EXHAUSTED,
    SearchStatus.CANCELLED: EXIT_CANCELLED,
}


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"bukan angka: {value}") from None
    if n < 1:
        raise argparse.ArgumentTypeError(f"harus >= 1: {value}")
    return n


def _non_negative_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"bukan angka: {value}") from None
    if n < 0:
        raise argparse.ArgumentTypeError(f"tidak boleh negatif: {value}")
    return n


def _non_negative_float(value: str) -> float:
    try:
        n = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"bukan angka: {value}") from None
    if n < 0:
        raise argparse.ArgumentTypeError(f"tidak boleh negatif: {value}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zipsieve",
        description="ZIPSIEVE – parallel wordlist password recovery untuk ZIP (ZipCrypto)",
    )
    parser.add_argument("zip", nargs="?", help="Path ke file ZIP terenkripsi")
    parser.add_argument("-w", "--wordlist", help="Wordlist, satu kandidat per baris ('-' = stdin)")
    parser.add_argument("-t", "--target", help="Nama entry di dalam arsip (default: entry terenkripsi pertama)")
    parser.add_argument("--smallest", action="store_true",
                        help="Pakai entry terenkripsi terkecil sebagai target (lebih cepat)")
    parser.add_argument("--engine", choices=sorted(ENGINES), default="thread",
                        help="Engine pencarian (default: thread)")
    parser.add_argument("--threads", type=_positive_int, default=None,
                        help="Jumlah worker (default: jumlah logical core)")
    parser.add_argument("--chunk-size", type=_positive_int, default=DEFAULT_CHUNK_SIZE,
                        help=f"Kandidat per chunk (default: {DEFAULT_CHUNK_SIZE})")
    parser.add_argument("--prefetch", type=_positive_int, default=None,
                        help="Chunk yang antri di queue (default: 2 x threads)")
    parser.add_argument("--start-at", type=_non_negative_int, default=0,
                        help="Lewati N baris pertama wordlist (lanjut dari run sebelumnya)")
    parser.add_argument("--timeout", type=_non_negative_float, default=None,
                        help="Batas waktu search dalam detik")
    parser.add_argument("--extract", nargs="?", const="", default=None, metavar="DIR",
                        help="Ekstrak arsip setelah password ditemukan")
    parser.add_argument("--info", action="store_true", help="Tampilkan isi arsip lalu keluar")
    parser.add_argument("--benchmark", action="store_true", help="Benchmark semua engine lalu keluar")
    parser.add_argument("--no-live", action="store_true", help="Nonaktifkan live dashboard")
    parser.add_argument("--log-dir", default=DEFAULT_LOG_DIR, help="Folder file log (default: ./logs)")
    parser.add_argument("--no-log", action="store_true", help="Jangan tulis file log")
    parser.add_argument("--theme", choices=sorted(THEMES), default="default")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def display_password(password: bytes) -> str:
    try:
        return password.decode("utf-8")
    except UnicodeDecodeError:
        return repr(password)


def show_info(zip_file: str) -> None:
    meta = get_zip_metadata(zip_file)
    table = Table(title=f"📦 {escape(zip_file)}")
    for col in ("Entry", "Method", "Compressed", "Size", "Encrypted", "AES"):
        table.add_column(col)
    for it in meta["items"]:
        table.add_row(
            escape(it["name"]), str(it["method"]), f"{it['compressed']:,}", f"{it['size']:,}",
            "✔" if it["encrypted"] else "", "✔" if it["aes"] else "",
        )
    ui.console.print(table)


def _open_logger(args) -> Optional[Logger]:
    if args.no_log:
        return None
    try:
        return Logger(mk_log_file(args.zip, args.log_dir))
    except OSError as e:
        ui.warning(f"⚠ Gagal membuat file log: {escape(str(e))}")
        return None


def run(args) -> int:
    logger = _open_logger(args)
    try:
        return _run(args, logger)
    finally:
        if logger:
            logger.close()


def _run(args, logger: Optional[Logger]) -> int:
    def log(msg):
        if logger:
            logger.write(msg)

    # --- setup (fatal sebelum worker jalan) ---
    source = None
    try:
        entry = load_target_entry(args.zip, target=args.target,
                                  pick=PICK_SMALLEST if args.smallest else PICK_FIRST)
        source = CandidateSource.from_path(args.wordlist, start_at=args.start_at, count_total=True)
        if source.total == 0:
            raise WordlistError(f"Wordlist kosong (setelah start-at {args.start_at}): {args.wordlist}")
        engine_cls = get_engine(args.engine)
        engine = engine_cls(
            entry, source,
            threads=args.threads,
            chunk_size=args.chunk_size,
            prefetch=args.prefetch,
            timeout=args.timeout,
            live=not args.no_live,
            logger=logger,
            zip_label=args.zip,
            wordlist_label=args.wordlist,
        )
    except SetupError as e:
        if source is not None:
            source.close()
        log(f"SETUP ERROR step={e.step} {e.args[0]}")
        ui.setup_failed(e.step, escape(e.args[0]))
        return EXIT_SETUP

    ui.info(
        f"📦 ZIP    : {escape(args.zip)}\n"
        f"🎯 Target : {escape(entry.name)} (method {entry.compress_type}, {entry.file_size:,} byte)\n"
        f"📝 Wordlist: {escape(args.wordlist)}\n"
        f"🧠 Engine : {engine.name}"
        + (f" · {engine.threads} worker" if hasattr(engine, "threads") else "")
        + f"\n🖥  {format_sysinfo()}",
        title="ZIPSIEVE",
    )
    if args.start_at:
        ui.attention(f"⏩ Lanjut dari baris {args.start_at:,} (baris sebelumnya dilewati)")

    # --- search ---
    try:
        with source:
            outcome = engine.run()
    except WorkerError as e:
        log(f"WORKER ERROR {e}")
        ui.error(f"❌ Worker crash:\n{escape(str(e))}")
        return EXIT_WORKER
    except SetupError as e:
        # misal wordlist gagal dibaca di tengah jalan
        log(f"SETUP ERROR step={e.step} {e.args[0]}")
        ui.setup_failed(e.step, escape(e.args[0]))
        return EXIT_SETUP

    result = engine.result_schema(outcome, extra={"log_file": logger.log_path if logger else None})
    if outcome.found:
        result["password"] = display_password(outcome.password)
        ui.password_found(escape(result["password"]), elapsed=outcome.elapsed,
                          rate=outcome.rate, tested=outcome.tested, source=engine.name)
        if args.extract is not None:
            try:
                outdir = extract_with_password(args.zip, outcome.password, args.extract or None)
                ui.success(f"✔ Semua file diekstrak ke: {escape(outdir)}")
                log(f"EXTRACTED {outdir}")
            except Exception as e:  # password sudah benar; ekstraksi cuma bonus
                ui.warning(f"⚠ Password benar tapi ekstraksi gagal:\n{escape(str(e))}")
                log(f"EXTRACT FAILED {e!r}")
    elif outcome.status is SearchStatus.CANCELLED:
        ui.search_cancelled(elapsed=outcome.elapsed, rate=outcome.rate, tested=outcome.tested)
    else:
        ui.password_not_found(elapsed=outcome.elapsed, rate=outcome.rate,
                              tested=outcome.tested, source=engine.name)

    dashboard.show_summary(result)
    return _EXIT_BY_STATUS[outcome.status]


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_theme(args.theme)

    if args.benchmark:
        from zipsieve.tools.benchmark import run_benchmark
        run_benchmark(threads=args.threads, chunk_size=args.chunk_size)
        return 0

    if not args.zip:
        parser.error("ZIP wajib diisi")

    if args.info:
        try:
            show_info(args.zip)
        except SetupError as e:
            ui.setup_failed(e.step, escape(e.args[0]))
            return EXIT_SETUP
        return 0

    if not args.wordlist:
        parser.error("--wordlist wajib diisi")

    try:
        return run(args)
    except KeyboardInterrupt:
        ui.warning("Dibatalkan oleh user (CTRL+C).")
        return EXIT_CANCELLED


if __name__ == "__main__":
    sys.exit(main())
