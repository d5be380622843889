import os
import zipfile

import pytest
from rich.panel import Panel

from zipsieve.cli import build_parser, display_password, main
from zipsieve.errors import WordlistError
from zipsieve.ui.dashboard import format_eta, render_dashboard, summary_table
from zipsieve.ui.theming import set_theme
from zipsieve.utils.wordlist import CandidateSource

from conftest import PASSWORD

QUIET = ["--no-live", "--no-log", "--threads", "2"]


class TestMainExitCodes:
    def test_found(self, zip_factory, wordlist_factory):
        wl = wordlist_factory(["nope", "salah", PASSWORD, "lagi"])
        assert main([zip_factory(), "-w", wl] + QUIET) == 0

    def test_exhausted(self, zip_factory, wordlist_factory):
        wl = wordlist_factory(["nope", "salah"])
        assert main([zip_factory(), "-w", wl] + QUIET) == 1

    @pytest.mark.parametrize("engine", ["sequential", "process"])
    def test_other_engines(self, zip_factory, wordlist_factory, engine):
        wl = wordlist_factory(["x", PASSWORD])
        assert main([zip_factory(), "-w", wl, "--engine", engine] + QUIET) == 0

    def test_missing_zip(self, tmp_path, wordlist_factory):
        wl = wordlist_factory(["a"])
        assert main([str(tmp_path / "missing.zip"), "-w", wl] + QUIET) == 2

    def test_missing_wordlist(self, zip_factory, tmp_path):
        assert main([zip_factory(), "-w", str(tmp_path / "missing.txt")] + QUIET) == 2

    def test_empty_wordlist(self, zip_factory, wordlist_factory):
        assert main([zip_factory(), "-w", wordlist_factory([])] + QUIET) == 2

    def test_unencrypted_zip(self, tmp_path, wordlist_factory):
        path = str(tmp_path / "plain.zip")
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("plain.txt", b"data")
        assert main([path, "-w", wordlist_factory(["a"])] + QUIET) == 2

    def test_timeout_zero_is_cancelled(self, zip_factory, wordlist_factory):
        wl = wordlist_factory([f"pw{i}" for i in range(50_000)])
        assert main([zip_factory(), "-w", wl, "--timeout", "0"] + QUIET) == 130

    def test_wordlist_read_error_mid_search(self, zip_factory, wordlist_factory, monkeypatch):
        original_take = CandidateSource.take
        calls = {"n": 0}

        def flaky_take(self, n):
            calls["n"] += 1
            if calls["n"] > 1:
                raise WordlistError("Gagal membaca wordlist: disk error")
            return original_take(self, n)

        monkeypatch.setattr(CandidateSource, "take", flaky_take)
        wl = wordlist_factory(["a", "b", "c", "d"])
        argv = [zip_factory(), "-w", wl, "--chunk-size", "1", "--prefetch", "1"] + QUIET
        assert main(argv) == 2
        assert calls["n"] >= 2

    def test_extract(self, zip_factory, wordlist_factory, tmp_path):
        path = zip_factory(files={"hello.txt": b"hello"})
        out = str(tmp_path / "extracted")
        wl = wordlist_factory([PASSWORD])
        assert main([path, "-w", wl, "--extract", out] + QUIET) == 0
        with open(os.path.join(out, "hello.txt"), "rb") as f:
            assert f.read() == b"hello"

    def test_log_file_written(self, zip_factory, wordlist_factory, tmp_path):
        log_dir = str(tmp_path / "logs")
        wl = wordlist_factory([PASSWORD])
        assert main([zip_factory(), "-w", wl, "--no-live", "--log-dir", log_dir]) == 0
        files = os.listdir(log_dir)
        assert len(files) == 1
        with open(os.path.join(log_dir, files[0]), encoding="utf-8") as f:
            text = f.read()
        assert "START engine=thread" in text
        assert "FINISHED status=found" in text

    def test_info(self, zip_factory):
        assert main([zip_factory(), "--info"]) == 0

    def test_info_missing_zip(self, tmp_path):
        assert main([str(tmp_path / "nope.zip"), "--info"]) == 2


class TestParser:
    @pytest.mark.parametrize("argv", [
        ["a.zip", "-w", "w.txt", "--threads", "0"],
        ["a.zip", "-w", "w.txt", "--chunk-size", "-3"],
        ["a.zip", "-w", "w.txt", "--start-at", "-1"],
        ["a.zip", "-w", "w.txt", "--timeout", "abc"],
        ["a.zip", "-w", "w.txt", "--engine", "gpu"],
    ])
    def test_invalid_options(self, argv):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(argv)
        assert exc.value.code == 2

    def test_wordlist_required(self, zip_factory):
        with pytest.raises(SystemExit):
            main([zip_factory()])

    def test_defaults(self):
        args = build_parser().parse_args(["a.zip", "-w", "w.txt"])
        assert args.engine == "thread"
        assert args.threads is None
        assert args.chunk_size == 64
        assert args.extract is None


class TestDisplay:
    def test_display_password(self):
        assert display_password(b"abc123") == "abc123"
        assert display_password(b"\xff\xfe") == repr(b"\xff\xfe")

    def test_render_dashboard(self):
        progress = {"done": 10, "total": 100, "header_hits": 1, "rate": 5.0, "eta": 18.0, "pct": 10.0}
        panel = render_dashboard("a.zip", "w.txt", 4, progress)
        assert isinstance(panel, Panel)

    def test_format_eta(self):
        assert format_eta(None) == "—"
        assert format_eta(61) == "0:01:01"

    def test_dashboard_follows_theme(self):
        set_theme("neon")
        try:
            panel = render_dashboard("a.zip", "w.txt", 2, {"done": 0})
            assert "bold bright_white" in str(panel.title)
            assert summary_table({"engine": "thread"}).title_style == "bold bright_magenta"
        finally:
            set_theme("default")
