# zipsieve/ui/theming.py
"""
Simple theming registry untuk konsistensi warna UI.
`messages.py` dan `dashboard.py` membaca warna dari sini.
"""

from __future__ import annotations

from typing import Dict

THEMES: Dict[str, Dict[str, str]] = {
    "default": {
        "info": "magenta",
        "attention": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red",
        "title": "bold magenta",
        "panel": "bold white",
    },
    "neon": {
        "info": "bright_magenta",
        "attention": "bright_cyan",
        "success": "bright_green",
        "warning": "bright_yellow",
        "error": "bright_red",
        "title": "bold bright_magenta",
        "panel": "bold bright_white",
    },
    "matrix": {
        "info": "green",
        "attention": "bright_black",
        "success": "green",
        "warning": "yellow",
        "error": "red",
        "title": "bold green",
        "panel": "bold green",
    },
}

_active = "default"


def set_theme(name: str) -> None:
    global _active
    if name in THEMES:
        _active = name
    else:
        raise ValueError(f"Theme '{name}' tidak ditemukan. Pilihan: {list(THEMES.keys())}")


def get_style(kind: str) -> str:
    return THEMES[_active].get(kind, "white")
