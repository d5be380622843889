# zipsieve/utils/sysinfo.py
# -------------------------------------------------------------
# Utility functions untuk ambil info sistem (dashboard)
# - CPU usage
# - RAM usage
# - Temperatur (jika tersedia)
# -------------------------------------------------------------

import psutil


def get_sysinfo() -> dict:
    """Return dict info CPU, RAM, suhu"""
    try:
        cpu_percent = psutil.cpu_percent(interval=None)
        ram_percent = psutil.virtual_memory().percent
    except (psutil.Error, OSError):
        cpu_percent = 0.0
        ram_percent = 0.0

    temp = None
    # sensors_temperatures tidak ada di macOS/Windows
    sensors = getattr(psutil, "sensors_temperatures", None)
    if sensors is not None:
        try:
            temps = sensors()
        except (psutil.Error, OSError):
            temps = None
        if temps:
            for entries in temps.values():
                if entries:
                    temp = entries[0].current
                    break

    return {
        "cpu_percent": cpu_percent,
        "ram_percent": ram_percent,
        "temp": temp,
    }


def format_sysinfo() -> str:
    """Return string ringkas CPU/RAM/Suhu"""
    info = get_sysinfo()
    parts = [
        f"CPU {info['cpu_percent']:.1f}%",
        f"RAM {info['ram_percent']:.1f}%",
    ]
    if info["temp"] is not None:
        parts.append(f"🌡 {info['temp']:.1f}°C")
    return " | ".join(parts)


def logical_cores() -> int:
    return psutil.cpu_count(logical=True) or 1
