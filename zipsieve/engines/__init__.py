from zipsieve.engines.base import BaseEngine, DEFAULT_CHUNK_SIZE, default_threads
from zipsieve.engines.checker import PasswordChecker, Verdict
from zipsieve.engines.coordinator import ThreadEngine, WorkCoordinator
from zipsieve.engines.decryptor import EntryDecryptor, SUPPORTED_METHODS
from zipsieve.engines.process_engine import ProcessEngine
from zipsieve.engines.sequential_engine import SequentialEngine
from zipsieve.engines.state import SearchHandle

ENGINES = {
    "thread": ThreadEngine,
    "process": ProcessEngine,
    "sequential": SequentialEngine,
}


def get_engine(name: str):
    try:
        return ENGINES[name]
    except KeyError:
        raise ValueError(f"Engine tidak dikenal: {name}. Pilihan: {sorted(ENGINES)}") from None


__all__ = [
    "BaseEngine", "DEFAULT_CHUNK_SIZE", "default_threads",
    "PasswordChecker", "Verdict",
    "WorkCoordinator", "ThreadEngine", "ProcessEngine", "SequentialEngine",
    "EntryDecryptor", "SUPPORTED_METHODS", "SearchHandle",
    "ENGINES", "get_engine",
]
