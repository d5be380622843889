"""ZIPSIEVE – parallel wordlist password recovery untuk ZIP ZipCrypto."""

__version__ = "0.1.0"
