from zipsieve.crypto.zipcrypto import (
    CRC_TABLE,
    CipherValidator,
    KeyState,
    crc_update,
    encrypt_entry,
)

__all__ = ["CRC_TABLE", "CipherValidator", "KeyState", "crc_update", "encrypt_entry"]
