import zlib

import pytest

from zipsieve.crypto.zipcrypto import CipherValidator, encrypt_entry
from zipsieve.engines.checker import PasswordChecker, Verdict
from zipsieve.engines.decryptor import EntryDecryptor
from zipsieve.models import ZIP_BZIP2, ZIP_DEFLATED, ZIP_STORED, TargetEntry

from conftest import PASSWORD, find_header_false_positive

METHODS = [ZIP_STORED, ZIP_DEFLATED, ZIP_BZIP2]
CONTENT = b"Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 40


def _entry_from_plaintext(password, plaintext):
    crc = zlib.crc32(plaintext) & 0xFFFFFFFF
    data = encrypt_entry(password, plaintext, (crc >> 24) & 0xFF, bytes(11))
    return TargetEntry(
        name="test.txt",
        compress_type=ZIP_STORED,
        compress_size=len(data),
        file_size=len(plaintext),
        crc=crc,
        header=data[:12],
        payload=data[12:],
    )


class TestConcreteScenario:
    """Entry stored 4 byte "test", CRC 0xD87F7E0C, password "abc123" """

    def test_abc123_confirmed(self):
        entry = _entry_from_plaintext(b"abc123", b"test")
        assert entry.crc == 0xD87F7E0C
        keys = CipherValidator(entry).check_header(b"abc123")
        assert keys is not None
        assert EntryDecryptor(entry).verify(keys)
        assert PasswordChecker(entry)(b"abc123") is Verdict.ACCEPTED

    def test_wrong_password_rejected(self):
        entry = _entry_from_plaintext(b"abc123", b"test")
        assert PasswordChecker(entry)(b"abc124") is not Verdict.ACCEPTED


class TestEntryDecryptor:
    """Test full decrypt + decompress + CRC"""

    @pytest.mark.parametrize("method", METHODS)
    def test_true_password_accepted(self, entry_factory, method):
        entry = entry_factory(content=CONTENT, compression=method)
        assert PasswordChecker(entry)(PASSWORD.encode()) is Verdict.ACCEPTED

    @pytest.mark.parametrize("method", METHODS)
    def test_header_false_positive_rejected_without_crash(self, entry_factory, method):
        entry = entry_factory(content=CONTENT, compression=method)
        validator = CipherValidator(entry)
        fp = find_header_false_positive(validator, PASSWORD.encode())
        keys = validator.check_header(fp)
        assert keys is not None
        assert EntryDecryptor(entry).verify(keys) is False
        assert PasswordChecker(entry)(fp) is Verdict.REJECTED_BODY

    @pytest.mark.parametrize("method", METHODS)
    def test_many_false_positives_never_raise(self, entry_factory, method):
        entry = entry_factory(content=CONTENT, compression=method)
        checker = PasswordChecker(entry)
        verdicts = [checker(b"wrong-%d" % i) for i in range(3000)]
        assert Verdict.ACCEPTED not in verdicts

    def test_verify_does_not_mutate_keys(self, entry_factory):
        entry = entry_factory(content=CONTENT, compression=ZIP_DEFLATED)
        keys = CipherValidator(entry).check_header(PASSWORD.encode())
        before = keys.as_tuple()
        decryptor = EntryDecryptor(entry)
        assert decryptor.verify(keys)
        assert keys.as_tuple() == before
        assert decryptor.verify(keys)

    def test_small_blocks(self, entry_factory):
        entry = entry_factory(content=CONTENT, compression=ZIP_DEFLATED)
        keys = CipherValidator(entry).check_header(PASSWORD.encode())
        assert EntryDecryptor(entry, block_size=7).verify(keys)

    def test_crc_mismatch_rejected(self, entry_factory):
        entry = entry_factory(content=b"test")
        tampered = TargetEntry(
            name=entry.name, compress_type=entry.compress_type, compress_size=entry.compress_size,
            file_size=entry.file_size, crc=entry.crc ^ 0x00FFFFFF, header=entry.header,
            payload=entry.payload, flag_bits=entry.flag_bits, dos_time=entry.dos_time,
        )
        # byte atas CRC sama → header tetap lolos, CRC penuh gagal
        assert PasswordChecker(tampered)(PASSWORD.encode()) is Verdict.REJECTED_BODY

    def test_size_mismatch_rejected(self, entry_factory):
        entry = entry_factory(content=b"test")
        shorter = TargetEntry(
            name=entry.name, compress_type=entry.compress_type, compress_size=entry.compress_size,
            file_size=3, crc=entry.crc, header=entry.header,
            payload=entry.payload, flag_bits=entry.flag_bits, dos_time=entry.dos_time,
        )
        assert PasswordChecker(shorter)(PASSWORD.encode()) is Verdict.REJECTED_BODY

    def test_unsupported_method(self, entry_factory):
        entry = entry_factory(content=b"test")
        lzma_entry = TargetEntry(
            name=entry.name, compress_type=14, compress_size=entry.compress_size,
            file_size=entry.file_size, crc=entry.crc, header=entry.header, payload=entry.payload,
        )
        with pytest.raises(ValueError):
            EntryDecryptor(lzma_entry)
