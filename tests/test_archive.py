import os
import zipfile

import pyzipper
import pytest

from zipsieve.errors import ArchiveError, TargetEntryError
from zipsieve.models import FLAG_DATA_DESCRIPTOR, ZIP_DEFLATED, ZIP_STORED
from zipsieve.tools.benchmark import dos_datetime
from zipsieve.utils.archive import (
    PICK_SMALLEST,
    extract_with_password,
    get_zip_metadata,
    load_target_entry,
)

from conftest import PASSWORD

FILES = {
    "big.txt": b"big file content " * 100,
    "small.txt": b"tiny",
}


class TestLoadTargetEntry:
    def test_default_is_first_encrypted_file(self, zip_factory):
        entry = load_target_entry(zip_factory(files=FILES))
        assert entry.name == "big.txt"
        assert entry.file_size == len(FILES["big.txt"])
        assert len(entry.header) == 12
        assert len(entry.payload) == entry.compress_size - 12

    def test_pick_smallest(self, zip_factory):
        entry = load_target_entry(zip_factory(files=FILES), pick=PICK_SMALLEST)
        assert entry.name == "small.txt"

    def test_named_target(self, zip_factory):
        entry = load_target_entry(zip_factory(files=FILES, compression=ZIP_DEFLATED), target="small.txt")
        assert entry.name == "small.txt"
        assert entry.compress_type == ZIP_DEFLATED

    def test_missing_target(self, zip_factory):
        with pytest.raises(TargetEntryError) as exc:
            load_target_entry(zip_factory(files=FILES), target="nope.txt")
        assert exc.value.step == "target"

    def test_data_descriptor_keeps_mod_time(self, zip_factory):
        entry = load_target_entry(zip_factory(data_descriptor=True))
        assert entry.flag_bits & FLAG_DATA_DESCRIPTOR
        assert entry.dos_time == dos_datetime()[0]

    def test_missing_zip(self, tmp_path):
        with pytest.raises(ArchiveError) as exc:
            load_target_entry(str(tmp_path / "nope.zip"))
        assert exc.value.step == "archive"

    def test_garbage_file(self, tmp_path):
        path = tmp_path / "garbage.zip"
        path.write_bytes(b"this is not a zip archive at all" * 10)
        with pytest.raises(ArchiveError):
            load_target_entry(str(path))

    def test_unencrypted_zip(self, tmp_path):
        path = str(tmp_path / "plain.zip")
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("plain.txt", b"no password here")
        with pytest.raises(TargetEntryError):
            load_target_entry(path)
        with pytest.raises(TargetEntryError):
            load_target_entry(path, target="plain.txt")

    def test_aes_zip_refused(self, tmp_path):
        path = str(tmp_path / "aes.zip")
        with pyzipper.AESZipFile(path, "w", compression=pyzipper.ZIP_STORED,
                                 encryption=pyzipper.WZ_AES) as zf:
            zf.setpassword(PASSWORD.encode())
            zf.writestr("secret.txt", b"aes protected")
        with pytest.raises(TargetEntryError) as exc:
            load_target_entry(path)
        assert "AES" in str(exc.value)


class TestMetadataAndExtract:
    def test_get_zip_metadata(self, zip_factory):
        meta = get_zip_metadata(zip_factory(files=FILES))
        assert meta["entries"] == 2
        assert meta["encrypted"] is True
        assert meta["aes"] is False
        assert meta["total_uncompressed"] == sum(len(v) for v in FILES.values())
        assert {it["name"] for it in meta["items"]} == set(FILES)

    def test_extract_with_password(self, zip_factory, tmp_path):
        path = zip_factory(files=FILES, compression=ZIP_DEFLATED)
        out = extract_with_password(path, PASSWORD.encode(), str(tmp_path / "out"))
        for name, content in FILES.items():
            with open(os.path.join(out, name), "rb") as f:
                assert f.read() == content

    def test_extract_stored(self, zip_factory, tmp_path):
        path = zip_factory(files={"a.bin": b"\x00\x01\x02"}, compression=ZIP_STORED)
        out = extract_with_password(path, PASSWORD.encode(), str(tmp_path / "stored"))
        assert os.listdir(out) == ["a.bin"]
