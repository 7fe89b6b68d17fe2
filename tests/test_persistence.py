"""
Tests for persistence — the resolution record file.
"""

import json
import time
from pathlib import Path

from relinker.core.models.record import ResolutionRecord
from relinker.core.persistence.record_file import (
    default_record_path,
    delete_record,
    load_record,
    save_record,
)


class TestRecordFile:
    """Tests for resolution record persistence."""

    def test_save_and_load(self, tmp_path: Path):
        """Record roundtrips through save/load."""
        path = tmp_path / ".server.relinker.json"
        record = ResolutionRecord(binary="/srv/server")
        record.record_package("libffi.so", "libffi8")
        record.record_built("libdispatch.so")

        save_record(record, path)
        loaded = load_record(path)

        assert loaded.binary == "/srv/server"
        assert loaded.packages == {"libffi.so": "libffi8"}
        assert loaded.built == ["libdispatch.so"]

    def test_load_missing_returns_none(self, tmp_path: Path):
        assert load_record(tmp_path / "nonexistent.json") is None

    def test_load_corrupt_returns_none(self, tmp_path: Path, caplog):
        path = tmp_path / "corrupt.json"
        path.write_text("not json at all {{{")
        with caplog.at_level("WARNING"):
            assert load_record(path) is None
        assert "Corrupt" in caplog.text

    def test_load_wrong_shape_returns_none(self, tmp_path: Path):
        path = tmp_path / "wrong.json"
        path.write_text(json.dumps({"packages": ["not", "a", "dict"]}))
        assert load_record(path) is None

    def test_save_creates_directories(self, tmp_path: Path):
        path = tmp_path / "deep" / "nested" / "record.json"
        save_record(ResolutionRecord(binary="x"), path)
        assert path.is_file()

    def test_save_is_valid_json(self, tmp_path: Path):
        path = tmp_path / "record.json"
        save_record(ResolutionRecord(binary="json-test"), path)
        data = json.loads(path.read_text())
        assert data["binary"] == "json-test"
        assert data["schema_version"] == 1

    def test_save_atomic_no_partial(self, tmp_path: Path):
        """No temp files are left behind."""
        path = tmp_path / "record.json"
        save_record(ResolutionRecord(binary="atomic"), path)
        assert list(tmp_path.glob(".record_*.tmp")) == []

    def test_save_updates_timestamp(self, tmp_path: Path):
        record = ResolutionRecord(binary="ts")
        old_ts = record.updated_at
        time.sleep(0.01)
        save_record(record, tmp_path / "record.json")
        assert record.updated_at != old_ts

    def test_delete(self, tmp_path: Path):
        path = tmp_path / "record.json"
        save_record(ResolutionRecord(), path)
        assert delete_record(path) is True
        assert not path.exists()
        assert delete_record(path) is False

    def test_default_path_next_to_binary(self):
        path = default_record_path(Path("/srv/blockheads/blockheads_server171"))
        assert path == Path("/srv/blockheads/.blockheads_server171.relinker.json")


class TestResolutionRecord:
    def test_empty(self):
        record = ResolutionRecord()
        assert record.empty
        record.record_built("libdispatch.so")
        assert not record.empty

    def test_record_built_dedupes(self):
        record = ResolutionRecord()
        record.record_built("libdispatch.so")
        record.record_built("libdispatch.so")
        assert record.built == ["libdispatch.so"]
