"""Tests for the local snapshot cache."""

import logging

import pytest

from crew_scheduler.storage import check_snapshot, list_snapshots, load_snapshot, save_snapshot
from crew_scheduler.utils import find_by_id, normalize_snapshot


def _snapshot(sid, generated_at):
    return {
        "snapshot_id": sid,
        "generated_at": generated_at,
        "jobs": [{"id": "J1", "scheduledTime": "2024-06-01T14:00:00Z"}],
        "technicians": [{"id": "T1"}],
    }


class TestSnapshotStorage:
    def test_save_and_load_latest(self, tmp_path):
        save_snapshot(tmp_path, _snapshot("s1", "2024-06-01T00:00:00Z"))
        save_snapshot(tmp_path, _snapshot("s2", "2024-06-02T00:00:00Z"))
        assert load_snapshot(tmp_path)["snapshot_id"] == "s2"
        assert load_snapshot(tmp_path, "s1")["jobs"][0]["id"] == "J1"

    def test_list_newest_first(self, tmp_path):
        save_snapshot(tmp_path, _snapshot("old", "2024-06-01T00:00:00Z"))
        save_snapshot(tmp_path, _snapshot("new", "2024-06-03T00:00:00Z"))
        rows = list_snapshots(tmp_path)
        assert [r["snapshot_id"] for r in rows] == ["new", "old"]
        assert rows[0]["counts"] == {"jobs": 1, "technicians": 1}
        assert rows[0]["job_statuses"] == {"unknown": 1}
        assert len(list_snapshots(tmp_path, limit=1)) == 1

    def test_missing_snapshot(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_snapshot(tmp_path)
        with pytest.raises(FileNotFoundError):
            load_snapshot(tmp_path, "nope")

    def test_corrupt_file_raises_value_error(self, tmp_path):
        path = save_snapshot(tmp_path, _snapshot("s1", "2024-06-01T00:00:00Z"))
        path.write_text('{"snapshot_id": "s1", "jobs": [', encoding="utf-8")
        with pytest.raises(ValueError, match="not valid JSON"):
            load_snapshot(tmp_path, "s1")

    def test_malformed_payload_raises_value_error(self, tmp_path):
        path = save_snapshot(tmp_path, _snapshot("s1", "2024-06-01T00:00:00Z"))
        path.write_text('{"snapshot_id": "s1", "jobs": {"id": "J1"}, "technicians": []}', encoding="utf-8")
        with pytest.raises(ValueError, match="'jobs' must be a list"):
            load_snapshot(tmp_path)

    def test_mismatched_id_raises_value_error(self, tmp_path):
        path = save_snapshot(tmp_path, _snapshot("s1", "2024-06-01T00:00:00Z"))
        path.rename(path.with_name("s2.json"))
        with pytest.raises(ValueError, match="records id 's1'"):
            load_snapshot(tmp_path, "s2")

    def test_list_skips_bad_files(self, tmp_path, caplog):
        save_snapshot(tmp_path, _snapshot("good", "2024-06-01T00:00:00Z"))
        (tmp_path / "snapshots" / "broken.json").write_text("[]", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="crew_scheduler.storage"):
            assert [r["snapshot_id"] for r in list_snapshots(tmp_path)] == ["good"]
        assert "broken.json" in caplog.text

    def test_save_rejects_non_object_records(self, tmp_path):
        bad = _snapshot("s1", "2024-06-01T00:00:00Z")
        bad["technicians"] = ["T1"]
        with pytest.raises(ValueError, match="every entry in 'technicians'"):
            save_snapshot(tmp_path, bad)

    @pytest.mark.parametrize("sid", ["../escape", "a/b", ".hidden"])
    def test_rejects_path_like_ids(self, tmp_path, sid):
        with pytest.raises(ValueError, match="invalid snapshot id"):
            load_snapshot(tmp_path, sid)

    def test_check_snapshot_returns_payload(self):
        snapshot = _snapshot("s1", None)
        assert check_snapshot(snapshot, "s1") is snapshot


class TestSnapshotHelpers:
    def test_normalize_fills_defaults(self):
        snapshot = normalize_snapshot({"jobs": [], "technicians": []})
        assert snapshot["snapshot_id"].startswith("snap-")
        assert snapshot["generated_at"].endswith("Z")

    def test_normalize_rejects_bad_lists(self):
        with pytest.raises(ValueError):
            normalize_snapshot({"jobs": {"id": "J1"}})

    def test_find_by_id(self):
        records = [{"id": "T1"}, {"id": "T2"}]
        assert find_by_id(records, "T2", "technician") == {"id": "T2"}
        with pytest.raises(ValueError, match="technician 'T3' not found"):
            find_by_id(records, "T3", "technician")
