"""Tests for src.data.db — ScheduleDB (SQLite key/value storage)."""

import sqlite3

from src.data.db import ScheduleDB


class TestScheduleDB:
    def test_empty_db_loads_empty_list(self, schedule_db):
        assert schedule_db.load() == []

    def test_save_then_load(self, schedule_db):
        records = [{"id": 1, "title": "Standup", "time": "09:00"}]
        schedule_db.save(records)
        assert schedule_db.load() == records

    def test_save_overwrites_whole_array(self, schedule_db):
        schedule_db.save([{"id": 1}, {"id": 2}])
        schedule_db.save([{"id": 3}])
        assert schedule_db.load() == [{"id": 3}]

    def test_non_ascii_titles_survive(self, schedule_db):
        schedule_db.save([{"id": 1, "title": "朝会"}])
        assert schedule_db.load()[0]["title"] == "朝会"

    def test_persists_across_instances(self, tmp_db_path):
        ScheduleDB(db_path=tmp_db_path).save([{"id": 7}])
        assert ScheduleDB(db_path=tmp_db_path).load() == [{"id": 7}]

    def test_separate_keys_do_not_collide(self, tmp_db_path):
        ScheduleDB(db_path=tmp_db_path, key="a").save([{"id": 1}])
        assert ScheduleDB(db_path=tmp_db_path, key="b").load() == []

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "s.db"
        ScheduleDB(db_path=str(path)).save([])
        assert path.exists()


class TestScheduleDBCorruption:
    def _write_raw(self, path, value):
        with sqlite3.connect(path) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, 0)",
                ("schedules", value),
            )

    def test_invalid_json_loads_empty(self, schedule_db, tmp_db_path):
        self._write_raw(tmp_db_path, "{not json")
        assert schedule_db.load() == []

    def test_non_list_json_loads_empty(self, schedule_db, tmp_db_path):
        self._write_raw(tmp_db_path, '{"id": 1}')
        assert schedule_db.load() == []
