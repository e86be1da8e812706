"""Tests for the EyeTracking facade: recording, export and import."""
from __future__ import annotations

import json
from pathlib import Path

import pyarrow.parquet as pq
import pytest

from eye_tracking.acquisition import SimulatedFaceTracker
from eye_tracking.configs import TrackerSettings
from eye_tracking.core import EyeTracking, RecorderState, SessionAggregator
from eye_tracking.errors import PersistenceError, PersistenceErrorKind, SerializationError
from eye_tracking.models import Session
from eye_tracking.serialization import KeyCasing, SessionCodec
from eye_tracking.storage import SessionStore

from conftest import FakeTracker, make_frame


@pytest.fixture
def eye_tracking(aggregator: SessionAggregator, store: SessionStore) -> EyeTracking:
    aggregator.store = store
    return EyeTracking(aggregator, store, SessionCodec())


class TestRecording:

    def test_end_session_keeps_and_persists(self, eye_tracking: EyeTracking, tracker: FakeTracker, store):
        eye_tracking.start_session()
        assert eye_tracking.state is RecorderState.RECORDING
        tracker.deliver(make_frame(1.0, x=10.0, y=20.0))
        session = eye_tracking.end_session()

        assert eye_tracking.sessions == [session]
        assert store.fetch_one(session.id) == session
        assert eye_tracking.pointer is not None

    def test_failed_persist_keeps_session_in_memory(self, eye_tracking: EyeTracking, tracker: FakeTracker):
        class BrokenStore:
            def write_one(self, session):
                raise PersistenceError(PersistenceErrorKind.WRITE, OSError("read-only"))

        eye_tracking.aggregator.store = BrokenStore()
        eye_tracking.start_session()
        tracker.deliver(make_frame(1.0))

        with pytest.raises(PersistenceError):
            eye_tracking.end_session()

        assert len(eye_tracking.sessions) == 1
        assert eye_tracking.sessions[0].is_finalized
        assert not eye_tracking.is_recording

    def test_pointer_listener(self, eye_tracking: EyeTracking, tracker: FakeTracker):
        seen = []
        eye_tracking.set_pointer_listener(lambda x, y: seen.append((x, y)))
        eye_tracking.start_session()
        tracker.deliver(make_frame(1.0))
        assert len(seen) == 1

    def test_shutdown_ends_running_session(self, eye_tracking: EyeTracking, tracker: FakeTracker):
        eye_tracking.start_session()
        tracker.deliver(make_frame(1.0))
        eye_tracking.shutdown()
        assert not eye_tracking.is_recording
        assert len(eye_tracking.sessions) == 1


class TestExport:

    def test_export_unknown_id(self, eye_tracking: EyeTracking):
        assert eye_tracking.export("nope") is None

    def test_export_from_memory(self, eye_tracking: EyeTracking, tracker: FakeTracker):
        eye_tracking.start_session()
        tracker.deliver(make_frame(1.0, x=3.0, y=4.0))
        session = eye_tracking.end_session()

        doc = json.loads(eye_tracking.export(session.id))
        assert doc["id"] == session.id
        assert doc["scanPath"][0]["x"] == 3.0

    def test_export_with_casing_override(self, eye_tracking: EyeTracking, tracker: FakeTracker):
        eye_tracking.start_session()
        session = eye_tracking.end_session()
        doc = json.loads(eye_tracking.export(session.id, casing=KeyCasing.SNAKE_CASE))
        assert "begin_time" in doc

    def test_export_falls_back_to_store(self, eye_tracking: EyeTracking, store: SessionStore, sample_session: Session):
        store.write_one(sample_session)
        assert SessionCodec().decode(eye_tracking.export(sample_session.id)) == sample_session

    def test_export_all_merges_memory_and_store(
        self, eye_tracking: EyeTracking, tracker: FakeTracker, store: SessionStore, sample_session: Session
    ):
        store.write_one(sample_session)
        eye_tracking.start_session()
        recorded = eye_tracking.end_session()

        exported = SessionCodec().decode_many(eye_tracking.export_all())
        assert {s.id for s in exported} == {sample_session.id, recorded.id}
        assert len(exported) == 2

    def test_export_parquet(self, eye_tracking: EyeTracking, store: SessionStore, sample_session: Session, tmp_path: Path):
        store.write_one(sample_session)
        scan_path_file, signals_file = eye_tracking.export_parquet(sample_session.id, tmp_path / "export")

        scan_path = pq.read_table(scan_path_file)
        assert scan_path.num_rows == 2
        assert scan_path.column("tracking_state").to_pylist() == [None, "limited.initializing"]

        signals = pq.read_table(signals_file)
        assert signals.num_rows == 2
        assert signals.column("signal_name").to_pylist() == ["eyeBlinkLeft", "eyeBlinkLeft"]
        assert signals.column("value").to_pylist() == pytest.approx([0.1, 0.9])

    def test_export_parquet_unknown_id(self, eye_tracking: EyeTracking, tmp_path: Path):
        assert eye_tracking.export_parquet("nope", tmp_path) is None


class TestImport:

    def test_import_session(self, eye_tracking: EyeTracking, store: SessionStore, sample_session: Session):
        payload = SessionCodec(KeyCasing.SNAKE_CASE).encode(sample_session)
        imported = eye_tracking.import_session(payload)

        assert imported == sample_session
        assert eye_tracking.sessions == [sample_session]
        assert store.fetch_one(sample_session.id) == sample_session

    def test_import_sessions(self, eye_tracking: EyeTracking, store: SessionStore, sample_session: Session):
        other = sample_session.model_copy(update={"id": "other"})
        eye_tracking.import_sessions(SessionCodec().encode_many([sample_session, other]))

        assert len(eye_tracking.sessions) == 2
        assert len(store.fetch_all()) == 2

    def test_reimport_replaces_same_id(self, eye_tracking: EyeTracking, store: SessionStore, sample_session: Session):
        payload = SessionCodec().encode_many([sample_session])
        eye_tracking.import_sessions(payload)
        eye_tracking.import_sessions(payload)

        updated = sample_session.model_copy(update={"end_time": sample_session.end_time + 5.0})
        eye_tracking.import_session(SessionCodec().encode(updated))

        assert eye_tracking.sessions == [updated]
        assert store.fetch_all() == [updated]
        assert len(SessionCodec().decode_many(eye_tracking.export_all())) == 1

    def test_import_malformed_changes_nothing(self, eye_tracking: EyeTracking, store: SessionStore):
        with pytest.raises(SerializationError):
            eye_tracking.import_sessions('[{"id": "half"}]')
        assert eye_tracking.sessions == []
        assert store.fetch_all() == []


class TestFromSettings:

    def test_records_simulated_session(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("EYE_TRACKING__STORE__PATH", str(tmp_path / "sessions.sqlite"))
        monkeypatch.setenv("EYE_TRACKING__APP_ID", "com.example.sim")
        monkeypatch.setenv("EYE_TRACKING__SIGNALS", '["eyeBlinkLeft"]')
        settings = TrackerSettings(_env_file=None)

        tracker = SimulatedFaceTracker(frequency=60)
        eye_tracking = EyeTracking.from_settings(settings, tracker)
        try:
            eye_tracking.start_session()
            for _ in range(30):
                tracker.emit()
            session = eye_tracking.end_session()
        finally:
            eye_tracking.shutdown()

        assert session.app_id == "com.example.sim"
        assert len(session.scan_path) == 30
        assert len(session.signals["eyeBlinkLeft"]) == 30
        assert all(g.tracking_state is None for g in session.scan_path)

        reopened = SessionStore(tmp_path / "sessions.sqlite")
        try:
            assert reopened.fetch_one(session.id) == session
        finally:
            reopened.close()

    def test_persist_on_end_disabled(self, tmp_path: Path):
        settings = TrackerSettings(
            _env_file=None,
            store={"path": tmp_path / "sessions.sqlite", "persist_on_end": False},
        )
        tracker = SimulatedFaceTracker()
        eye_tracking = EyeTracking.from_settings(settings, tracker)
        try:
            eye_tracking.start_session()
            tracker.emit()
            session = eye_tracking.end_session()
            assert eye_tracking.store.fetch_one(session.id) is None
            assert eye_tracking.export(session.id) is not None
        finally:
            eye_tracking.shutdown()
