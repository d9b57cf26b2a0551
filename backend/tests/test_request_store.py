import sqlite3

from conftest import NOW, hours_ago
from doc_chaser.database import init_db
from doc_chaser.services.request_store import RequestStore
from doc_chaser.utils.timestamps import format_timestamp


class TestRequestStore:
    def test_create_generates_pending_request_with_unique_token(self, db_session):
        store = RequestStore(db_session)
        a = store.create("Jane Doe", "+15550102030", None, "Pay Stub")
        b = store.create("John Roe", "+15550102031", "john@example.com", "Tax Return")

        assert a.status == "pending"
        assert a.upload_token and b.upload_token
        assert a.upload_token != b.upload_token
        assert a.last_reminder_at is None
        assert a.reminders_stopped is False
        assert a.created_at.endswith("Z")

    def test_create_stores_deadline_in_utc(self, db_session):
        store = RequestStore(db_session)
        request = store.create("Jane", "+1", None, "Pay Stub", deadline=NOW)
        assert request.deadline == "2026-03-10T12:00:00Z"

    def test_lookup_by_token(self, db_session, make_request):
        store = RequestStore(db_session)
        make_request(upload_token="open")
        make_request(upload_token="done", status="completed")

        assert store.get_pending_by_token("open") is not None
        assert store.get_pending_by_token("done") is None
        assert store.get_by_token("done").status == "completed"

    def test_list_pending_excludes_stopped(self, db_session, make_request):
        store = RequestStore(db_session)
        kept = make_request()
        make_request(reminders_stopped=True)
        make_request(status="expired")

        assert [r.id for r in store.list_pending()] == [kept.id]

    def test_completion_happens_once(self, db_session, make_request):
        store = RequestStore(db_session)
        request = make_request()

        assert store.mark_completed(request.id, "https://files/1", NOW) is True
        assert store.mark_completed(request.id, "https://files/2") is False

        db_session.refresh(request)
        assert request.status == "completed"
        assert request.file_url == "https://files/1"
        assert request.uploaded_at == format_timestamp(NOW)

    def test_no_transition_out_of_completed(self, db_session, make_request):
        store = RequestStore(db_session)
        request = make_request(status="completed")

        assert store.mark_expired(request.id) is False
        assert store.record_reminder(request.id, None, NOW) is False
        db_session.refresh(request)
        assert request.status == "completed"

    def test_record_reminder_is_conditional_on_value_read(self, db_session, make_request):
        store = RequestStore(db_session)
        request = make_request(last_reminder_at=hours_ago(30))

        # The second write is based on a stale read of last_reminder_at.
        assert store.record_reminder(request.id, hours_ago(30), NOW) is True
        assert store.record_reminder(request.id, hours_ago(30), NOW) is False

        db_session.refresh(request)
        assert request.last_reminder_at == format_timestamp(NOW)

    def test_status_counts(self, db_session, make_request):
        store = RequestStore(db_session)
        make_request()
        make_request()
        make_request(status="completed")

        assert store.status_counts() == {"pending": 2, "completed": 1, "expired": 0}

    def test_record_reminder_never_moves_backwards(self, db_session, make_request):
        store = RequestStore(db_session)
        request = make_request(last_reminder_at=format_timestamp(NOW))

        earlier = NOW.replace(hour=11)
        assert store.record_reminder(request.id, format_timestamp(NOW), earlier) is False
        assert store.record_reminder(request.id, format_timestamp(NOW), NOW) is False

        db_session.refresh(request)
        assert request.last_reminder_at == format_timestamp(NOW)


class TestSchema:
    def test_init_db_is_rerunnable(self, tmp_data):
        db_path = tmp_data / "schema.sqlite"
        init_db(db_path)
        init_db(db_path)

        conn = sqlite3.connect(str(db_path))
        columns = {row[1] for row in conn.execute("PRAGMA table_info(document_requests)")}
        conn.close()
        assert "reminders_stopped" in columns
        assert "last_reminder_at" in columns
