"""
Unit tests for the session store.

Covers session lifecycle (create / select / two-phase delete), ordered
appends, rollback, and the durable mirror (load once, save after every
mutation, failures as warnings).
"""

import json

import pytest
from unittest.mock import Mock

from core.errors import InvalidAttachmentType, PersistenceFailure
from core.models import ChatSession, Message, MessageRole
from core.persistence.session_store import SessionStore, storage_key
from core.persistence.storage import InMemoryKeyValueStorage
from core.utils.data_uri import encode_data_uri

USER_ID = "user-123"


def user(text):
    return Message(MessageRole.USER, text)


def model(text):
    return Message(MessageRole.MODEL, text)


class TestCreateSession:
    """Creating sessions from uploads."""

    def test_create_marks_new_session_active(self, store, pdf_data_uri):
        sid = store.create_session("notes.pdf", pdf_data_uri, "application/pdf")

        assert store.active_session_id == sid
        session = store.active_session()
        assert session.source_file_name == "notes.pdf"
        assert session.source_data_uri == pdf_data_uri
        assert session.messages == []

    def test_ids_are_unique_even_with_a_frozen_clock(self, store, pdf_data_uri):
        ids = [
            store.create_session(f"doc{i}.pdf", pdf_data_uri, "application/pdf")
            for i in range(25)
        ]
        assert len(set(ids)) == 25
        assert [s.id for s in store.sessions] == ids

    def test_ids_are_creation_time_derived(self, store, pdf_data_uri):
        sid = store.create_session("a.pdf", pdf_data_uri, "application/pdf")
        assert sid == "1700000000000"

    def test_rejects_text_plain_without_state_change(self, store, storage):
        before = storage.get_item(storage_key(USER_ID))
        uri = encode_data_uri(b"hello", "text/plain")

        with pytest.raises(InvalidAttachmentType):
            store.create_session("notes.txt", uri, "text/plain")

        assert store.session_count == 0
        assert store.active_session_id is None
        assert storage.get_item(storage_key(USER_ID)) == before

    def test_rejects_pdf_label_on_non_pdf_payload(self, store):
        uri = encode_data_uri(b"hello", "text/plain")
        with pytest.raises(InvalidAttachmentType):
            store.create_session("fake.pdf", uri, "application/pdf")
        assert store.session_count == 0

    def test_create_persists(self, store, storage, pdf_data_uri):
        sid = store.create_session("notes.pdf", pdf_data_uri, "application/pdf")
        saved = json.loads(storage.get_item(storage_key(USER_ID)))
        assert saved == [
            {
                "id": sid,
                "sourceFileName": "notes.pdf",
                "sourceDataUri": pdf_data_uri,
                "messages": [],
            }
        ]


class TestSelectAndDelete:
    """Active-session pointer and two-phase deletion."""

    @pytest.fixture
    def three(self, storage, counter_clock, pdf_data_uri):
        s = SessionStore(storage, clock=counter_clock)
        s.load_for_user(USER_ID)
        ids = [s.create_session(f"{n}.pdf", pdf_data_uri, "application/pdf") for n in "abc"]
        return s, ids

    def test_select_is_idempotent(self, three):
        s, ids = three
        s.select_session(ids[0])
        s.select_session(ids[0])
        assert s.active_session_id == ids[0]

    def test_select_unknown_id_is_noop(self, three):
        s, ids = three
        s.select_session("missing")
        assert s.active_session_id == ids[-1]

    def test_delete_requires_confirmation(self, three):
        s, ids = three
        s.request_delete(ids[1])
        assert s.session_count == 3
        assert s.pending_delete_id == ids[1]

        s.cancel_delete()
        assert s.pending_delete_id is None
        assert s.confirm_delete() is None
        assert s.session_count == 3

    def test_delete_active_falls_to_first_remaining(self, three):
        s, ids = three
        s.select_session(ids[1])
        s.request_delete(ids[1])
        removed = s.confirm_delete()

        assert removed.id == ids[1]
        assert [x.id for x in s.sessions] == [ids[0], ids[2]]
        assert s.active_session_id == ids[0]

    def test_delete_inactive_keeps_active(self, three):
        s, ids = three
        s.request_delete(ids[0])
        s.confirm_delete()
        assert s.active_session_id == ids[2]

    def test_delete_last_session_leaves_none_active(self, store, pdf_data_uri):
        sid = store.create_session("only.pdf", pdf_data_uri, "application/pdf")
        store.request_delete(sid)
        store.confirm_delete()
        assert store.session_count == 0
        assert store.active_session_id is None

    def test_request_delete_unknown_is_noop(self, three):
        s, _ = three
        s.request_delete("missing")
        assert s.pending_delete_id is None


class TestMessages:
    """Append ordering and wholesale replacement."""

    def test_append_preserves_call_order(self, store, pdf_data_uri):
        sid = store.create_session("notes.pdf", pdf_data_uri, "application/pdf")
        sent = [user("q1"), model("a1"), user("q2"), model("a2"), user("q3")]
        for m in sent:
            assert store.append_message(sid, m) is True
        assert store.get_session(sid).messages == sent

    def test_replace_history_is_exact(self, store, pdf_data_uri):
        sid = store.create_session("notes.pdf", pdf_data_uri, "application/pdf")
        store.append_message(sid, user("q1"))
        store.append_message(sid, model("a1"))
        snapshot = tuple(store.get_session(sid).messages)
        store.append_message(sid, user("q2"))

        assert store.replace_history(sid, snapshot) is True
        assert store.get_session(sid).messages == list(snapshot)

    def test_stale_ids_are_noops(self, store):
        assert store.append_message("gone", user("x")) is False
        assert store.replace_history("gone", []) is False
        assert store.session_count == 0


class TestPersistence:
    """Durable mirror: round trip, load-once, and failure handling."""

    def test_round_trip_for_same_user(self, store, storage, pdf_data_uri):
        sid = store.create_session("notes.pdf", pdf_data_uri, "application/pdf", source_file=object())
        store.append_message(sid, user("What is photosynthesis?"))
        store.append_message(sid, model("Photosynthesis is..."))

        reloaded = SessionStore(storage)
        reloaded.load_for_user(USER_ID)

        assert reloaded.sessions == store.sessions
        assert reloaded.get_session(sid).source_file is None
        assert reloaded.active_session_id == sid

    def test_mirror_is_keyed_by_user(self, store, storage, pdf_data_uri):
        store.create_session("notes.pdf", pdf_data_uri, "application/pdf")

        other = SessionStore(storage)
        other.load_for_user("someone-else")
        assert other.session_count == 0

    def test_load_is_once_per_user(self, store, storage, pdf_data_uri):
        store.create_session("notes.pdf", pdf_data_uri, "application/pdf")
        storage.set_item(storage_key(USER_ID), "[]")

        store.load_for_user(USER_ID)
        assert store.session_count == 1

    def test_corrupt_mirror_starts_empty_with_warning(self, storage):
        storage.set_item(storage_key(USER_ID), "{not json")
        s = SessionStore(storage)
        s.load_for_user(USER_ID)

        assert s.session_count == 0
        warnings = s.drain_warnings()
        assert len(warnings) == 1
        assert "Could not load" in warnings[0]
        assert s.drain_warnings() == []

    def test_write_failure_warns_but_keeps_memory(self, pdf_data_uri):
        storage = Mock(spec=InMemoryKeyValueStorage)
        storage.get_item.return_value = None
        storage.set_item.side_effect = PersistenceFailure("quota exceeded")
        s = SessionStore(storage)
        s.load_for_user(USER_ID)

        sid = s.create_session("notes.pdf", pdf_data_uri, "application/pdf")
        s.append_message(sid, user("hi"))

        assert s.get_session(sid).messages == [user("hi")]
        warnings = s.drain_warnings()
        assert len(warnings) == 2
        assert all("quota exceeded" in w for w in warnings)

    def test_clear_keeps_mirror(self, store, storage, pdf_data_uri):
        store.create_session("notes.pdf", pdf_data_uri, "application/pdf")
        store.clear()

        assert store.session_count == 0
        assert store.user_id is None
        assert json.loads(storage.get_item(storage_key(USER_ID)))

    def test_no_writes_before_a_user_is_loaded(self, pdf_data_uri):
        storage = InMemoryKeyValueStorage()
        s = SessionStore(storage)
        s.create_session("notes.pdf", pdf_data_uri, "application/pdf")
        assert storage._items == {}

    def test_session_from_dict_requires_fields(self):
        with pytest.raises(KeyError):
            ChatSession.from_dict({"id": "1"})
