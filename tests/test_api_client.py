"""
Unit tests for ManasAPIClient
Tests: request marshaling, response parsing, status code mapping
"""
import json
from datetime import datetime, timezone

import pytest
import requests

from manas.core.errors import AuthError, NotFoundError, RemoteError, ValidationError
from manas.Modules.Pomodoro_module.pomodoro_models import PomodoroMode, PomodoroSessionRecord
from manas.Modules.Sync_module.api_client import ManasAPIClient
from manas.Modules.Sync_module.backends import RemoteBackend
from manas.Modules.Sync_module.preferences import Preferences
from manas.Modules.Thoughts_module.thoughts_models import SessionMeta


class FakeResponse:
    """Minimalna odpowiedź requests"""

    def __init__(self, status_code=200, payload=None, raw=None):
        self.status_code = status_code
        if raw is not None:
            self.content = raw.encode("utf-8")
        elif payload is not None:
            self.content = json.dumps(payload).encode("utf-8")
        else:
            self.content = b""

    def json(self):
        return json.loads(self.content.decode("utf-8"))


@pytest.fixture
def http(monkeypatch):
    """Przechwytuje requests.Session.request i zwraca zaplanowane odpowiedzi"""

    class Recorder:
        def __init__(self):
            self.requests = []
            self.responses = []
            self.headers = []

        def reply(self, status_code=200, payload=None, raw=None):
            self.responses.append(FakeResponse(status_code, payload, raw))

        @property
        def last(self):
            return self.requests[-1]

    recorder = Recorder()

    def fake_request(session, method, url, **kwargs):
        recorder.requests.append((method, url, kwargs))
        recorder.headers.append(dict(session.headers))
        response = recorder.responses.pop(0)
        if isinstance(response.status_code, Exception):
            raise response.status_code
        return response

    monkeypatch.setattr(requests.Session, "request", fake_request)
    return recorder


@pytest.fixture
def client():
    return ManasAPIClient("http://api.test/", access_token="token-123", timeout=7)


SERVER_THOUGHT = {
    "_id": "65f0c0ffee",
    "text": "call mom",
    "timestamp": "2024-03-15T09:30:00.000Z",
    "session": {"mode": "focus", "sessionNumber": 2},
    "tags": ["family"],
    "isDeleted": False,
}


class TestTransport:
    """Test headers and status mapping"""

    def test_headers_and_timeout(self, client, http):
        http.reply(200, {"sessionsCompleted": 1})

        client.fetch_stats()

        method, url, kwargs = http.last
        assert (method, url) == ("GET", "http://api.test/api/user/stats")
        assert kwargs["timeout"] == 7
        assert http.headers[-1]["Authorization"] == "Bearer token-123"
        assert http.headers[-1]["Content-Type"] == "application/json"

    @pytest.mark.parametrize("status, error", [
        (400, ValidationError),
        (401, AuthError),
        (404, NotFoundError),
        (500, RemoteError),
        (503, RemoteError),
    ])
    def test_status_mapping(self, client, http, status, error):
        http.reply(status, {"error": "nope"})

        with pytest.raises(error) as exc_info:
            client.delete_thought("abc")

        assert exc_info.value.status_code == status
        assert exc_info.value.message == "nope"

    def test_detail_used_as_message(self, client, http):
        http.reply(404, {"detail": "Thought not found"})

        with pytest.raises(NotFoundError, match="Thought not found"):
            client.update_thought("abc", is_completed=True)

    def test_network_error(self, client, http):
        http.reply(requests.exceptions.ConnectionError("refused"))

        with pytest.raises(RemoteError):
            client.fetch_stats()

    def test_invalid_json(self, client, http):
        http.reply(200, raw="<html>oops</html>")

        with pytest.raises(RemoteError):
            client.fetch_stats()

    def test_no_token_no_header(self, http):
        anonymous = ManasAPIClient("http://api.test")
        http.reply(200, {"status": "healthy"})

        anonymous.health_check()

        assert "Authorization" not in http.headers[-1]


class TestThoughtEndpoints:
    """Test thoughts endpoints"""

    def test_fetch_thoughts(self, client, http):
        http.reply(200, {
            "thoughts": [SERVER_THOUGHT],
            "pagination": {"page": 1, "limit": 200, "total": 1, "pages": 1},
        })

        thoughts, pagination = client.fetch_thoughts(limit=200)

        assert http.last[2]["params"] == {"page": 1, "limit": 200}
        assert pagination["total"] == 1
        thought = thoughts[0]
        assert thought.id == "65f0c0ffee"
        assert thought.is_completed is False
        assert thought.session == SessionMeta(PomodoroMode.FOCUS, 2)
        assert thought.timestamp == datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)

    def test_fetch_thoughts_partial_session(self, client, http):
        """A thought whose session has no mode loses only its session meta"""
        http.reply(200, {"thoughts": [
            {"_id": "a", "text": "fine"},
            {"_id": "b", "text": "partial", "session": {"sessionNumber": 2}},
        ]})

        thoughts, _pagination = client.fetch_thoughts()

        assert [t.id for t in thoughts] == ["a", "b"]
        assert thoughts[1].session is None

    def test_fetch_thoughts_skips_broken_items(self, client, http):
        http.reply(200, {"thoughts": [SERVER_THOUGHT, "not a thought", {"_id": "c", "session": "focus"}]})

        thoughts, _pagination = client.fetch_thoughts()

        assert [t.id for t in thoughts] == ["65f0c0ffee"]

    def test_fetch_thoughts_malformed(self, client, http):
        http.reply(200, {"items": []})

        with pytest.raises(RemoteError):
            client.fetch_thoughts()

    def test_create_thought_payload(self, client, http):
        http.reply(201, SERVER_THOUGHT)

        thought = client.create_thought(
            "  call mom ", session=SessionMeta(PomodoroMode.FOCUS, 2), tags=["family"]
        )

        method, url, kwargs = http.last
        assert (method, url) == ("POST", "http://api.test/api/thoughts")
        assert kwargs["json"] == {
            "text": "call mom",
            "session": {"mode": "focus", "sessionNumber": 2},
            "tags": ["family"],
        }
        assert thought.id == "65f0c0ffee"

    @pytest.mark.parametrize("text", ["", "   ", "x" * 1001])
    def test_create_thought_validates_before_call(self, client, http, text):
        with pytest.raises(ValidationError):
            client.create_thought(text)
        assert http.requests == []

    def test_create_thought_too_many_tags(self, client, http):
        with pytest.raises(ValidationError):
            client.create_thought("ok", tags=[str(i) for i in range(11)])
        assert http.requests == []

    def test_update_thought_partial(self, client, http):
        http.reply(200, {**SERVER_THOUGHT, "isCompleted": True})

        thought = client.update_thought("65f0c0ffee", is_completed=True, is_dealt_with=True)

        method, url, kwargs = http.last
        assert (method, url) == ("PUT", "http://api.test/api/thoughts/65f0c0ffee")
        assert kwargs["json"] == {"isCompleted": True, "isDealtWith": True}
        assert thought.is_completed is True

    def test_delete_thought(self, client, http):
        http.reply(200, {"message": "Thought deleted successfully"})

        assert client.delete_thought("65f0c0ffee") == "Thought deleted successfully"
        assert http.last[0] == "DELETE"

    def test_cleanup(self, client, http):
        http.reply(200, {"message": "Cleanup completed", "deletedCount": 3})
        http.reply(200, {"message": "Global cleanup completed", "deletedCount": 9})

        assert client.cleanup_thoughts() == 3
        assert http.last[0] == "POST"
        assert client.cleanup_all_thoughts("secret") == 9
        assert http.last[0] == "DELETE"
        assert http.last[2]["headers"] == {"x-api-key": "secret"}


class TestSessionEndpoints:
    """Test sessions endpoints"""

    def test_create_session_payload(self, client, http):
        http.reply(201, {"_id": "s1"})
        record = PomodoroSessionRecord(
            mode=PomodoroMode.FOCUS,
            duration_minutes=25,
            start_time=datetime(2024, 3, 15, 9, 0, tzinfo=timezone.utc),
            end_time=datetime(2024, 3, 15, 9, 25, 30, tzinfo=timezone.utc),
            paused_duration_ms=30000,
        )

        client.create_session(record)

        assert http.last[2]["json"] == {
            "mode": "focus",
            "duration": 25,
            "completed": True,
            "startTime": "2024-03-15T09:00:00.000Z",
            "endTime": "2024-03-15T09:25:30.000Z",
            "pausedDuration": 30000,
            "thoughtsCaptured": 0,
        }

    def test_invalid_session_not_sent(self, client, http):
        record = PomodoroSessionRecord(
            mode=PomodoroMode.FOCUS,
            duration_minutes=0,
            start_time=datetime(2024, 3, 15, 9, 0, tzinfo=timezone.utc),
        )

        with pytest.raises(ValidationError):
            client.create_session(record)
        assert http.requests == []

    def test_list_sessions_filters(self, client, http):
        http.reply(200, {"sessions": [], "pagination": {"page": 2}})

        sessions, pagination = client.list_sessions(
            page=2, limit=10, mode="shortBreak",
            start_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
        )

        assert sessions == []
        assert http.last[2]["params"] == {
            "page": 2,
            "limit": 10,
            "mode": "shortBreak",
            "startDate": "2024-03-01T00:00:00.000Z",
        }


class TestPreferenceEndpoints:
    """Test preferences endpoints"""

    def test_get_preferences(self, client, http):
        http.reply(200, {
            "focusDuration": 50,
            "shortBreakDuration": 10,
            "longBreakDuration": 20,
            "theme": "dark",
            "notifications": False,
        })

        preferences = client.get_preferences()

        assert preferences.focus_duration == 50
        assert preferences.notifications is False

    def test_set_preferences_sends_full_object(self, client, http):
        http.reply(200, {"focusDuration": 40, "shortBreakDuration": 5, "longBreakDuration": 15})

        client.set_preferences(Preferences(focusDuration=40))

        assert http.last[0] == "PUT"
        assert http.last[2]["json"] == {
            "focusDuration": 40,
            "shortBreakDuration": 5,
            "longBreakDuration": 15,
            "theme": "animated-gradient",
            "notifications": True,
        }

    def test_remote_partial_save_keeps_other_fields(self, client, http, test_config):
        """Changing only the theme must not reset durations on the server"""
        current = {
            "focusDuration": 50,
            "shortBreakDuration": 10,
            "longBreakDuration": 30,
            "theme": "forest",
            "notifications": False,
        }
        http.reply(200, current)
        http.reply(200, dict(current, theme="dark"))
        backend = RemoteBackend(client, test_config)

        saved = backend.set_preferences({"theme": "dark"})

        assert [request[0] for request in http.requests] == ["GET", "PUT"]
        assert http.last[2]["json"] == dict(current, theme="dark")
        assert saved.focus_duration == 50

    def test_set_preferences_out_of_range(self, client, http):
        with pytest.raises(ValidationError):
            client.set_preferences({"longBreakDuration": 2})
        assert http.requests == []


class TestHealth:
    """Test health check"""

    def test_healthy(self, client, http):
        http.reply(200, {"status": "healthy"})
        assert client.health_check() is True

    def test_unhealthy(self, client, http):
        http.reply(503, {"status": "unhealthy"})
        assert client.health_check() is False
