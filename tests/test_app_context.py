"""
Integration tests for ManasApp wiring
Tests: guest persistence, session counting, preferences, sign out
"""
import pytest

from manas.core.app_context import ManasApp
from manas.core.identity import UserIdentity, identity_from_config
from manas.Modules.Pomodoro_module.pomodoro_models import PomodoroMode
from manas.Modules.Sync_module.backends import GuestBackend, RemoteBackend, create_backend
from manas.Modules.Sync_module.local_storage import LocalStateStorage
from manas.Modules.Sync_module.preferences import Preferences
from manas.utils.sound_manager import NullSoundManager


@pytest.fixture
def guest_app(test_config, dispatcher, clock):
    return ManasApp(
        test_config,
        dispatcher=dispatcher,
        sound_manager=NullSoundManager(),
        clock=clock,
    )


@pytest.fixture
def remote_app(test_config, remote_backend, dispatcher, clock):
    return ManasApp(
        test_config,
        identity=UserIdentity(access_token="token", user_id="user-1"),
        backend=remote_backend,
        dispatcher=dispatcher,
        sound_manager=NullSoundManager(),
        clock=clock,
    )


def finish_focus(app):
    app.timer.start_stop()
    app.timer.state.time_remaining = 1
    app.timer.tick()


class TestGuestApp:
    """Test guest mode wiring"""

    def test_guest_backend_selected(self, guest_app):
        assert isinstance(guest_app.backend, GuestBackend)
        assert guest_app.is_authenticated is False

    def test_capture_thought_persisted_locally(self, guest_app, test_config):
        guest_app.capture_thought("idea during focus")

        reloaded = LocalStateStorage(test_config.DATA_DIR, test_config.STORAGE_KEY).load()
        assert [t.text for t in reloaded.thoughts] == ["idea during focus"]
        assert reloaded.thoughts[0].session.mode == PomodoroMode.FOCUS
        assert reloaded.thoughts[0].session.session_number == 1

    def test_session_number_follows_completed_sessions(self, guest_app):
        guest_app.increment_sessions()
        guest_app.increment_sessions()
        guest_app.timer.switch_mode(PomodoroMode.SHORT_BREAK)

        guest_app.capture_thought("on a break")

        meta = guest_app.snapshot().thoughts[0].session
        assert meta.session_number == 3
        assert meta.mode == PomodoroMode.SHORT_BREAK

    def test_state_restored_on_restart(self, guest_app, test_config, dispatcher):
        guest_app.set_theme("forest")
        guest_app.increment_sessions()

        restarted = ManasApp(test_config, dispatcher=dispatcher, sound_manager=NullSoundManager())

        state = restarted.snapshot()
        assert state.theme == "forest"
        assert state.sessions_completed == 1

    def test_focus_completion_counts_and_records(self, guest_app, dispatcher):
        finish_focus(guest_app)

        assert guest_app.snapshot().sessions_completed == 1
        assert guest_app.timer.mode == PomodoroMode.SHORT_BREAK
        assert dispatcher.names == ["create_session"]

        dispatcher.run_all()

        state = guest_app.snapshot()
        assert state.total_focus_time == 25
        assert state.streak == 1
        assert state.sessions_completed == 1

    def test_clear_all_resets_and_persists(self, guest_app, test_config):
        guest_app.capture_thought("temporary")
        guest_app.increment_sessions()

        guest_app.clear_all()

        assert guest_app.snapshot().thoughts == []
        reloaded = LocalStateStorage(test_config.DATA_DIR, test_config.STORAGE_KEY).load()
        assert reloaded.sessions_completed == 0
        assert reloaded.thoughts == []

    def test_start_applies_stored_preferences(self, guest_app, dispatcher):
        guest_app.backend.set_preferences({"focusDuration": 50})

        guest_app.start()
        dispatcher.run_all()

        assert guest_app.preferences.focus_duration == 50
        assert guest_app.timer.time_remaining == 50 * 60

    def test_save_preferences(self, guest_app, dispatcher):
        assert guest_app.save_preferences({"shortBreakDuration": 10}) is True
        dispatcher.run_all()

        assert guest_app.timer.state.durations[PomodoroMode.SHORT_BREAK] == 600
        assert guest_app.backend.get_preferences().short_break_duration == 10

    def test_invalid_preferences_not_sent(self, guest_app, dispatcher):
        assert guest_app.save_preferences({"focusDuration": 0}) is False
        assert dispatcher.pending == 0


class TestRemoteApp:
    """Test authenticated mode wiring"""

    def test_remote_backend_used(self, remote_app):
        assert isinstance(remote_app.backend, RemoteBackend)
        assert remote_app.is_authenticated is True

    def test_start_syncs_with_server(self, remote_app, dispatcher, api):
        api.seed("from server")
        api.preferences = Preferences(focusDuration=30)

        remote_app.start()
        dispatcher.run_all()

        assert [t.text for t in remote_app.snapshot().thoughts] == ["from server"]
        assert remote_app.timer.time_remaining == 30 * 60

    def test_capture_thought_confirmed_by_server(self, remote_app, dispatcher, api):
        remote_app.capture_thought("server bound")
        dispatcher.run_all()

        thought = remote_app.snapshot().thoughts[0]
        assert thought.id in api.thoughts
        assert api.thoughts[thought.id].session.session_number == 1

    def test_completed_focus_triggers_resync(self, remote_app, dispatcher, api):
        finish_focus(remote_app)
        dispatcher.run_next()       # create_session

        assert len(api.sessions) == 1
        assert dispatcher.names == ["sync"]

    def test_sign_out_switches_to_guest(self, remote_app, dispatcher, api):
        api.seed("private")
        remote_app.start()
        dispatcher.run_all()

        remote_app.sign_out()

        assert isinstance(remote_app.backend, GuestBackend)
        state = remote_app.snapshot()
        assert state.thoughts == []
        assert state.sessions_completed == 0

    def test_shutdown_closes_http_session(self, remote_app, api):
        remote_app.shutdown()

        assert api.closed is True


class TestBackendSelection:
    """Test identity-based backend selection"""

    def test_no_token_means_guest(self, test_config):
        assert identity_from_config(test_config) is None
        assert isinstance(create_backend(None, test_config), GuestBackend)

    def test_token_means_remote(self, test_config):
        test_config.ACCESS_TOKEN = "abc"
        identity = identity_from_config(test_config)

        backend = create_backend(identity, test_config)

        assert isinstance(backend, RemoteBackend)
        assert backend.api_client.session.headers["Authorization"] == "Bearer abc"
