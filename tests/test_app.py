# tests/test_app.py
"""
Drive the Textual app with a scripted backend.
"""
import pytest

from l2chat.app import ChatApp, build_session, exit_stats, main
from l2chat.config import ConfigurationError, Settings
from l2chat.core.condenser import ContextCondenser
from l2chat.core.pump import TokenStreamPump
from l2chat.core.session import Session, SessionState
from l2chat.core.storage import Record, Store
from l2chat.models import Turn, UsageStats


def build(store, backend):
    return Session(store, ContextCondenser(backend), TokenStreamPump(backend))


class TestChatApp:
    @pytest.mark.asyncio
    async def test_submit_streams_and_persists(self, store, backend):
        session = build(store, backend)
        app = ChatApp(session, tick_interval=0.01)

        async with app.run_test() as pilot:
            await pilot.press(*"Hello")
            await pilot.press("enter")
            for _ in range(50):
                await pilot.pause(0.02)
                if not session.streaming and len(session.history) == 2:
                    break

            assert session.history == [Turn.user("Hello"), Turn.assistant("Hi there!")]
            assert "Hi there!" in session.content

            await pilot.press("ctrl+c")

        assert session.state is SessionState.EXITING
        assert store.read_stats().total_tokens == 3

    @pytest.mark.asyncio
    async def test_empty_enter_does_nothing(self, store, backend):
        session = build(store, backend)
        app = ChatApp(session, tick_interval=0.01)

        async with app.run_test() as pilot:
            await pilot.press("enter")
            await pilot.pause(0.05)

        assert session.history == []
        assert backend.streamed_with == []


def test_exit_stats_panel():
    panel = exit_stats(UsageStats(12))
    assert "Total tokens used: 12" in panel.renderable.plain


class TestStartupDiagnostics:
    def test_undecodable_system_prompt_is_configuration_error(self, tmp_path):
        store = Store(tmp_path)
        store.write(Record.SYSTEM, b"\xff\xfe\x00bad")

        with pytest.raises(ConfigurationError):
            build_session(Settings(api_key="sk-test", home=tmp_path))

    def test_unwritable_home_exits_with_diagnostic(self, tmp_path, monkeypatch, capsys):
        blocker = tmp_path / "home"
        blocker.write_text("not a directory")
        monkeypatch.setenv("OPENROUTER", "sk-test")
        monkeypatch.setenv("L2_HOME", str(blocker))

        with pytest.raises(SystemExit) as exc:
            main()

        assert exc.value.code == 1
        assert "cannot write logs" in capsys.readouterr().err
