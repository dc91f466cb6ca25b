"""
Tests for resolver module.
"""

import re
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from gameserver_setup.error_log import ErrorLog
from gameserver_setup.resolver import (
    AttemptState,
    InstallResolver,
    ResolverState,
    UpdateResult,
    find_target,
    next_state,
)


def make_resolver(roots, error_log, search=None, target="ConanSandboxServer.exe"):
    """Build a resolver answering prompts from ``roots``."""
    answers = iter(roots)
    update = MagicMock()
    ask_root = MagicMock(side_effect=lambda: str(next(answers)))
    kwargs = {"error_log": error_log, "ask_root": ask_root}
    if search is not None:
        kwargs["search"] = search
    return InstallResolver(target, update, **kwargs), update, ask_root


class TestNextState:
    """Test the state transition function."""

    def test_found_wins(self):
        assert next_state(1, Path("/x/App.exe")) is ResolverState.FOUND
        assert next_state(3, Path("/x/App.exe")) is ResolverState.FOUND

    def test_miss_below_limit_keeps_searching(self):
        assert next_state(1, None) is ResolverState.SEARCHING
        assert next_state(2, None) is ResolverState.SEARCHING

    def test_miss_at_limit_exhausts(self):
        assert next_state(3, None) is ResolverState.EXHAUSTED_RETRIES

    def test_custom_limit(self):
        assert next_state(1, None, max_attempts=1) is ResolverState.EXHAUSTED_RETRIES


class TestAttemptState:
    def test_defaults(self):
        state = AttemptState(attempt=0)
        assert state.attempt == 0
        assert state.last_error is None

    def test_immutable(self):
        state = AttemptState(attempt=1)
        with pytest.raises(AttributeError):
            state.attempt = 2


class TestFindTarget:
    """Test recursive executable search."""

    def test_depth_zero(self, temp_dir):
        (temp_dir / "App.exe").write_text("")
        assert find_target(temp_dir, "App.exe") == temp_dir / "App.exe"

    def test_depth_one(self, temp_dir):
        (temp_dir / "bin").mkdir()
        (temp_dir / "bin" / "App.exe").write_text("")
        assert find_target(temp_dir, "App.exe").parent == temp_dir / "bin"

    def test_depth_n(self, temp_dir):
        deep = temp_dir / "a" / "b" / "c" / "d" / "e"
        deep.mkdir(parents=True)
        (deep / "App.exe").write_text("")
        assert find_target(temp_dir, "App.exe").parent == deep

    def test_not_found(self, temp_dir):
        (temp_dir / "Other.exe").write_text("")
        assert find_target(temp_dir, "App.exe") is None

    def test_missing_root(self, temp_dir):
        assert find_target(temp_dir / "does-not-exist", "App.exe") is None

    def test_directory_with_target_name_ignored(self, temp_dir):
        (temp_dir / "App.exe").mkdir()
        assert find_target(temp_dir, "App.exe") is None

    def test_build_output_example(self, temp_dir):
        root = temp_dir / "srv" / "x"
        out = root / "build" / "out"
        out.mkdir(parents=True)
        (out / "App.exe").write_text("")

        assert find_target(root, "App.exe").parent == out

    def test_multiple_matches_pick_one(self, temp_dir):
        for name in ["one", "two", "three"]:
            (temp_dir / name).mkdir()
            (temp_dir / name / "App.exe").write_text("")

        found = find_target(temp_dir, "App.exe")

        assert found is not None
        assert found.parent in {temp_dir / "one", temp_dir / "two", temp_dir / "three"}


class TestInstallResolver:
    """Test InstallResolver class."""

    def test_success_first_attempt(self, server_tree, error_log):
        resolver, update, ask_root = make_resolver([server_tree], error_log)

        result = resolver.resolve_and_update()

        assert result.success is True
        assert result.state is ResolverState.FOUND
        assert result.attempts == 1
        assert result.install_dir == server_tree / "ConanExiles" / "server"
        update.assert_called_once_with(server_tree / "ConanExiles" / "server")
        assert ask_root.call_count == 1
        assert not error_log.path.exists()
        assert result.last_error is None

    def test_all_attempts_fail(self, temp_dir, error_log):
        empty = temp_dir / "empty"
        empty.mkdir()
        resolver, update, ask_root = make_resolver([empty] * 5, error_log)

        result = resolver.resolve_and_update()

        assert result.success is False
        assert result.state is ResolverState.EXHAUSTED_RETRIES
        assert result.install_dir is None
        assert result.attempts == 3
        assert ask_root.call_count == 3
        update.assert_not_called()

        lines = error_log.path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 3
        assert all("ERROR: ConanSandboxServer.exe not found under" in line for line in lines)
        assert result.last_error == f"ConanSandboxServer.exe not found under {empty}"
        assert lines[-1].endswith(result.last_error)

    def test_miss_then_hit(self, temp_dir, server_tree, error_log):
        empty = temp_dir / "empty"
        empty.mkdir()
        search = MagicMock(wraps=find_target)
        resolver, update, ask_root = make_resolver(
            [empty, server_tree, empty], error_log, search=search
        )

        result = resolver.resolve_and_update()

        assert result.success is True
        assert result.attempts == 2
        assert ask_root.call_count == 2
        assert search.call_count == 2
        update.assert_called_once_with(server_tree / "ConanExiles" / "server")
        assert len(error_log.path.read_text(encoding="utf-8").splitlines()) == 1

    def test_different_roots_each_attempt(self, temp_dir, error_log):
        roots = [temp_dir / "a", temp_dir / "b", temp_dir / "c"]
        search = MagicMock(return_value=None)
        resolver, _, _ = make_resolver(roots, error_log, search=search)

        resolver.resolve_and_update()

        searched = [call.args[0] for call in search.call_args_list]
        assert searched == roots

    def test_update_exit_status_ignored(self, server_tree, error_log):
        resolver, update, _ = make_resolver([server_tree], error_log)
        update.return_value = MagicMock(returncode=7)

        result = resolver.resolve_and_update()

        assert result.success is True

    def test_multiple_matches_choose_one_directory(self, temp_dir, error_log):
        for name in ["left", "right"]:
            (temp_dir / name).mkdir()
            (temp_dir / name / "ConanSandboxServer.exe").write_text("")
        resolver, update, _ = make_resolver([temp_dir], error_log)

        result = resolver.resolve_and_update()

        assert result.success is True
        assert update.call_count == 1
        assert result.install_dir in {temp_dir / "left", temp_dir / "right"}

    def test_log_timestamps_non_decreasing(self, temp_dir, error_log):
        resolver, _, _ = make_resolver(
            [temp_dir / "missing"] * 3, error_log, search=MagicMock(return_value=None)
        )
        resolver.resolve_and_update()

        stamps = [
            line.split(" - ")[0]
            for line in error_log.path.read_text(encoding="utf-8").splitlines()
        ]
        assert len(stamps) == 3
        for stamp in stamps:
            assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}", stamp)
        assert stamps == sorted(stamps)

    def test_repeated_runs_accumulate(self, temp_dir):
        log_path = temp_dir / "error.log"
        for _ in range(2):
            log = ErrorLog(log_path)
            resolver, _, _ = make_resolver(
                [temp_dir] * 3, log, search=MagicMock(return_value=None)
            )
            resolver.resolve_and_update()
            log.close()

        assert len(log_path.read_text(encoding="utf-8").splitlines()) == 6

    def test_terminal_failure_message(self, temp_dir, error_log, capsys):
        resolver, _, _ = make_resolver(
            [temp_dir] * 3, error_log, search=MagicMock(return_value=None)
        )

        resolver.resolve_and_update()
        captured = capsys.readouterr()

        assert "Maximum attempts (3) reached" in captured.out
        assert "Attempt 1/3 failed" in captured.out
        assert "Attempt 2/3 failed" in captured.out

    def test_default_prompt_used(self, server_tree, error_log):
        update = MagicMock()
        resolver = InstallResolver("ConanSandboxServer.exe", update, error_log=error_log)

        with patch("gameserver_setup.resolver.prompt_path", return_value=str(server_tree)):
            result = resolver.resolve_and_update()

        assert result.success is True


class TestUpdateResult:
    def test_success_property(self):
        assert UpdateResult(ResolverState.FOUND, Path("/x"), 1).success is True
        assert UpdateResult(ResolverState.EXHAUSTED_RETRIES, None, 3).success is False

    def test_last_error_defaults_to_none(self):
        assert UpdateResult(ResolverState.FOUND, Path("/x"), 1).last_error is None

    def test_last_error_kept_after_miss_then_hit(self, temp_dir, server_tree, error_log):
        empty = temp_dir / "empty"
        empty.mkdir()
        resolver, _, _ = make_resolver([empty, server_tree], error_log)

        result = resolver.resolve_and_update()

        assert result.success is True
        assert result.last_error == f"ConanSandboxServer.exe not found under {empty}"
