"""
Tests for runtime: command runner, listing cache and settings.
"""

import subprocess
import threading
import time
from unittest.mock import Mock, patch

import pytest

from warren.core.errors import ConfigError, ExternalToolError
from warren.core.runtime.cache import ListingCache
from warren.core.runtime.resolver import Settings, project_base
from warren.core.runtime.runner import CommandRunner


class TestCommandRunner:
    """Test CommandRunner with subprocess mocked."""

    @patch("warren.core.runtime.runner.subprocess.run")
    def test_returns_stdout(self, mock_run):
        """Test a successful call returns stdout."""
        mock_run.return_value = Mock(returncode=0, stdout="bar 1 2 3\n", stderr="")

        output = CommandRunner("rabbitmqctl").run("list_user_permissions", "foo")

        assert output == "bar 1 2 3\n"
        args, kwargs = mock_run.call_args
        assert args[0] == ["rabbitmqctl", "list_user_permissions", "foo"]
        assert kwargs.get("shell", False) is False

    @patch("warren.core.runtime.runner.subprocess.run")
    def test_arguments_are_not_split(self, mock_run):
        """Test that arguments with spaces stay one token."""
        mock_run.return_value = Mock(returncode=0, stdout="", stderr="")

        CommandRunner("rabbitmqctl").run("set_permissions", "-p", "my vhost", "foo; rm -rf /")

        assert mock_run.call_args[0][0] == ["rabbitmqctl", "set_permissions", "-p", "my vhost", "foo; rm -rf /"]

    @patch("warren.core.runtime.runner.subprocess.run")
    def test_nonzero_exit(self, mock_run):
        """Test non-zero exit raises with code and stderr."""
        mock_run.return_value = Mock(returncode=2, stdout="", stderr="Error: no_such_user\n")

        with pytest.raises(ExternalToolError) as exc:
            CommandRunner("rabbitmqctl").run("clear_permissions", "-p", "bar", "foo")

        assert exc.value.returncode == 2
        assert exc.value.stderr == "Error: no_such_user"
        assert exc.value.command == ["rabbitmqctl", "clear_permissions", "-p", "bar", "foo"]
        assert mock_run.call_count == 1

    @patch("warren.core.runtime.runner.subprocess.run")
    def test_missing_executable(self, mock_run):
        """Test launch failure has no return code."""
        mock_run.side_effect = FileNotFoundError()

        with pytest.raises(ExternalToolError) as exc:
            CommandRunner("rabbitmqctl").run("status")

        assert exc.value.returncode is None
        assert "rabbitmqctl" in str(exc.value)

    @patch("warren.core.runtime.runner.subprocess.run")
    def test_timeout(self, mock_run):
        """Test timeout is passed and its expiry mapped."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="rabbitmqctl", timeout=5)

        with pytest.raises(ExternalToolError, match="Timeout"):
            CommandRunner("rabbitmqctl", timeout=5).run("status")

        assert mock_run.call_args[1]["timeout"] == 5

    @patch("warren.core.runtime.runner.subprocess.run")
    def test_echo_hides_password(self, mock_run):
        """Test the verbose echo masks --password values but runs the real one."""
        mock_run.return_value = Mock(returncode=0, stdout="", stderr="")
        console = Mock()

        CommandRunner("rabbitmqadmin", console=console).run("declare", "exchange", "--password=s3cret", "name=x")

        echoed = console.print.call_args[0][0]
        assert "s3cret" not in echoed
        assert "--password=****" in echoed
        assert "--password=s3cret" in mock_run.call_args[0][0]

    @patch("warren.core.runtime.runner.subprocess.run")
    def test_error_message_hides_password(self, mock_run):
        """Test the error message masks --password values."""
        mock_run.return_value = Mock(returncode=1, stdout="", stderr="Access refused")

        with pytest.raises(ExternalToolError) as exc:
            CommandRunner("rabbitmqadmin").run("delete", "exchange", "--password=s3cret", "name=x")

        assert "s3cret" not in str(exc.value)
        assert "--password=s3cret" in exc.value.command


class TestListingCache:
    """Test ListingCache."""

    def test_loads_once(self):
        """Test the loader runs only on the first access."""
        cache = ListingCache()
        loader = Mock(return_value="bar 1 2 3\n\nbaz 4 5 6\n")

        first = cache.lines("user_permissions", "foo", loader)
        second = cache.lines("user_permissions", "foo", loader)

        assert first == ["bar 1 2 3", "baz 4 5 6"]
        assert second is first
        loader.assert_called_once()

    def test_scopes_are_independent(self):
        """Test different scopes call the loader separately."""
        cache = ListingCache()

        cache.lines("user_permissions", "foo", lambda: "a 1 2 3")
        cache.lines("user_permissions", "dan", lambda: "b 1 2 3")

        assert cache.cached("user_permissions", "foo") == ["a 1 2 3"]
        assert cache.cached("user_permissions", "dan") == ["b 1 2 3"]

    def test_invalidate_class(self):
        """Test invalidate drops the whole class table."""
        cache = ListingCache()
        loader = Mock(return_value="bar 1 2 3")
        cache.lines("user_permissions", "foo", loader)
        cache.lines("exchange", "myvhost", lambda: "")

        cache.invalidate("user_permissions")
        cache.lines("user_permissions", "foo", loader)

        assert loader.call_count == 2
        assert cache.cached("exchange", "myvhost") == []

    def test_invalidate_scope(self):
        """Test invalidate with a scope keeps the other scopes."""
        cache = ListingCache()
        cache.lines("user_permissions", "foo", lambda: "a 1 2 3")
        cache.lines("user_permissions", "dan", lambda: "b 1 2 3")

        cache.invalidate("user_permissions", "foo")

        assert cache.cached("user_permissions", "foo") is None
        assert cache.cached("user_permissions", "dan") == ["b 1 2 3"]

    def test_loader_error_is_not_cached(self):
        """Test a failing loader leaves nothing cached."""
        cache = ListingCache()
        loader = Mock(side_effect=ExternalToolError(["rabbitmqctl"], 1, "boom"))

        with pytest.raises(ExternalToolError):
            cache.lines("user_permissions", "foo", loader)

        assert cache.cached("user_permissions", "foo") is None

    def test_concurrent_readers_share_one_listing(self):
        """Test threads reading the same scope trigger a single load."""
        cache = ListingCache()
        calls = []

        def slow_loader():
            calls.append(1)
            time.sleep(0.05)
            return "bar 1 2 3\n"

        results = []
        threads = [
            threading.Thread(target=lambda: results.append(cache.lines("user_permissions", "foo", slow_loader)))
            for _ in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert len(results) == 8
        assert all(lines is results[0] for lines in results)

    def test_read_after_invalidate_reloads(self):
        """Test invalidation is visible to the next read."""
        cache = ListingCache()
        loader = Mock(side_effect=["bar 1 2 3", "bar 4 5 6"])
        cache.lines("user_permissions", "foo", loader)

        cache.invalidate("user_permissions")

        assert cache.lines("user_permissions", "foo", loader) == ["bar 4 5 6"]
        assert loader.call_count == 2

    def test_clear(self):
        """Test clear drops everything."""
        cache = ListingCache()
        cache.lines("user_permissions", "foo", lambda: "a 1 2 3")

        cache.clear()

        assert cache.cached("user_permissions", "foo") is None


class TestSettings:
    """Test Settings resolution."""

    def test_defaults(self):
        """Test defaults with an empty environment."""
        settings = Settings.from_env({})

        assert settings.rabbitmqctl == "rabbitmqctl"
        assert settings.rabbitmqadmin == "rabbitmqadmin"
        assert settings.rabbitmq_version is None
        assert settings.command_timeout is None
        assert settings.manifest == "warren.yaml"

    def test_from_environment(self):
        """Test WARREN_* variables."""
        settings = Settings.from_env({
            "WARREN_RABBITMQCTL": "/usr/sbin/rabbitmqctl",
            "WARREN_RABBITMQ_VERSION": "3.12.1",
            "WARREN_COMMAND_TIMEOUT": "30",
            "WARREN_MANIFEST": "prod.yaml",
        })

        assert settings.rabbitmqctl == "/usr/sbin/rabbitmqctl"
        assert settings.rabbitmq_version == "3.12.1"
        assert settings.command_timeout == 30.0
        assert settings.manifest == "prod.yaml"

    def test_invalid_timeout(self):
        """Test a non numeric timeout is a ConfigError."""
        with pytest.raises(ConfigError):
            Settings.from_env({"WARREN_COMMAND_TIMEOUT": "soon"})

    def test_project_base_explicit(self, tmp_path):
        """Test WARREN_PROJECT_ROOT wins."""
        assert project_base({"WARREN_PROJECT_ROOT": str(tmp_path)}) == tmp_path.resolve()

    def test_project_base_finds_manifest(self, tmp_path, monkeypatch):
        """Test the nearest ancestor with warren.yaml."""
        (tmp_path / "warren.yaml").write_text("{}\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert project_base({}) == tmp_path.resolve()
