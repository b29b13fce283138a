"""Tests for task implementations"""

from __future__ import annotations

import sys
import time

import pytest
import requests

from conftest import assert_duration
from retrier.infrastructure.deadline import child_scope
from retrier.infrastructure.tasks import (
    CallableTask,
    ExecTask,
    HttpTask,
    TaskError,
    TaskFactory,
)


def _make_response(status_code: int, reason: str = "") -> requests.Response:
    r = requests.Response()
    r.status_code = status_code
    r.reason = reason
    r.url = "http://example.test"
    r._content = b""  # type: ignore[attr-defined]
    r._content_consumed = True  # type: ignore[attr-defined]
    return r


def _python(code: str) -> ExecTask:
    return ExecTask(sys.executable, ["-c", code])


class TestExecTask:
    """Tests for ExecTask"""

    def test_zero_exit_succeeds(self):
        with child_scope(None, 10) as scope:
            _python("import sys; sys.exit(0)").run(scope)

    def test_nonzero_exit_fails(self):
        with child_scope(None, 10) as scope:
            with pytest.raises(TaskError, match="exit status 3"):
                _python("import sys; sys.exit(3)").run(scope)

    def test_missing_command_fails(self):
        with child_scope(None, 10) as scope:
            with pytest.raises(TaskError, match="failed to start"):
                ExecTask("retrier-no-such-command").run(scope)

    def test_killed_on_deadline(self):
        """Test the process is killed when the scope expires"""
        task = _python("import time; time.sleep(30)")
        start = time.monotonic()

        with child_scope(None, 0.5) as scope:
            with pytest.raises(TaskError, match="deadline exceeded"):
                task.run(scope)
        assert_duration(0.5, time.monotonic() - start, epsilon=0.4)

    def test_output_passes_through(self, capfd):
        with child_scope(None, 10) as scope:
            _python("print('hello from task')").run(scope)
        assert "hello from task" in capfd.readouterr().out

    def test_quiet_discards_output(self, capfd):
        task = ExecTask(sys.executable, ["-c", "print('hidden')"], quiet=True)
        with child_scope(None, 10) as scope:
            task.run(scope)
        assert "hidden" not in capfd.readouterr().out

    def test_describe(self):
        assert ExecTask("echo", ["a b"]).describe() == "echo 'a b'"


class TestHttpTask:
    """Tests for HttpTask"""

    def test_ok_status_succeeds(self, monkeypatch):
        calls = []

        def fake_get(url, **kwargs):
            calls.append((url, kwargs))
            return _make_response(200, "OK")

        monkeypatch.setattr(requests, "get", fake_get)

        with child_scope(None, 0) as scope:
            HttpTask("http://example.test").run(scope)

        assert calls[0][0] == "http://example.test"
        assert calls[0][1]["timeout"] is None

    def test_timeout_follows_scope(self, monkeypatch):
        calls = []

        def fake_get(url, **kwargs):
            calls.append(kwargs)
            return _make_response(200)

        monkeypatch.setattr(requests, "get", fake_get)

        with child_scope(None, 5) as scope:
            HttpTask("http://example.test").run(scope)

        assert 0 < calls[0]["timeout"] <= 5

    def test_other_status_fails(self, monkeypatch):
        monkeypatch.setattr(requests, "get", lambda *a, **kw: _make_response(503, "Service Unavailable"))

        with child_scope(None, 0) as scope:
            with pytest.raises(TaskError, match="HTTP status was 503 Service Unavailable"):
                HttpTask("http://example.test").run(scope)

    def test_non_200_success_status_fails(self, monkeypatch):
        monkeypatch.setattr(requests, "get", lambda *a, **kw: _make_response(204, "No Content"))

        with child_scope(None, 0) as scope:
            with pytest.raises(TaskError, match="204"):
                HttpTask("http://example.test").run(scope)

    def test_connection_error_fails(self, monkeypatch):
        def fake_get(*args, **kwargs):
            raise requests.exceptions.ConnectionError("no route")

        monkeypatch.setattr(requests, "get", fake_get)

        with child_scope(None, 0) as scope:
            with pytest.raises(TaskError, match="no route"):
                HttpTask("https://fake.example.com").run(scope)

    def test_ended_scope_skips_request(self, monkeypatch):
        def fake_get(*args, **kwargs):
            raise AssertionError("request should not be sent")

        monkeypatch.setattr(requests, "get", fake_get)
        scope = child_scope(None, 0)
        scope.cancel()

        with pytest.raises(TaskError, match="cancelled"):
            HttpTask("http://example.test").run(scope)

    def test_expired_attempt_deadline_skips_request(self, monkeypatch):
        def fake_get(*args, **kwargs):
            raise AssertionError("request should not be sent")

        monkeypatch.setattr(requests, "get", fake_get)
        scope = child_scope(None, 0.01)
        scope.wait()

        with pytest.raises(TaskError, match="deadline exceeded"):
            HttpTask("http://example.test").run(scope)


class TestCallableTask:
    """Tests for CallableTask"""

    def test_passes_scope(self):
        seen = []

        def check(scope):
            seen.append(scope)

        task = CallableTask(check)
        with child_scope(None, 0) as scope:
            task.run(scope)

        assert seen == [scope]
        assert task.describe() == "check"

    def test_exception_propagates(self):
        def broken(scope):
            raise ValueError("nope")

        with child_scope(None, 0) as scope:
            with pytest.raises(ValueError):
                CallableTask(broken, name="broken").run(scope)


class TestTaskFactory:
    """Tests for TaskFactory"""

    @pytest.mark.parametrize("url", ["http://example.test", "https://example.test/health"])
    def test_url_creates_http_task(self, url):
        task = TaskFactory.create(url)
        assert isinstance(task, HttpTask)
        assert task.url == url

    def test_command_creates_exec_task(self):
        task = TaskFactory.create("ls", ["-l", "/tmp"], quiet=True)
        assert isinstance(task, ExecTask)
        assert task.name == "ls"
        assert task.args == ["-l", "/tmp"]
        assert task.quiet is True

    def test_empty_target_rejected(self):
        with pytest.raises(ValueError, match="no command given"):
            TaskFactory.create("")
