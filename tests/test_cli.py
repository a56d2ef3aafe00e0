"""Tests for the command-line interface."""

import io
import json
import math
import time
from unittest.mock import patch

import pytest
import structlog

from nohumanallowed.cli import main
from nohumanallowed.config import settings
from nohumanallowed.logging_config import setup_logging


@pytest.fixture(autouse=True)
def unsigned():
    with patch.object(settings, "challenge_secret", None), patch.object(
        settings, "require_signature", False
    ):
        yield


def run_json(capsys, *argv):
    code = main([*argv, "--json"])
    return code, json.loads(capsys.readouterr().out)


class TestChallengeCommand:
    def test_json_output(self, capsys):
        code, challenge = run_json(capsys, "challenge", "-d", "3", "-e", "120")

        assert code == 0
        assert challenge["target"] == "000"
        assert challenge["expiresAt"] >= math.floor(time.time()) + 119
        assert "signature" not in challenge

    def test_signed_with_configured_secret(self, capsys, secret):
        with patch.object(settings, "challenge_secret", secret):
            _, challenge = run_json(capsys, "challenge")

        assert len(challenge["signature"]) == 32

    def test_human_output(self, capsys):
        assert main(["challenge", "--difficulty", "2"]) == 0

        out = capsys.readouterr().out
        assert "Challenge created:" in out
        assert "target:    00" in out
        assert "nohumanallowed solve --prefix" in out


class TestSolveCommand:
    def test_prints_nonce_only(self, capsys):
        """Test that stdout carries only the nonce, for piping."""
        assert main(["solve", "--prefix", "abcdef0123456789", "--target", "00"]) == 0

        captured = capsys.readouterr()
        nonce = captured.out.strip()
        assert nonce.isdigit()
        assert "Solved in" in captured.err

    def test_json_output(self, capsys):
        code, solution = run_json(capsys, "solve", "-p", "abcdef0123456789", "-t", "0")

        assert code == 0
        assert solution["found"] is True
        assert solution["hash"].startswith("0")

    def test_not_found(self, capsys):
        code = main(["solve", "-p", "abc", "-t", "000000", "--max-iterations", "10"])

        assert code == 1
        assert "Failed to solve challenge" in capsys.readouterr().err


class TestVerifyCommand:
    def test_challenge_solve_verify(self, capsys):
        """Test the three commands chained together."""
        _, challenge = run_json(capsys, "challenge", "-d", "2")
        _, solution = run_json(
            capsys, "solve", "-p", challenge["prefix"], "-t", challenge["target"]
        )

        code, result = run_json(
            capsys,
            "verify",
            "-p",
            challenge["prefix"],
            "-n",
            solution["nonce"],
            "-t",
            challenge["target"],
            "-e",
            str(challenge["expiresAt"]),
        )

        assert code == 0
        assert result["valid"] is True
        assert result["hash"] == solution["hash"]

    def test_invalid_solution(self, capsys):
        code = main(["verify", "-p", "abc", "-n", "x", "-t", "000000", "-e", "9999999999"])

        assert code == 1
        out = capsys.readouterr().out
        assert "Invalid solution" in out
        assert "invalid_hash" in out

    def test_missing_expires_warns(self, capsys):
        main(["verify", "-p", "abc", "-n", "x", "-t", "0"])
        assert "--expires not provided" in capsys.readouterr().err

    def test_expired(self, capsys):
        code, result = run_json(capsys, "verify", "-p", "abc", "-n", "1", "-t", "0", "-e", "1")

        assert code == 1
        assert result == {"valid": False, "reason": "expired"}


class TestLogStream:
    @pytest.fixture
    def debug_logging(self):
        with patch.object(settings, "log_level", "DEBUG"), patch.object(
            settings, "solver_progress_interval", 1
        ):
            yield
        setup_logging()

    def test_debug_logs_keep_stdout_parseable(self, capsys, debug_logging):
        """Test that log lines go to stderr while JSON goes to stdout."""
        code = main(["solve", "-p", "abc", "-t", "000000", "--max-iterations", "5", "--json"])

        captured = capsys.readouterr()
        assert code == 1
        assert json.loads(captured.out)["found"] is False
        assert "solve_progress" in captured.err
        assert "solve_progress" not in captured.out

    def test_setup_logging_writes_to_given_stream(self, debug_logging):
        stream = io.StringIO()
        setup_logging(stream=stream)

        structlog.get_logger().info("stream_check")
        assert "stream_check" in stream.getvalue()


class TestServeCommand:
    def test_runs_uvicorn(self):
        with patch("uvicorn.run") as mock_run:
            assert main(["serve", "--port", "9999"]) == 0

        mock_run.assert_called_once_with("nohumanallowed.main:app", host=settings.host, port=9999)


def test_command_is_required():
    with pytest.raises(SystemExit):
        main([])
