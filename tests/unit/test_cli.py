"""Unit tests for the tracflow command line."""

from pathlib import Path
from textwrap import dedent

import pytest
from click.testing import CliRunner, Result
from xmlrpc_fake import FakeTracServer

from tracflow.cli import main


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Create a config file for the fake server."""
    config_path = tmp_path / "tracflow.yaml"
    config_path.write_text(
        dedent("""
            host: trac.example.com
            path: /trac/
            username: alice
            password: s3cret
        """).strip()
    )
    return config_path


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    """CLI runner with TRAC_* and TRACFLOW_* variables cleared."""
    for variable in (
        "TRAC_HOST",
        "TRAC_PATH",
        "TRAC_USER",
        "TRAC_PASSWORD",
        "TRACFLOW_LOG_DIR",
        "TRACFLOW_LOG_LEVEL",
    ):
        monkeypatch.delenv(variable, raising=False)
    return CliRunner()


@pytest.fixture
def trac_server() -> FakeTracServer:
    """Fake server holding ticket #42."""
    server = FakeTracServer()
    server.add_ticket(
        42,
        summary="Fix bug",
        description="It crashes",
        owner="bob",
        reviewer="carol",
        milestone="v1",
        status="open",
    )
    server.accept_updates()
    return server


def invoke(runner: CliRunner, server: FakeTracServer, config_file: Path, *args: str) -> Result:
    """Run the CLI against the fake server."""
    return runner.invoke(
        main, ["-c", str(config_file), *args], obj={"transport": server.transport()}
    )


@pytest.mark.unit
class TestReadCommands:
    """Tests for show, fields, actions and url."""

    def test_show(self, runner: CliRunner, trac_server: FakeTracServer, config_file: Path) -> None:
        """show prints the terse line."""
        result = invoke(runner, trac_server, config_file, "show", "42")

        assert result.exit_code == 0
        assert result.stdout == "Ticket 42: 'Fix bug' | o: bob, r: carol, m: v1 | open\n"

    def test_show_detail(
        self, runner: CliRunner, trac_server: FakeTracServer, config_file: Path
    ) -> None:
        """--detail adds the description."""
        result = invoke(runner, trac_server, config_file, "show", "42", "--detail")

        assert result.exit_code == 0
        assert result.stdout.endswith("=" * 56 + "\n\nIt crashes\n")

    def test_fields(
        self, runner: CliRunner, trac_server: FakeTracServer, config_file: Path
    ) -> None:
        """fields lists name, type, default and options."""
        trac_server.respond(
            "ticket.getTicketFields",
            [
                {"name": "summary", "type": "text"},
                {"name": "priority", "type": "select", "options": ["low", "high"], "default": "low"},
            ],
        )

        result = invoke(runner, trac_server, config_file, "fields")

        assert result.exit_code == 0
        assert result.stdout.splitlines() == [
            "summary (string)",
            "priority (dropdown) default=low options: low, high",
        ]

    def test_actions(
        self, runner: CliRunner, trac_server: FakeTracServer, config_file: Path
    ) -> None:
        """actions prints name and description."""
        trac_server.respond("ticket.getActions", [["leave", "leave as open", "", []]])

        result = invoke(runner, trac_server, config_file, "actions", "42")

        assert result.exit_code == 0
        assert result.stdout == "leave: leave as open\n"

    def test_actions_none_available(
        self, runner: CliRunner, trac_server: FakeTracServer, config_file: Path
    ) -> None:
        """A failed action lookup prints a notice and still succeeds."""
        trac_server.fault("ticket.getActions", 403, "Forbidden")

        result = invoke(runner, trac_server, config_file, "actions", "42")

        assert result.exit_code == 0
        assert "No actions available" in result.stdout

    def test_url(self, runner: CliRunner, trac_server: FakeTracServer, config_file: Path) -> None:
        """url prints the ticket link without calling the server."""
        result = invoke(runner, trac_server, config_file, "url", "42")

        assert result.stdout == "https://trac.example.com/trac/ticket/42\n"
        assert trac_server.calls == []


@pytest.mark.unit
class TestWorkflowCommands:
    """Tests for the mutation commands."""

    @pytest.mark.parametrize(
        ("args", "expected"),
        [
            (["set-reviewer", "42", "dave"], [(42, "", {"reviewer": "dave"})]),
            (
                ["request-review", "42", "dave"],
                [
                    (42, "", {"reviewer": "dave"}),
                    (42, "Sent to dave for review", {"action": "peer_review"}),
                ],
            ),
            (["review-pass", "42", "-m", "LGTM"], [(42, "LGTM", {"action": "pass_peer_review"})]),
            (["review-fail", "42", "No tests"], [(42, "No tests", {"action": "reject"})]),
            (["accept", "42"], [(42, "", {"action": "accept"})]),
            (["accept", "42", "--no-estimate"], [(42, "", {"action": "no_estimate_needed"})]),
            (["release", "42"], [(42, "", {"action": "leave"})]),
            (["reopen", "42", "-m", "Again"], [(42, "Again", {"action": "reopen"})]),
            (["close", "42"], [(42, "", {"action": "resolve"})]),
        ],
    )
    def test_sends_updates(
        self,
        runner: CliRunner,
        trac_server: FakeTracServer,
        config_file: Path,
        args: list[str],
        expected: list[tuple],
    ) -> None:
        """Each command sends the matching ticket.update calls."""
        result = invoke(runner, trac_server, config_file, *args)

        assert result.exit_code == 0, result.output
        assert trac_server.calls_to("ticket.update") == expected


@pytest.mark.unit
class TestErrors:
    """Tests for error reporting."""

    def test_trac_error_exits_1(
        self, runner: CliRunner, trac_server: FakeTracServer, config_file: Path
    ) -> None:
        """Server errors are printed to stderr."""
        result = invoke(runner, trac_server, config_file, "show", "7")

        assert result.exit_code == 1
        assert "Trac error:" in result.stderr
        assert "Ticket 7 does not exist" in result.stderr

    def test_review_request_failure_exits_1(
        self, runner: CliRunner, trac_server: FakeTracServer, config_file: Path
    ) -> None:
        """A partial review request is reported as an error."""
        trac_server.fault("ticket.update", 2, "Permission denied")

        result = invoke(runner, trac_server, config_file, "request-review", "42", "dave")

        assert result.exit_code == 1
        assert "Review request for ticket #42 failed" in result.stderr

    def test_config_error_exits_1(
        self, runner: CliRunner, trac_server: FakeTracServer, tmp_path: Path
    ) -> None:
        """Incomplete configuration is reported."""
        config_path = tmp_path / "tracflow.yaml"
        config_path.write_text("host: trac.example.com\n")

        result = invoke(runner, trac_server, config_path, "show", "42")

        assert result.exit_code == 1
        assert "Configuration error: Missing required fields: username, password" in result.stderr
        assert trac_server.calls == []

    def test_non_integer_ticket_id(
        self, runner: CliRunner, trac_server: FakeTracServer, config_file: Path
    ) -> None:
        """Ticket ids must be integers."""
        result = invoke(runner, trac_server, config_file, "show", "abc")

        assert result.exit_code == 2

    def test_out_of_range_ticket_id(
        self, runner: CliRunner, trac_server: FakeTracServer, config_file: Path
    ) -> None:
        """Ids XML-RPC cannot carry are reported like any Trac error."""
        result = invoke(runner, trac_server, config_file, "show", str(2**31))

        assert result.exit_code == 1
        assert "Trac error: ticket.get arguments cannot be marshaled" in result.stderr
        assert trac_server.calls == []


@pytest.mark.unit
class TestConsoleLogging:
    """Tests for what the CLI writes to stderr."""

    def test_error_reported_once(
        self, runner: CliRunner, trac_server: FakeTracServer, config_file: Path
    ) -> None:
        """Without -v a failure prints only the error line."""
        result = invoke(runner, trac_server, config_file, "show", "7")

        assert result.exit_code == 1
        assert result.stderr.splitlines() == [
            "Trac error: ticket.get fault 404: Ticket 7 does not exist."
        ]

    def test_update_is_quiet(
        self, runner: CliRunner, trac_server: FakeTracServer, config_file: Path
    ) -> None:
        """Without -v a successful update writes nothing to stderr."""
        result = invoke(runner, trac_server, config_file, "release", "42")

        assert result.exit_code == 0
        assert result.stderr == ""

    def test_verbose_logs_calls(
        self, runner: CliRunner, trac_server: FakeTracServer, config_file: Path
    ) -> None:
        """-v turns on debug logging to stderr."""
        result = invoke(runner, trac_server, config_file, "-v", "release", "42")

        assert result.exit_code == 0
        assert "| tracflow.trac | Fetching ticket #42" in result.stderr
        assert "Updating ticket #42" in result.stderr
