import pytest

from slack_notify.context import (
    DEFAULT_SERVER_URL,
    STATUS_COLORS,
    clean_value,
    first_line,
    normalise_status,
    resolve_compare_url,
    resolve_context,
)
from slack_notify.errors import EXIT_CONFIG_ERROR

REQUIRED = {"SLACK_WEBHOOK_URL": "https://hooks.example/T1", "SLACK_STATUS": "success"}


def test_optional_values_take_defaults() -> None:
    ctx = resolve_context(dict(REQUIRED))

    assert ctx.webhook_url == "https://hooks.example/T1"
    assert ctx.status == "success"
    assert ctx.author == "unknown"
    assert ctx.email == ""
    assert ctx.commit_id == ""
    assert ctx.compare_url == ""
    assert ctx.server_url == DEFAULT_SERVER_URL


def test_empty_author_falls_back_to_unknown() -> None:
    ctx = resolve_context({**REQUIRED, "SLACK_AUTHOR": ""})
    assert ctx.author == "unknown"


@pytest.mark.parametrize("missing", ["SLACK_WEBHOOK_URL", "SLACK_STATUS"])
def test_missing_required_value_exits_with_config_error(missing: str, capsys: pytest.CaptureFixture) -> None:
    env = dict(REQUIRED)
    del env[missing]

    with pytest.raises(SystemExit) as excinfo:
        resolve_context(env)

    assert excinfo.value.code == EXIT_CONFIG_ERROR
    captured = capsys.readouterr()
    assert f"Need to provide {missing}" in captured.err
    assert captured.out == ""


def test_empty_required_value_counts_as_missing(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as excinfo:
        resolve_context({**REQUIRED, "SLACK_WEBHOOK_URL": ""})

    assert excinfo.value.code == EXIT_CONFIG_ERROR
    assert "SLACK_WEBHOOK_URL" in capsys.readouterr().err


def test_webhook_url_is_checked_before_status(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit):
        resolve_context({})

    err = capsys.readouterr().err
    assert "SLACK_WEBHOOK_URL" in err
    assert "SLACK_STATUS" not in err


@pytest.mark.parametrize(
    "raw, expected",
    [("success", "success"), ("Success", "success"), ("FAILURE", "failure"), ("Cancelled", "cancelled")],
)
def test_status_is_lowercased(raw: str, expected: str) -> None:
    assert normalise_status(raw) == expected


@pytest.mark.parametrize("raw", ["skipped", "SUCCESSFUL", "ok", " success"])
def test_unknown_status_is_rejected(raw: str, capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as excinfo:
        resolve_context({**REQUIRED, "SLACK_STATUS": raw})

    assert excinfo.value.code == EXIT_CONFIG_ERROR
    err = capsys.readouterr().err
    assert "Invalid SLACK_STATUS" in err
    assert repr(raw) in err


def test_color_follows_status() -> None:
    for status, color in STATUS_COLORS.items():
        assert resolve_context({**REQUIRED, "SLACK_STATUS": status}).color == color


def test_status_colors_are_read_only() -> None:
    with pytest.raises(TypeError):
        STATUS_COLORS["skipped"] = "#000000"  # type: ignore[index]


def test_commit_message_keeps_first_line_only() -> None:
    ctx = resolve_context({**REQUIRED, "SLACK_COMMIT_MSG": "Fix bug\n\nDetails..."})
    assert ctx.commit_msg == "Fix bug"


def test_first_line_strips_carriage_return() -> None:
    assert first_line("Fix bug\r\nmore") == "Fix bug"
    assert first_line("single line") == "single line"
    assert first_line("") == ""


def test_compare_url_prefers_explicit_value() -> None:
    assert resolve_compare_url("https://cmp", "https://commit", "acme/widget", DEFAULT_SERVER_URL) == "https://cmp"


def test_compare_url_falls_back_to_commit_url() -> None:
    ctx = resolve_context({**REQUIRED, "SLACK_COMMIT_URL": "https://git/x/commit/1", "GITHUB_REPOSITORY": "acme/widget"})
    assert ctx.compare_url == "https://git/x/commit/1"


def test_compare_url_falls_back_to_repository_home() -> None:
    ctx = resolve_context({**REQUIRED, "GITHUB_REPOSITORY": "acme/widget"})
    assert ctx.compare_url == "https://github.com/acme/widget"


def test_compare_url_uses_server_url_without_trailing_slash() -> None:
    ctx = resolve_context(
        {**REQUIRED, "GITHUB_REPOSITORY": "acme/widget", "GITHUB_SERVER_URL": "https://ghe.example.com/"}
    )
    assert ctx.server_url == "https://ghe.example.com"
    assert ctx.compare_url == "https://ghe.example.com/acme/widget"


def test_compare_url_empty_without_any_source() -> None:
    assert resolve_compare_url("", "", "", DEFAULT_SERVER_URL) == ""


def test_context_is_immutable() -> None:
    ctx = resolve_context(dict(REQUIRED))
    with pytest.raises(AttributeError):
        ctx.status = "failure"  # type: ignore[misc]


def test_clean_value_replaces_undecodable_bytes() -> None:
    assert clean_value("Fix caf\udce9 bug") == "Fix caf\ufffd bug"
    assert clean_value("Café") == "Café"


def test_undecodable_environment_bytes_are_replaced() -> None:
    environ = {**REQUIRED, "SLACK_COMMIT_MSG": "Fix caf\udce9 bug", "SLACK_AUTHOR": "J\udcf6rg"}

    ctx = resolve_context(environ)

    assert ctx.commit_msg == "Fix caf\ufffd bug"
    assert ctx.author == "J\ufffdrg"


def test_crlf_commit_message_keeps_first_line_without_carriage_return() -> None:
    ctx = resolve_context({**REQUIRED, "SLACK_COMMIT_MSG": "Fix bug\r\n\r\nDetails"})
    assert ctx.commit_msg == "Fix bug"
