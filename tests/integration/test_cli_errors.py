# tests/integration/test_cli_errors.py
# Integration tests for CLI error reporting: labels, exit codes & failed saves

from typer.testing import CliRunner

ENV = {"NO_COLOR": "1", "TERM": "dumb"}


def _invoke(*args):
    from profilehub.cli.app import app

    return CliRunner().invoke(app, list(args), env=ENV)


# * Ensure an unknown category is reported as a validation error
def test_unknown_category(isolate_config):
    result = _invoke("data", "add", "hobby")

    assert result.exit_code == 1
    assert "Validation Error" in result.output


def test_bad_assignment_syntax(isolate_config):
    result = _invoke("data", "personal", "no-equals-sign")

    assert result.exit_code == 1
    assert "FIELD=VALUE" in result.output


# * Ensure a save over quota fails the command w/ the storage message
def test_save_over_quota_fails(isolate_config):
    assert _invoke("config", "set", "storage_quota_bytes", "100").exit_code == 0

    result = _invoke("profiles", "create", "--name", "Too Big")

    assert result.exit_code == 1
    assert "Storage Error" in result.output
    assert "quota exceeded" in result.output


# * Verify database storage w/o a user id refuses to run
def test_database_requires_user_id(isolate_config):
    from profilehub.config.settings import settings_manager

    # bypass validation: a config file cannot hold an empty user id
    settings = settings_manager.load()
    settings.storage_backend = "database"
    settings.user_id = ""

    result = _invoke("profiles", "list")

    assert result.exit_code == 1
    assert "signed-in user id" in result.output
