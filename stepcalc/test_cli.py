import pytest
from pydantic import ValidationError

from stepcalc import cli
from stepcalc.config import Settings


# ---------------------------
# Settings
# ---------------------------

def test_settings_defaults(clean_env):
    settings = Settings.from_env()
    assert settings.log_level == "WARNING"
    assert settings.prompt == "Expression: "
    assert settings.host == "127.0.0.1"
    assert settings.port == 8000


def test_settings_from_environment(clean_env):
    clean_env.setenv("STEPCALC_LOG_LEVEL", "debug")
    clean_env.setenv("STEPCALC_PORT", "9001")
    clean_env.setenv("STEPCALC_PROMPT", "calc> ")
    settings = Settings.from_env()
    assert settings.log_level == "DEBUG"
    assert settings.port == 9001
    assert settings.prompt == "calc> "


def test_settings_from_dotenv_file(tmp_path, monkeypatch):
    # load_dotenv writes os.environ directly; register the key so it is undone
    monkeypatch.setenv("STEPCALC_HOST", "unset")
    monkeypatch.delenv("STEPCALC_HOST")
    env_file = tmp_path / ".env"
    env_file.write_text("STEPCALC_HOST=0.0.0.0\n")
    settings = Settings.from_env(str(env_file))
    assert settings.host == "0.0.0.0"
    monkeypatch.delenv("STEPCALC_HOST")


def test_settings_validation():
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")
    with pytest.raises(ValidationError):
        Settings(port=0)
    with pytest.raises(ValidationError):
        Settings(host="  ")


# ---------------------------
# Command line
# ---------------------------

def test_eval_prints_result(clean_env, capsys):
    assert cli.main(["-e", "2+3"]) == 0
    assert capsys.readouterr().out.strip() == "2 + 3 = 5"


def test_eval_with_details_flag(clean_env, capsys):
    assert cli.main(["-e", "8r3", "--details"]) == 0
    out = capsys.readouterr().out
    assert "Step 1: 8 r 3 = 2" in out


def test_eval_with_details_keyword(clean_env, capsys):
    assert cli.main(["--eval", "details 2^3"]) == 0
    assert "Step 1: 2 ^ 3 = 8" in capsys.readouterr().out


def test_eval_error_exit_status(clean_env, capsys):
    assert cli.main(["-e", "sqrt(-1)"]) == 1
    assert "Error: sqrt domain" in capsys.readouterr().out


def test_eval_blank_expression(clean_env, capsys):
    assert cli.main(["-e", "details"]) == 1


def test_command_line_overrides_environment(clean_env):
    clean_env.setenv("STEPCALC_PORT", "9001")
    args = cli.build_parser().parse_args(["--port", "9100", "--log-level", "info"])
    settings = cli.load_settings(args)
    assert settings.port == 9100
    assert settings.log_level == "INFO"


def test_invalid_log_level_exits(clean_env):
    with pytest.raises(SystemExit):
        cli.main(["--log-level", "chatty", "-e", "1"])


def test_serve_runs_uvicorn(clean_env, monkeypatch):
    calls = {}

    def fake_run(app, host, port, log_level):
        calls.update(app=app, host=host, port=port, log_level=log_level)

    monkeypatch.setattr("uvicorn.run", fake_run)
    assert cli.main(["--serve", "--port", "8123"]) == 0
    assert calls["port"] == 8123
    assert calls["host"] == "127.0.0.1"
    assert calls["log_level"] == "warning"


def test_no_arguments_starts_shell(clean_env, monkeypatch):
    started = []
    monkeypatch.setattr("stepcalc.shell.Shell.run", lambda self: started.append(self.prompt))
    assert cli.main([]) == 0
    assert started == ["Expression: "]
