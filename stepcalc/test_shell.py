import pytest
from prompt_toolkit.completion import WordCompleter

from stepcalc.shell import render_result, show_help, split_details


def test_evaluate_line_bare_expression(shell):
    ok, out = shell.evaluate_line("2+3*4")
    assert ok
    assert out == "  2 + 3 * 4 = 14"


def test_evaluate_line_blank(shell):
    assert shell.evaluate_line("   ") == (True, "")


def test_evaluate_line_error(shell):
    ok, out = shell.evaluate_line("5/0")
    assert not ok
    assert out == "  5 / 0 = Error: Division by zero"


def test_evaluate_line_lex_error(shell):
    ok, out = shell.evaluate_line("2 $ 3")
    assert not ok
    assert "Unknown character: '$'" in out


@pytest.mark.parametrize("line", ["details 2+3*4", "2+3*4 details", "DETAILS 2+3*4"])
def test_details_prefix_and_suffix(shell, line):
    ok, out = shell.evaluate_line(line)
    assert ok
    assert out.splitlines() == [
        "  2 + 3 * 4 = 14",
        "",
        "  Step-by-step evaluation:",
        "  Step 1: 3 * 4 = 12",
        "  Step 2: 2 + 12 = 14",
    ]


def test_details_without_expression(shell):
    ok, out = shell.evaluate_line("details")
    assert not ok
    assert "valid expression" in out


def test_details_without_steps_prints_only_result(shell):
    ok, out = shell.evaluate_line("details 42")
    assert ok
    assert out == "  42 = 42"


def test_unary_step_is_displayed_canonically(shell):
    _, out = shell.evaluate_line("details -5")
    assert "  Step 1: -5 = -5" in out.splitlines()


@pytest.mark.parametrize("command", ["quit", "exit", "q", "QUIT"])
def test_quit_commands_raise_eof(shell, command):
    with pytest.raises(EOFError):
        shell.evaluate_line(command)


@pytest.mark.parametrize("command", ["clear", "reset"])
def test_clear_commands(shell, command):
    shell.evaluate_line("1 + 1")
    assert shell.history == ["1 + 1"]
    ok, out = shell.evaluate_line(command)
    assert ok and out == "History cleared"
    assert shell.history == []


def test_history_records_expressions_not_commands(shell):
    shell.evaluate_line("1 + 1")
    shell.evaluate_line("help")
    shell.evaluate_line("bad(")
    assert shell.history == ["1 + 1", "bad("]


def test_help_command(shell):
    ok, out = shell.evaluate_line("help")
    assert ok and "Calculator help" in out
    ok, out = shell.evaluate_line("help functions")
    assert "Built-in functions" in out
    assert "stdev (stddev)" in out
    ok, out = shell.evaluate_line("HELP constants")
    assert "pi" in out


def test_show_help_unknown_topic():
    assert "No help available for topic" in show_help("nonexistent_topic")
    assert "Operators and precedence" in show_help("operators")


def test_split_details():
    assert split_details("details 1+1") == (True, "1+1")
    assert split_details("1+1 details") == (True, "1+1")
    assert split_details("1+1") == (False, "1+1")
    assert split_details("detailsx") == (False, "detailsx")


def test_render_result_formats_non_integral_values():
    ok, out = render_result("1/4")
    assert ok and out == "  1 / 4 = 0.25"
    ok, out = render_result("10^400")
    assert ok and out == "  10 ^ 400 = inf"


def test_completer_covers_functions_and_constants(shell):
    completer = shell._build_completer()
    assert isinstance(completer, WordCompleter)
    assert "sqrt" in completer.words
    assert "pi" in completer.words


def test_trig_of_infinite_value_is_not_an_error(shell):
    ok, out = shell.evaluate_line("sin(2 ^ 2000)")
    assert ok
    assert out == "  sin(2 ^ 2000) = NaN"


class ScriptedSession:
    """Stands in for PromptSession, replaying lines then Ctrl-D."""

    def __init__(self, lines):
        self.lines = list(lines)

    def prompt(self, message):
        if not self.lines:
            raise EOFError()
        return self.lines.pop(0)


def test_run_survives_unexpected_errors(shell, monkeypatch, capsys, caplog):
    import stepcalc.shell as shell_module

    real_calculate = shell_module.calculate

    def flaky_calculate(text, detailed=False):
        if text == "9 + 9":
            raise RuntimeError("engine exploded")
        return real_calculate(text, detailed)

    monkeypatch.setattr(shell_module, "calculate", flaky_calculate)
    monkeypatch.setattr(shell, "_new_session", lambda: ScriptedSession(["9 + 9", "1 + 1"]))
    with caplog.at_level("ERROR", logger="stepcalc.shell"):
        shell.run()
    out = capsys.readouterr().out
    assert "Unexpected error: engine exploded" in out
    assert "  1 + 1 = 2" in out
    assert out.rstrip().endswith("Goodbye!")
    assert "engine exploded" in caplog.text
