"""Interactive line-mode shell on top of the expression engine.

The shell owns everything the engine does not: commands, the ``details``
keyword, history and presentation. History is kept in memory only.
"""

import logging
from typing import List, Optional, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory

from stepcalc.errors import CalculatorError
from stepcalc.formatting import canonicalize_spacing, format_number
from stepcalc.functions import CONSTANTS, FUNCTION_NAMES, FUNCTIONS
from stepcalc.parser import calculate

logger = logging.getLogger(__name__)

DETAILS_KEYWORD = "details"
QUIT_COMMANDS = {'quit', 'exit', 'q'}
CLEAR_COMMANDS = {'clear', 'reset'}

BANNER = (
    "Console Calculator\n"
    "Supports: +, -, *, /, %, ^, r (root), functions (sin, cos, etc.)\n"
    "Constants: pi, e\n"
    "Navigation: Left/Right, Backspace/Delete, Home/End, Up/Down for history\n"
    "Special commands: 'quit' to exit, 'clear' to reset history, 'help' for help\n"
    "Add 'details' before expression for step-by-step evaluation\n"
)


def _function_lines() -> str:
    seen = set()
    lines = []
    for name in FUNCTION_NAMES:
        spec = FUNCTIONS[name]
        if spec.name in seen:
            continue
        seen.add(spec.name)
        aliases = [n for n in FUNCTION_NAMES if FUNCTIONS[n] is spec and n != spec.name]
        label = spec.name if not aliases else f"{spec.name} ({', '.join(aliases)})"
        lines.append(f"  {label:<22}: {spec.summary}")
    return "\n".join(lines)


_HELP_TOPICS = {
    'general': (
        "Calculator help:\n"
        "Type an expression and press Enter.\n"
        "Examples:\n"
        "  2 + 3 * 4 -> 14\n"
        "  8 r 3 -> 2\n"
        "  sinh(1.5)\n"
        "  perm(10, 3) -> 720\n"
        "  details comb(8, 3)\n"
        "Commands:\n"
        "  help [topic]     show help (topics: operators, functions, constants)\n"
        "  details <expr>   show step-by-step evaluation ('<expr> details' works too)\n"
        "  clear, reset     clear calculation history\n"
        "  quit, exit, q    exit\n"
    ),
    'operators': (
        "Operators and precedence (high -> low):\n"
        "  unary: + -\n"
        "  ^ : Exponentiation, right-assoc (2 ^ 3 ^ 2 == 2 ^ 9)\n"
        "  r : Root (8 r 3 = 2), not chainable\n"
        "  * / % : % truncates both operands to integers (10.7 % 3.2 = 1)\n"
        "  + -\n"
        "Notes:\n"
        "  - A leading sign binds tighter than ^, so -2 ^ 2 == 4.\n"
        "  - 'r' is reserved for roots and cannot start a name.\n"
    ),
    'functions': (
        "Built-in functions (angles in degrees):\n"
        + _function_lines() + "\n"
    ),
    'constants': (
        "Constants:\n"
        + "\n".join(f"  {name:<3}: {format_number(value)}" for name, value in CONSTANTS.items())
        + "\n"
    ),
}


def show_help(topic: Optional[str] = None) -> str:
    """Return help text for topic or general if None."""
    if not topic:
        return _HELP_TOPICS['general']
    key = topic.lower()
    return _HELP_TOPICS.get(key, f"No help available for topic '{topic}'")


def split_details(line: str) -> Tuple[bool, str]:
    """Strip a leading or trailing ``details`` keyword.

    Returns ``(detailed, expression)``.
    """
    lowered = line.lower()
    prefix = DETAILS_KEYWORD + " "
    suffix = " " + DETAILS_KEYWORD
    if lowered.startswith(prefix):
        return True, line[len(prefix):].strip()
    if lowered.endswith(suffix):
        return True, line[:-len(suffix)].strip()
    if lowered == DETAILS_KEYWORD:
        return True, ""
    return False, line


def render_result(expression: str, detailed: bool = False) -> Tuple[bool, str]:
    """Evaluate ``expression`` and render it the way the shell prints it."""
    shown = canonicalize_spacing(expression)
    try:
        value, steps = calculate(expression, detailed)
    except CalculatorError as e:
        return False, f"  {shown} = Error: {e}"
    lines = [f"  {shown} = {format_number(value)}"]
    if detailed and steps:
        lines.append("")
        lines.append("  Step-by-step evaluation:")
        for i, step in enumerate(steps, start=1):
            lines.append(
                f"  Step {i}: {canonicalize_spacing(step.operation)} = {format_number(step.result)}"
            )
    return True, "\n".join(lines)


class Shell:
    """Read-Eval-Print Loop for the calculator."""

    def __init__(self, prompt: str = "Expression: "):
        self.prompt = prompt
        self.history: List[str] = []
        self.session: Optional[PromptSession] = None

    def _build_completer(self) -> WordCompleter:
        words = list(FUNCTION_NAMES) + list(CONSTANTS) + [DETAILS_KEYWORD, 'help']
        return WordCompleter(words, ignore_case=True)

    def _new_session(self) -> PromptSession:
        return PromptSession(history=InMemoryHistory(), completer=self._build_completer())

    def clear_history(self) -> None:
        self.history = []
        if self.session is not None:
            self.session = self._new_session()

    def evaluate_line(self, line: str) -> Tuple[bool, str]:
        """Evaluate a single line (either command or expression). Returns (ok, output).

        Raises EOFError for the quit commands so the caller can shut down.
        """
        text = line.strip()
        if not text:
            return True, ""
        lowered = text.lower()
        if lowered in QUIT_COMMANDS:
            raise EOFError()
        if lowered in CLEAR_COMMANDS:
            self.clear_history()
            return True, "History cleared"
        if lowered == 'help' or lowered.startswith('help '):
            parts = text.split(None, 1)
            return True, show_help(parts[1].strip() if len(parts) > 1 else None)

        detailed, expression = split_details(text)
        if not expression:
            return False, f"Please enter a valid expression after '{DETAILS_KEYWORD}'"
        self.history.append(text)
        return render_result(expression, detailed)

    def run(self) -> None:
        """Interactive loop; Ctrl-C drops the current line, Ctrl-D exits."""
        print(BANNER)
        self.session = self._new_session()
        logger.info("Shell started")
        while True:
            try:
                line = self.session.prompt(self.prompt)
            except KeyboardInterrupt:
                print("^C")
                continue
            except EOFError:
                break
            try:
                _, out = self.evaluate_line(line)
            except EOFError:
                break
            except Exception as e:
                logger.error(f"Unexpected error evaluating {line!r}: {str(e)}")
                out = f"Unexpected error: {e}"
            if out:
                print(out)
                print()
        print("Goodbye!")
        logger.info(f"Shell stopped after {len(self.history)} expressions")
