"""Exception hierarchy for the expression engine.

Lexical problems raise a :class:`LexError`, everything the parser or a
builtin function rejects raises an :class:`EvalError`. Both derive from
:class:`CalculatorError` so collaborators can catch a single type.
"""


class CalculatorError(Exception):
    """Base class for calculator errors."""
    pass


# ---------------------------
# Tokenizer errors
# ---------------------------

class LexError(CalculatorError):
    """Raised for errors during tokenization."""
    pass


class InvalidNumber(LexError):
    """A numeric run that does not parse as a float."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Invalid number: '{raw}'")


class UnknownCharacter(LexError):
    """A character that cannot start any token."""

    def __init__(self, char: str):
        self.char = char
        super().__init__(f"Unknown character: '{char}'")


# ---------------------------
# Parser / evaluator errors
# ---------------------------

class EvalError(CalculatorError):
    """Raised for errors during parsing and evaluation."""
    pass


class DivisionByZero(EvalError):
    def __init__(self, message: str = "Division by zero"):
        super().__init__(message)


class ZeroRootDegree(EvalError):
    def __init__(self):
        super().__init__("Root degree cannot be zero")


class EvenRootOfNegative(EvalError):
    def __init__(self):
        super().__init__("Even root of negative number")


class DomainError(EvalError):
    """A function argument outside the function's domain."""

    def __init__(self, function: str, message: str):
        self.function = function
        super().__init__(message)


class WrongArity(EvalError):
    """A function called with an unsupported number of arguments."""

    def __init__(self, function: str, message: str):
        self.function = function
        super().__init__(message)


class UnknownFunction(EvalError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown function: '{name}'")


class MissingParentheses(EvalError):
    """An identifier other than a constant that is not followed by '('."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Function '{name}' requires parentheses")


class UnclosedParenthesis(EvalError):
    def __init__(self, message: str = "Missing closing parenthesis"):
        super().__init__(message)


class UnexpectedToken(EvalError):
    def __init__(self, message: str = "Unexpected token"):
        super().__init__(message)


class TrailingTokens(EvalError):
    def __init__(self):
        super().__init__("Unexpected tokens at end of expression")


class EmptyInput(EvalError):
    def __init__(self):
        super().__init__("Empty expression")
