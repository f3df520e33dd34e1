"""Arithmetic expression engine with step-by-step evaluation traces."""

from stepcalc.errors import (
    CalculatorError,
    DivisionByZero,
    DomainError,
    EmptyInput,
    EvalError,
    EvenRootOfNegative,
    InvalidNumber,
    LexError,
    MissingParentheses,
    TrailingTokens,
    UnclosedParenthesis,
    UnexpectedToken,
    UnknownCharacter,
    UnknownFunction,
    WrongArity,
    ZeroRootDegree,
)
from stepcalc.formatting import canonicalize_spacing, format_number
from stepcalc.parser import calculate, evaluate
from stepcalc.tokenizer import Token, TokenType, tokenize
from stepcalc.trace import EvaluationTrace, Step

__version__ = "1.0.0"

__all__ = [
    "CalculatorError",
    "DivisionByZero",
    "DomainError",
    "EmptyInput",
    "EvalError",
    "EvaluationTrace",
    "EvenRootOfNegative",
    "InvalidNumber",
    "LexError",
    "MissingParentheses",
    "Step",
    "Token",
    "TokenType",
    "TrailingTokens",
    "UnclosedParenthesis",
    "UnexpectedToken",
    "UnknownCharacter",
    "UnknownFunction",
    "WrongArity",
    "ZeroRootDegree",
    "calculate",
    "canonicalize_spacing",
    "evaluate",
    "format_number",
    "tokenize",
]
