"""Recursive descent parser that evaluates while it parses.

No AST is built. Each grammar rule is a function taking the token list,
the current position and the trace, and returning ``(value, new_position)``.
Grammar, lowest precedence first::

    expr    : term (('+' | '-') term)*
    term    : factor (('*' | '/' | '%') factor)*
    factor  : power ('r' power)?
    power   : unary ('^' power)?
    unary   : ('+' | '-')* primary
    primary : NUMBER | '(' expr ')' | IDENT | IDENT '(' args ')'
    args    : (expr (',' expr)*)?

Any error aborts the whole evaluation; the exception propagates to the
caller unchanged.
"""

import logging
import math
from typing import List, Sequence, Tuple

from stepcalc.errors import (
    DivisionByZero,
    EmptyInput,
    EvenRootOfNegative,
    MissingParentheses,
    TrailingTokens,
    UnclosedParenthesis,
    UnexpectedToken,
    ZeroRootDegree,
)
from stepcalc.formatting import format_number as _num
from stepcalc.functions import CONSTANTS, call_function
from stepcalc.tokenizer import Token, TokenType, tokenize
from stepcalc.trace import EvaluationTrace, Step

logger = logging.getLogger(__name__)

Parsed = Tuple[float, int]

_I64_MIN = -(2 ** 63)
_I64_MAX = 2 ** 63 - 1


def _is_op(tokens: Sequence[Token], pos: int, symbol: str) -> bool:
    return pos < len(tokens) and tokens[pos].is_op(symbol)


def _is_type(tokens: Sequence[Token], pos: int, type_: str) -> bool:
    return pos < len(tokens) and tokens[pos].type == type_


# --------------------------
# Arithmetic helpers
# --------------------------

def _truncate_i64(x: float) -> int:
    """Truncate toward zero, saturating at the signed 64-bit range."""
    if math.isnan(x):
        return 0
    if x >= _I64_MAX:
        return _I64_MAX
    if x <= _I64_MIN:
        return _I64_MIN
    return int(x)


def _modulo(left: float, right: float) -> float:
    """Integer remainder of the truncated operands; the sign follows ``left``."""
    dividend = _truncate_i64(left)
    divisor = _truncate_i64(right)
    if divisor == 0:
        raise DivisionByZero("Modulo by zero")
    remainder = abs(dividend) % abs(divisor)
    return float(-remainder if dividend < 0 else remainder)


def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and x.is_integer() and x % 2.0 == 1.0


def _real_pow(base: float, exponent: float) -> float:
    """Real power with IEEE results where math.pow raises."""
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and _is_odd_integer(exponent):
            return -math.inf
        return math.inf
    except ValueError:
        if base == 0.0:
            # zero raised to a negative power
            if _is_odd_integer(exponent):
                return math.copysign(math.inf, base)
            return math.inf
        # negative base with a non-integer exponent
        return math.nan


# --------------------------
# Grammar rules
# --------------------------

def _expr(tokens: Sequence[Token], pos: int, trace: EvaluationTrace) -> Parsed:
    left, pos = _term(tokens, pos, trace)
    while True:
        if _is_op(tokens, pos, '+'):
            right, pos = _term(tokens, pos + 1, trace)
            operation = f"{_num(left)} + {_num(right)}"
            left = left + right
        elif _is_op(tokens, pos, '-'):
            right, pos = _term(tokens, pos + 1, trace)
            operation = f"{_num(left)} - {_num(right)}"
            left = left - right
        else:
            return left, pos
        trace.record(operation, left)


def _term(tokens: Sequence[Token], pos: int, trace: EvaluationTrace) -> Parsed:
    left, pos = _factor(tokens, pos, trace)
    while True:
        if _is_op(tokens, pos, '*'):
            right, pos = _factor(tokens, pos + 1, trace)
            operation = f"{_num(left)} * {_num(right)}"
            left = left * right
        elif _is_op(tokens, pos, '/'):
            right, pos = _factor(tokens, pos + 1, trace)
            if right == 0.0:
                raise DivisionByZero()
            operation = f"{_num(left)} / {_num(right)}"
            left = left / right
        elif _is_op(tokens, pos, '%'):
            right, pos = _factor(tokens, pos + 1, trace)
            operation = f"{_num(left)} % {_num(right)}"
            left = _modulo(left, right)
        else:
            return left, pos
        trace.record(operation, left)


def _factor(tokens: Sequence[Token], pos: int, trace: EvaluationTrace) -> Parsed:
    base, pos = _power(tokens, pos, trace)
    if not _is_op(tokens, pos, 'r'):
        return base, pos
    degree, pos = _power(tokens, pos + 1, trace)
    if degree == 0.0:
        raise ZeroRootDegree()
    # Float test: 4.0 counts as even, 2.0000001 does not.
    if base < 0.0 and degree % 2.0 == 0.0:
        raise EvenRootOfNegative()
    result = _real_pow(base, 1.0 / degree)
    trace.record(f"{_num(base)} r {_num(degree)}", result)
    return result, pos


def _power(tokens: Sequence[Token], pos: int, trace: EvaluationTrace) -> Parsed:
    left, pos = _unary(tokens, pos, trace)
    if not _is_op(tokens, pos, '^'):
        return left, pos
    # Right-associative: the exponent is itself a power.
    right, pos = _power(tokens, pos + 1, trace)
    result = _real_pow(left, right)
    trace.record(f"{_num(left)} ^ {_num(right)}", result)
    return result, pos


def _unary(tokens: Sequence[Token], pos: int, trace: EvaluationTrace) -> Parsed:
    negative = False
    negated = False
    while True:
        if _is_op(tokens, pos, '+'):
            pos += 1
        elif _is_op(tokens, pos, '-'):
            negative = not negative
            negated = True
            pos += 1
        else:
            break
    value, pos = _primary(tokens, pos, trace)
    if negative:
        value = -value
    if negated:
        sign = '-' if negative else '+'
        trace.record(f"{sign} {_num(abs(value))}", value)
    return value, pos


def _primary(tokens: Sequence[Token], pos: int, trace: EvaluationTrace) -> Parsed:
    if pos >= len(tokens):
        raise UnexpectedToken("Unexpected end of input")
    tok = tokens[pos]
    if tok.type == TokenType.NUMBER:
        return tok.value, pos + 1
    if tok.type == TokenType.LPAREN:
        value, pos = _expr(tokens, pos + 1, trace)
        if not _is_type(tokens, pos, TokenType.RPAREN):
            raise UnclosedParenthesis()
        return value, pos + 1
    if tok.type == TokenType.IDENT:
        return _identifier(tokens, pos, trace)
    raise UnexpectedToken(f"Unexpected token: '{tok.value}'")


def _identifier(tokens: Sequence[Token], pos: int, trace: EvaluationTrace) -> Parsed:
    """Constant lookup or function call, starting at the IDENT token."""
    name = tokens[pos].value.lower()
    pos += 1
    if name in CONSTANTS:
        value = CONSTANTS[name]
        trace.record(name, value)
        return value, pos
    if not _is_type(tokens, pos, TokenType.LPAREN):
        raise MissingParentheses(name)
    args, pos = _arguments(tokens, pos + 1, trace)
    result = call_function(name, args)
    args_str = ", ".join(_num(a) for a in args)
    trace.record(f"{name}({args_str})", result)
    return result, pos


def _arguments(tokens: Sequence[Token], pos: int, trace: EvaluationTrace) -> Tuple[List[float], int]:
    """Parse call arguments after '(' up to and including the closing ')'."""
    args: List[float] = []
    while pos < len(tokens) and tokens[pos].type != TokenType.RPAREN:
        value, pos = _expr(tokens, pos, trace)
        args.append(value)
        if _is_type(tokens, pos, TokenType.COMMA):
            pos += 1
        elif pos < len(tokens) and tokens[pos].type != TokenType.RPAREN:
            raise UnexpectedToken("Expected comma or closing parenthesis")
    if not _is_type(tokens, pos, TokenType.RPAREN):
        raise UnclosedParenthesis("Missing closing parenthesis for function")
    return args, pos + 1


# --------------------------
# Entry points
# --------------------------

def evaluate(tokens: Sequence[Token], detailed: bool = False) -> Tuple[float, List[Step]]:
    """Evaluate a token sequence.

    Returns the value and the ordered list of steps, which is empty unless
    ``detailed`` is set. Raises an :class:`~stepcalc.errors.EvalError`
    subclass for the first problem encountered.
    """
    if not tokens:
        raise EmptyInput()
    trace = EvaluationTrace(detailed)
    value, pos = _expr(tokens, 0, trace)
    if pos < len(tokens):
        raise TrailingTokens()
    logger.debug(f"Evaluated {len(tokens)} tokens to {value!r} with {len(trace.steps)} steps")
    return value, trace.steps


def calculate(text: str, detailed: bool = False) -> Tuple[float, List[Step]]:
    """Tokenize and evaluate ``text`` in one call."""
    return evaluate(tokenize(text), detailed)
