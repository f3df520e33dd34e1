"""Display helpers: canonical expression spacing and number rendering.

Nothing in here is used by the evaluator itself.
"""

import math
from decimal import Decimal
from typing import List, Optional, Tuple

from stepcalc.tokenizer import DIGITS, OPERATORS, scan_ident, scan_number

# Piece kinds used by canonicalize_spacing
_NUMBER = 'number'
_IDENT = 'ident'
_BINARY = 'binary'
_SIGN = 'sign'
_CALL_OPEN = 'call_open'
_CALL_CLOSE = 'call_close'
_GROUP_OPEN = 'group_open'
_GROUP_CLOSE = 'group_close'
_COMMA = 'comma'
_OTHER = 'other'

# A '+' or '-' after one of these (or at the start) is a unary sign.
_SIGN_CONTEXT = {_BINARY, _SIGN, _CALL_OPEN, _GROUP_OPEN, _COMMA}


def format_number(value: float) -> str:
    """Render a float the way results are shown to the user.

    Integral values print without a fractional part, other finite values
    in shortest round-trip positional notation (never an exponent).
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    text = format(Decimal(repr(float(value))), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def _split(text: str) -> List[Tuple[str, str]]:
    """Split ``text`` into (kind, text) pieces, ignoring whitespace."""
    pieces: List[Tuple[str, str]] = []
    call_stack: List[bool] = []
    pos = 0
    while pos < len(text):
        ch = text[pos]
        prev: Optional[str] = pieces[-1][0] if pieces else None
        if ch.isspace():
            pos += 1
            continue
        if ch in DIGITS or ch == '.':
            end = scan_number(text, pos)
            pieces.append((_NUMBER, text[pos:end]))
            pos = end
            continue
        if ch in OPERATORS:
            if ch in '+-' and (prev is None or prev in _SIGN_CONTEXT):
                pieces.append((_SIGN, ch))
            else:
                pieces.append((_BINARY, ch))
            pos += 1
            continue
        if ch.isalpha():
            end = scan_ident(text, pos)
            pieces.append((_IDENT, text[pos:end]))
            pos = end
            continue
        if ch == '(':
            is_call = prev == _IDENT
            call_stack.append(is_call)
            pieces.append((_CALL_OPEN if is_call else _GROUP_OPEN, ch))
        elif ch == ')':
            is_call = call_stack.pop() if call_stack else False
            pieces.append((_CALL_CLOSE if is_call else _GROUP_CLOSE, ch))
        elif ch == ',':
            pieces.append((_COMMA, ch))
        else:
            pieces.append((_OTHER, ch))
        pos += 1
    return pieces


def _needs_space(prev: str, cur: str) -> bool:
    if cur in (_COMMA, _CALL_CLOSE):
        return False
    if prev in (_SIGN, _CALL_OPEN):
        return False
    if prev == _IDENT and cur == _CALL_OPEN:
        return False
    return True


def canonicalize_spacing(text: str) -> str:
    """Normalize whitespace in an expression for display.

    Binary operators and grouping parentheses get one space on each side,
    commas one space after. Function calls keep their name glued to the
    argument list, and unary signs stay attached to their operand::

        >>> canonicalize_spacing("2*sin(30)+(1-3)")
        '2 * sin(30) + ( 1 - 3 )'
    """
    out: List[str] = []
    prev: Optional[str] = None
    for kind, piece in _split(text):
        if prev is not None and _needs_space(prev, kind):
            out.append(' ')
        out.append(piece)
        prev = kind
    return ''.join(out)
