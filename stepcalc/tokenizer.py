"""Tokenizer for calculator expressions.

Produces NUMBER, OP, IDENT, LPAREN, RPAREN and COMMA tokens. There is no
EOF token; the parser treats the end of the list as end of input.
"""

import logging
from dataclasses import dataclass
from typing import List, Union

from stepcalc.errors import InvalidNumber, UnknownCharacter

logger = logging.getLogger(__name__)

DIGITS = "0123456789"
# 'r' is the root operator, so no identifier can start with a lowercase r.
OPERATORS = "+-*/^%r"


class TokenType:
    """Enumeration of token types."""
    NUMBER = 'NUMBER'
    OP = 'OP'
    IDENT = 'IDENT'
    LPAREN = 'LPAREN'
    RPAREN = 'RPAREN'
    COMMA = 'COMMA'


@dataclass(frozen=True)
class Token:
    """Represents a token with type, value, and character position."""
    type: str
    value: Union[float, str]
    pos: int = 0

    def is_op(self, symbol: str) -> bool:
        return self.type == TokenType.OP and self.value == symbol

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r}, pos={self.pos})"


_SINGLE_CHAR_TOKENS = {
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    ',': TokenType.COMMA,
}


def scan_number(text: str, start: int) -> int:
    """Return the end index of the numeric run beginning at ``start``."""
    pos = start
    has_dot = False
    has_exp = False
    while pos < len(text):
        ch = text[pos]
        if ch in DIGITS:
            pos += 1
        elif ch == '.':
            if has_dot:
                break
            has_dot = True
            pos += 1
        elif ch in 'eE' and not has_exp:
            has_exp = True
            pos += 1
            if pos < len(text) and text[pos] in '+-':
                pos += 1
        else:
            break
    return pos


def scan_ident(text: str, start: int) -> int:
    pos = start
    while pos < len(text) and text[pos].isalpha():
        pos += 1
    return pos


def tokenize(text: str) -> List[Token]:
    """Convert ``text`` into a list of tokens.

    Raises:
        InvalidNumber: a numeric run fails to parse as a float.
        UnknownCharacter: a character cannot start any token.
    """
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        ch = text[pos]
        if ch in ' \t':
            pos += 1
        elif ch in _SINGLE_CHAR_TOKENS:
            tokens.append(Token(_SINGLE_CHAR_TOKENS[ch], ch, pos))
            pos += 1
        elif ch in OPERATORS:
            tokens.append(Token(TokenType.OP, ch, pos))
            pos += 1
        elif ch in DIGITS or ch == '.':
            end = scan_number(text, pos)
            raw = text[pos:end]
            try:
                value = float(raw)
            except ValueError:
                raise InvalidNumber(raw)
            tokens.append(Token(TokenType.NUMBER, value, pos))
            pos = end
        elif ch.isascii() and ch.isalpha():
            end = scan_ident(text, pos)
            tokens.append(Token(TokenType.IDENT, text[pos:end], pos))
            pos = end
        else:
            raise UnknownCharacter(ch)
    logger.debug(f"Tokenized {text!r} into {len(tokens)} tokens")
    return tokens
