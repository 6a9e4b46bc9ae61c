"""Classification of SQL text by its leading statement keyword."""

from __future__ import annotations

from .sqllexer import TOKEN_NAMES, Lexer, TokenType

_SELECT = TOKEN_NAMES[TokenType.SELECT]
_MODIFYING = frozenset(
    TOKEN_NAMES[token_type]
    for token_type in (TokenType.INSERT, TokenType.UPDATE, TokenType.DELETE)
)


def is_select_sql(lexer: Lexer) -> bool:
    """Tell whether the SQL behind ``lexer`` is a select query.

    Tokens are read until the first ``select`` (a select query) or the first
    ``insert``, ``update`` or ``delete`` (not one). Text holding none of them
    is not a select query. Raises SQLLexError when the text cannot be
    tokenized.
    """
    while lexer.look_ahead() != TokenType.EOF:
        _, _, token = lexer.get_next_token()
        if token == _SELECT:
            return True
        if token in _MODIFYING:
            return False
    return False