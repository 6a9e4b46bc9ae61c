import pytest

from illabuilder.sqllexer import Lexer, SQLLexError
from illabuilder.sqlparser import is_select_sql


@pytest.mark.parametrize(
    ("sql", "expected"),
    [
        ("\n/* pick rows */\nSELECT * FROM items WHERE id=3 AND kind=2;\n", True),
        ("\n/* pick rows */\nDELETE FROM items WHERE id=7;\n", False),
        ("\n/* change */\nupdate people set Label = 'a' where Tag = 'b'\n", False),
        ("\n/* add */\nInsert into things ( Label, id ) VALUES ('a', 55)\n", False),
        (
            "\ncreate table if not exists people\n(\n  id bigserial not null,\n"
            "  label varchar(20) not null, /* note */\n  flag boolean default false\n);\n",
            False,
        ),
        (
            "\nALTER TABLE things\n  DROP CONSTRAINT IF EXISTS things_key\n"
            ", ADD CONSTRAINT things_key UNIQUE (version, value);\n",
            False,
        ),
        (
            "\nINSERT INTO archive\n  (a_id,a_label)\n  SELECT a_id,a_label\n  FROM live;\n",
            False,
        ),
    ],
)
def test_query_kinds(sql, expected):
    assert is_select_sql(Lexer(sql)) is expected


def test_empty_text_is_not_select():
    assert is_select_sql(Lexer("")) is False


def test_unexpected_symbol_raises():
    with pytest.raises(SQLLexError):
        is_select_sql(Lexer("? select"))