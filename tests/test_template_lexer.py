from __future__ import annotations

import pytest

from contracts.errors import ResolutionError
from templating import tokenize
from templating.lexer import has_markers, parse_directive
from templating.tokens import EnvRef, IndexedResultRef, KeyedResultRef, Literal, ResultRef


def test_plain_text_is_one_literal() -> None:
    assert tokenize("no directives here") == (Literal("no directives here"),)
    assert tokenize("") == ()


def test_env_forms() -> None:
    assert tokenize("{%STAGE%}-x") == (EnvRef("STAGE", braced=True), Literal("-x"))
    assert tokenize("a%STAGE%b") == (Literal("a"), EnvRef("STAGE"), Literal("b"))


def test_percent_without_name_is_literal() -> None:
    assert tokenize("100% sure") == (Literal("100% sure"),)


def test_result_directives() -> None:
    assert parse_directive("role.Arn") == ResultRef("role", "Arn")
    assert parse_directive("pool.Users[2].Username") == IndexedResultRef("pool", "Users", "2", "Username")
    assert parse_directive("pool.Users[$Name$bob].Id") == KeyedResultRef("pool", "Users", "Name", "bob", "Id")


def test_key_marker_wins_over_index_text() -> None:
    token = parse_directive("pool.Users[0$Name$bob].Id")
    assert token == KeyedResultRef("pool", "Users", "Name", "bob", "Id")


def test_key_value_may_be_empty() -> None:
    assert parse_directive("pool.Users[$Name$].Id") == KeyedResultRef("pool", "Users", "Name", "", "Id")


def test_index_text_is_kept_raw() -> None:
    assert parse_directive("pool.Users[%N%].Id") == IndexedResultRef("pool", "Users", "%N%", "Id")


def test_escape_emits_literal_brace() -> None:
    assert tokenize('{!"a": 1}') == (Literal('{"a": 1}'),)
    assert tokenize("x{!y") == (Literal("x{y"),)


def test_mixed_string_order() -> None:
    tokens = tokenize("arn:%P%:{role.Arn}/{!x}")
    assert tokens == (
        Literal("arn:"),
        EnvRef("P"),
        Literal(":"),
        ResultRef("role", "Arn"),
        Literal("/{x}"),
    )


def test_unterminated_directive() -> None:
    with pytest.raises(ResolutionError) as excinfo:
        tokenize("prefix {role.Arn")
    assert excinfo.value.code == "directive.unterminated"


@pytest.mark.parametrize("text", ["{}", "{noDot}", '{"a": 1}', "{a.b[1]}", "{a.b[$k].c}", "{a.b[1].c.d}"])
def test_malformed_directives(text: str) -> None:
    with pytest.raises(ResolutionError) as excinfo:
        tokenize(text)
    assert excinfo.value.code == "directive.malformed"


def test_has_markers() -> None:
    assert has_markers("{a.b}")
    assert has_markers("%A%")
    assert not has_markers("plain <file.zip>")
