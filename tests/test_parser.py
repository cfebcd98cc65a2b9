from __future__ import annotations

import pytest

from puffin import lookup
from puffin.builder import unescape
from puffin.nodes import (
    Assign,
    Assignable,
    Block,
    Exp,
    ExpStmt,
    FieldStep,
    For,
    ForIn,
    FunctionDef,
    If,
    IfElse,
    IndexStep,
    NameRef,
    NullLit,
    NumLit,
    Paren,
    RangeArray,
    Return,
    SizedArray,
    StringLit,
    StructField,
    StructLit,
    While,
)
from tests.support.harness import ASTBuildError, PuffinSyntaxError, parse


def _single(src: str):
    statements = parse(src).statements
    assert len(statements) == 1, statements
    return statements[0]


def _num(n: float) -> Exp:
    return Exp([NumLit(float(n))])


def _name(n: str) -> Exp:
    return Exp([NameRef(n)])


def test_empty_program() -> None:
    assert parse("").statements == []
    assert parse("  // only a comment\n").statements == []


def test_plain_assignment() -> None:
    assert _single("x = 1;") == Assign(Assignable("x"), _num(1))


def test_drilldown_target() -> None:
    stmt = _single("a[0].b = null;")

    assert stmt == Assign(Assignable("a", [IndexStep(_num(0)), FieldStep("b")]), Exp([NullLit()]))


@pytest.mark.parametrize("op", ["+", "-", "*", "/", "%"])
def test_compound_assignment_desugars(op: str) -> None:
    stmt = _single(f"x {op}= 2 + y;")
    rhs = Exp([NumLit(2.0), lookup.infix("+"), NameRef("y")])

    assert stmt == Assign(Assignable("x"), Exp([NameRef("x"), lookup.infix(op), Paren(rhs)]))


def test_compound_assignment_keeps_target_steps() -> None:
    stmt = _single("s.n += 1;")

    assert stmt.lhs == Assignable("s", [FieldStep("n")])
    assert stmt.rhs.terms[:2] == [NameRef("s"), lookup.dot("n")]


def test_expression_terms_stay_flat() -> None:
    stmt = _single("-a.b(1, 2)[0] * !c;")

    assert stmt == ExpStmt(Exp([
        lookup.unary("-"),
        NameRef("a"),
        lookup.dot("b"),
        lookup.call([_num(1), _num(2)]),
        lookup.subscript(_num(0)),
        lookup.infix("*"),
        lookup.unary("!"),
        NameRef("c"),
    ]))


def test_literals() -> None:
    stmt = _single('return [3] == [1:n] + {a: 1, b: "s",} + 2.5e1;')
    terms = stmt.exp.terms

    assert isinstance(stmt, Return)
    assert terms[0] == SizedArray(_num(3))
    assert terms[2] == RangeArray(_num(1), _name("n"))
    assert terms[4] == StructLit([StructField("a", _num(1)), StructField("b", Exp([StringLit("s")]))])
    assert terms[6] == NumLit(25.0)


def test_statement_start_brace_is_struct_literal() -> None:
    assert _single("{};") == ExpStmt(Exp([StructLit([])]))


def test_function_literal() -> None:
    stmt = _single("f = fn(a, b) { return a; };")

    assert stmt.rhs == Exp([FunctionDef(["a", "b"], Block([Return(_name("a"))]))])


def test_arrow_function_wraps_return() -> None:
    stmt = _single("f = fn(x) => x + 1;")
    body = Exp([NameRef("x"), lookup.infix("+"), NumLit(1.0)])

    assert stmt.rhs == Exp([FunctionDef(["x"], Block([Return(body)]))])


def test_arrow_function_without_params() -> None:
    stmt = _single("f = fn() => null;")

    assert stmt.rhs == Exp([FunctionDef([], Block([Return(Exp([NullLit()]))]))])


def test_if_and_if_else() -> None:
    assert _single("if (x) { y; }") == If(_name("x"), Block([ExpStmt(_name("y"))]))
    assert _single("if (x) {} else { return 1; }") == IfElse(_name("x"), Block([]), Block([Return(_num(1))]))


def test_else_if_chain_nests_in_blocks() -> None:
    stmt = _single("if (a) { } else if (b) { } else { c; }")
    inner = IfElse(_name("b"), Block([]), Block([ExpStmt(_name("c"))]))

    assert stmt == IfElse(_name("a"), Block([]), Block([inner]))


def test_while() -> None:
    assert _single("while (i < 3) { i += 1; }") == While(
        Exp([NameRef("i"), lookup.infix("<"), NumLit(3.0)]),
        Block([Assign(Assignable("i"), Exp([NameRef("i"), lookup.infix("+"), Paren(_num(1))]))]),
    )


def test_for_with_simple_statements() -> None:
    stmt = _single("for (i = 0; i < n; i += 1) { f(i); }")

    assert isinstance(stmt, For)
    assert stmt.init == Assign(Assignable("i"), _num(0))
    assert stmt.cond == Exp([NameRef("i"), lookup.infix("<"), NameRef("n")])
    assert isinstance(stmt.advance, Assign)
    assert stmt.block == Block([ExpStmt(Exp([NameRef("f"), lookup.call([_name("i")])]))])


def test_for_with_expression_clauses() -> None:
    stmt = _single("for (f(); 0; g()) {}")

    assert isinstance(stmt.init, ExpStmt)
    assert isinstance(stmt.advance, ExpStmt)


def test_for_in() -> None:
    assert _single("for (x in [1:3]) { }") == ForIn("x", Exp([RangeArray(_num(1), _num(3))]), Block([]))


def test_comments_are_ignored() -> None:
    src = """
    // leading
    x = 1; // trailing
    // between
    y = 2;
    """

    assert [stmt.lhs.name for stmt in parse(src).statements] == ["x", "y"]


def test_comment_marker_inside_string_is_text() -> None:
    assert _single('s = "a // b";').rhs == Exp([StringLit("a // b")])


@pytest.mark.parametrize(
    "body, text",
    [
        pytest.param(r"plain", "plain", id="plain"),
        pytest.param(r"a\"b", 'a"b', id="quote"),
        pytest.param(r"a\\b", "a\\b", id="backslash"),
        pytest.param(r"line\nnext", "line\nnext", id="newline"),
        pytest.param(r"\t\r", "\t\r", id="tab-return"),
        pytest.param(r"\q", "\\q", id="unknown-kept"),
    ],
)
def test_unescape(body: str, text: str) -> None:
    assert unescape(body) == text


def test_string_literal_escapes() -> None:
    assert _single(r'return "say \"hi\"\n";') == Return(Exp([StringLit('say "hi"\n')]))


@pytest.mark.parametrize(
    "src",
    [
        pytest.param("1 = 2;", id="literal-target"),
        pytest.param("f() = 1;", id="call-target"),
        pytest.param("-x = 1;", id="unary-target"),
        pytest.param("a + b = 1;", id="infix-target"),
        pytest.param("(x) = 1;", id="paren-target"),
        pytest.param("for (1 = 2; 0; 0) {}", id="for-init-target"),
    ],
)
def test_invalid_assignment_targets(src: str) -> None:
    with pytest.raises(ASTBuildError, match="invalid assignment target"):
        parse(src)


@pytest.mark.parametrize(
    "src",
    [
        pytest.param("x = ;", id="missing-rhs"),
        pytest.param("x = 1", id="missing-semicolon"),
        pytest.param("in = 1;", id="keyword-target"),
        pytest.param("return;", id="bare-return"),
        pytest.param("f(n = 0);", id="assignment-as-argument"),
        pytest.param("x = (1;", id="unbalanced"),
        pytest.param("x = 1 # 2;", id="bad-character"),
        pytest.param("if x { }", id="if-without-parens"),
        pytest.param('s = "open;', id="unterminated-string"),
    ],
)
def test_syntax_errors(src: str) -> None:
    with pytest.raises(PuffinSyntaxError) as exc_info:
        parse(src)

    assert exc_info.value.line is not None and exc_info.value.line >= 1


def test_syntax_error_reports_position() -> None:
    with pytest.raises(PuffinSyntaxError) as exc_info:
        parse("x = 1;\ny = ;\n")

    err = exc_info.value
    assert err.line == 2
    assert "(line 2, col" in str(err)
    assert err.context
