from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    PuffinTypeError,
    PuffinUserError,
    run_runtime_case,
)

SCENARIOS = [
    pytest.param("1 + 2;", ("null", None), None, id="program-without-return-is-null"),
    pytest.param("", ("null", None), None, id="empty-program"),
    pytest.param("return 1; return 2;", ("number", 1), None, id="first-return-wins"),
    pytest.param('return 1; error("unreachable");', ("number", 1), None, id="return-stops-program"),
    pytest.param("if (1) { z = 3; } return z;", ("number", 3), None, id="blocks-share-frame"),
    pytest.param("if (0.5) { return 1; } return 2;", ("number", 2), None, id="fraction-truncates-false"),
    pytest.param("if (-1.5) { return 1; } return 2;", ("number", 1), None, id="negative-truthy"),
    pytest.param('if ("x") { return 1; }', None, PuffinTypeError, id="string-condition"),
    pytest.param("if (null) { return 1; }", None, PuffinTypeError, id="null-condition"),
    pytest.param(
        "if (0) { return 1; } else { return 2; }",
        ("number", 2),
        None,
        id="if-else",
    ),
    pytest.param(
        dedent(
            """\
            x = 5;
            if (x < 3) {
                return "small";
            } else if (x < 10) {
                return "medium";
            } else {
                return "large";
            }
        """
        ),
        ("string", "medium"),
        None,
        id="else-if-chain",
    ),
    pytest.param(
        dedent(
            """\
            x = 50;
            if (x < 3) { return "small"; } else if (x < 10) { return "medium"; }
            return "fell-through";
        """
        ),
        ("string", "fell-through"),
        None,
        id="else-if-no-match",
    ),
    pytest.param(
        "n = 0; while (n < 3) { n += 1; } return n;",
        ("number", 3),
        None,
        id="while-counts",
    ),
    pytest.param(
        "n = 0; while (!(n == 4)) { n = n + 2; } return n;",
        ("number", 4),
        None,
        id="while-not",
    ),
    pytest.param(
        "n = 0; while (1) { n += 1; if (n == 7) { return n; } }",
        ("number", 7),
        None,
        id="while-return-escapes",
    ),
    pytest.param(
        "s = 0; for (i = 0; i < 5; i += 1) { s += i; } return s * 100 + i;",
        ("number", 1005),
        None,
        id="c-style-for",
    ),
    pytest.param(
        dedent(
            """\
            log = [0];
            f = fn() {
                for (i = 0; i < 3; push(log, i)) {
                    return 5;
                }
            };
            f();
            return len(log);
        """
        ),
        ("number", 0),
        None,
        id="for-advance-skipped-on-return",
    ),
    pytest.param(
        dedent(
            """\
            prod = 1;
            for (i in [1:25]) {
                prod *= i;
            }
            return prod;
        """
        ),
        ("number", 620448401733239439360000.0),
        None,
        id="factorial-24-for-in",
    ),
    pytest.param(
        "for (i in [0:10]) { if (i == 3) { return i; } } return -1;",
        ("number", 3),
        None,
        id="for-in-return",
    ),
    pytest.param(
        dedent(
            """\
            a = [0:3];
            n = 0;
            for (v in a) {
                if (v == 0) { push(a, 9); }
                n += 1;
            }
            return n;
        """
        ),
        ("number", 4),
        None,
        id="for-in-rereads-length",
    ),
    pytest.param(
        "for (v in [1:4]) { } return v;",
        ("number", 3),
        None,
        id="for-in-binding-survives",
    ),
    pytest.param("for (v in 3) { }", None, PuffinTypeError, id="for-in-non-array"),
    pytest.param('error("boom");', None, PuffinUserError, id="user-error"),
    pytest.param(
        dedent(
            """\
            f = fn(n) {
                for (i in [0:n]) {
                    while (1) {
                        if (i == 2) { return i * 10; }
                        i = 99;
                        if (i == 99) { return -1; }
                    }
                }
                return 0;
            };
            return f(5);
        """
        ),
        ("number", -1),
        None,
        id="nested-return-propagates",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_control_flow(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)
