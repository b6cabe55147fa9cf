"""Unit tests for the tokenizer."""

import pytest

from midlfmt.tokenizer import (
    is_declaration,
    is_inside_enum,
    normalize_statement,
    split_enum_members,
    tokenize,
)
from midlfmt.types import Token, TokenKind

K = TokenKind


def kinds_and_text(text: str) -> list[tuple[TokenKind, str]]:
    return [(t.kind, t.text) for t in tokenize(text)]


class TestTokenizeBasics:
    """Tests for the scanning rules of tokenize()."""

    def test_empty_input(self):
        assert tokenize("") == []

    def test_whitespace_only(self):
        """Test pure whitespace produces no tokens."""
        assert tokenize("  \n\n\t \n") == []

    def test_line_comment(self):
        assert kinds_and_text("// hello\nlong x;") == [
            (K.COMMENT, "// hello"),
            (K.STATEMENT, "long x;"),
        ]

    def test_line_comment_at_end_of_input(self):
        assert kinds_and_text("// trailing") == [(K.COMMENT, "// trailing")]

    def test_block_comment_keeps_raw_text(self):
        """Test block comments keep their raw span for re-indentation."""
        tokens = tokenize("/* a\n   b */ long x;")
        assert tokens[0].kind is K.COMMENT
        assert tokens[0].raw_text == "/* a\n   b */"
        assert tokens[1] == Token(K.STATEMENT, "long x;")

    def test_unterminated_block_comment(self):
        """Test an unterminated block comment runs to end of input."""
        tokens = tokenize("long a; /* open\nlong b;")
        assert tokens[0] == Token(K.STATEMENT, "long a;")
        assert tokens[1].kind is K.COMMENT
        assert tokens[1].text == "/* open\nlong b;"
        assert len(tokens) == 2

    def test_directive(self):
        assert kinds_and_text('#include "a.h"\nlong x;') == [
            (K.DIRECTIVE, '#include "a.h"'),
            (K.STATEMENT, "long x;"),
        ]

    def test_directive_with_continuation(self):
        """Test backslash-newline continuations stay in the directive."""
        assert kinds_and_text("#define X \\\n    1\nlong a;") == [
            (K.DIRECTIVE, "#define X \\\n    1"),
            (K.STATEMENT, "long a;"),
        ]

    def test_continuation_with_trailing_blanks(self):
        """Test blanks after the backslash do not end the directive."""
        assert kinds_and_text("#define X \\  \n    1\nlong a;") == [
            (K.DIRECTIVE, "#define X \\  \n    1"),
            (K.STATEMENT, "long a;"),
        ]

    def test_attribute_block(self):
        assert kinds_and_text("[in, out] long x;") == [
            (K.ATTRIBUTE_BLOCK, "[in, out]"),
            (K.STATEMENT, "long x;"),
        ]

    def test_nested_attribute_block(self):
        """Test nested brackets inside an attribute block."""
        tokens = tokenize("[size_is(n), x[2]] long y;")
        assert tokens[0] == Token(K.ATTRIBUTE_BLOCK, "[size_is(n), x[2]]")

    def test_unterminated_attribute_block(self):
        """Test an unterminated attribute block runs to end of input."""
        assert kinds_and_text("[uuid(1234\nlong x;") == [
            (K.ATTRIBUTE_BLOCK, "[uuid(1234\nlong x;"),
        ]

    def test_braces(self):
        assert kinds_and_text("interface I{long x;}") == [
            (K.DECLARATION, "interface I"),
            (K.BRACE_OPEN, "{"),
            (K.STATEMENT, "long x;"),
            (K.BRACE_CLOSE, "}"),
        ]


class TestCloseBraceFusion:
    """Tests for the closing brace lookahead."""

    def test_brace_semicolon(self):
        tokens = tokenize("struct S{long a;};")
        assert tokens[-1] == Token(K.BRACE_CLOSE, "};")

    def test_brace_space_semicolon(self):
        tokens = tokenize("struct S{long a;} \t;")
        assert tokens[-1] == Token(K.BRACE_CLOSE, "};")

    def test_typedef_aliases(self):
        """Test typedef aliases are fused onto the closing brace."""
        tokens = tokenize("typedef struct tagRECT{long left;} RECT, *PRECT;")
        assert tokens[-1] == Token(K.BRACE_CLOSE, "} RECT, *PRECT;")

    def test_semicolon_on_next_line_not_fused(self):
        assert kinds_and_text("}\n;") == [
            (K.BRACE_CLOSE, "}"),
            (K.STATEMENT, ";"),
        ]

    def test_trailing_comment_not_fused(self):
        """Test a comment after the brace stays a separate token."""
        assert kinds_and_text("} // end;\nlong x;") == [
            (K.BRACE_CLOSE, "}"),
            (K.COMMENT, "// end;"),
            (K.STATEMENT, "long x;"),
        ]

    def test_alias_without_semicolon_not_fused(self):
        assert kinds_and_text("} RECT\n") == [
            (K.BRACE_CLOSE, "}"),
            (K.STATEMENT, "RECT"),
        ]

    def test_aliases_wrapped_over_lines(self):
        """Test an alias list continuing on later lines is still fused."""
        tokens = tokenize("typedef struct tagRECT\n{\n    long left;\n} RECT,\n  *PRECT;\n")
        assert tokens[-1] == Token(K.BRACE_CLOSE, "} RECT, *PRECT;")

    def test_wrapped_aliases_stop_at_comment(self):
        assert kinds_and_text("} RECT, // c\n*PRECT;") == [
            (K.BRACE_CLOSE, "}"),
            (K.STATEMENT, "RECT,"),
            (K.COMMENT, "// c"),
            (K.STATEMENT, "*PRECT;"),
        ]


class TestGenericUnits:
    """Tests for generic unit scanning."""

    def test_semicolon_consumed(self):
        tokens = tokenize("long a; long b;")
        assert [t.text for t in tokens] == ["long a;", "long b;"]

    def test_open_brace_not_consumed(self):
        tokens = tokenize("coclass C {")
        assert tokens == [Token(K.DECLARATION, "coclass C"), Token(K.BRACE_OPEN, "{")]

    def test_semicolon_inside_parens(self):
        """Test a nested semicolon does not end the unit."""
        tokens = tokenize("HRESULT F(long a; long b);")
        assert tokens == [Token(K.STATEMENT, "HRESULT F(long a; long b);")]

    def test_semicolon_inside_string(self):
        tokens = tokenize('cpp_quote("typedef int X;");')
        assert tokens == [Token(K.STATEMENT, 'cpp_quote("typedef int X;");')]

    def test_brace_inside_character_literal(self):
        """Test quoted characters never act as terminators or braces."""
        assert kinds_and_text("const char c = '{'; const char d = ';';") == [
            (K.STATEMENT, "const char c = '{';"),
            (K.STATEMENT, "const char d = ';';"),
        ]

    def test_embedded_attribute_skipped(self):
        """Test commas and semicolons in a parameter attribute do not split."""
        tokens = tokenize("HRESULT F([in, size_is(n; m)] long* p);")
        assert len(tokens) == 1
        assert tokens[0].text == "HRESULT F([in, size_is(n; m)] long* p);"

    def test_top_level_comment_ends_unit(self):
        assert kinds_and_text("long a // note\n;") == [
            (K.STATEMENT, "long a"),
            (K.COMMENT, "// note"),
            (K.STATEMENT, ";"),
        ]

    def test_nested_comment_kept_in_unit(self):
        """Test comments inside parentheses stay with their statement."""
        tokens = tokenize("HRESULT F(long a, // first (\n long b);")
        assert tokens == [Token(K.STATEMENT, "HRESULT F(long a, /* first ( */ long b);")]

    def test_line_leading_directive_ends_unit(self):
        assert kinds_and_text("A,\n#ifdef X\nB") == [
            (K.STATEMENT, "A,"),
            (K.DIRECTIVE, "#ifdef X"),
            (K.STATEMENT, "B"),
        ]

    def test_unbalanced_paren_runs_to_end(self):
        """Test an unclosed parenthesis keeps the unit open to end of input."""
        tokens = tokenize("HRESULT F(long a;\n}\nlong b;")
        assert tokens == [Token(K.STATEMENT, "HRESULT F(long a; } long b;")]


class TestNormalizeStatement:
    """Tests for normalize_statement."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("long   x ;", "long x;"),
            ("long\n\tx;", "long x;"),
            ("HRESULT F(long a,long b);", "HRESULT F(long a, long b);"),
            ("const long X=1+2;", "const long X = 1 + 2;"),
            ("A = -1", "A = - 1"),
            ("x<=y", "x < = y"),
            ("long&r", "long & r"),
            ("long *p;", "long *p;"),
            ("if(x)", "if (x)"),
            ("typedef struct(x)", "typedef struct (x)"),
            ("sizeof(x)", "sizeof(x)"),
            ("HRESULT F([in]long x);", "HRESULT F([in] long x);"),
            ("long a[10][20];", "long a[10][20];"),
        ],
    )
    def test_spacing(self, raw, expected):
        assert normalize_statement(raw) == expected

    def test_string_literals_untouched(self):
        """Test string contents are protected from re-spacing."""
        assert normalize_statement('cpp_quote("a=b,c  d")') == 'cpp_quote("a=b,c  d")'

    def test_block_comment_untouched(self):
        assert (
            normalize_statement("HRESULT F(long a /* x=y, z */);")
            == "HRESULT F(long a /* x=y, z */);"
        )

    def test_character_literal_untouched(self):
        assert normalize_statement("const char c=',';") == "const char c = ',';"

    def test_open_string_closed_at_line_end(self):
        """Test a literal left open is closed before lines are joined."""
        assert normalize_statement('x = "a  b\nlong   y;') == 'x = "a  b" long y;'

    def test_idempotent(self):
        """Test normalizing twice changes nothing."""
        once = normalize_statement("HRESULT  F([in,out]long*a,long b=-1);")
        assert normalize_statement(once) == once


class TestIsDeclaration:
    """Tests for is_declaration."""

    @pytest.mark.parametrize(
        "stmt",
        [
            "interface IFoo : IUnknown",
            "library MyLib",
            "coclass C",
            "dispinterface D",
            "module M",
            "struct S",
            "union U",
            "enum E",
            "typedef long HANDLE_T;",
            'import "oaidl.idl";',
            'importlib("stdole2.tlb");',
        ],
    )
    def test_declarations(self, stmt):
        assert is_declaration(stmt) is True

    @pytest.mark.parametrize(
        "stmt",
        ["HRESULT F();", "interfaces x;", "enumerate x;", "long struct_size;", ""],
    )
    def test_not_declarations(self, stmt):
        assert is_declaration(stmt) is False


class TestEnumHandling:
    """Tests for enum-body detection and member splitting."""

    def test_split_members(self):
        assert split_enum_members("A, B, C") == ["A,", "B,", "C"]

    def test_split_keeps_trailing_comma(self):
        """Test a trailing source comma stays on the final member."""
        assert split_enum_members("A, B,") == ["A,", "B,"]

    def test_split_strips_semicolon(self):
        assert split_enum_members("A, B;") == ["A,", "B"]

    def test_split_can_keep_semicolon(self):
        assert split_enum_members("A, B;", keep_semicolon=True) == ["A,", "B;"]

    def test_split_drops_bare_terminator(self):
        assert split_enum_members("A,;") == ["A,"]

    def test_split_respects_parens(self):
        assert split_enum_members("A = F(1, 2), B") == ["A = F(1, 2),", "B"]

    def test_split_empty(self):
        assert split_enum_members("") == []

    def test_inside_enum(self):
        tokens = [Token(K.DECLARATION, "typedef enum Color"), Token(K.BRACE_OPEN, "{")]
        assert is_inside_enum(tokens) is True

    def test_inside_struct(self):
        tokens = [Token(K.DECLARATION, "typedef struct S"), Token(K.BRACE_OPEN, "{")]
        assert is_inside_enum(tokens) is False

    def test_after_enum_closed(self):
        """Test a closed enum body no longer counts."""
        tokens = [
            Token(K.DECLARATION, "interface I"),
            Token(K.BRACE_OPEN, "{"),
            Token(K.DECLARATION, "enum E"),
            Token(K.BRACE_OPEN, "{"),
            Token(K.STATEMENT, "A"),
            Token(K.BRACE_CLOSE, "};"),
        ]
        assert is_inside_enum(tokens) is False

    def test_top_level(self):
        assert is_inside_enum([]) is False
        assert is_inside_enum([Token(K.BRACE_OPEN, "{")]) is False

    def test_enum_body_split_into_members(self):
        """Test one source line of members becomes one token per member."""
        assert kinds_and_text("enum E { A, B = 2, C }") == [
            (K.DECLARATION, "enum E"),
            (K.BRACE_OPEN, "{"),
            (K.STATEMENT, "A,"),
            (K.STATEMENT, "B = 2,"),
            (K.STATEMENT, "C"),
            (K.BRACE_CLOSE, "}"),
        ]

    def test_struct_body_not_split(self):
        assert kinds_and_text("struct S { long a, b; }")[2] == (K.STATEMENT, "long a, b;")

    def test_enum_members_with_comments(self):
        """Test comments between members keep the separating commas."""
        assert [t.text for t in tokenize("enum E {\n A, // first\n B\n}")] == [
            "enum E",
            "{",
            "A,",
            "// first",
            "B",
            "}",
        ]

    def test_stray_semicolon_in_enum_body_kept(self):
        """Test a semicolon followed by more members still separates them."""
        assert [t.text for t in tokenize("enum E { A, B; C }")] == [
            "enum E",
            "{",
            "A,",
            "B;",
            "C",
            "}",
        ]

    def test_semicolon_before_close_dropped(self):
        assert [t.text for t in tokenize("enum E { A, B; }")] == ["enum E", "{", "A,", "B", "}"]
