"""Tests for balanced-expression navigation over buffer text."""

from __future__ import annotations

import pytest

from conftest import split_cursor, syntax_at
from eldoc_lsp._analyzer.syntax import BufferSyntax, LiteralSpan, UnbalancedSyntaxError


class TestLiteralState:
    """Test comment and string detection."""

    def test_block_comment(self):
        """Test that an offset inside a block comment is in a comment."""
        syntax, offset = syntax_at("int x; /* some $text */ int y;")
        assert syntax.in_comment(offset)
        assert not syntax.in_string(offset)

    def test_line_comment_end(self):
        """Test that the end of a line comment still counts as inside it."""
        syntax, offset = syntax_at("int x; // trailing$\nint y;")
        assert syntax.in_comment(offset)

    def test_after_block_comment(self):
        """Test that the offset right after a block comment is outside it."""
        syntax, offset = syntax_at("int x; /* c */$ int y;")
        assert not syntax.in_comment(offset)

    def test_string_literal(self):
        """Test detection of an offset between string quotes."""
        syntax, offset = syntax_at('void g() { puts("hel$lo"); }')
        assert syntax.in_string(offset)
        assert not syntax.in_comment(offset)

    def test_code_is_not_literal(self):
        """Test that plain code is neither comment nor string."""
        syntax, offset = syntax_at("int ma$in() { return 0; }")
        assert not syntax.in_comment(offset)
        assert not syntax.in_string(offset)
        assert syntax.literal_at(offset) is None

    def test_explicit_spans(self):
        """Test that precomputed literal spans are used as given."""
        syntax = BufferSyntax("abc def", spans=[LiteralSpan(4, 7, "comment")])
        assert syntax.in_comment(5)
        assert not syntax.in_comment(2)

    def test_unterminated_block_comment(self):
        """Test that a block comment being typed runs to the end of the buffer."""
        syntax, offset = syntax_at("int add(int x);\n/** see add(1,$ 2)")
        assert syntax.in_comment(offset)
        assert syntax.in_comment(len(syntax.text))
        assert syntax.enclosing_open(len(syntax.text)) is None

    def test_unterminated_string(self):
        """Test that an open quote runs to the end of its line."""
        syntax, offset = syntax_at('void g() { f("abc, $\nint y;')
        assert syntax.in_string(offset)
        assert not syntax.in_string(syntax.text.index("int y"))

    def test_digit_separator_is_not_literal(self):
        """Test that a quote between digits does not open a character literal."""
        syntax, offset = syntax_at("int n = 1'000; int m$;")
        assert not syntax.in_string(offset)
        assert syntax.literal_at(syntax.text.index("000")) is None


class TestIdentifiers:
    """Test identifier scanning."""

    def test_identifier_bounds(self):
        """Test that bounds cover the whole identifier around the offset."""
        syntax, offset = syntax_at("x = some_na$me + 1;")
        start, end = syntax.identifier_bounds(offset)
        assert syntax.text[start:end] == "some_name"

    def test_skip_blank_backward_over_comment(self):
        """Test skipping whitespace and comments before a position."""
        text, offset = split_cursor("foo /* note */ $(1);")
        syntax = BufferSyntax(text)
        assert syntax.skip_blank_backward(offset) == 3


class TestGroups:
    """Test group ascent and closer matching."""

    def test_enclosing_group(self):
        """Test finding the innermost group around an offset."""
        syntax, offset = syntax_at("void g() { f(a, (b$), c); }")
        open_pos, close_pos = syntax.enclosing_group(offset)
        assert syntax.text[open_pos : close_pos + 1] == "(b)"

    def test_enclosing_group_skips_closed_groups(self):
        """Test that complete groups before the offset are stepped over."""
        syntax, offset = syntax_at("void g() { f(h(1), [2], $x); }")
        open_pos, close_pos = syntax.enclosing_group(offset)
        assert syntax.text[open_pos : close_pos + 1] == "(h(1), [2], x)"

    def test_delimiters_in_literals_ignored(self):
        """Test that delimiters inside strings and comments are not counted."""
        syntax, offset = syntax_at('void g() { f(")", /* ( */ $x); }')
        open_pos, close_pos = syntax.enclosing_group(offset)
        assert syntax.text[open_pos:close_pos] == '(")", /* ( */ x'

    def test_unterminated_group_ends_at_buffer_end(self):
        """Test that a group still being typed closes at the end of the buffer."""
        syntax, offset = syntax_at("f(x, $y")
        open_pos, close_pos = syntax.enclosing_group(offset)
        assert open_pos == 1
        assert close_pos == len(syntax.text)

    def test_unterminated_group_ends_at_semicolon(self):
        """Test that a group still being typed closes at a statement end."""
        syntax, offset = syntax_at("void g() { f(x, $y;\n h(); }")
        _, close_pos = syntax.enclosing_group(offset)
        assert syntax.text[close_pos] == ";"

    def test_unterminated_group_ends_at_unmatched_brace(self):
        """Test that an unmatched closing brace ends a group being typed."""
        syntax, offset = syntax_at("void g() { f(x, $y }")
        _, close_pos = syntax.enclosing_group(offset)
        assert syntax.text[close_pos] == "}"

    def test_mismatched_closer_raises(self):
        """Test that a mismatched closer is reported."""
        syntax, offset = syntax_at("f(x$]")
        with pytest.raises(UnbalancedSyntaxError):
            syntax.enclosing_group(offset)

    def test_match_backward_mismatch_raises(self):
        """Test that backward matching reports a wrong opener."""
        syntax = BufferSyntax("[x)")
        with pytest.raises(UnbalancedSyntaxError):
            syntax.match_backward(2)

    def test_no_enclosing_group(self):
        """Test that top level code has no enclosing group."""
        syntax, offset = syntax_at("int x$ = 1;")
        assert syntax.enclosing_group(offset) is None


class TestTemplateGroups:
    """Test matching of template argument lists."""

    def test_match_angle_backward(self):
        """Test finding the opener of a template argument list."""
        text = "f<std::map<K, V>, B>(x)"
        syntax = BufferSyntax(text)
        close_pos = text.index("(") - 1
        assert syntax.match_angle_backward(close_pos) == 1

    def test_match_angle_backward_skips_arrow(self):
        """Test that member access arrows are not template closers."""
        text = "f<N->value>(y)"
        syntax = BufferSyntax(text)
        assert syntax.match_angle_backward(text.index("(y") - 1) == 1

    def test_comparison_is_not_template(self):
        """Test that a comparison stops at the enclosing opener."""
        text = "if (a > (b))"
        syntax = BufferSyntax(text)
        assert syntax.match_angle_backward(text.index(">")) is None

    def test_match_angle_forward(self):
        """Test finding the closer of a template argument list."""
        text = "f<A<B>, C>(x)"
        syntax = BufferSyntax(text)
        assert syntax.match_angle_forward(1, len(text)) == text.index("(") - 1
