from __future__ import annotations

import unittest

from expohtml import LexError, ParseError
from expohtml.tokenizer import Tokenizer, parse_tag, tokenize
from expohtml.tokens import Token, TokenKind


def kinds(tokens):
    return [token.kind for token in tokens]


class TestParseTag(unittest.TestCase):
    def test_open_tag_with_quoted_attributes(self) -> None:
        tag = parse_tag("<div class=\"box\" id='main'>")
        assert tag.name == "div"
        assert tag.attrs == {"class": "box", "id": "main"}
        assert tag.is_closing is False
        assert tag.is_self_closing is False

    def test_closing_tag_allows_whitespace(self) -> None:
        tag = parse_tag("</ div >")
        assert tag.name == "div"
        assert tag.is_closing is True
        assert tag.attrs == {}

    def test_self_closing_detection(self) -> None:
        assert parse_tag("<br/>").is_self_closing is True
        assert parse_tag("<load target=\"a.css\" />").is_self_closing is True
        assert parse_tag("<br>").is_self_closing is False

    def test_valueless_attribute_is_true(self) -> None:
        tag = parse_tag("<input disabled>")
        assert tag.attrs == {"disabled": True}

    def test_empty_quoted_value_stays_empty_string(self) -> None:
        tag = parse_tag('<img alt="">')
        assert tag.attrs == {"alt": ""}

    def test_unquoted_value(self) -> None:
        tag = parse_tag("<td colspan=2>")
        assert tag.attrs == {"colspan": "2"}

    def test_duplicate_attribute_last_wins(self) -> None:
        tag = parse_tag('<a x="1" x="2">')
        assert tag.attrs == {"x": "2"}

    def test_escaped_quote_inside_value(self) -> None:
        tag = parse_tag(r'<a title="say \"hi\"">')
        assert tag.attrs == {"title": r"say \"hi\""}

    def test_doctype_has_no_name(self) -> None:
        assert parse_tag("<!DOCTYPE html>").name == ""

    def test_repr(self) -> None:
        assert repr(parse_tag("<br/>")) == "<start:br />"
        assert repr(parse_tag("</p>")) == "<end:p>"


class TestTokenizer(unittest.TestCase):
    def test_text_and_tags(self) -> None:
        tokens = tokenize("<p>Hello</p>")
        assert kinds(tokens) == [TokenKind.TAG_OPEN, TokenKind.TEXT, TokenKind.TAG_CLOSE]
        assert tokens[1].raw == "Hello"
        assert tokens[0].parsed.name == "p"

    def test_positions_are_source_offsets(self) -> None:
        tokens = tokenize("ab<p>cd")
        assert [token.position for token in tokens] == [0, 2, 5]

    def test_gt_inside_quoted_attribute_does_not_end_tag(self) -> None:
        tokens = tokenize('<a title="x>y">z</a>')
        assert kinds(tokens) == [TokenKind.TAG_OPEN, TokenKind.TEXT, TokenKind.TAG_CLOSE]
        assert tokens[0].parsed.attrs == {"title": "x>y"}

    def test_comment(self) -> None:
        tokens = tokenize("a<!-- note -->b")
        assert kinds(tokens) == [TokenKind.TEXT, TokenKind.COMMENT, TokenKind.TEXT]
        assert tokens[1].raw == " note "

    def test_comment_content_is_not_tokenized(self) -> None:
        tokens = tokenize("<!-- <div> {@ x } -->")
        assert kinds(tokens) == [TokenKind.COMMENT]

    def test_raw_block_keeps_delimiters(self) -> None:
        tokens = tokenize("a{@ echo $x; }b")
        assert kinds(tokens) == [TokenKind.TEXT, TokenKind.RAW_CODE, TokenKind.TEXT]
        assert tokens[1].raw == "{@ echo $x; }"

    def test_nested_raw_blocks_form_one_token(self) -> None:
        tokens = tokenize("{@ a {@ b } c }")
        assert kinds(tokens) == [TokenKind.RAW_CODE]
        assert tokens[0].raw == "{@ a {@ b } c }"

    def test_plain_brace_closes_raw_block(self) -> None:
        # Only "{@" opens a nesting level; any "}" closes one
        tokens = tokenize("{@ if ($x) { echo 1; } }")
        assert tokens[0].raw == "{@ if ($x) { echo 1; }"
        assert tokens[1].kind == TokenKind.TEXT
        assert tokens[1].raw == " }"

    def test_interpolation_is_plain_text(self) -> None:
        tokens = tokenize("Hi {$name|upper}!")
        assert kinds(tokens) == [TokenKind.TEXT]
        assert tokens[0].raw == "Hi {$name|upper}!"

    def test_script_content_is_raw_text(self) -> None:
        tokens = tokenize("<script>if (a < b) { go(); }</script>")
        assert kinds(tokens) == [TokenKind.TAG_OPEN, TokenKind.TEXT, TokenKind.TAG_CLOSE]
        assert tokens[1].raw == "if (a < b) { go(); }"

    def test_raw_block_inside_script(self) -> None:
        tokens = tokenize("<script>var x = {@ echo 1; };</script>")
        assert kinds(tokens) == [
            TokenKind.TAG_OPEN,
            TokenKind.TEXT,
            TokenKind.RAW_CODE,
            TokenKind.TEXT,
            TokenKind.TAG_CLOSE,
        ]
        assert tokens[2].raw == "{@ echo 1; }"

    def test_style_end_tag_is_case_insensitive(self) -> None:
        tokens = tokenize("<style>p > a {}</STYLE>x")
        assert kinds(tokens) == [TokenKind.TAG_OPEN, TokenKind.TEXT, TokenKind.TAG_CLOSE, TokenKind.TEXT]

    def test_token_equality(self) -> None:
        assert Token(TokenKind.TEXT, "a") == Token(TokenKind.TEXT, "a", position=5)
        assert Token(TokenKind.TEXT, "a") != Token(TokenKind.COMMENT, "a")

    def test_empty_input(self) -> None:
        assert tokenize("") == []
        assert tokenize(None) == []


class TestUnterminated(unittest.TestCase):
    def test_unterminated_tag_is_best_effort(self) -> None:
        errors = []
        tokens = tokenize('text<div class="a"', errors=errors)
        assert kinds(tokens) == [TokenKind.TEXT, TokenKind.TAG_OPEN]
        assert tokens[1].parsed.name == "div"
        assert errors == [ParseError("eof-in-tag", 4)]

    def test_unterminated_comment(self) -> None:
        errors = []
        tokens = tokenize("<!-- open", errors=errors)
        assert kinds(tokens) == [TokenKind.COMMENT]
        assert tokens[0].raw == " open"
        assert [e.code for e in errors] == ["eof-in-comment"]

    def test_unterminated_raw_block(self) -> None:
        errors = []
        tokens = tokenize("a{@ echo 1;", errors=errors)
        assert kinds(tokens) == [TokenKind.TEXT, TokenKind.RAW_CODE]
        assert tokens[1].raw == "{@ echo 1;"
        assert [e.code for e in errors] == ["eof-in-raw-block"]

    def test_errors_not_collected_without_list(self) -> None:
        tokenizer = Tokenizer("<div")
        tokenizer.run()
        assert tokenizer.errors is None

    def test_strict_mode_raises(self) -> None:
        for source in ("<div", "<!-- x", "{@ x", '<a title="x>'):
            with self.assertRaises(LexError):
                tokenize(source, strict=True)

    def test_strict_mode_accepts_well_formed_input(self) -> None:
        tokens = tokenize("<p>{@ echo 1; }</p><!-- c -->", strict=True)
        assert len(tokens) == 4

    def test_lex_error_carries_fragment(self) -> None:
        with self.assertRaises(LexError) as ctx:
            tokenize("ok <span", strict=True)
        assert ctx.exception.code == "lex-error"
        assert ctx.exception.fragment == "<span"


if __name__ == "__main__":
    unittest.main()
