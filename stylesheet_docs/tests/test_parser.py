from __future__ import annotations

import pytest

from stylesheet_docs.doc_harvester import parser
from stylesheet_docs.doc_harvester.parser import (
    ClassifiedLine,
    DocRecord,
    Link,
    Parameter,
    ReturnInfo,
)

ADD_SOURCE = """\
// Adds two numbers
// @param {Number} a - first
// @param {Number} b - second
// @return {Number} sum
function add(a, b)
"""


def test_parse_file_end_to_end() -> None:
    records = parser.parse_file(ADD_SOURCE)
    assert len(records) == 1
    record = records[0]
    assert record.type == "function"
    assert record.name == "add"
    assert record.description == "Adds two numbers"
    assert record.parameters == [
        Parameter(type="Number", name="a", default=None, description="first"),
        Parameter(type="Number", name="b", default=None, description="second"),
    ]
    assert record.returns == ReturnInfo(type=["Number"], description="sum")
    assert record.to_dict()["return"] == {"type": ["Number"], "description": "sum"}
    assert record.to_dict()["parameters"][0] == {
        "type": "Number",
        "name": "a",
        "default": None,
        "description": "first",
    }


def test_file_without_declarations_is_empty() -> None:
    assert parser.parse_file("// just a comment\n$size: 10px;\n") == []
    assert parser.parse_file("") == []


def test_undocumented_declaration_has_defaults() -> None:
    records = parser.parse_file("$a: 1;\n@mixin clearfix {\n}\n")
    assert len(records) == 1
    data = records[0].to_dict()
    assert data["type"] == "mixin"
    assert data["name"] == "clearfix"
    assert data["description"] == ""
    assert data["access"] == "public"
    assert data["deprecated"] is False
    assert data["author"] is False
    assert data["return"] == {"type": None, "description": False}
    for key in ("parameters", "throws", "todos", "alias", "link"):
        assert data[key] == []


def test_multiple_declarations_are_independent() -> None:
    content = """\
/// First helper
/// @todo tidy up
@function first() {}

/// Second helper
@mixin second {}
"""
    records = parser.parse_file(content)
    assert [(record.type, record.name) for record in records] == [
        ("function", "first"),
        ("mixin", "second"),
    ]
    assert records[0].todos == ["tidy up"]
    assert records[1].todos == []
    assert records[1].description == "Second helper"


def test_parse_file_is_deterministic() -> None:
    assert parser.parse_file(ADD_SOURCE) == parser.parse_file(ADD_SOURCE)


def test_parse_file_rejects_non_text() -> None:
    with pytest.raises(TypeError):
        parser.parse_file(b"@function f() {}")  # type: ignore[arg-type]


@pytest.mark.parametrize("line", ["", "   ", "-----", "=====", "@ignore internal helper"])
def test_parse_line_skips_noise(line: str) -> None:
    assert parser.parse_line(line) is None


def test_parse_line_classifies_tags() -> None:
    assert parser.parse_line("@author Jane Doe") == ClassifiedLine("author", "Jane Doe")
    assert parser.parse_line("@access private") == ClassifiedLine("access", "private")
    assert parser.parse_line("@deprecated") == ClassifiedLine("deprecated", True)
    assert parser.parse_line("@deprecated Use `add` instead") == ClassifiedLine(
        "deprecated", "Use `add` instead"
    )
    assert parser.parse_line("@throws Invalid unit") == ClassifiedLine(
        "throws", "Invalid unit", multiple=True
    )
    assert parser.parse_line("@todo Support maps") == ClassifiedLine(
        "todos", "Support maps", multiple=True
    )
    assert parser.parse_line("@alias plus") == ClassifiedLine("alias", "plus", multiple=True)
    assert parser.parse_line("@link https://sass-lang.com Sass") == ClassifiedLine(
        "link", Link(url="https://sass-lang.com", caption="Sass"), multiple=True
    )


def test_parse_line_return_types_form_ordered_set() -> None:
    line = parser.parse_line("@return {Number | String | Number} value")
    assert line is not None
    assert line.tag == "return"
    assert line.multiple is False
    assert line.value == ReturnInfo(type=["Number", "String"], description="value")


def test_parse_line_param_with_default() -> None:
    line = parser.parse_line("@param {Length} $size (10px) - Size of things")
    assert line == ClassifiedLine(
        "parameters",
        Parameter(type="Length", name="size", default="10px", description="Size of things"),
        multiple=True,
    )


def test_unrecognized_tag_falls_back_to_description() -> None:
    assert parser.parse_line("@param missing braces") == ClassifiedLine(
        "description", "\n@param missing braces"
    )


def test_find_comment_block_stops_at_code() -> None:
    lines = ["$x: 1;", "// one", "// two", "@mixin foo {"]
    assert parser.find_comment_block(3, lines) == ["// one", "// two"]


def test_find_comment_block_stops_at_blank_after_collecting() -> None:
    lines = ["// outer paragraph", "", "// inner one", "// inner two", "@mixin foo {"]
    assert parser.find_comment_block(4, lines) == ["// inner one", "// inner two"]


def test_find_comment_block_blank_line_above_declaration_ends_scan() -> None:
    lines = ["// detached", "", "@function f() {}"]
    assert parser.find_comment_block(2, lines) == []
    assert parser.parse_file("\n".join(lines))[0].description == ""


def test_find_comment_block_reaches_file_start() -> None:
    lines = ["/**", " * Doc", " */", "@function f() {}"]
    assert parser.find_comment_block(3, lines) == lines[:3]
    assert parser.find_comment_block(0, lines) == []


@pytest.mark.parametrize("index", [-1, 5])
def test_find_comment_block_rejects_bad_index(index: int) -> None:
    with pytest.raises(IndexError):
        parser.find_comment_block(index, ["// a", "@mixin a {}"])


def test_parse_comment_block_description_lines() -> None:
    record = parser.parse_comment_block(["// Line one", "// Line two", "// Line three"])
    assert record.description == "Line one\nLine two\nLine three"


def test_parse_comment_block_sequences_keep_order() -> None:
    record = parser.parse_comment_block(["// @todo a", "// @todo b", "// @todo c"])
    assert record.todos == ["a", "b", "c"]


def test_parse_comment_block_scalars_last_write_wins() -> None:
    record = parser.parse_comment_block(["// @access private", "// @access protected"])
    assert record.access == "protected"


def test_parse_comment_block_mixed_block() -> None:
    record = parser.parse_comment_block(
        [
            "/**",
            " * Builds a button.",
            " * ------------------",
            " * @ignore generated",
            " * Works with themes.",
            " * @author Jane Doe",
            " * @throws Unknown theme",
            " * @alias btn",
            " * @deprecated",
            " */",
        ]
    )
    assert record.description == "Builds a button.\nWorks with themes."
    assert record.author == "Jane Doe"
    assert record.throws == ["Unknown theme"]
    assert record.alias == ["btn"]
    assert record.deprecated is True


def test_apply_rejects_unknown_tag() -> None:
    with pytest.raises(ValueError):
        DocRecord().apply(ClassifiedLine("since", "1.0"))


def test_record_dict_round_trip() -> None:
    record = parser.parse_file(ADD_SOURCE)[0]
    assert DocRecord.from_dict(record.to_dict()) == record


def test_universal_selector_above_mixin_is_not_documentation() -> None:
    content = "* { box-sizing: border-box; }\n@mixin reset {}\n"
    assert parser.parse_file(content)[0].description == ""


def test_lines_split_on_newline_only() -> None:
    records = parser.parse_file("// Adds\x0c numbers too\n@function add() {}\n")
    assert records[0].description == "Adds\x0c numbers too"
    lines = [index for index, _ in parser.iter_declarations('var s = "a\u2028b";\n\n@mixin m {}\n')]
    assert lines == [2]


def test_crlf_line_endings() -> None:
    content = "// Adds two numbers\r\n// @return {Number} sum\r\nfunction add(a, b)\r\n"
    record = parser.parse_file(content)[0]
    assert record.name == "add"
    assert record.description == "Adds two numbers"
    assert record.returns == ReturnInfo(type=["Number"], description="sum")
