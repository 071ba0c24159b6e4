"""
Tests for frontmatter parsing.

Covers:
- parse_frontmatter: mapping + body split, files without frontmatter,
  malformed YAML, non-mapping YAML, unclosed blocks, BOM and CRLF
- body_start_line
"""

import pytest

from skilldeck.corpus.frontmatter import body_start_line, parse_frontmatter
from skilldeck.errors import FrontmatterError


class TestParseFrontmatter:
    def test_mapping_and_body(self):
        meta, body = parse_frontmatter("---\nname: my-skill\ndescription: Does X\n---\n\n# Body\n")
        assert meta == {"name": "my-skill", "description": "Does X"}
        assert body == "\n# Body\n"

    def test_no_frontmatter(self):
        meta, body = parse_frontmatter("# Just a doc\n\ntext")
        assert meta == {}
        assert body == "# Just a doc\n\ntext"

    def test_empty_frontmatter(self):
        meta, body = parse_frontmatter("---\n---\nbody")
        assert meta == {}
        assert body == "body"

    def test_multiline_description(self):
        text = "---\nname: x\ndescription: >\n  first line\n  second line\n---\nbody"
        meta, _ = parse_frontmatter(text)
        assert meta["description"].strip() == "first line second line"

    def test_invalid_yaml_raises_with_line(self):
        with pytest.raises(FrontmatterError) as exc:
            parse_frontmatter("---\nname: ok\ndescription: [unclosed\n---\nbody")
        assert "invalid YAML" in str(exc.value)
        assert exc.value.line is not None

    def test_non_mapping_raises(self):
        with pytest.raises(FrontmatterError, match="must be a mapping"):
            parse_frontmatter("---\n- a\n- b\n---\nbody")

    def test_unclosed_block_raises(self):
        with pytest.raises(FrontmatterError, match="not closed"):
            parse_frontmatter("---\nname: x\n\n# Body with no closing delimiter\n")

    def test_bom_and_crlf(self):
        meta, body = parse_frontmatter("\ufeff---\r\nname: x\r\n---\r\nbody\r\n")
        assert meta == {"name": "x"}
        assert body == "body\n"

    def test_horizontal_rule_in_body_not_confused(self):
        meta, body = parse_frontmatter("---\nname: x\n---\ntext\n---\nmore")
        assert meta == {"name": "x"}
        assert body == "text\n---\nmore"


class TestBodyStartLine:
    def test_with_frontmatter(self):
        assert body_start_line("---\nname: x\ndescription: y\n---\nbody") == 5

    def test_without_frontmatter(self):
        assert body_start_line("body") == 1

    def test_unclosed(self):
        assert body_start_line("---\nname: x\n") == 1
