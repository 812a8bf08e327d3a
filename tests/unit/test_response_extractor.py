"""Tests for JSONPath and XPath value extraction."""

import pytest

from chainpost.services.execution.response_extractor import ResponseValueExtractor

JSON_BODY = (
    '{"data": {"user": {"id": 42, "name": "Ada", "active": true, "score": 9.5, '
    '"tags": ["a", "b"], "manager": null}}, "items": [{"id": "first"}, {"id": "second"}]}'
)
XML_BODY = (
    '<root><user id="7" role="admin"><name>Ada</name><email>ada@example.com</email></user>'
    '<item type="a">alpha</item><item type="b">beta</item></root>'
)


@pytest.fixture
def extractor() -> ResponseValueExtractor:
    return ResponseValueExtractor()


class TestJsonExtraction:
    @pytest.mark.parametrize("pattern, expected", [
        ("$.data.user.id", "42"),
        ("$.data.user.name", "Ada"),
        ("$.data.user.active", "true"),
        ("$.data.user.score", "9.5"),
        ("$.items[1].id", "second"),
        ("$.data.user.tags", '["a","b"]'),
    ])
    def test_extracts_values_as_text(self, extractor, pattern, expected) -> None:
        assert extractor.extract(JSON_BODY, pattern, "application/json") == expected

    def test_first_match_wins(self, extractor) -> None:
        assert extractor.extract(JSON_BODY, "$.items[*].id", "application/json") == "first"

    def test_null_and_missing_yield_none(self, extractor) -> None:
        assert extractor.extract(JSON_BODY, "$.data.user.manager", "application/json") is None
        assert extractor.extract(JSON_BODY, "$.data.nothing", "application/json") is None

    def test_graphql_content_type_uses_json(self, extractor) -> None:
        assert extractor.extract(JSON_BODY, "$.data.user.id", "application/graphql-response+json") == "42"

    def test_malformed_body_yields_none(self, extractor) -> None:
        assert extractor.extract("{not json", "$.a", "application/json") is None

    def test_malformed_pattern_yields_none(self, extractor) -> None:
        assert extractor.extract(JSON_BODY, "$.[[[", "application/json") is None


class TestXmlExtraction:
    @pytest.mark.parametrize("pattern, expected", [
        ("//user/name", "Ada"),
        ("/root/user/email", "ada@example.com"),
        ("//name/text()", "Ada"),
        ("//user/@id", "7"),
        ("/root/item[@type='b']", "beta"),
        ("//@role", "admin"),
    ])
    def test_extracts_values(self, extractor, pattern, expected) -> None:
        assert extractor.extract(XML_BODY, pattern, "application/xml") == expected

    def test_no_match_yields_none(self, extractor) -> None:
        assert extractor.extract(XML_BODY, "//missing", "text/xml") is None

    def test_malformed_body_yields_none(self, extractor) -> None:
        assert extractor.extract("<root><open></root>", "//open", "application/xml") is None


class TestFormatSelection:
    def test_blank_body_or_pattern_yields_none(self, extractor) -> None:
        assert extractor.extract("", "$.a", "application/json") is None
        assert extractor.extract("   ", "$.a", "application/json") is None
        assert extractor.extract(JSON_BODY, "  ", "application/json") is None

    def test_sniffs_json_for_unknown_content_type(self, extractor) -> None:
        assert extractor.extract(JSON_BODY, "$.data.user.name", "text/plain") == "Ada"

    def test_sniffs_xml_for_missing_content_type(self, extractor) -> None:
        assert extractor.extract(XML_BODY, "//user/name", None) == "Ada"

    def test_plain_text_yields_none(self, extractor) -> None:
        assert extractor.extract("hello world", "$.a", "text/plain") is None
