"""Extraction of values from response bodies by JSONPath or XPath."""

import json
import logging
import xml.etree.ElementTree as ET
from typing import Any

from jsonpath_ng import parse as jsonpath_parse

logger = logging.getLogger(__name__)


class ResponseValueExtractor:
    """
    Pulls a single value out of a response body.

    Supported formats:
    - JSON / GraphQL: JSONPath ($.data.user.id)
    - XML: XPath subset (//user/id, /root/item[@type='a'], //user/@id, //name/text())

    Extraction is best-effort: a malformed body or pattern yields None,
    never an exception.
    """

    def extract(self, body: str | None, pattern: str | None, content_type: str | None) -> str | None:
        """
        Extract a value from a response body.

        Args:
            body: Response body text
            pattern: JSONPath or XPath expression
            content_type: Response Content-Type, used to pick the format

        Returns:
            Extracted value as a string, or None if nothing matched
        """
        if not body or not body.strip() or not pattern or not pattern.strip():
            return None

        content_type = (content_type or "").lower()
        if "json" in content_type or "graphql" in content_type:
            return self.extract_from_json(body, pattern)
        if "xml" in content_type:
            return self.extract_from_xml(body, pattern)

        # Unknown content type, detect from content
        trimmed = body.lstrip()
        if trimmed.startswith(("{", "[")):
            return self.extract_from_json(body, pattern)
        if trimmed.startswith("<"):
            return self.extract_from_xml(body, pattern)
        return None

    def extract_from_json(self, content: str, path: str) -> str | None:
        try:
            document = json.loads(content)
            matches = jsonpath_parse(path).find(document)
        except Exception as e:
            # Bad JSON and jsonpath_ng grammar errors of assorted types alike
            logger.debug("JSON extraction of %r failed: %s", path, e)
            return None

        if not matches:
            return None
        return _stringify_json_value(matches[0].value)

    def extract_from_xml(self, content: str, xpath: str) -> str | None:
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            logger.debug("XML extraction failed to parse body: %s", e)
            return None

        path, attribute = _split_xpath(xpath.strip())

        # Wrap the root so absolute paths and // can match the root element itself
        wrapper = ET.Element("__document__")
        wrapper.append(root)

        try:
            element = wrapper.find(path)
        except (SyntaxError, KeyError) as e:
            logger.debug("Unsupported XPath %r: %s", xpath, e)
            return None

        if element is None:
            return None
        if attribute is not None:
            return element.get(attribute)
        return "".join(element.itertext())


def _stringify_json_value(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return repr(value) if isinstance(value, float) else str(value)
    # Objects and arrays as compact JSON
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _split_xpath(xpath: str) -> tuple[str, str | None]:
    """
    Translate an XPath expression to an ElementTree path.

    Returns:
        Tuple of (elementtree_path, attribute_name or None)
    """
    attribute = None
    if xpath.endswith("/text()"):
        xpath = xpath[: -len("/text()")]

    head, sep, last = xpath.rpartition("/")
    if sep and last.startswith("@"):
        attribute = last[1:]
        xpath = head
        if xpath.endswith("/"):
            # "//@id" style: any element carrying the attribute
            xpath = xpath + f"/*[@{attribute}]"

    if xpath.startswith("/"):
        path = "." + xpath
    else:
        path = ".//" + xpath

    return path, attribute
