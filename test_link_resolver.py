"""
Link Resolver Tests

Identifiers of nested NetSuite resources only exist inside the "self"
link of each entry. These tests cover extraction and the miss cases.
"""

from connectors.netsuite.ns_links import (
    APPLIED_DOC_LINK_PATTERN,
    ITEM_LINK_PATTERN,
    find_link,
    resolve_link_id,
)
from connectors.netsuite.ns_models import NSLink

BASE = "https://123.suitetalk.api.netsuite.com/services/rest/record/v1"


def links(*pairs):
    return [NSLink(rel=rel, href=href) for rel, href in pairs]


class TestItemLinks:

    def test_extracts_item_id_from_self_link(self):
        result = resolve_link_id(links(("self", f"{BASE}/invoice/42/item/3")), ITEM_LINK_PATTERN)
        assert result == "3"

    def test_relative_href(self):
        assert resolve_link_id(links(("self", "/invoice/1/item/9")), ITEM_LINK_PATTERN) == "9"

    def test_multi_digit_id(self):
        assert resolve_link_id(links(("self", f"{BASE}/invoice/1/item/12345")), ITEM_LINK_PATTERN) == "12345"

    def test_no_match_returns_none(self):
        assert resolve_link_id(links(("self", f"{BASE}/invoice/42")), ITEM_LINK_PATTERN) is None

    def test_non_numeric_id_returns_none(self):
        assert resolve_link_id(links(("self", f"{BASE}/invoice/42/item/abc")), ITEM_LINK_PATTERN) is None

    def test_only_self_relation_is_inspected(self):
        entry = links(("next", f"{BASE}/invoice/42/item/3"))
        assert resolve_link_id(entry, ITEM_LINK_PATTERN) is None

    def test_first_self_link_wins(self):
        entry = links(
            ("describedby", f"{BASE}/metadata/invoice/item/7"),
            ("self", f"{BASE}/invoice/42/item/3"),
            ("self", f"{BASE}/invoice/42/item/4"),
        )
        assert resolve_link_id(entry, ITEM_LINK_PATTERN) == "3"

    def test_empty_and_missing_links(self):
        assert resolve_link_id([], ITEM_LINK_PATTERN) is None
        assert resolve_link_id(None, ITEM_LINK_PATTERN) is None

    def test_self_link_without_href(self):
        assert resolve_link_id([NSLink(rel="self")], ITEM_LINK_PATTERN) is None


class TestAppliedDocLinks:

    def test_extracts_document_id(self):
        entry = links(("self", f"{BASE}/customerpayment/7/apply/doc=981"))
        assert resolve_link_id(entry, APPLIED_DOC_LINK_PATTERN) == "981"

    def test_item_link_does_not_match(self):
        entry = links(("self", f"{BASE}/invoice/1/item/9"))
        assert resolve_link_id(entry, APPLIED_DOC_LINK_PATTERN) is None

    def test_custom_relation(self):
        entry = links(("related", f"{BASE}/customerpayment/7/apply/doc=5"))
        assert resolve_link_id(entry, APPLIED_DOC_LINK_PATTERN, rel="related") == "5"


def test_find_link_returns_first_href():
    entry = links(("self", "a"), ("next", "b"), ("next", "c"))
    assert find_link(entry, "next") == "b"
    assert find_link(entry, "prev") is None
