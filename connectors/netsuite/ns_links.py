"""Hypermedia link resolution.

NetSuite nested resources (invoice item lines, payment apply entries) carry
no usable id in the collection payload; the identifier only exists inside
the ``self`` link, e.g.::

    https://123.suitetalk.api.netsuite.com/services/rest/record/v1/invoice/42/item/3
    https://123.suitetalk.api.netsuite.com/services/rest/record/v1/customerpayment/7/apply/doc=981

A miss is never an error; callers decide whether to skip the entry.
"""

import re
from typing import Iterable, Optional, Pattern

from connectors.netsuite.ns_models import NSLink


SELF_REL = "self"
NEXT_REL = "next"

ITEM_LINK_PATTERN = re.compile(r"/item/(\d+)")
APPLIED_DOC_LINK_PATTERN = re.compile(r"/apply/doc=(\d+)")


def find_link(links: Optional[Iterable[NSLink]], rel: str) -> Optional[str]:
    """Return the href of the first link with relation ``rel``."""
    for link in links or []:
        if link.rel == rel:
            return link.href
    return None


def resolve_link_id(
    links: Optional[Iterable[NSLink]],
    pattern: Pattern[str],
    rel: str = SELF_REL,
) -> Optional[str]:
    """Extract an identifier from the first ``rel`` link.

    Args:
        links: Links of the reference
        pattern: Compiled pattern whose first group is the identifier
        rel: Relation to inspect (default: "self")

    Returns:
        The identifier, or None when the relation is absent or its href
        does not match the pattern
    """
    href = find_link(links, rel)
    if not href:
        return None
    match = pattern.search(href)
    if match is None:
        return None
    return match.group(1)
