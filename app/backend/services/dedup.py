"""Collapse credit items repeated across chunks."""

import logging
from collections.abc import Iterable

from ..models import CreditItem

logger = logging.getLogger(__name__)


def deduplicate_items(items: Iterable[CreditItem]) -> list[CreditItem]:
    """
    Keep the first item seen for each (creditor, type, amount) key.

    Bureaus and dates are not part of the key, so two tradelines that only
    differ there are merged.
    """
    unique: list[CreditItem] = []
    seen: set[tuple[str, str, int]] = set()

    for item in items:
        key = item.dedup_key
        if key in seen:
            logger.debug("Dropping duplicate credit item: %s", key)
            continue
        seen.add(key)
        unique.append(item)

    return unique
