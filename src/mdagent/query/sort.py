"""Sort specifications for search results."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from mdagent.query.builder import ATTR_CREATED, ATTR_MODIFIED, ATTR_NAME, ATTR_SIZE

SORT_KEYS: dict[str, str] = {
    "name": ATTR_NAME,
    "date": ATTR_MODIFIED,
    "size": ATTR_SIZE,
    "created": ATTR_CREATED,
}


class SortSpec(BaseModel):
    """Attribute to order results by, and in which direction."""

    model_config = ConfigDict(frozen=True)

    attribute: str
    descending: bool = False


def parse_sort_spec(spec: str | None) -> SortSpec | None:
    """Parse ``date``, ``-size``, ``kMDItemDisplayName`` and the like.

    A leading ``-`` sorts descending. Known keys map to their Spotlight
    attribute; anything else is used as the attribute name itself. Returns
    ``None`` when no key is given.
    """
    if not spec:
        return None
    descending = spec.startswith("-")
    key = spec[1:] if descending else spec
    if not key:
        return None
    return SortSpec(attribute=SORT_KEYS.get(key, key), descending=descending)
