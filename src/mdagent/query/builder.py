"""Fragments of the native Spotlight query language (MDQuery).

Every function returns one predicate string; :func:`and_` joins several
into a conjunction.
"""

from __future__ import annotations

from collections.abc import Sequence

ATTR_NAME = "kMDItemFSName"
ATTR_TEXT_CONTENT = "kMDItemTextContent"
ATTR_KIND = "kMDItemKind"
ATTR_CONTENT_TYPE = "kMDItemContentType"
ATTR_CONTENT_TYPE_TREE = "kMDItemContentTypeTree"
ATTR_MODIFIED = "kMDItemContentModificationDate"
ATTR_CREATED = "kMDItemFSCreationDate"
ATTR_SIZE = "kMDItemFSSize"

# Raw queries start with an attribute name, and every attribute starts with this.
NATIVE_PREFIX = "kMD"

MATCH_ALL = f'{ATTR_NAME} == "*"'

SECONDS_PER_DAY = 86_400


def quote(value: str) -> str:
    """Return *value* as a double-quoted MDQuery string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def filename(pattern: str) -> str:
    """File name matches the glob *pattern*, ignoring case and diacritics."""
    return f"{ATTR_NAME} == {quote(pattern)}cd"


def content(text: str) -> str:
    """Indexed text content contains *text*, ignoring case and diacritics."""
    return f"{ATTR_TEXT_CONTENT} == {quote(f'*{text}*')}cd"


def kind(label: str) -> str:
    return f"{ATTR_KIND} == {quote(label)}"


def content_type(uti: str) -> str:
    return f"{ATTR_CONTENT_TYPE} == {quote(uti)}"


def content_type_tree(uti: str) -> str:
    """Content type conforms to *uti* (e.g. ``public.image``)."""
    return f"{ATTR_CONTENT_TYPE_TREE} == {quote(uti)}"


def modified_within_days(days: int) -> str:
    return f"{ATTR_MODIFIED} > $time.now({-days * SECONDS_PER_DAY})"


def created_within_days(days: int) -> str:
    return f"{ATTR_CREATED} > $time.now({-days * SECONDS_PER_DAY})"


def size(operator: str, num_bytes: int) -> str:
    return f"{ATTR_SIZE} {operator} {num_bytes}"


def and_(fragments: Sequence[str]) -> str:
    """Join *fragments* with ``&&``; an empty sequence matches everything."""
    if not fragments:
        return MATCH_ALL
    if len(fragments) == 1:
        return fragments[0]
    return "(" + " && ".join(fragments) + ")"
