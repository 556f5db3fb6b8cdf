"""Shorthand query translator.

Turns a compact query such as ``@name:*.py @content:TODO @mod:7`` into a
native Spotlight expression. Recognized tokens:

=============== =========================================================
``@name:``      file name glob
``@content:``   text content contains
``@kind:``      kind label (``folder``, ``PDF document``...)
``@type:``      exact content type (UTI)
``@tree:``      content type conforms to (UTI tree)
``@mod:N``      modified within the last *N* days
``@created:N``  created within the last *N* days
``@size:[><]N`` size compared against *N* bytes, ``K``/``M``/``G`` suffixes
=============== =========================================================

A token's value runs up to the next space. Text outside any token is a file
name glob. Input that already starts with ``kMD`` is a raw query and is
returned untouched.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import NamedTuple

from mdagent.query import builder
from mdagent.query.literals import parse_relative_days, parse_size_predicate

PREFIXES: tuple[str, ...] = (
    "@name:",
    "@content:",
    "@kind:",
    "@type:",
    "@tree:",
    "@mod:",
    "@created:",
    "@size:",
)

# One token: a prefix, its value up to the next space, and that space.
_TOKEN = re.compile("(" + "|".join(re.escape(p) for p in PREFIXES) + ")([^ ]*) ?")


class Token(NamedTuple):
    prefix: str
    value: str


def _modified(value: str) -> str:
    days = parse_relative_days(value)
    return builder.MATCH_ALL if days is None else builder.modified_within_days(days)


def _created(value: str) -> str:
    days = parse_relative_days(value)
    return builder.MATCH_ALL if days is None else builder.created_within_days(days)


def _size(value: str) -> str:
    return builder.size(*parse_size_predicate(value))


_RULES: dict[str, Callable[[str], str]] = {
    "@name:": builder.filename,
    "@content:": builder.content,
    "@kind:": builder.kind,
    "@type:": builder.content_type,
    "@tree:": builder.content_type_tree,
    "@mod:": _modified,
    "@created:": _created,
    "@size:": _size,
}


def tokenize(query: str) -> tuple[list[Token], str]:
    """Split *query* into shorthand tokens and the text left between them.

    Tokens are returned grouped in :data:`PREFIXES` order (document order
    within a prefix); the leftover text is returned untrimmed.
    """
    tokens = [Token(m.group(1), m.group(2)) for m in _TOKEN.finditer(query)]
    tokens.sort(key=lambda token: PREFIXES.index(token.prefix))
    return tokens, _TOKEN.sub("", query)


def translate_token(token: Token) -> str:
    """Translate a single token to its native fragment."""
    return _RULES[token.prefix](token.value)


def translate(query: str) -> str:
    """Translate a shorthand query into a native Spotlight expression.

    Tokens with an empty value are dropped. Leftover text is always added
    as one more file name glob, even next to matched tokens, so
    ``@kind:folder src`` means "folders named src".
    """
    if query.startswith(builder.NATIVE_PREFIX):
        return query

    tokens, leftover = tokenize(query)
    fragments = [translate_token(token) for token in tokens if token.value]

    leftover = leftover.strip()
    if leftover:
        fragments.append(builder.filename(leftover))

    return builder.and_(fragments)
