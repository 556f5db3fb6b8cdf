"""Query layer — shorthand translation into native Spotlight queries."""

from mdagent.query.literals import parse_relative_days, parse_size, parse_size_predicate
from mdagent.query.shorthand import Token, tokenize, translate
from mdagent.query.sort import SortSpec, parse_sort_spec

__all__ = [
    "SortSpec",
    "Token",
    "parse_relative_days",
    "parse_size",
    "parse_size_predicate",
    "parse_sort_spec",
    "tokenize",
    "translate",
]
