"""GDELT query synthesis for NewsMapper.

Compiles the four facet inputs (resource, region, country, custom text) into a
single boolean query string for the GDELT DOC/GEO 2.0 full-text grammar.
Pure and deterministic: no I/O and no state between calls.

Assembly rules:
- Custom text always overrides the resource/topic term; location still applies.
- A comma-separated custom list with no explicit operators becomes an OR-list.
- The region "Global" never contributes a location clause.
- Free-text resource or region phrases outside the lexicon are phrase-quoted.
- Region and country are OR'd together inside one parenthesized group.
- Any top-level OR-list is parenthesized before being combined with AND.
- An empty result means "no filter"; callers substitute their own default.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Set

from config.defaults import GLOBAL_REGION
from newsmapper.analysis.lexicon import (
    COUNTRY_QUOTING,
    PHRASE_QUOTING,
    ResourceLexicon,
)
from newsmapper.models.query import FacetState

logger = logging.getLogger(__name__)

_OPERATOR_RE = re.compile(r"\b(AND|OR)\b")


def _mask_nested(expr: str) -> str:
    """Blank out quoted phrases and parenthesized groups, keeping depth-0 text.

    The returned string has the same length as ``expr`` so positions line up.
    """
    out: List[str] = []
    depth = 0
    in_quote = False
    for ch in expr:
        if ch == '"':
            in_quote = not in_quote
            out.append(" ")
        elif in_quote:
            out.append(" ")
        elif ch == "(":
            depth += 1
            out.append(" ")
        elif ch == ")":
            depth = max(depth - 1, 0)
            out.append(" ")
        else:
            out.append(ch if depth == 0 else " ")
    return "".join(out)


def _top_level_operators(expr: str) -> Set[str]:
    return set(_OPERATOR_RE.findall(_mask_nested(expr)))


def _is_wrapped(expr: str) -> bool:
    """True when the whole expression is one balanced parenthesized group."""
    if not (expr.startswith("(") and expr.endswith(")")):
        return False
    depth = 0
    in_quote = False
    for i, ch in enumerate(expr):
        if ch == '"':
            in_quote = not in_quote
        elif in_quote:
            continue
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0 and i != len(expr) - 1:
                return False
    return depth == 0


def _split_top_level_or(expr: str) -> List[str]:
    masked = _mask_nested(expr)
    parts: List[str] = []
    start = 0
    for match in re.finditer(r"\bOR\b", masked):
        parts.append(expr[start:match.start()].strip())
        start = match.end()
    parts.append(expr[start:].strip())
    return [p for p in parts if p]


def group_disjunction(expr: str) -> str:
    """Parenthesize an expression whose top level is an OR-list."""
    expr = expr.strip()
    if expr and "OR" in _top_level_operators(expr) and not _is_wrapped(expr):
        return f"({expr})"
    return expr


def or_join(terms: List[str]) -> str:
    """OR terms together inside one pair of parentheses.

    Terms that are themselves parenthesized pure OR-lists are flattened into
    the outer list; terms with a top-level AND are parenthesized.
    """
    flat: List[str] = []
    for term in terms:
        term = term.strip()
        if not term:
            continue
        if _is_wrapped(term):
            inner = term[1:-1].strip()
            if _top_level_operators(inner) == {"OR"}:
                flat.extend(_split_top_level_or(inner))
                continue
            flat.append(term)
        elif _top_level_operators(term):
            flat.append(f"({term})")
        else:
            flat.append(term)
    if not flat:
        return ""
    if len(flat) == 1:
        return flat[0]
    return "(" + " OR ".join(flat) + ")"


def _literal_term(text: str) -> str:
    """Phrase-quote free text that carries no query syntax of its own."""
    if _OPERATOR_RE.search(text) or any(ch in text for ch in '"()'):
        return text
    return PHRASE_QUOTING.apply(text)


def _split_top_level_commas(expr: str) -> List[str]:
    masked = _mask_nested(expr)
    cuts = [i for i, ch in enumerate(masked) if ch == ","]
    return [expr[a + 1:b] for a, b in zip([-1] + cuts, cuts + [len(expr)])]


def normalize_custom(custom: str) -> str:
    """Upgrade an implicit comma-separated list into an explicit OR-list.

    Applies only when the text contains a comma outside quoted phrases and no
    AND, OR, or parenthesis. Items containing whitespace are phrase-quoted;
    already-quoted items are kept whole; empty items are dropped.

    Args:
        custom: Trimmed custom facet text.

    Returns:
        Normalized custom expression (unchanged when the rule does not apply).
    """
    if "," not in custom:
        return custom
    if _OPERATOR_RE.search(custom) or "(" in custom or ")" in custom:
        return custom
    parts = _split_top_level_commas(custom)
    if len(parts) == 1:
        return custom
    items = [PHRASE_QUOTING.apply(part) for part in parts]
    items = [item for item in items if item]
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return "(" + " OR ".join(items) + ")"


class QueryBuilder:
    """Composes GDELT query strings from facet selections.

    Args:
        lexicon: Resource/region lexicon (defaults to the embedded table).
        global_region: Region value treated as "no location filter".
    """

    def __init__(
        self,
        lexicon: Optional[ResourceLexicon] = None,
        global_region: str = GLOBAL_REGION,
    ) -> None:
        self.lexicon = lexicon or ResourceLexicon.default()
        self.global_region = global_region

    def topic_term(self, resource: str) -> str:
        """Resolve the resource facet to its lexicon expression or raw text."""
        resource = resource.strip()
        if not resource:
            return ""
        expr = self.lexicon.lookup_resource(resource)
        return expr if expr is not None else _literal_term(resource)

    def location_term(self, region: str, country: str) -> str:
        """Build the location clause from region and country facets."""
        region = region.strip()
        country = country.strip()

        region_term = ""
        if region and region.casefold() != self.global_region.casefold():
            expr = self.lexicon.lookup_region(region)
            region_term = expr if expr is not None else _literal_term(region)

        country_term = COUNTRY_QUOTING.apply(country) if country else ""

        if region_term and country_term:
            return or_join([region_term, country_term])
        return region_term or country_term

    def build(self, facets: FacetState) -> str:
        """Compile a FacetState into a GDELT query string.

        Args:
            facets: Current facet selection.

        Returns:
            Compiled query, or "" when no facet contributes a clause.
        """
        f = facets.normalized()
        location = self.location_term(f.region, f.country)
        custom = normalize_custom(f.custom) if f.custom else ""

        if custom:
            subject = custom
            logger.debug("Custom text overrides topic term: %r", custom)
        else:
            subject = self.topic_term(f.resource)

        parts = [group_disjunction(p) for p in (location, subject) if p]
        query = " AND ".join(parts)
        logger.debug("Compiled query %r from %s", query, f)
        return query

    def build_query(self, resource: str, region: str, country: str, custom: str) -> str:
        """Positional convenience wrapper around build()."""
        return self.build(
            FacetState(
                resource=resource or "",
                region=region or "",
                country=country or "",
                custom=custom or "",
            )
        )


def build_query(
    resource: str,
    region: str,
    country: str,
    custom: str,
    lexicon: Optional[ResourceLexicon] = None,
) -> str:
    """Compile facet strings into a GDELT query using a fresh QueryBuilder."""
    return QueryBuilder(lexicon=lexicon).build_query(resource, region, country, custom)


def describe_facets(facets: FacetState, global_region: str = GLOBAL_REGION) -> str:
    """Return a short human-readable label for section titles.

    Custom text wins; otherwise resource, non-global region and country are
    joined with ", ". With nothing selected the label is "All News".
    """
    f = facets.normalized()
    if f.custom:
        return f.custom
    parts = [f.resource]
    if f.region.casefold() != global_region.casefold():
        parts.append(f.region)
    parts.append(f.country)
    parts = [p for p in parts if p]
    return ", ".join(parts) if parts else "All News"
