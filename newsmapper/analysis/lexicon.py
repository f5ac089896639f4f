"""Resource and region lexicon for NewsMapper query synthesis.

One versioned table maps facet labels (case-insensitive) to pre-composed GDELT
sub-query expressions. Phrase quoting for every entry goes through an explicit
PhraseQuotingPolicy so that the same rules apply to lexicon values, countries
and custom list items.

GDELT grammar notes:
- A bare multi-word term is read as separate required words; phrases must be quoted.
- A quoted single word is rejected by GDELT as "too short" — never quote bare words.
- OR-lists must be wrapped in parentheses before being combined with AND.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Union

import yaml

logger = logging.getLogger(__name__)

LEXICON_VERSION = "2"


@dataclass(frozen=True)
class PhraseQuotingPolicy:
    """Decides when a literal term must be wrapped in double quotes.

    Args:
        quote_on_whitespace: Quote terms containing any whitespace.
        quote_chars: Additional characters that force quoting (e.g. "-,").
    """

    quote_on_whitespace: bool = True
    quote_chars: str = ""

    def needs_quotes(self, term: str) -> bool:
        term = term.strip()
        if not term or _is_quoted(term) or _is_parenthesized(term):
            return False
        if self.quote_on_whitespace and any(ch.isspace() for ch in term):
            return True
        return any(ch in term for ch in self.quote_chars)

    def apply(self, term: str) -> str:
        """Return the term, phrase-quoted when the policy requires it.

        Interior double quotes are dropped before wrapping since the GDELT
        grammar has no escape sequence for them.
        """
        term = term.strip()
        if not self.needs_quotes(term):
            return term
        inner = " ".join(term.replace('"', " ").split())
        return f'"{inner}"'


# Multi-word phrases (lexicon entries, custom list items)
PHRASE_QUOTING = PhraseQuotingPolicy(quote_on_whitespace=True)

# Free-text country names: "Ivory Coast", "Guinea-Bissau", "Korea, South"
COUNTRY_QUOTING = PhraseQuotingPolicy(quote_on_whitespace=True, quote_chars="-,")


def _is_quoted(term: str) -> bool:
    return len(term) >= 2 and term.startswith('"') and term.endswith('"')


def _is_parenthesized(term: str) -> bool:
    return term.startswith("(") and term.endswith(")")


def any_of(*terms: str) -> str:
    """Compose a parenthesized OR-list, quoting multi-word terms.

    A single term is returned without parentheses.
    """
    quoted = [PHRASE_QUOTING.apply(t) for t in terms if t.strip()]
    if not quoted:
        return ""
    if len(quoted) == 1:
        return quoted[0]
    return "(" + " OR ".join(quoted) + ")"


_LOGGING_EXPR = "(logging OR timber AND forest)"

_SINGLE_COMMODITIES = [
    "Iron", "Copper", "Nickel", "Cobalt", "Zinc", "Lead", "Gold", "Silver",
    "Platinum", "Palladium", "Lithium", "Graphite", "Tin", "Tantalum", "Tungsten",
    "Manganese", "Chromium", "Molybdenum", "Vanadium", "Niobium", "Uranium", "Antimony",
]

_RESOURCE_TABLE: Dict[str, str] = {
    "Fossil Fuels": any_of("oil", "petroleum", "gas", "lng", "coal"),
    "Oil & Gas": any_of("oil", "gas"),
    "Petroleum": "petroleum",
    "LNG": "lng",
    "Coal": "coal",
    "Mining": "mining",
    "Any Mining": "mining",
    "ETMs": any_of(
        "lithium", "cobalt", "nickel", "copper", "graphite", "manganese",
        "rare earths", "platinum", "palladium", "antimony",
    ),
    "Aluminum/Bauxite": any_of("aluminum", "bauxite"),
    "Agroindustry": any_of("palm oil", "soy", "cattle", "beef"),
    "Palm Oil": any_of("palm oil"),
    "Soy": "soy",
    "Cattle/Beef": any_of("cattle", "beef"),
    "Logging": _LOGGING_EXPR,
    "Any Logging": _LOGGING_EXPR,
    "Timber": "timber",
    "Biofuels": "biofuels",
    # Legacy misspelling still offered by older saved links
    "Tantalium": "tantalum",
}
_RESOURCE_TABLE.update({name: name.lower() for name in _SINGLE_COMMODITIES})

AMAZON_COUNTRIES = [
    "Brazil", "Peru", "Colombia", "Bolivia", "Venezuela",
    "Ecuador", "Guyana", "Suriname", "French Guiana",
]

_REGION_TABLE: Dict[str, str] = {
    "Amazon": any_of(*AMAZON_COUNTRIES),
    "Congo": "Congo",
    "ASEAN": "ASEAN",
    "Africa": "Africa",
    "Asia": "Asia",
    "South America": PHRASE_QUOTING.apply("South America"),
}


class ResourceLexicon:
    """Read-only, case-insensitive mapping of facet labels to sub-queries.

    Args:
        resources: Resource/category label -> query expression.
        regions: Macro-region label -> query expression.
        version: Lexicon version tag.
    """

    def __init__(
        self,
        resources: Mapping[str, str],
        regions: Optional[Mapping[str, str]] = None,
        version: str = LEXICON_VERSION,
    ) -> None:
        self.version = str(version)
        self._resource_labels: List[str] = list(resources)
        self._region_labels: List[str] = list(regions or {})
        self._resources = MappingProxyType({k.strip().casefold(): v for k, v in resources.items()})
        self._regions = MappingProxyType(
            {k.strip().casefold(): v for k, v in (regions or {}).items()}
        )

    @classmethod
    def default(cls) -> "ResourceLexicon":
        """Return the shared embedded lexicon."""
        return DEFAULT_LEXICON

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ResourceLexicon":
        """Load a lexicon from a YAML file.

        Expected layout::

            version: "3"
            resources:
              Oil & Gas: (oil OR gas)
            regions:
              Amazon: (Brazil OR Peru)

        Args:
            path: Path to the YAML file.

        Returns:
            ResourceLexicon built from the file.

        Raises:
            ValueError: If the file cannot be read or has the wrong shape.
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ValueError(f"Could not load lexicon from {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError(f"Lexicon file {path} must contain a mapping")

        resources = _string_mapping(data.get("resources") or {}, "resources", path)
        regions = _string_mapping(data.get("regions") or {}, "regions", path)
        version = str(data.get("version", LEXICON_VERSION))
        logger.info(
            "Loaded lexicon v%s from %s (%d resources, %d regions)",
            version, path, len(resources), len(regions),
        )
        return cls(resources, regions, version=version)

    def lookup_resource(self, label: str) -> Optional[str]:
        return self._resources.get(label.strip().casefold())

    def lookup_region(self, label: str) -> Optional[str]:
        return self._regions.get(label.strip().casefold())

    @property
    def resource_labels(self) -> List[str]:
        """Resource labels in their original casing and table order."""
        return list(self._resource_labels)

    @property
    def region_labels(self) -> List[str]:
        return list(self._region_labels)

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, label: object) -> bool:
        return isinstance(label, str) and self.lookup_resource(label) is not None


def _string_mapping(raw: object, section: str, path: Path) -> Dict[str, str]:
    if not isinstance(raw, dict):
        raise ValueError(f"Lexicon section {section!r} in {path} must be a mapping")
    result: Dict[str, str] = {}
    for key, value in raw.items():
        if not isinstance(value, str) or not str(key).strip():
            raise ValueError(f"Lexicon entry {key!r} in {section!r} of {path} must map to a string")
        result[str(key)] = value.strip()
    return result


DEFAULT_LEXICON = ResourceLexicon(_RESOURCE_TABLE, _REGION_TABLE)
