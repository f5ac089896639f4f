"""Facet input model for NewsMapper query synthesis."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FacetState:
    """The user's current filter selection.

    Every field is free text; empty string means the facet is absent.
    Clearing ``custom`` when another facet changes is a caller policy and is
    not enforced here.
    """

    resource: str = ""
    region: str = ""
    country: str = ""
    custom: str = ""

    def normalized(self) -> "FacetState":
        """Return a copy with every facet trimmed of surrounding whitespace."""
        return FacetState(
            resource=(self.resource or "").strip(),
            region=(self.region or "").strip(),
            country=(self.country or "").strip(),
            custom=(self.custom or "").strip(),
        )
