"""
Social Search Data Models
=========================

Accounts, investigation input and the query descriptors produced from it.

Credential and InvestigationRecord are frozen dataclasses: they are loaded once
and never change. Query descriptors are TypedDicts because they travel as plain
JSON (CLI output, HTTP responses) and are keyed by their search string.

QUERY SHAPES
────────────
    InvestigationRecord(company="Acme", products=["Widget"], keywords=["leak"])

    by incident (IncidentSearch):
        "Acme Widget leak" -> {company_name, search_string, search_options}

    by company-or-product (CompanyOrProductSearch):
        "Acme"   -> {company_name, incident_keywords, search_string, search_options}
        "Widget" -> {...}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Tuple, TypedDict


# =============================================================================
# ENUMS
# =============================================================================

class PlatformType(str, Enum):
    """Platforms an account can belong to."""
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"

    def __str__(self) -> str:
        return self.value


class SearchGrouping(str, Enum):
    """How investigation records are expanded into search strings."""
    BY_INCIDENT = "incident"
    BY_COMPANY_OR_PRODUCT = "company"


# =============================================================================
# ACCOUNTS
# =============================================================================

@dataclass(frozen=True)
class Credential:
    """An account used to obtain one authenticated session."""
    type: PlatformType
    username: str
    password: str = field(repr=False)

    @property
    def key(self) -> str:
        """Identity key, e.g. 'facebook-alice'. Must be unique in a registry."""
        return f"{self.type.value}-{self.username}"


# =============================================================================
# INVESTIGATION INPUT
# =============================================================================

@dataclass(frozen=True)
class InvestigationRecord:
    """A company, its products and the incident keywords to pair them with."""
    company_name: str
    incident_keywords: Tuple[str, ...]
    product_names: Tuple[str, ...] = ()
    search_options: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InvestigationRecord":
        """Build from a JSON object using snake_case or camelCase field names."""
        company = data.get("company_name", data.get("companyName"))
        if not company:
            raise ValueError("investigation record requires company_name")

        keywords = data.get("incident_keywords", data.get("incidentKeywords")) or []
        products = data.get("product_names", data.get("productNames")) or []
        options = data.get("search_options", data.get("searchOptions")) or {}

        for name, value in (("incident_keywords", keywords), ("product_names", products)):
            if not isinstance(value, (list, tuple)):
                raise ValueError(f"{name} must be a list, got {type(value).__name__}")

        return cls(
            company_name=company,
            incident_keywords=tuple(keywords),
            product_names=tuple(products),
            search_options=dict(options),
        )


# =============================================================================
# QUERY DESCRIPTORS
# =============================================================================

class IncidentSearch(TypedDict):
    """One company-or-product x incident keyword combination."""
    company_name: str
    search_string: str
    search_options: Dict[str, Any]


class CompanyOrProductSearch(TypedDict):
    """A first-level word whose keyword combination is deferred."""
    company_name: str
    incident_keywords: List[str]
    search_string: str
    search_options: Dict[str, Any]
