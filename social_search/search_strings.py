"""
Search string generation

Expands investigation records into the search strings that get distributed
across sessions. Both generators are pure and deterministic for a given input
order. When two combinations produce the same string the later one wins.
"""
from typing import Dict, Iterable, List, Union

from .models import (
    CompanyOrProductSearch,
    IncidentSearch,
    InvestigationRecord,
    SearchGrouping,
)

SearchStrings = Union[Dict[str, IncidentSearch], Dict[str, CompanyOrProductSearch]]


def generate_search_strings(
    records: Iterable[InvestigationRecord],
) -> Dict[str, IncidentSearch]:
    """
    Build one search string per (company-or-product, incident keyword) pair.

    First-level words are "<company> <product>" for every product, or the bare
    company name when the record has no products.

    Args:
        records: Investigation records, in priority order

    Returns:
        Dict of search string -> IncidentSearch
    """
    result: Dict[str, IncidentSearch] = {}

    for record in records:
        first_search_words = [record.company_name]
        if record.product_names:
            first_search_words = [
                f"{record.company_name} {product}" for product in record.product_names
            ]

        for part_of_search in first_search_words:
            for keyword in record.incident_keywords:
                search_string = f"{part_of_search} {keyword}"
                result[search_string] = {
                    "company_name": record.company_name,
                    "search_string": search_string,
                    "search_options": dict(record.search_options),
                }

    return result


def generate_company_or_product_search_strings(
    records: Iterable[InvestigationRecord],
) -> Dict[str, CompanyOrProductSearch]:
    """
    Build one search string per company name and per product name.

    Incident keywords are carried along unexpanded so they can be combined
    later, per session (see expand_deferred_search).
    """
    result: Dict[str, CompanyOrProductSearch] = {}

    for record in records:
        for search_string in [record.company_name, *record.product_names]:
            result[search_string] = {
                "company_name": record.company_name,
                "incident_keywords": list(record.incident_keywords),
                "search_string": search_string,
                "search_options": dict(record.search_options),
            }

    return result


def generate_by_grouping(
    records: Iterable[InvestigationRecord],
    grouping: SearchGrouping,
) -> SearchStrings:
    """Dispatch to the generator for the requested grouping."""
    if grouping == SearchGrouping.BY_COMPANY_OR_PRODUCT:
        return generate_company_or_product_search_strings(records)
    return generate_search_strings(records)


def expand_deferred_search(descriptor: CompanyOrProductSearch) -> List[str]:
    """Combine a company-or-product descriptor with its incident keywords."""
    keywords = descriptor.get("incident_keywords") or []
    if not keywords:
        return [descriptor["search_string"]]
    return [f"{descriptor['search_string']} {keyword}" for keyword in keywords]
