"""
Customer name search

Case-insensitive substring match on first or last name, results ordered by
last name then first name with a base-strength comparison (accents and case
ignored, so "Ärzte" sorts with "Arzt" as German phone books do).
"""

import unicodedata

from ...storage.base import CustomerRecord


def collation_key(value: str) -> str:
    """Accent- and case-insensitive sort key"""
    decomposed = unicodedata.normalize("NFKD", value or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def matches(customer: CustomerRecord, query: str) -> bool:
    needle = query.casefold()
    return needle in (customer.first_name or "").casefold() or needle in (
        customer.last_name or ""
    ).casefold()


def sort_key(customer: CustomerRecord) -> tuple:
    return (collation_key(customer.last_name), collation_key(customer.first_name), customer.id)


def search_customers(customers: list[CustomerRecord], query: str) -> list[CustomerRecord]:
    """Matching customers, sorted; a blank query matches nothing"""
    query = (query or "").strip()
    if not query:
        return []
    return sorted((c for c in customers if matches(c, query)), key=sort_key)
