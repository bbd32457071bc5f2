"""Tests for domain/customers/search.py"""

from terminplaner.domain.customers.search import collation_key, search_customers
from terminplaner.storage.base import CustomerRecord


def customer(id, last_name, first_name):
    return CustomerRecord(
        id=id,
        last_name=last_name,
        first_name=first_name,
        street="Hauptstraße 1",
        zip="10115",
        city="Berlin",
        phone="030 1",
        email="a@example.de",
    )


def test_collation_ignores_case_and_accents():
    assert collation_key("Äpfel") == collation_key("apfel")
    assert collation_key("ÉCOLE") == collation_key("ecole")


def test_sorted_by_last_then_first_name():
    customers = [
        customer(1, "Özdemir", "Zeynep"),
        customer(2, "Meier", "Jan"),
        customer(3, "meier", "Anna"),
        customer(4, "Ohm", "Georg"),
    ]

    results = search_customers(customers, "e")

    assert [c.id for c in results] == [3, 2, 4, 1]


def test_substring_in_first_name():
    customers = [customer(1, "Schulz", "Johanna"), customer(2, "Fischer", "Paul")]
    assert [c.id for c in search_customers(customers, "hann")] == [1]


def test_query_is_trimmed():
    customers = [customer(1, "Schulz", "Johanna")]
    assert [c.id for c in search_customers(customers, "  schulz ")] == [1]


def test_empty_query():
    assert search_customers([customer(1, "Schulz", "Johanna")], "") == []
