"""
Shared fixtures for the MonChantier test suite.
"""

from datetime import date

import pytest
from monchantier import (
    Category,
    Chantier,
    ChantierStatus,
    Expense,
    MonetaryAmount,
    Quote,
    Snapshot,
    Transfer,
    create_rate_table,
)


@pytest.fixture
def rates():
    """Default MonChantier rate table: 1 EUR = 3.35 DNT, 1 USD = 3.10 DNT."""
    return create_rate_table()


@pytest.fixture
def snapshot():
    """Two chantiers (DNT and EUR), three categories, mixed records."""
    return Snapshot(
        chantiers=[
            Chantier(id="villa", name="Villa Sousse", currency="DNT", budget=20000),
            Chantier(
                id="lyon",
                name="Immeuble Lyon",
                currency="EUR",
                budget=1000,
                status=ChantierStatus.SUSPENDED,
            ),
        ],
        categories=[
            Category(id="gros_oeuvre", name="Gros oeuvre"),
            Category(id="materiel", name="Materiel"),
            Category(id="main_oeuvre", name="Main d'oeuvre"),
        ],
        expenses=[
            Expense(
                id="e1",
                date=date(2025, 1, 5),
                amount=MonetaryAmount(1000, "DNT"),
                chantier_id="villa",
                category_id="gros_oeuvre",
                payer="Karim",
                description="Beton",
            ),
            Expense(
                id="e2",
                date=date(2025, 1, 20),
                amount=MonetaryAmount(100, "EUR"),
                chantier_id="lyon",
                category_id="materiel",
                payer="Sophie",
                description="Grue",
            ),
            Expense(
                id="e3",
                date=date(2025, 2, 3),
                amount=MonetaryAmount(500, "DNT"),
                chantier_id="villa",
                category_id="main_oeuvre",
                description="Equipe",
            ),
        ],
        quotes=[
            Quote(
                id="q1",
                date=date(2025, 1, 10),
                amount=MonetaryAmount(200, "EUR"),
                chantier_id="lyon",
                category_id="gros_oeuvre",
                supplier="Lafarge",
            ),
        ],
        transfers=[
            Transfer(
                id="t1",
                date=date(2025, 1, 2),
                amount=MonetaryAmount(1000, "EUR"),
                source="Sophie",
                destination="Karim",
            ),
        ],
    )
