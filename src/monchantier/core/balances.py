"""
Net balance per named actor.

Transfers move money between actors; expenses paid by an actor consume the
money that actor holds. The resulting balance shows who still holds funds
(positive) and who has advanced more than they received (negative):

    balance = received - given - expenses_paid
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from ..fx import to_base
from .exceptions import UnknownCurrency
from .records import Expense, Transfer


@dataclass(frozen=True)
class ActorBalance:
    """Money flows of one actor, all in BASE currency."""

    actor_name: str
    received: float
    given: float
    expenses_paid: float
    balance: float


def transfer_base_amount(transfer: Transfer, rates: Mapping[str, float]) -> float:
    """Stored BASE snapshot when present, live conversion otherwise."""
    if transfer.converted_base is not None:
        return float(transfer.converted_base)
    try:
        return to_base(transfer.amount, rates)
    except UnknownCurrency as exc:
        raise UnknownCurrency(exc.currency, transfer.id) from None


def compute_balances(
    transfers: Iterable[Transfer],
    expenses: Iterable[Expense],
    rates: Mapping[str, float],
) -> list[ActorBalance]:
    """
    Compute received/given/expenses-paid and the net balance of every actor.

    Args:
        transfers: Budget transfers (source gives, destination receives)
        expenses: Expenses; only those with a payer are counted
        rates: Rate table (currency -> rate-to-base)

    Returns:
        One ActorBalance per actor named by at least one record, in
        first-seen order. Actors whose flows net to zero are kept.

    Raises:
        UnknownCurrency: If a record needs a rate that is missing
    """
    # actor -> [received, given, expenses_paid], registered on first touch
    flows: dict[str, list[float]] = {}

    def _acc(name: str | None) -> list[float] | None:
        if not name:
            return None
        return flows.setdefault(name, [0.0, 0.0, 0.0])

    for transfer in transfers:
        amount = transfer_base_amount(transfer, rates)
        giver = _acc(transfer.source)
        receiver = _acc(transfer.destination)
        if giver is not None:
            giver[1] += amount
        if receiver is not None:
            receiver[0] += amount

    for expense in expenses:
        payer = _acc(expense.payer)
        if payer is None:
            continue
        try:
            payer[2] += to_base(expense.amount, rates)
        except UnknownCurrency as exc:
            raise UnknownCurrency(exc.currency, expense.id) from None

    return [
        ActorBalance(
            actor_name=name,
            received=received,
            given=given,
            expenses_paid=paid,
            balance=received - given - paid,
        )
        for name, (received, given, paid) in flows.items()
    ]


def sort_by_magnitude(balances: Iterable[ActorBalance]) -> list[ActorBalance]:
    """Order balances by absolute value, largest first (display helper)."""
    return sorted(balances, key=lambda b: abs(b.balance), reverse=True)
