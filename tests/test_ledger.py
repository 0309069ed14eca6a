"""
Tests for derived balances and account statements.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from aeroledger.services import finance_service, ledger_service
from aeroledger.services.approval_service import approve_flight_submission
from aeroledger.services.cancellation_service import delete_flight
from aeroledger.services.errors import NotFoundError


@pytest.fixture
def activity(db, make_submission, pilot):
    """One 500000 charge, one 300000 deposit, one 62000 fuel credit."""
    s = make_submission(102.5, 52.0)
    flight_id = approve_flight_submission(db, s.id, 180000, 20000)["flightId"]
    d = finance_service.create_deposit(db, pilot.id, datetime(2025, 12, 3), 300000)
    finance_service.approve_deposit(db, d.id)
    f = finance_service.create_fuel_log(db, pilot.id, datetime(2025, 12, 4), 40, 62000)
    finance_service.approve_fuel(db, f.id)
    return {"flight_id": flight_id}


class TestBalance:

    def test_no_transactions_is_zero(self, db, pilot):
        assert ledger_service.balance_for(db, pilot.id) == Decimal("0")

    def test_balance_is_sum_of_ledger(self, db, pilot, activity):
        assert ledger_service.balance_for(db, pilot.id) == Decimal("-138000")

    def test_breakdown_matches_balance(self, db, pilot, activity):
        b = ledger_service.balance_breakdown(db, pilot.id)

        assert b["deposits"] == Decimal("300000")
        assert b["fuelCredits"] == Decimal("62000")
        assert b["charges"] == Decimal("500000")
        assert b["balance"] == b["deposits"] + b["fuelCredits"] - b["charges"]
        assert b["balance"] == ledger_service.balance_for(db, pilot.id)

    def test_deleting_flight_removes_its_charge(self, db, pilot, activity):
        delete_flight(db, activity["flight_id"])

        assert ledger_service.balance_for(db, pilot.id) == Decimal("362000")

    def test_balances_are_per_pilot(self, db, pilot, other_pilot, activity):
        assert ledger_service.balance_for(db, other_pilot.id) == Decimal("0")


class TestAccountStatement:

    def test_running_balance(self, db, pilot, activity):
        st = ledger_service.account_statement(db, pilot.id)

        assert st["codigo"] == "JP"
        assert [e["tipo"] for e in st["entries"]] == ["CHARGE", "DEPOSIT", "FUEL_CREDIT"]
        assert [e["saldo"] for e in st["entries"]] == [Decimal("-500000"), Decimal("-200000"), Decimal("-138000")]
        assert st["balance"] == st["entries"][-1]["saldo"]

    def test_unknown_pilot(self, db):
        with pytest.raises(NotFoundError):
            ledger_service.account_statement(db, 404)


class TestBalancesByPilot:

    def test_lists_every_pilot(self, db, pilot, other_pilot, admin, activity):
        rows = {r["codigo"]: r["balance"] for r in ledger_service.balances_by_pilot(db)}

        assert rows == {"JP": Decimal("-138000"), "MR": Decimal("0")}
