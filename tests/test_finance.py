"""
Tests for deposit and fuel approvals.
"""

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import select

from aeroledger.models.deposit import Deposit, APROBADO, PENDIENTE
from aeroledger.models.fuel_log import FuelLog
from aeroledger.models.transaction import Transaction, DEPOSIT, FUEL_CREDIT
from aeroledger.services import finance_service
from aeroledger.services.errors import (
    AlreadyApprovedError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from aeroledger.services.ledger_service import balance_for


@pytest.fixture
def deposit(db, pilot):
    return finance_service.create_deposit(db, pilot.id, datetime(2025, 12, 3), Decimal("300000"), "Transferencia")


def _fuel(db, pilot, fecha):
    return finance_service.create_fuel_log(db, pilot.id, fecha, Decimal("40"), Decimal("62000"))


def _transactions(db):
    return db.execute(select(Transaction)).scalars().all()


# =============================================================================
# Deposits
# =============================================================================

class TestDeposits:

    def test_create_deposit_is_pending(self, deposit):
        assert deposit.estado == PENDIENTE

    @pytest.mark.parametrize("monto", [0, -5, None, "abc"])
    def test_create_deposit_requires_positive_amount(self, db, pilot, monto):
        with pytest.raises(ValidationError):
            finance_service.create_deposit(db, pilot.id, datetime(2025, 12, 3), monto)

    def test_approve_deposit_posts_one_credit(self, db, pilot, deposit):
        finance_service.approve_deposit(db, deposit.id)

        db.refresh(deposit)
        assert deposit.estado == APROBADO
        txns = _transactions(db)
        assert len(txns) == 1
        assert txns[0].tipo == DEPOSIT
        assert txns[0].deposit_id == deposit.id
        assert balance_for(db, pilot.id) == Decimal("300000")

    def test_approve_twice_raises(self, db, deposit):
        finance_service.approve_deposit(db, deposit.id)

        with pytest.raises(AlreadyApprovedError):
            finance_service.approve_deposit(db, deposit.id)
        assert len(_transactions(db)) == 1

    def test_approve_missing_deposit(self, db):
        with pytest.raises(NotFoundError):
            finance_service.approve_deposit(db, 77)

    def test_reject_deletes_record(self, db, deposit):
        deposit_id = deposit.id

        finance_service.reject_deposit(db, deposit_id)

        assert db.get(Deposit, deposit_id) is None
        assert _transactions(db) == []

    def test_reject_approved_deposit_is_refused(self, db, deposit):
        finance_service.approve_deposit(db, deposit.id)

        with pytest.raises(InvalidStateError):
            finance_service.reject_deposit(db, deposit.id)
        assert db.get(Deposit, deposit.id) is not None


# =============================================================================
# Fuel
# =============================================================================

class TestFuel:

    def test_fuel_on_cutoff_is_credited(self, db, pilot):
        fuel = _fuel(db, pilot, datetime(2025, 11, 29, 0, 0, 0))

        finance_service.approve_fuel(db, fuel.id)

        txns = _transactions(db)
        assert [t.tipo for t in txns] == [FUEL_CREDIT]
        assert txns[0].fuel_log_id == fuel.id
        assert balance_for(db, pilot.id) == Decimal("62000")

    def test_fuel_before_cutoff_is_approved_without_credit(self, db, pilot):
        fuel = _fuel(db, pilot, datetime(2025, 11, 28, 23, 59, 59))

        finance_service.approve_fuel(db, fuel.id)

        db.refresh(fuel)
        assert fuel.estado == APROBADO
        assert _transactions(db) == []
        assert balance_for(db, pilot.id) == Decimal("0")

    def test_fuel_approve_twice_raises(self, db, pilot):
        fuel = _fuel(db, pilot, datetime(2025, 12, 5))
        finance_service.approve_fuel(db, fuel.id)

        with pytest.raises(AlreadyApprovedError):
            finance_service.approve_fuel(db, fuel.id)

    def test_reject_fuel(self, db, pilot):
        fuel = _fuel(db, pilot, datetime(2025, 12, 5))
        fuel_id = fuel.id

        finance_service.reject_fuel(db, fuel_id)

        assert db.get(FuelLog, fuel_id) is None

    def test_reject_missing_fuel(self, db):
        with pytest.raises(NotFoundError):
            finance_service.reject_fuel(db, 5)

    def test_create_fuel_requires_positive_litros(self, db, pilot):
        with pytest.raises(ValidationError):
            finance_service.create_fuel_log(db, pilot.id, datetime(2025, 12, 5), 0, 1000)


class TestListPending:

    def test_only_pending_records_listed(self, db, pilot, deposit):
        approved = finance_service.create_deposit(db, pilot.id, datetime(2025, 12, 4), 1000)
        finance_service.approve_deposit(db, approved.id)
        fuel = _fuel(db, pilot, datetime(2025, 12, 5))

        pending = finance_service.list_pending(db)

        assert [d.id for d in pending["deposits"]] == [deposit.id]
        assert [f.id for f in pending["fuelLogs"]] == [fuel.id]
