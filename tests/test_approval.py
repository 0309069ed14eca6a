"""
Tests for the flight approval orchestrator.
"""

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import select, func

from aeroledger.models.component import Component, AIRFRAME, ENGINE, PROPELLER
from aeroledger.models.flight import Flight
from aeroledger.models.flight_submission import FlightSubmission, PENDIENTE, COMPLETADO
from aeroledger.models.transaction import Transaction, CHARGE
from aeroledger.services.approval_service import approve_flight_submission, flight_cost
from aeroledger.services.ledger_service import balance_for
from aeroledger.services.submission_service import mark_awaiting_approval


def _components(db, matricula="CC-AQI"):
    rows = db.execute(select(Component).where(Component.aircraft_id == matricula)).scalars().all()
    return {c.tipo: c.horas_acumuladas for c in rows}


def _count(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


# =============================================================================
# Cost formula
# =============================================================================

class TestFlightCost:

    def test_cost_is_hobbs_delta_times_total_rate(self):
        assert flight_cost(Decimal("2.5"), Decimal("180000"), Decimal("20000")) == Decimal("500000.00")

    def test_cost_rounds_to_cents(self):
        assert flight_cost(Decimal("0.3"), Decimal("1000.555"), Decimal("0")) == Decimal("300.17")


# =============================================================================
# Approval
# =============================================================================

class TestApproveFlightSubmission:

    def test_end_to_end_approval(self, db, make_submission, aircraft, pilot):
        """Aircraft at 100/50, pilot reports 102.5/52.0, approved at 180000 + 20000."""
        s = make_submission(102.5, 52.0)

        result = approve_flight_submission(db, s.id, Decimal("180000"), Decimal("20000"))

        assert result["success"] is True
        flight = db.get(Flight, result["flightId"])
        assert flight.hobbs_inicio == Decimal("100.0")
        assert flight.tach_inicio == Decimal("50.0")
        assert flight.diff_hobbs == Decimal("2.5")
        assert flight.diff_tach == Decimal("2.0")
        assert flight.costo == Decimal("500000.00")
        assert flight.submission_id == s.id

        db.refresh(aircraft)
        assert aircraft.hobbs_actual == Decimal("102.5")
        assert aircraft.tach_actual == Decimal("52.0")

        hours = _components(db)
        assert hours[AIRFRAME] == Decimal("1002.0")
        assert hours[ENGINE] == Decimal("502.0")

        charges = db.execute(select(Transaction).where(Transaction.flight_id == flight.id)).scalars().all()
        assert len(charges) == 1
        assert charges[0].tipo == CHARGE
        assert charges[0].monto == Decimal("-500000.00")
        assert balance_for(db, pilot.id) == Decimal("-500000")

        db.refresh(s)
        assert s.estado == COMPLETADO
        assert s.flight_id == flight.id
        assert s.rate == Decimal("180000")

    def test_reference_scenario(self, db, make_submission, aircraft, pilot):
        s = make_submission(102.0, 51.0)

        result = approve_flight_submission(db, s.id, Decimal("100000"), Decimal("0"))

        flight = db.get(Flight, result["flightId"])
        assert (flight.diff_hobbs, flight.diff_tach) == (Decimal("2.0"), Decimal("1.0"))
        assert flight.costo == Decimal("200000")
        db.refresh(aircraft)
        assert (aircraft.hobbs_actual, aircraft.tach_actual) == (Decimal("102.0"), Decimal("51.0"))
        assert balance_for(db, pilot.id) == Decimal("-200000")

    def test_component_without_baseline_stays_null(self, db, make_submission):
        s = make_submission(101.0, 51.0)

        approve_flight_submission(db, s.id, 100000, 0)

        hours = _components(db)
        assert hours[PROPELLER] is None
        flight = db.execute(select(Flight)).scalars().one()
        assert flight.propeller_hours is None
        assert flight.engine_hours == Decimal("501.0")

    def test_component_hours_round_half_up(self, db, make_submission):
        s = make_submission(101.0, 51.25)

        approve_flight_submission(db, s.id, 100000, 0)

        assert _components(db)[AIRFRAME] == Decimal("1001.3")

    def test_second_flight_starts_from_previous_finals(self, db, make_submission):
        first = make_submission(102.5, 52.0, fecha=datetime(2025, 12, 1, 9, 0))
        approve_flight_submission(db, first.id, 100000, 0)
        second = make_submission(104.0, 53.2, fecha=datetime(2025, 12, 2, 9, 0))

        result = approve_flight_submission(db, second.id, 100000, 0)

        flight = db.get(Flight, result["flightId"])
        assert flight.hobbs_inicio == Decimal("102.5")
        assert flight.tach_inicio == Decimal("52.0")
        assert flight.diff_hobbs == Decimal("1.5")

    def test_baseline_uses_flight_date_not_insertion_order(self, db, make_submission):
        """A back-dated flight approved later is not the baseline."""
        recent = make_submission(105.0, 55.0, fecha=datetime(2025, 12, 10))
        approve_flight_submission(db, recent.id, 100000, 0)
        # inserted directly to simulate a late correction entered for an earlier day
        db.add(Flight(
            fecha=datetime(2025, 12, 5), hobbs_inicio=Decimal("101"), hobbs_fin=Decimal("102"),
            tach_inicio=Decimal("51"), tach_fin=Decimal("52"), diff_hobbs=Decimal("1"), diff_tach=Decimal("1"),
            costo=Decimal("0"), tarifa=Decimal("0"), instructor_rate=Decimal("0"),
            piloto_id=recent.piloto_id, aircraft_id="CC-AQI",
        ))
        db.commit()
        nxt = make_submission(106.0, 56.0, fecha=datetime(2025, 12, 11))

        result = approve_flight_submission(db, nxt.id, 100000, 0)

        assert db.get(Flight, result["flightId"]).hobbs_inicio == Decimal("105.0")

    def test_approve_from_awaiting_approval(self, db, make_submission):
        s = make_submission(101.0, 51.0)
        mark_awaiting_approval(db, s.id)

        result = approve_flight_submission(db, s.id, 100000, 0)

        assert result["success"] is True

    def test_second_approval_is_rejected(self, db, make_submission):
        s = make_submission(102.5, 52.0)
        assert approve_flight_submission(db, s.id, 180000, 20000)["success"] is True

        again = approve_flight_submission(db, s.id, 180000, 20000)

        assert again["success"] is False
        assert again["code"] == "INVALID_STATE"
        assert _count(db, Flight) == 1
        assert _count(db, Transaction) == 1

    def test_missing_submission(self, db, aircraft):
        result = approve_flight_submission(db, 999, 100000, 0)
        assert result == {"success": False, "error": "submission 999 not found", "code": "NOT_FOUND"}

    def test_incomplete_data_leaves_submission_pending(self, db, aircraft, pilot):
        s = FlightSubmission(piloto_id=pilot.id, aircraft_id="CC-AQI", estado=PENDIENTE, hobbs_final=None, tach_final=Decimal("52"))
        db.add(s)
        db.commit()

        result = approve_flight_submission(db, s.id, 100000, 0)

        assert result["success"] is False
        assert result["code"] == "INCOMPLETE_DATA"
        db.refresh(s)
        assert s.estado == PENDIENTE
        assert _count(db, Flight) == 0

    def test_negative_rate_rejected(self, db, make_submission):
        s = make_submission(101.0, 51.0)

        result = approve_flight_submission(db, s.id, -1, 0)

        assert result["code"] == "VALIDATION_ERROR"
        assert _count(db, Transaction) == 0

    @pytest.mark.parametrize("rate", [None, float("nan")])
    def test_missing_rate_counts_as_zero(self, db, make_submission, rate):
        s = make_submission(101.0, 51.0)

        result = approve_flight_submission(db, s.id, rate, 20000)

        assert db.get(Flight, result["flightId"]).costo == Decimal("20000.00")

    def test_pilot_is_notified_after_commit(self, db, make_submission, sent_emails):
        s = make_submission(102.5, 52.0)

        approve_flight_submission(db, s.id, 180000, 20000)

        assert len(sent_emails) == 1
        assert sent_emails[0]["to"] == "jperez@aeroclub.cl"
        assert "$500.000" in sent_emails[0]["body"]

    def test_notification_failure_does_not_undo_approval(self, db, make_submission, monkeypatch):
        from aeroledger.services import email_service

        def _boom(*args, **kwargs):
            raise RuntimeError("smtp down")

        monkeypatch.setattr(email_service, "send_email", _boom)
        s = make_submission(102.5, 52.0)

        result = approve_flight_submission(db, s.id, 180000, 20000)

        assert result["success"] is True
        db.refresh(s)
        assert s.estado == COMPLETADO

    def test_failure_after_flight_insert_rolls_everything_back(self, db, make_submission, aircraft, pilot, monkeypatch):
        """The Flight row is flushed before the charge is posted; a failure there must leave no trace."""
        from aeroledger.services import ledger_service

        def _boom(*args, **kwargs):
            raise RuntimeError("ledger unavailable")

        monkeypatch.setattr(ledger_service, "post_transaction", _boom)
        before = _components(db)
        s = make_submission(102.5, 52.0)

        result = approve_flight_submission(db, s.id, 180000, 20000)

        assert result["success"] is False
        assert result["code"] == "INTERNAL_ERROR"
        assert _count(db, Flight) == 0
        assert _count(db, Transaction) == 0
        db.refresh(aircraft)
        assert (aircraft.hobbs_actual, aircraft.tach_actual) == (Decimal("100.0"), Decimal("50.0"))
        assert _components(db) == before
        db.refresh(s)
        assert s.estado == PENDIENTE
        assert s.flight_id is None
        assert balance_for(db, pilot.id) == Decimal("0")

    def test_notification_formatting_error_does_not_undo_approval(self, db, make_submission, monkeypatch, sent_emails):
        from aeroledger.services import notification_service

        def _boom(value):
            raise ValueError("bad amount")

        monkeypatch.setattr(notification_service, "_fmt_clp", _boom)
        s = make_submission(102.5, 52.0)

        result = approve_flight_submission(db, s.id, 180000, 20000)

        assert result["success"] is True
        assert sent_emails == []
        db.refresh(s)
        assert s.estado == COMPLETADO
        assert _count(db, Flight) == 1
