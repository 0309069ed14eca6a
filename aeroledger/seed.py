from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import ProgrammingError, OperationalError

from aeroledger.db.session import SessionLocal
from aeroledger.core.config import settings
from aeroledger.models.user import User
from aeroledger.models.aircraft import Aircraft
from aeroledger.models.component import Component, AIRFRAME, ENGINE, PROPELLER

# TBO limits for the club's Cessna 172 (Lycoming O-320)
DEFAULT_COMPONENTS = [
    (AIRFRAME, Decimal("30000")),
    (ENGINE, Decimal("2000")),
    (PROPELLER, Decimal("2000")),
]


def ensure_user(db: Session, email: str, role: str, name: str, codigo: str | None = None):
    u = db.query(User).filter(User.email == email).first()
    if u:
        return u
    u = User(email=email, full_name=name, role=role, codigo=codigo, is_active=True)
    db.add(u)
    db.commit()
    return u


def ensure_aircraft(db: Session, matricula: str, modelo: str):
    a = db.get(Aircraft, matricula)
    if not a:
        a = Aircraft(matricula=matricula, modelo=modelo, hobbs_actual=Decimal("0"), tach_actual=Decimal("0"))
        db.add(a)
        db.flush()
    existing = {c.tipo for c in db.query(Component).filter(Component.aircraft_id == matricula).all()}
    for tipo, tbo in DEFAULT_COMPONENTS:
        if tipo not in existing:
            db.add(Component(aircraft_id=matricula, tipo=tipo, horas_acumuladas=None, limite_tbo=tbo))
    db.commit()
    return a


def run(db=None):
    if db is None:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM users LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            print("[seed] users table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        ensure_user(db, "admin@aeroclub.cl", "admin", "Admin")
        ensure_user(db, "piloto@aeroclub.cl", "pilot", "Piloto Demo", codigo="PD")
        ensure_aircraft(db, settings.DEFAULT_AIRCRAFT, "Cessna 172")
        print("[seed] done")
    finally:
        db.close()


if __name__ == "__main__":
    run()
