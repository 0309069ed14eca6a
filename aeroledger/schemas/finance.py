from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel


class DepositCreate(BaseModel):
    fecha: datetime
    monto: Decimal
    detalle: Optional[str] = ""


class FuelLogCreate(BaseModel):
    fecha: datetime
    litros: Decimal
    monto: Decimal
    detalle: Optional[str] = ""


class PendingRecordOut(BaseModel):
    id: int
    userId: int
    fecha: str
    monto: Decimal
    litros: Optional[Decimal] = None
    detalle: Optional[str] = None
    estado: str


class LedgerEntryOut(BaseModel):
    id: int
    tipo: str
    monto: Decimal
    flightId: Optional[int] = None
    depositId: Optional[int] = None
    fuelLogId: Optional[int] = None
    createdAt: Optional[str] = None
    saldo: Decimal


class AccountOut(BaseModel):
    pilotId: int
    codigo: Optional[str] = None
    nombre: str = ""
    deposits: Decimal
    fuelCredits: Decimal
    charges: Decimal
    balance: Decimal
    entries: List[LedgerEntryOut]


class PilotBalanceOut(BaseModel):
    pilotId: int
    codigo: Optional[str] = None
    nombre: str = ""
    balance: Decimal
