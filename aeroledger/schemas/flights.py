from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class SubmissionCreate(BaseModel):
    fecha: datetime
    hobbsFinal: Optional[Decimal] = None  # validated by the service so missing values get a 400, not a 422
    tachFinal: Optional[Decimal] = None
    aircraftId: Optional[str] = None
    copiloto: Optional[str] = ""
    detalle: Optional[str] = ""
    ruta: Optional[str] = ""
    cliente: Optional[str] = None


class SubmissionOut(BaseModel):
    id: int
    estado: str
    pilotoId: int
    aircraftId: str
    fechaVuelo: Optional[str] = None
    hobbsFinal: Optional[Decimal] = None
    tachFinal: Optional[Decimal] = None
    copiloto: Optional[str] = None
    detalle: Optional[str] = None
    ruta: Optional[str] = None
    cliente: Optional[str] = None
    rate: Optional[Decimal] = None
    instructorRate: Optional[Decimal] = None
    flightId: Optional[int] = None
    errorMessage: Optional[str] = None
    createdAt: Optional[str] = None


class ApproveIn(BaseModel):
    rate: Decimal = Field(default=Decimal("0"))
    instructorRate: Decimal = Field(default=Decimal("0"))


class CancelIn(BaseModel):
    reason: Optional[str] = None


class OperationResult(BaseModel):
    success: bool
    flightId: Optional[int] = None
    error: Optional[str] = None
    code: Optional[str] = None


class FlightOut(BaseModel):
    id: int
    fecha: str
    aircraftId: str
    pilotoId: int
    submissionId: Optional[int] = None
    hobbsInicio: Decimal
    hobbsFin: Decimal
    tachInicio: Decimal
    tachFin: Decimal
    diffHobbs: Decimal
    diffTach: Decimal
    costo: Decimal
    tarifa: Decimal
    instructorRate: Decimal
    airframeHours: Optional[Decimal] = None
    engineHours: Optional[Decimal] = None
    propellerHours: Optional[Decimal] = None
    cliente: Optional[str] = None
    copiloto: Optional[str] = None
    detalle: Optional[str] = None
    ruta: Optional[str] = None


class BaselineIn(BaseModel):
    hobbs: Decimal
    tach: Decimal
    componentHours: dict[str, Optional[Decimal]] = {}


class FlightCountersIn(BaseModel):
    hobbsInicio: Decimal
    hobbsFin: Decimal
    tachInicio: Decimal
    tachFin: Decimal


class OverhaulIn(BaseModel):
    airframeHours: Decimal
    fecha: datetime
    notas: Optional[str] = None
