from fastapi import APIRouter
from aeroledger.api.v1.routes.pilot import router as pilot_router
from aeroledger.api.v1.routes.submissions import router as submissions_router
from aeroledger.api.v1.routes.flights import router as flights_router
from aeroledger.api.v1.routes.finance import router as finance_router
from aeroledger.api.v1.routes.aircraft import router as aircraft_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(pilot_router)
api_router.include_router(submissions_router)
api_router.include_router(flights_router)
api_router.include_router(finance_router)
api_router.include_router(aircraft_router)
