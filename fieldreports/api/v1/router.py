from fastapi import APIRouter

from fieldreports.api.v1.endpoints import customers
from fieldreports.api.v1.endpoints import reports
from fieldreports.api.v1.endpoints import spares
from fieldreports.api.v1.endpoints import users

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(customers.router, prefix="/customers", tags=["customers"])
api_router.include_router(spares.router, prefix="/spares", tags=["spares"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
