"""API router setup."""
from fastapi import APIRouter

from clinica.api.v1 import admin_agenda, clients, finance, me, professionals, public

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(admin_agenda.router)
api_router.include_router(clients.router)
api_router.include_router(professionals.router)
api_router.include_router(finance.router)
api_router.include_router(me.router)
api_router.include_router(public.router)
