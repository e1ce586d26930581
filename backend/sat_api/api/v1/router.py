"""API v1 router - includes all v1 endpoints."""

from fastapi import APIRouter

from sat_api.api.v1.endpoints import health, questions

api_router = APIRouter()

api_router.include_router(health.router, prefix="", tags=["Health"])
api_router.include_router(questions.router)
