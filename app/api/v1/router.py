"""Main API router for v1 endpoints."""

from fastapi import APIRouter

from app.api.v1 import contractors, customers, document_numbers, end_customers

router = APIRouter()

router.include_router(document_numbers.router)
router.include_router(customers.router)
router.include_router(end_customers.router)
router.include_router(contractors.router)


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "message": "Docuform API is running"}
