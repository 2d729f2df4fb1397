from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from app.api.deps import get_db
from app.api.routes import customers, invoices, public, wati
from app.core.db import check_connection

api_router = APIRouter()

# Health check endpoint
@api_router.get("/health-check/", tags=["health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "invoice-notification-backend"}


@api_router.get("/ready", tags=["health"])
def readiness_check(session: Session = Depends(get_db)):
    """Readiness check: the database must answer."""
    try:
        check_connection(session)
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail={"status": "not ready", "database": "disconnected", "error": str(e)},
        )
    return {"status": "ready", "database": "connected"}

# Include all API routes
api_router.include_router(customers.router)
api_router.include_router(invoices.router)
api_router.include_router(public.router)
api_router.include_router(wati.router)
