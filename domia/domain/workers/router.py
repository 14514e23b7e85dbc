"""Worker router - FastAPI endpoints for the worker directory"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import WorkerSummary
from .service import WorkerService

router = APIRouter(prefix="/workers", tags=["Workers"])


def get_worker_service(db: Session = Depends(get_db)) -> WorkerService:
    """Dependency injection for WorkerService"""
    return WorkerService(db)


@router.get("/search", response_model=list[WorkerSummary])
async def search_workers(
    profession: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    postalCode: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: WorkerService = Depends(get_worker_service),
):
    """Find workers to send offers to; the caller is never listed"""
    return [
        WorkerSummary(
            id=w.id,
            firstName=w.first_name,
            lastName=w.last_name,
            email=w.email,
            phone=w.phone,
            profession=w.profession,
            hourlyRate=w.hourly_rate,
            address=w.address,
            city=w.city,
            postalCode=w.postal_code,
            country=w.country,
        )
        for w in service.search(current_user, profession, city, postalCode)
    ]
