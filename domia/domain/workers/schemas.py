"""Worker directory schemas"""

from typing import Optional

from pydantic import BaseModel


class WorkerSummary(BaseModel):
    """Public profile of a worker returned by the directory search"""

    id: int
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: str
    phone: Optional[str] = None
    profession: Optional[str] = None
    hourlyRate: Optional[float] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postalCode: Optional[str] = None
    country: Optional[str] = None
