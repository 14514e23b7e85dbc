"""Worker service - Directory search"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import User
from ...shared.validators import normalize_text
from .repository import WorkerRepository

logger = logging.getLogger(__name__)


class WorkerService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = WorkerRepository()

    def search(
        self,
        user: User,
        profession: Optional[str] = None,
        city: Optional[str] = None,
        postal_code: Optional[str] = None,
    ) -> list[User]:
        """Search other workers by profession, city and postal code"""
        workers = self.repo.search_workers(
            self.db,
            user.id,
            profession=normalize_text(profession) or None,
            city=normalize_text(city) or None,
            postal_code=normalize_text(postal_code) or None,
        )
        logger.info(f"🔍 Worker search by user {user.id}: {len(workers)} result(s)")
        return workers
