"""Worker repository - Directory queries over worker accounts"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import ACCOUNT_TYPE_WORKER, User

SEARCH_LIMIT = 50


class WorkerRepository:
    """Repository for worker directory lookups"""

    @staticmethod
    def search_workers(
        db: Session,
        exclude_user_id: int,
        profession: Optional[str] = None,
        city: Optional[str] = None,
        postal_code: Optional[str] = None,
        limit: int = SEARCH_LIMIT,
    ) -> list[User]:
        """Workers matching every given filter; city is a case-insensitive substring match"""
        query = db.query(User).filter(
            User.account_type == ACCOUNT_TYPE_WORKER,
            User.id != exclude_user_id,
        )

        if profession:
            query = query.filter(User.profession == profession)
        if city:
            query = query.filter(User.city.icontains(city, autoescape=True))
        if postal_code:
            query = query.filter(User.postal_code == postal_code)

        return query.order_by(User.last_name, User.first_name, User.id).limit(limit).all()
