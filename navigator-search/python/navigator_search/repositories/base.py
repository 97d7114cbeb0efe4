"""
Base repository pattern implementation
"""

from abc import ABC
from typing import Any, List, Optional, Type, TypeVar, Generic

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.base import Base

T = TypeVar('T', bound=Base)

class BaseRepository(Generic[T], ABC):
    """Read and replace operations shared by the stored-version repositories"""

    def __init__(self, session: Session, model_class: Type[T]):
        self.session = session
        self.model_class = model_class

    def get_by_id(self, id: int) -> Optional[T]:
        return self.session.get(self.model_class, id)

    def find_one(self, **criteria: Any) -> Optional[T]:
        """First entity whose columns equal ``criteria``"""
        return self.session.query(self.model_class).filter_by(**criteria).first()

    def find_all(self, order_by: Optional[Any] = None, **criteria: Any) -> List[T]:
        """Entities whose columns equal ``criteria``, ordered by primary key unless told otherwise"""
        query = self.session.query(self.model_class).filter_by(**criteria)
        return query.order_by(order_by if order_by is not None else self.model_class.id).all()

    def for_domain_version(self, domain_version_pk: int) -> List[T]:
        """Rows owned by one stored domain version"""
        return self.find_all(domain_version_pk=domain_version_pk)

    def remove(self, entity: T) -> None:
        """Delete an entity and flush so its unique keys can be reused at once"""
        self.session.delete(entity)
        self.session.flush()

    def count(self, **criteria: Any) -> int:
        query = self.session.query(func.count(self.model_class.id))
        for column, value in criteria.items():
            query = query.filter(getattr(self.model_class, column) == value)
        return query.scalar()
