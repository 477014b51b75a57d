"""
Base repository with generic CRUD operations.
"""
import uuid
from typing import TypeVar, Generic, Type, Optional, List, Any, Iterable, Sequence, Tuple

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func

from tasktrail.core.timeutils import utcnow

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository with CRUD operations.
    Inherit and specify the model class.

    Every write commits on its own; there is no transaction spanning two calls.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    def _apply_filters(self, query, filters: Optional[dict] = None, conditions: Sequence = ()):
        if filters:
            for field, value in filters.items():
                if hasattr(self.model, field) and value is not None:
                    query = query.where(getattr(self.model, field) == value)
        for condition in conditions:
            query = query.where(condition)
        return query

    async def create(self, obj_in: dict) -> ModelType:
        """Create a new record."""
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        await self.session.commit()
        await self.session.refresh(db_obj)
        return db_obj

    async def get(self, id: uuid.UUID) -> Optional[ModelType]:
        """Get a record by ID."""
        return await self.session.get(self.model, id)

    async def get_many(self, ids: Iterable[uuid.UUID]) -> List[ModelType]:
        """Get all records whose ID is in ids. Unknown IDs are skipped."""
        ids = list(set(ids))
        if not ids:
            return []
        query = select(self.model).where(self.model.id.in_(ids))
        result = await self.session.exec(query)
        return result.all()

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """Get a record by a specific field."""
        query = select(self.model).where(getattr(self.model, field) == value)
        result = await self.session.exec(query)
        return result.first()

    async def list(
        self,
        filters: Optional[dict] = None,
        conditions: Sequence = (),
        order_by: str = "created_at",
        order_desc: bool = True,
        limit: Optional[int] = None
    ) -> List[ModelType]:
        """List all records with optional filters."""
        query = self._apply_filters(select(self.model), filters, conditions)

        # Apply ordering
        if hasattr(self.model, order_by):
            order_column = getattr(self.model, order_by)
            query = query.order_by(order_column.desc() if order_desc else order_column)

        if limit:
            query = query.limit(limit)

        result = await self.session.exec(query)
        return result.all()

    async def update(self, id: uuid.UUID, obj_in: dict) -> Optional[ModelType]:
        """
        Update a record.
        Every key in obj_in is written, including None, so callers pass
        model_dump(exclude_unset=True) to leave untouched fields alone.
        """
        db_obj = await self.get(id)
        if not db_obj:
            return None

        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        # Update timestamp if exists
        if hasattr(db_obj, "updated_at"):
            db_obj.updated_at = utcnow()

        self.session.add(db_obj)
        await self.session.commit()
        await self.session.refresh(db_obj)
        return db_obj

    async def update_many(self, ids: Iterable[uuid.UUID], obj_in: dict) -> List[ModelType]:
        """Apply the same field values to several records."""
        records = await self.get_many(ids)
        now = utcnow()
        for db_obj in records:
            for field, value in obj_in.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)
            if hasattr(db_obj, "updated_at"):
                db_obj.updated_at = now
            self.session.add(db_obj)
        await self.session.commit()
        return records

    async def delete(self, id: uuid.UUID) -> bool:
        """Delete a record."""
        db_obj = await self.get(id)
        if not db_obj:
            return False

        await self.session.delete(db_obj)
        await self.session.commit()
        return True

    async def delete_many(self, ids: Iterable[uuid.UUID]) -> int:
        """Delete several records, returning how many existed."""
        records = await self.get_many(ids)
        for db_obj in records:
            await self.session.delete(db_obj)
        await self.session.commit()
        return len(records)

    async def count(self, filters: Optional[dict] = None, conditions: Sequence = ()) -> int:
        """Count records."""
        query = self._apply_filters(select(func.count()).select_from(self.model), filters, conditions)
        result = await self.session.exec(query)
        return result.one()

    async def group_by_count(
        self,
        field: str,
        conditions: Sequence = (),
        limit: Optional[int] = None
    ) -> List[Tuple[Any, int]]:
        """
        Count records per distinct value of field.
        Sorted by count descending, ties broken by the key so results are stable.
        """
        column = getattr(self.model, field)
        count_col = func.count().label("count")
        query = self._apply_filters(select(column, count_col), None, conditions)
        query = query.group_by(column).order_by(count_col.desc(), column)
        if limit:
            query = query.limit(limit)

        result = await self.session.exec(query)
        return [(row[0], row[1]) for row in result.all()]

    async def exists(self, id: uuid.UUID) -> bool:
        """Check if a record exists."""
        obj = await self.get(id)
        return obj is not None
