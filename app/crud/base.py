"""Generic CRUD operations shared by all repositories."""
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType")
UpdateSchemaType = TypeVar("UpdateSchemaType")


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """CRUD object with default methods to Create, Read, Update, Delete.

    Writes commit by default. Pass ``commit=False`` to only flush, so several
    writes can share the caller's transaction.
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def _finish(self, db: AsyncSession, db_obj: Optional[ModelType], commit: bool) -> None:
        if commit:
            await db.commit()
            if db_obj is not None:
                await db.refresh(db_obj)
        else:
            await db.flush()

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """Get a single row by primary key."""
        result = await db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_multi(
        self,
        db: AsyncSession,
        *,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[ModelType]:
        """Get multiple rows with optional equality filters."""
        query = select(self.model)
        for field, value in (filters or {}).items():
            query = query.where(getattr(self.model, field) == value)
        query = query.order_by(self.model.id).offset(skip).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: Union[CreateSchemaType, Dict[str, Any]],
        commit: bool = True,
    ) -> ModelType:
        """Create a new row."""
        if isinstance(obj_in, BaseModel):
            obj_data = obj_in.model_dump()
        else:
            obj_data = dict(obj_in)
        db_obj = self.model(**obj_data)
        db.add(db_obj)
        await self._finish(db, db_obj, commit)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]],
        commit: bool = True,
    ) -> ModelType:
        """Update a row in place."""
        if isinstance(obj_in, BaseModel):
            update_data = obj_in.model_dump(exclude_unset=True)
        else:
            update_data = dict(obj_in)

        for field, value in update_data.items():
            setattr(db_obj, field, value)

        db.add(db_obj)
        await self._finish(db, db_obj, commit)
        return db_obj

    async def remove(self, db: AsyncSession, *, id: Any, commit: bool = True) -> Optional[ModelType]:
        """Delete a row by primary key."""
        db_obj = await self.get(db, id=id)
        if db_obj is not None:
            await db.delete(db_obj)
            await self._finish(db, None, commit)
        return db_obj
