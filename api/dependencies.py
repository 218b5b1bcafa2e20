"""Dependency injection for the Adaptus API."""
from datetime import date
from typing import Annotated

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database.base import get_db


def get_today(target_date: date | None = Query(None, alias="date")) -> date:
    """Local calendar day, overridable with ``?date=YYYY-MM-DD``."""
    return target_date or date.today()


# Type aliases for cleaner dependency injection
DBSession = Annotated[AsyncSession, Depends(get_db)]
Today = Annotated[date, Depends(get_today)]
