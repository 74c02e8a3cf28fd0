# backend/tutorcenter/models/types.py
"""
Custom SQLAlchemy types that work across different database backends.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

import pytz
from sqlalchemy import DateTime, TypeDecorator

if TYPE_CHECKING:
    from sqlalchemy.sql.type_api import TypeDecorator as _TypeDecorator

    TypeDecoratorProtocol = _TypeDecorator[Any]
else:
    TypeDecoratorProtocol = TypeDecorator


class UTCDateTime(TypeDecoratorProtocol):
    """
    Timestamp column that always round-trips as an aware UTC datetime.

    PostgreSQL stores it as TIMESTAMPTZ. SQLite has no timezone support, so
    values are normalized to UTC before binding and re-tagged on load; this
    keeps equality lookups on start instants exact on both backends.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is None:
            return value
        if value.tzinfo is None:
            raise ValueError("UTCDateTime requires timezone-aware datetimes")
        utc_value = value.astimezone(pytz.UTC)
        if dialect.name == "sqlite":
            return utc_value.replace(tzinfo=None)
        return utc_value

    def process_result_value(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is None:
            return value
        if value.tzinfo is None:
            return pytz.UTC.localize(value)
        return value.astimezone(pytz.UTC)
