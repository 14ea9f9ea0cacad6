from datetime import date, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Depends
from sqlalchemy.orm import Session

from ledger.core.config import settings
from ledger.db.session import get_db
from ledger.repositories.records import LedgerRepository


def get_repository(db: Session = Depends(get_db)) -> LedgerRepository:
    return LedgerRepository(db)


def get_business_tz() -> tzinfo:
    try:
        return ZoneInfo(settings.business_timezone)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"Unknown business timezone: {settings.business_timezone}") from exc


def get_today(tz: tzinfo = Depends(get_business_tz)) -> date:
    return datetime.now(tz).date()
