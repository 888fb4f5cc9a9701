"""Persistence for cached forecast days."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime
from typing import Protocol

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from runcast.db.models import WeatherCache
from runcast.db.session import SessionFactory, get_session
from runcast.utils.timezone import to_naive_utc, to_utc
from runcast.weather.types import CacheEntry, WeatherDay

_UPSERT_COLUMNS = (
    "condition",
    "description",
    "latitude",
    "longitude",
    "temperature",
    "feels_like",
    "precipitation",
    "humidity",
    "wind_speed",
    "wind_direction",
    "cached_at",
    "expires_at",
)


class ForecastCacheStore(Protocol):
    """Cache persistence used by ForecastCache."""

    def find_many(self, location: str, dates: Sequence[date], now: datetime) -> list[CacheEntry]: ...

    def upsert_batch(self, entries: Sequence[CacheEntry]) -> None: ...

    def purge_expired(self, now: datetime) -> int: ...


def _row_to_entry(row: WeatherCache) -> CacheEntry:
    day = WeatherDay(
        location=row.location,
        date=row.date,
        condition=row.condition,
        description=row.description,
        latitude=row.latitude,
        longitude=row.longitude,
        temperature=row.temperature,
        feels_like=row.feels_like,
        precipitation=row.precipitation,
        humidity=row.humidity,
        wind_speed=row.wind_speed,
        wind_direction=row.wind_direction,
    )
    return CacheEntry(day=day, cached_at=to_utc(row.cached_at), expires_at=to_utc(row.expires_at))


def _entry_to_values(entry: CacheEntry) -> dict:
    day = entry.day
    return {
        "location": day.location,
        "date": day.date,
        "condition": day.condition,
        "description": day.description or day.condition,
        "latitude": day.latitude,
        "longitude": day.longitude,
        "temperature": day.temperature,
        "feels_like": day.feels_like,
        "precipitation": day.precipitation,
        "humidity": day.humidity,
        "wind_speed": day.wind_speed,
        "wind_direction": day.wind_direction,
        "cached_at": to_naive_utc(entry.cached_at),
        "expires_at": to_naive_utc(entry.expires_at),
    }


def _upsert_statement(session: Session, rows: list[dict]):
    """Build INSERT ... ON CONFLICT (location, date) DO UPDATE for the session's dialect."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(WeatherCache).values(rows)
    elif dialect == "sqlite":
        stmt = sqlite_insert(WeatherCache).values(rows)
    else:
        raise NotImplementedError(f"Forecast cache upsert is not supported on {dialect}")
    return stmt.on_conflict_do_update(
        index_elements=["location", "date"],
        set_={column: getattr(stmt.excluded, column) for column in _UPSERT_COLUMNS},
    )


class SqlForecastCacheStore:
    """ForecastCacheStore on the `weather_cache` table."""

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self._session_factory = session_factory or get_session

    def find_many(self, location: str, dates: Sequence[date], now: datetime) -> list[CacheEntry]:
        """Return unexpired entries for `location` on any of `dates`."""
        if not dates:
            return []
        with self._session_factory() as session:
            rows = session.execute(
                select(WeatherCache).where(
                    WeatherCache.location == location,
                    WeatherCache.date.in_(list(dates)),
                    WeatherCache.expires_at > to_naive_utc(now),
                )
            ).scalars()
            return [_row_to_entry(row) for row in rows]

    def upsert_batch(self, entries: Sequence[CacheEntry]) -> None:
        """Insert or refresh all entries in one transaction, keyed by (location, date)."""
        if not entries:
            return
        rows = _dedupe(_entry_to_values(entry) for entry in entries)
        with self._session_factory() as session:
            session.execute(_upsert_statement(session, rows))
        logger.debug(f"Upserted {len(rows)} forecast cache rows")

    def purge_expired(self, now: datetime) -> int:
        """Delete entries that expired at or before `now`. Returns the number removed."""
        with self._session_factory() as session:
            result = session.execute(delete(WeatherCache).where(WeatherCache.expires_at <= to_naive_utc(now)))
            removed = result.rowcount or 0
        logger.info(f"Purged {removed} expired forecast cache rows")
        return removed


def _dedupe(rows: Iterable[dict]) -> list[dict]:
    # A single INSERT ... ON CONFLICT cannot touch the same key twice; last one wins
    by_key: dict[tuple[str, date], dict] = {}
    for row in rows:
        by_key[(row["location"], row["date"])] = row
    return list(by_key.values())
