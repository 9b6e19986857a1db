"""
Record store used by the property catalog and the reservation engine.

A thin layer over one SQLAlchemy session: each ``RecordStore`` lives for a
single request, and every write goes through the store circuit breaker so a
failing database makes callers fail fast instead of piling up.
"""
import logging
from datetime import date
from typing import List, Optional

from pybreaker import CircuitBreaker, CircuitBreakerError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .circuit_breaker import store_circuit_breaker
from .errors import StoreConflict, StoreError, StoreUnavailable

logger = logging.getLogger(__name__)


class RecordStore:
    def __init__(self, db: Session, breaker: CircuitBreaker = store_circuit_breaker):
        self.db = db
        self.breaker = breaker

    # ----- reads -----
    def get(self, model, entity_id: int, lock: bool = False):
        """
        Fetch an entity by primary key, or None.

        With ``lock=True`` the row is selected ``FOR UPDATE`` so concurrent
        writers on the same entity are serialized until the next commit.
        Databases without row locks (SQLite) ignore the hint.
        """
        query = self.db.query(model).filter(model.id == entity_id)
        if lock:
            query = query.with_for_update()
        return query.first()

    def query_all(self, model) -> list:
        return self.db.query(model).order_by(model.id).all()

    def query_by_field(self, model, field: str, value) -> list:
        column = getattr(model, field)
        return self.db.query(model).filter(column == value).order_by(model.id).all()

    def query_reservations_overlapping(
        self,
        property_id: int,
        status: models.ReservationStatus,
        range_start: date,
        range_end: date,
        exclude_id: Optional[int] = None,
    ) -> List[models.Reservation]:
        """
        Reservations on a property in ``status`` that touch the given range.

        Both boundaries are inclusive: a stay ending on day X overlaps a
        stay starting on day X.
        """
        query = self.db.query(models.Reservation).filter(
            models.Reservation.property_id == property_id,
            models.Reservation.status == status,
            models.Reservation.check_in_date <= range_end,
            models.Reservation.check_out_date >= range_start,
        )
        if exclude_id is not None:
            query = query.filter(models.Reservation.id != exclude_id)
        return query.order_by(models.Reservation.check_in_date).all()

    def query_reservations_by_host(self, host_id: int) -> List[models.Reservation]:
        return (
            self.db.query(models.Reservation)
            .join(models.Property, models.Reservation.property_id == models.Property.id)
            .filter(models.Property.host_id == host_id)
            .order_by(models.Reservation.id)
            .all()
        )

    # ----- writes -----
    def save(self, entity, *related):
        """
        Insert or update ``entity`` (plus any ``related`` rows) in one commit.

        Ids and timestamps are assigned by the database on insert.
        """
        self.db.add(entity)
        for extra in related:
            self.db.add(extra)
        self._commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity) -> None:
        self.db.delete(entity)
        self._commit()

    def clear_blocked_dates(self, reservation_id: int) -> None:
        """Queue removal of a reservation's blocked days; committed by the next save."""
        self.db.query(models.BlockedDate).filter(
            models.BlockedDate.reservation_id == reservation_id
        ).delete(synchronize_session=False)

    def _commit(self) -> None:
        try:
            self.breaker.call(self.db.commit)
        except IntegrityError as exc:
            self.db.rollback()
            raise StoreConflict("Write rejected by a uniqueness constraint") from exc
        except CircuitBreakerError as exc:
            self.db.rollback()
            logger.error(f"Record store circuit open: {exc}")
            raise StoreUnavailable(
                "Record store temporarily unavailable. Please try again later."
            ) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Record store commit failed: {exc}", exc_info=True)
            raise StoreError("Record store failure") from exc
