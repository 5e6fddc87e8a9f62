"""
Persistence of classified tracker records
"""
import logging
from typing import List, Optional, Sequence
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from database.models import DeviceData
from database.schemas import CommandRecordCreate

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a record cannot be written to or read from the store"""


class SQLAlchemyStore:
    """Insert-only record store; every save runs in its own session"""

    def __init__(self, session_factory=None):
        if session_factory is None:
            from database.db_conf import Session
            session_factory = Session
        self.session_factory = session_factory

    def save(self, record: CommandRecordCreate) -> int:
        """Persist one record and return its id"""
        row = DeviceData(
            device_id=record.device_id,
            type=record.type,
            content=record.raw_content,
            received_at=record.received_at,
            latitude=record.latitude,
            longitude=record.longitude,
            battery_level=record.battery_level,
            signal_strength=record.signal_strength,
            image_timestamp=record.image_timestamp,
            image_data=record.image_data,
        )
        session = self.session_factory()
        try:
            session.add(row)
            session.commit()
            record_id = row.id
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(f"Failed to save {record.type} record for {record.device_id}: {e}") from e
        finally:
            session.close()

        logger.debug(f"Saved DeviceData id={record_id} type={record.type} device={record.device_id}")
        return record_id

    def find_by_device(self, device_id: str, types: Optional[Sequence[str]] = None,
                       limit: int = 100) -> List[DeviceData]:
        """Records for a device, newest first, optionally restricted to some types"""
        query = select(DeviceData).where(DeviceData.device_id == device_id)
        if types:
            query = query.where(DeviceData.type.in_(list(types)))
        query = query.order_by(DeviceData.received_at.desc(), DeviceData.id.desc()).limit(limit)

        session = self.session_factory()
        try:
            rows = list(session.scalars(query))
            # Detach so callers can read attributes after close
            session.expunge_all()
            return rows
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load records for {device_id}: {e}") from e
        finally:
            session.close()
