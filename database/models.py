from sqlalchemy import Column, String, Float, DateTime, MetaData, Integer, Index, Text
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone
metadata = MetaData()
Base = declarative_base(metadata=metadata)


class DeviceData(Base):
    """One record per accepted tracker frame, plus richer rows for
    position and snapshot frames."""
    __tablename__ = 'device_data'

    id = Column(Integer, primary_key=True, autoincrement=True)
    device_id = Column(String, nullable=False)
    type = Column(String, nullable=False)  # command token: LK, UD, AL, img...
    content = Column(Text, nullable=False)  # raw frame content
    received_at = Column(DateTime(timezone=True), nullable=False,
                         default=lambda: datetime.now(timezone.utc))

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    battery_level = Column(Integer, nullable=True)
    signal_strength = Column(Integer, nullable=True)

    # Remote snapshot (img,5) payload, stored as received
    image_timestamp = Column(String, nullable=True)
    image_data = Column(Text, nullable=True)

    __table_args__ = (
        Index('idx_device_data_device_type', 'device_id', 'type'),
        Index('idx_device_data_received', 'device_id', 'received_at'),
    )

    def __repr__(self):
        return f"<DeviceData(device_id={self.device_id}, type={self.type})>"
