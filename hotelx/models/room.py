import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from hotelx.models.base import Base


class RoomStatus(enum.Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    RESERVED = "reserved"


# Statuses staff may set directly; the rest are written by the booking lifecycle
MANUAL_ROOM_STATUSES = (RoomStatus.AVAILABLE, RoomStatus.MAINTENANCE)


class RoomCategory(Base):
    __tablename__ = "room_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    base_price = Column(Numeric(10, 2), nullable=False)
    capacity = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    rooms = relationship("Room", back_populates="category")


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    room_number = Column(String, nullable=False, unique=True)
    category_id = Column(Integer, ForeignKey("room_categories.id"), nullable=False)
    status = Column(Enum(RoomStatus), default=RoomStatus.AVAILABLE, nullable=False)
    floor = Column(Integer, nullable=False, default=1)

    has_wifi = Column(Boolean, default=True, nullable=False)
    has_ac = Column(Boolean, default=True, nullable=False)
    has_minibar = Column(Boolean, default=False, nullable=False)
    has_room_service = Column(Boolean, default=False, nullable=False)
    has_tv = Column(Boolean, default=True, nullable=False)
    has_balcony = Column(Boolean, default=False, nullable=False)

    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    category = relationship("RoomCategory", back_populates="rooms")
    bookings = relationship("Booking", back_populates="room")
