from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Text, UniqueConstraint, text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


def utcnow() -> datetime:
    """Naive UTC timestamp (columns are stored without tz)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Providers(Base):
    __tablename__ = 'providers'

    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    id = Column(Integer, primary_key=True)
    phone = Column(Text)
    whatsapp_number = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    availability = relationship('Availability', back_populates='provider')
    bookings = relationship('Bookings', back_populates='provider')


class Availability(Base):
    __tablename__ = 'availability'
    __table_args__ = (
        UniqueConstraint('provider_id', 'date', 'time_slot', name='uq_availability_slot'),
    )

    provider_id = Column(ForeignKey('providers.id', ondelete='CASCADE'), nullable=False)
    date = Column(Text, nullable=False)  # YYYY-MM-DD
    time_slot = Column(Text, nullable=False)  # HH:MM
    is_blocked = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    provider = relationship('Providers', back_populates='availability')


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        # One active booking per slot; cancelled rows are kept for audit/retry.
        Index(
            'uq_bookings_active_slot',
            'provider_id', 'date', 'time_slot',
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
        Index('ix_bookings_notification', 'notification_status', 'created_at'),
    )

    provider_id = Column(ForeignKey('providers.id', ondelete='CASCADE'), nullable=False)
    date = Column(Text, nullable=False)
    time_slot = Column(Text, nullable=False)
    client_name = Column(Text, nullable=False)
    client_phone = Column(Text, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'confirmed'"))
    notification_status = Column(Text, nullable=False, server_default=text("'pending'"))
    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    provider = relationship('Providers', back_populates='bookings')
