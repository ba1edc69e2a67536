"""
Configuración compartida para tests pytest
"""
from datetime import date, datetime, time
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base

# Importar todos los modelos para que SQLAlchemy pueda resolver las relaciones
import app.models  # noqa: F401
from app.crud import court as court_crud
from app.enums.slot_type import SlotType
from app.enums.weekday import Weekday
from app.schemas.actor import Actor
from app.schemas.court import AvailabilitySlot, CourtCreate
from app.services.booking_service import BookingService


# Base de datos en memoria para tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Hora fija de la instalación: lunes 2 de marzo de 2026, 08:00
FIXED_NOW = datetime(2026, 3, 2, 8, 0)
MONDAY = date(2026, 3, 9)
TUESDAY = date(2026, 3, 10)
THURSDAY = date(2026, 3, 12)


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute))


@pytest.fixture
def db():
    """Crear base de datos de test y limpiarla después"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def override_get_db(db):
    """Override de get_db para tests"""
    def _get_db():
        try:
            yield db
        finally:
            pass
    return _get_db


@pytest.fixture
def sample_court(db):
    """
    Cancha de prueba: lunes 09:00-12:00 (cualquier propósito) y
    jueves 18:00-20:00 (academia), a 20 por hora
    """
    court = CourtCreate(
        name="Court 1",
        sport_type="Basketball",
        hourly_rate=Decimal("20"),
        availability={
            Weekday.MONDAY: [AvailabilitySlot(start=time(9, 0), end=time(12, 0))],
            Weekday.THURSDAY: [
                AvailabilitySlot(
                    start=time(18, 0), end=time(20, 0), slot_type=SlotType.ACADEMY
                )
            ],
        },
    )
    return court_crud.create_court(db, court)


@pytest.fixture
def service(db):
    """Servicio de reservas con el reloj fijo"""
    return BookingService(db, clock=lambda: FIXED_NOW)


@pytest.fixture
def manager():
    return Actor(user_id=100, can_manage=True)


@pytest.fixture
def player():
    return Actor(user_id=1)


@pytest.fixture
def other_player():
    return Actor(user_id=2)
