"""
Utilidades de hora local de la instalación.

Todas las reservas se guardan como datetimes "naive" en la hora local de la
instalación (FACILITY_TIMEZONE). Así el día de la semana y la hora de reloj
que se comparan contra la plantilla de disponibilidad son siempre los locales.
"""

from datetime import datetime
from zoneinfo import ZoneInfo
from dotenv import load_dotenv
import os

load_dotenv()

FACILITY_TIMEZONE = ZoneInfo(os.getenv("FACILITY_TIMEZONE", "UTC"))


def to_facility_local(value: datetime) -> datetime:
    """
    Convierte un datetime a hora local naive de la instalación.

    Un datetime sin zona horaria se asume ya expresado en hora local.

    Args:
        value: datetime con o sin tzinfo

    Returns:
        datetime: datetime naive en hora local de la instalación
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(FACILITY_TIMEZONE).replace(tzinfo=None)


def facility_now() -> datetime:
    """Hora actual de la instalación (naive)."""
    return datetime.now(FACILITY_TIMEZONE).replace(tzinfo=None)
