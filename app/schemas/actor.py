from pydantic import BaseModel
from typing import Optional


class Actor(BaseModel):
    """
    Identidad que ejecuta una operación sobre reservas.

    can_manage es la capacidad opaca de gestión que resuelve la capa de
    autenticación; el motor de reservas no conoce roles.
    """

    user_id: Optional[int] = None
    can_manage: bool = False
    booking_reference: Optional[str] = None  # Invitados: referencia de su reserva
