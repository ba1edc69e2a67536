from enum import Enum


class SlotType(str, Enum):
    """Tipo de franja horaria de una cancha"""

    ACADEMY = "academy"  # Entrenamientos y partidos de equipos
    RENTAL = "rental"  # Alquiler al público
