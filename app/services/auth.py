from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from app.schemas.actor import Actor
import os
from dotenv import load_dotenv

load_dotenv()

# Security configuration
SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key")
ALGORITHM = "HS256"

# Tokens are issued by the identity service; this backend only reads them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")


def actor_from_token(token: str) -> Actor:
    """
    Obtiene el actor a partir de un JWT.

    El token trae el id del usuario en "sub" y la capacidad de gestión en
    "can_manage"; la política de roles vive en el servicio de identidad.

    Raises:
        JWTError: Si el token es inválido, expiró o no trae "sub"
    """
    payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    subject = payload.get("sub")
    if subject is None:
        raise JWTError("Token without subject")
    return Actor(
        user_id=int(subject),
        can_manage=bool(payload.get("can_manage", False)),
    )


def get_current_actor(token: str = Depends(oauth2_scheme)) -> Actor:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        return actor_from_token(token)
    except (JWTError, ValueError):
        raise credentials_exception

