import uuid
from collections.abc import Generator
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session

from app import crud
from app.core.config import settings
from app.core.db import engine
from app.core.language import UnsupportedLanguageError, localized, resolve_language
from app.core.security import decode_access_token
from app.models import User

reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_PREFIX}/auth/login", auto_error=False
)


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]
TokenDep = Annotated[str | None, Depends(reusable_oauth2)]


def get_user_from_token(session: Session, token: str | None) -> User:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token não fornecido")
    try:
        payload = decode_access_token(token)
        user_id = uuid.UUID(str(payload.get("sub")))
    except (jwt.InvalidTokenError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token inválido")
    user = session.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário não encontrado ou inativo",
        )
    return user


def get_current_user(session: SessionDep, token: TokenDep) -> User:
    return get_user_from_token(session, token)


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_current_active_admin(current_user: CurrentUser) -> User:
    if current_user.role != "ADMIN":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso negado. Apenas administradores.",
        )
    return current_user


CurrentAdmin = Annotated[User, Depends(get_current_active_admin)]


def request_language(requested: str | None, user: User) -> str:
    try:
        return resolve_language(requested, user.language)
    except UnsupportedLanguageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def require_quota(user: User, field: str) -> None:
    if not crud.has_quota(user, field):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=localized(
                user.language,
                "Cota esgotada para este recurso. Contate um administrador.",
                "Quota exhausted for this feature. Please contact an administrator.",
            ),
        )
