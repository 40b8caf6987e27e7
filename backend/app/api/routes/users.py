import logging
import uuid
from typing import Any

from fastapi import APIRouter, HTTPException, Query, status
from sqlmodel import col, select

from app import crud
from app.api.deps import CurrentAdmin, CurrentUser, SessionDep
from app.core.language import INVALID_LANGUAGE_MESSAGE, SUPPORTED_LANGUAGES
from app.models import (
    User,
    UserAdminPublic,
    UserCreate,
    UserLanguageUpdate,
    UserMessage,
    UserPublic,
    UserQuotasUpdate,
    UsersPublic,
    UserUpdate,
)

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


def _get_user_or_404(session: SessionDep, user_id: uuid.UUID) -> User:
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Usuário não encontrado")
    return user


@router.patch("/language", response_model=UserMessage)
def update_language(session: SessionDep, current_user: CurrentUser, body: UserLanguageUpdate) -> Any:
    language = body.language.strip() if isinstance(body.language, str) else ""
    if language not in SUPPORTED_LANGUAGES:
        raise HTTPException(status_code=400, detail=INVALID_LANGUAGE_MESSAGE)
    current_user.language = language
    session.add(current_user)
    session.commit()
    session.refresh(current_user)
    return UserMessage(message="Idioma atualizado com sucesso", user=UserPublic.model_validate(current_user))


@router.get("/admin/list", response_model=UsersPublic)
def list_users(
    session: SessionDep,
    current_admin: CurrentAdmin,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str | None = None,
    role: str | None = None,
    active: bool | None = None,
) -> Any:
    statement = select(User)
    if search and search.strip():
        statement = statement.where(crud.search_filter(search, User.name, User.email))
    if role:
        statement = statement.where(User.role == role)
    if active is not None:
        statement = statement.where(User.is_active == active)
    statement = statement.order_by(col(User.created_at).desc())

    users, pagination = crud.paginate(session=session, statement=statement, page=page, limit=limit)
    return UsersPublic(
        users=[UserAdminPublic.model_validate(user) for user in users],
        pagination=pagination,
    )


@router.post("/admin/create", response_model=UserAdminPublic, status_code=status.HTTP_201_CREATED)
def create_user(session: SessionDep, current_admin: CurrentAdmin, user_in: UserCreate) -> Any:
    if crud.get_user_by_email(session=session, email=str(user_in.email)):
        raise HTTPException(status_code=400, detail="Email já cadastrado")
    user = crud.create_user(session=session, user_create=user_in)
    logger.info("Admin %s created user %s", current_admin.email, user.email)
    return user


@router.put("/admin/{user_id}", response_model=UserAdminPublic)
def update_user(
    session: SessionDep, current_admin: CurrentAdmin, user_id: uuid.UUID, user_in: UserUpdate
) -> Any:
    db_user = _get_user_or_404(session, user_id)
    if user_in.email:
        existing = crud.get_user_by_email(session=session, email=str(user_in.email))
        if existing and existing.id != user_id:
            raise HTTPException(status_code=400, detail="Email já cadastrado")
    return crud.update_user(session=session, db_user=db_user, user_in=user_in)


@router.patch("/admin/{user_id}/quotas", response_model=UserAdminPublic)
def update_user_quotas(
    session: SessionDep, current_admin: CurrentAdmin, user_id: uuid.UUID, quotas_in: UserQuotasUpdate
) -> Any:
    db_user = _get_user_or_404(session, user_id)
    return crud.update_user_quotas(session=session, db_user=db_user, quotas_in=quotas_in)


@router.delete("/admin/{user_id}", response_model=UserMessage)
def delete_user(session: SessionDep, current_admin: CurrentAdmin, user_id: uuid.UUID) -> Any:
    if user_id == current_admin.id:
        raise HTTPException(status_code=400, detail="Você não pode excluir sua própria conta")
    db_user = _get_user_or_404(session, user_id)
    db_user.is_active = False
    session.add(db_user)
    session.commit()
    session.refresh(db_user)
    logger.info("Admin %s deactivated user %s", current_admin.email, db_user.email)
    return UserMessage(message="Usuário desativado com sucesso", user=UserPublic.model_validate(db_user))
