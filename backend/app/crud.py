import math
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlmodel import Session, col, func, or_, select

from app.core.config import settings
from app.core.security import (
    generate_refresh_token,
    get_password_hash,
    hash_token,
    verify_password,
)
from app.models import (
    Pagination,
    RefreshToken,
    Topico,
    User,
    UserCreate,
    UserQuotasUpdate,
    UserTopico,
    UserUpdate,
)

QUOTA_FIELDS = (
    "quota_temas",
    "quota_roteiros",
    "quota_narracoes",
    "quota_temas_carrossel",
    "quota_carrossel",
)


def create_user(*, session: Session, user_create: UserCreate) -> User:
    default_quotas = {field: settings.DEFAULT_QUOTA for field in QUOTA_FIELDS}
    db_obj = User.model_validate(
        user_create,
        update={
            "email": str(user_create.email).strip().lower(),
            "hashed_password": get_password_hash(user_create.password),
            **default_quotas,
        },
    )
    session.add(db_obj)
    session.flush()
    # New accounts start with a personal copy of the global topic catalog.
    for topico in session.exec(select(Topico).where(Topico.ativo == True)).all():  # noqa: E712
        session.add(UserTopico(nome=topico.nome, descricao=topico.descricao, user_id=db_obj.id))
    session.commit()
    session.refresh(db_obj)
    return db_obj


def update_user(*, session: Session, db_user: User, user_in: UserUpdate) -> Any:
    user_data = user_in.model_dump(exclude_unset=True, exclude_none=True)
    extra_data = {}
    if "password" in user_data:
        password = user_data.pop("password")
        extra_data["hashed_password"] = get_password_hash(password)
    if "email" in user_data:
        user_data["email"] = str(user_data["email"]).strip().lower()
    db_user.sqlmodel_update(user_data, update=extra_data)
    session.add(db_user)
    session.commit()
    session.refresh(db_user)
    return db_user


def update_user_quotas(*, session: Session, db_user: User, quotas_in: UserQuotasUpdate) -> User:
    db_user.sqlmodel_update(quotas_in.model_dump(exclude_unset=True, exclude_none=True))
    session.add(db_user)
    session.commit()
    session.refresh(db_user)
    return db_user


def get_user_by_email(*, session: Session, email: str) -> User | None:
    statement = select(User).where(User.email == email.strip().lower())
    session_user = session.exec(statement).first()
    return session_user


# Dummy hash to use for timing attack prevention when user is not found
# This is an Argon2 hash of a random password, used to ensure constant-time comparison
DUMMY_HASH = "$argon2id$v=19$m=65536,t=3,p=4$MjQyZWE1MzBjYjJlZTI0Yw$YTU4NGM5ZTZmYjE2NzZlZjY0ZWY3ZGRkY2U2OWFjNjk"


def authenticate(*, session: Session, email: str, password: str) -> User | None:
    db_user = get_user_by_email(session=session, email=email)
    if not db_user:
        # Prevent timing attacks by running password verification even when user doesn't exist
        # This ensures the response time is similar whether or not the email exists
        verify_password(password, DUMMY_HASH)
        return None
    verified, updated_password_hash = verify_password(password, db_user.hashed_password)
    if not verified:
        return None
    if updated_password_hash:
        db_user.hashed_password = updated_password_hash
        session.add(db_user)
        session.commit()
        session.refresh(db_user)
    return db_user


def _utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def issue_refresh_token(*, session: Session, user_id: uuid.UUID) -> str:
    """Stores a new refresh token for the user and revokes every other live one."""
    now = datetime.now(timezone.utc)
    expired = session.exec(
        select(RefreshToken).where(
            RefreshToken.user_id == user_id, RefreshToken.expires_at < now
        )
    ).all()
    for token in expired:
        session.delete(token)
    live_tokens = session.exec(
        select(RefreshToken).where(
            RefreshToken.user_id == user_id,
            col(RefreshToken.revoked_at).is_(None),
        )
    ).all()
    for token in live_tokens:
        token.revoked_at = now
        session.add(token)

    raw_token = generate_refresh_token()
    session.add(
        RefreshToken(
            user_id=user_id,
            token_hash=hash_token(raw_token),
            expires_at=now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )
    )
    session.commit()
    return raw_token


def consume_refresh_token(*, session: Session, raw_token: str) -> RefreshToken | None:
    """Revokes the token and returns it when it was still valid, otherwise returns None."""
    now = datetime.now(timezone.utc)
    stored = session.exec(
        select(RefreshToken).where(RefreshToken.token_hash == hash_token(raw_token))
    ).first()
    if not stored:
        return None
    was_valid = stored.revoked_at is None and _utc(stored.expires_at) > now
    if stored.revoked_at is None:
        stored.revoked_at = now
        session.add(stored)
        session.commit()
        session.refresh(stored)
    return stored if was_valid else None


def revoke_refresh_token(*, session: Session, raw_token: str) -> None:
    stored = session.exec(
        select(RefreshToken).where(
            RefreshToken.token_hash == hash_token(raw_token),
            col(RefreshToken.revoked_at).is_(None),
        )
    ).first()
    if stored:
        stored.revoked_at = datetime.now(timezone.utc)
        session.add(stored)
        session.commit()


def is_admin(user: User) -> bool:
    return user.role == "ADMIN"


def has_quota(user: User, field: str) -> bool:
    return is_admin(user) or getattr(user, field) > 0


def consume_quota(*, session: Session, user: User, field: str) -> None:
    """Called only after a successful generation. Admins are not charged."""
    if is_admin(user):
        return
    setattr(user, field, max(0, getattr(user, field) - 1))
    session.add(user)
    session.commit()
    session.refresh(user)


def paginate(*, session: Session, statement: Any, page: int, limit: int) -> tuple[list[Any], Pagination]:
    total = session.exec(select(func.count()).select_from(statement.subquery())).one()
    items = session.exec(statement.offset((page - 1) * limit).limit(limit)).all()
    total_pages = math.ceil(total / limit) if total else 0
    return list(items), Pagination(
        current_page=page,
        total_pages=total_pages,
        total_items=total,
        items_per_page=limit,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


def search_filter(search: str, *columns: Any) -> Any:
    pattern = f"%{search.strip().lower()}%"
    return or_(*(func.lower(column).like(pattern) for column in columns))
