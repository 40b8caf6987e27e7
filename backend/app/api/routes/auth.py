import logging
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Cookie, HTTPException, Response, status

from app import crud
from app.api.deps import CurrentUser, SessionDep
from app.core import security
from app.core.config import settings
from app.models import (
    AuthResponse,
    LoginRequest,
    Message,
    User,
    UserCreate,
    UserMessage,
    UserPublic,
    UserRegister,
)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

COOKIE_PATH = f"{settings.API_PREFIX}/auth"


def _set_refresh_cookie(response: Response, raw_token: str) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=raw_token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="lax",
        path=COOKIE_PATH,
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.REFRESH_COOKIE_NAME, path=COOKIE_PATH)


def _access_token(user: User) -> str:
    return security.create_access_token(
        user.id,
        expires_delta=timedelta(seconds=settings.ACCESS_TOKEN_EXPIRE_SECONDS),
        email=user.email,
        role=user.role,
    )


def _auth_response(message: str, user: User) -> AuthResponse:
    return AuthResponse(
        message=message,
        token=_access_token(user),
        user=UserPublic.model_validate(user),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_SECONDS,
    )


@router.post("/register", response_model=UserMessage, status_code=status.HTTP_201_CREATED)
def register(session: SessionDep, user_in: UserRegister) -> Any:
    if not user_in.email or not user_in.password or not (user_in.name or "").strip():
        raise HTTPException(status_code=400, detail="Email, senha e nome são obrigatórios")
    if len(user_in.password) < 6:
        raise HTTPException(status_code=400, detail="A senha deve ter pelo menos 6 caracteres")
    role = (user_in.role or "GENERAL").strip().upper()
    if role not in ("ADMIN", "GENERAL"):
        raise HTTPException(status_code=400, detail="Role inválido")
    if crud.get_user_by_email(session=session, email=str(user_in.email)):
        raise HTTPException(status_code=400, detail="Email já cadastrado")

    user = crud.create_user(
        session=session,
        user_create=UserCreate(
            email=user_in.email,
            password=user_in.password,
            name=user_in.name.strip(),
            role=role,
        ),
    )
    logger.info("User registered: %s", user.email)
    return UserMessage(message="Usuário criado com sucesso", user=UserPublic.model_validate(user))


@router.post("/login", response_model=AuthResponse)
def login(session: SessionDep, response: Response, credentials: LoginRequest) -> Any:
    if not credentials.email or not credentials.password:
        raise HTTPException(status_code=400, detail="Email e senha são obrigatórios")
    user = crud.authenticate(session=session, email=credentials.email, password=credentials.password)
    if not user:
        raise HTTPException(status_code=401, detail="Credenciais inválidas")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Usuário inativo")

    _set_refresh_cookie(response, crud.issue_refresh_token(session=session, user_id=user.id))
    logger.info("User logged in: %s", user.email)
    return _auth_response("Login realizado com sucesso", user)


@router.post("/refresh", response_model=AuthResponse)
def refresh(
    session: SessionDep,
    response: Response,
    refresh_token: str | None = Cookie(default=None, alias=settings.REFRESH_COOKIE_NAME),
) -> Any:
    def reject(detail: str) -> HTTPException:
        # HTTPException responses are built from scratch, so the cookie is cleared explicitly.
        return HTTPException(
            status_code=401,
            detail=detail,
            headers={
                "set-cookie": f"{settings.REFRESH_COOKIE_NAME}=; Max-Age=0; Path={COOKIE_PATH}; HttpOnly; SameSite=lax"
            },
        )

    if not refresh_token:
        raise reject("Refresh token não fornecido")
    stored = crud.consume_refresh_token(session=session, raw_token=refresh_token)
    if not stored:
        raise reject("Refresh token inválido ou expirado")
    user = session.get(User, stored.user_id)
    if not user or not user.is_active:
        raise reject("Usuário não encontrado ou inativo")

    _set_refresh_cookie(response, crud.issue_refresh_token(session=session, user_id=user.id))
    return _auth_response("Token renovado com sucesso", user)


@router.get("/verify")
def verify(current_user: CurrentUser) -> Any:
    return {"user": UserPublic.model_validate(current_user)}


@router.post("/logout", response_model=Message)
def logout(
    session: SessionDep,
    response: Response,
    refresh_token: str | None = Cookie(default=None, alias=settings.REFRESH_COOKIE_NAME),
) -> Any:
    if refresh_token:
        crud.revoke_refresh_token(session=session, raw_token=refresh_token)
    _clear_refresh_cookie(response)
    return Message(message="Logout realizado com sucesso")
