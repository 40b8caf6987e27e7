import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import EmailStr
from sqlalchemy import JSON, DateTime, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

Role = Literal["ADMIN", "GENERAL"]
Language = Literal["pt-BR", "en"]


def get_datetime_utc() -> datetime:
    return datetime.now(timezone.utc)


# Shared properties
class UserBase(SQLModel):
    email: EmailStr = Field(unique=True, index=True, max_length=255)
    name: str = Field(min_length=1, max_length=255)
    role: str = Field(default="GENERAL", max_length=20)
    is_active: bool = True
    language: str = Field(default="pt-BR", max_length=10)


class UserQuotas(SQLModel):
    quota_temas: int = Field(default=0, ge=0)
    quota_roteiros: int = Field(default=0, ge=0)
    quota_narracoes: int = Field(default=0, ge=0)
    quota_temas_carrossel: int = Field(default=0, ge=0)
    quota_carrossel: int = Field(default=0, ge=0)


# Properties to receive via API on creation
class UserCreate(UserBase):
    password: str = Field(min_length=6, max_length=128)
    role: Role = "GENERAL"
    language: Language = "pt-BR"


class UserRegister(SQLModel):
    email: EmailStr | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, max_length=128)
    name: str | None = Field(default=None, max_length=255)
    role: str = "GENERAL"


# Properties to receive via API on update, all are optional
class UserUpdate(SQLModel):
    email: EmailStr | None = Field(default=None, max_length=255)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    password: str | None = Field(default=None, min_length=6, max_length=128)
    role: Role | None = None
    is_active: bool | None = None
    language: Language | None = None


class UserQuotasUpdate(SQLModel):
    quota_temas: int | None = Field(default=None, ge=0)
    quota_roteiros: int | None = Field(default=None, ge=0)
    quota_narracoes: int | None = Field(default=None, ge=0)
    quota_temas_carrossel: int | None = Field(default=None, ge=0)
    quota_carrossel: int | None = Field(default=None, ge=0)


class UserLanguageUpdate(SQLModel):
    language: str | None = None


class LoginRequest(SQLModel):
    email: str = ""
    password: str = ""


# Database model, database table inferred from class name
class User(UserBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    hashed_password: str
    quota_temas: int = 0
    quota_roteiros: int = 0
    quota_narracoes: int = 0
    quota_temas_carrossel: int = 0
    quota_carrossel: int = 0
    provider: str = Field(default="CREDENTIALS", max_length=20)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    refresh_tokens: list["RefreshToken"] = Relationship(
        back_populates="user", cascade_delete=True
    )
    topicos: list["UserTopico"] = Relationship(back_populates="user", cascade_delete=True)


# Properties to return via API, id is always required
class UserPublic(UserBase):
    id: uuid.UUID
    provider: str = "CREDENTIALS"
    created_at: datetime | None = None


class UserAdminPublic(UserPublic, UserQuotas):
    pass


class Pagination(SQLModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next: bool
    has_prev: bool


class UsersPublic(SQLModel):
    users: list[UserAdminPublic]
    pagination: Pagination


# Generic message
class Message(SQLModel):
    message: str


class UserMessage(SQLModel):
    message: str
    user: UserPublic


# Response of login/refresh
class AuthResponse(SQLModel):
    message: str
    token: str
    user: UserPublic
    expires_in: int


class RefreshToken(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    token_hash: str = Field(unique=True, index=True, max_length=64)
    expires_at: datetime = Field(sa_type=DateTime(timezone=True))  # type: ignore
    revoked_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))  # type: ignore
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE")
    user: User | None = Relationship(back_populates="refresh_tokens")


# Runtime configuration

class ConfiguracaoBase(SQLModel):
    chave: str = Field(min_length=1, max_length=100)
    valor: str | None = Field(default=None)
    nome: str = Field(min_length=1, max_length=255)
    descricao: str | None = Field(default=None)
    categoria: str = Field(default="Geral", max_length=50)


class ConfiguracaoCreate(SQLModel):
    chave: str | None = None
    valor: str | None = None
    nome: str | None = None
    descricao: str | None = None
    categoria: str | None = None


class ConfiguracaoUpdate(SQLModel):
    valor: str | None = None
    nome: str | None = None
    descricao: str | None = None
    categoria: str | None = None
    ativo: bool | None = None


class Configuracao(ConfiguracaoBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    chave: str = Field(unique=True, index=True, max_length=100)
    ativo: bool = True
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    updated_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class ConfiguracaoPublic(ConfiguracaoBase):
    id: uuid.UUID
    ativo: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserConfiguracao(ConfiguracaoBase, table=True):
    __table_args__ = (UniqueConstraint("user_id", "chave"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    ativo: bool = True
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE")
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class UserConfiguracaoPublic(ConfiguracaoBase):
    id: uuid.UUID
    ativo: bool


class UserConfiguracaoValor(SQLModel):
    valor: str | None = None


# Topics

class TopicoBase(SQLModel):
    nome: str = Field(min_length=1, max_length=255)
    descricao: str | None = Field(default=None)


class TopicoCreate(SQLModel):
    nome: str | None = None
    descricao: str | None = None


class TopicoUpdate(SQLModel):
    nome: str | None = None
    descricao: str | None = None
    ativo: bool | None = None


class Topico(TopicoBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    nome: str = Field(unique=True, index=True, max_length=255)
    ativo: bool = True
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class UserTopico(TopicoBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    ativo: bool = True
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE")
    user: User | None = Relationship(back_populates="topicos")
    temas: list["Tema"] = Relationship(back_populates="topico", cascade_delete=True)
    temas_carrossel: list["UserTemaCarrossel"] = Relationship(
        back_populates="topico", cascade_delete=True
    )


class TopicoPublic(TopicoBase):
    id: uuid.UUID
    ativo: bool
    created_at: datetime | None = None


class TopicosPublic(SQLModel):
    topicos: list[TopicoPublic]
    pagination: Pagination


# Theme suggestions

class Tema(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    titulo: str
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    user_topico_id: uuid.UUID = Field(
        foreign_key="usertopico.id", nullable=False, ondelete="CASCADE"
    )
    topico: UserTopico | None = Relationship(back_populates="temas")


class UserTemaCarrossel(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    titulo: str
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    user_topico_id: uuid.UUID = Field(
        foreign_key="usertopico.id", nullable=False, ondelete="CASCADE"
    )
    topico: UserTopico | None = Relationship(back_populates="temas_carrossel")


class TemasRequest(SQLModel):
    topico_id: uuid.UUID | None = None
    language: str | None = None


class TemasPublic(SQLModel):
    temas: list[str]
    topico: str | None = None
    language: str | None = None


# Generated content

class UserRoteiro(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tema: str = Field(max_length=500)
    duracao: int
    language: str = Field(default="pt-BR", max_length=10)
    conteudo: dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    ativo: bool = True
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE")


class RoteiroRequest(SQLModel):
    tema: Any = None
    duracao: Any = None
    language: str | None = None


class UserCarrossel(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tema: str = Field(max_length=500)
    quantidade: int
    language: str = Field(default="pt-BR", max_length=10)
    conteudo: dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    ativo: bool = True
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE")


class CarrosselRequest(SQLModel):
    tema: Any = None
    quantidade: Any = None
    language: str | None = None


class CarrosselUpdate(SQLModel):
    carrossel: list[dict[str, Any]] = Field(default_factory=list)


class UserNarracao(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    nome: str = Field(max_length=255)
    texto: str
    arquivo: str = Field(max_length=255)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE")


class UserNarracaoPublic(SQLModel):
    id: uuid.UUID
    nome: str
    texto: str
    arquivo: str
    created_at: datetime | None = None


class NarracoesRequest(SQLModel):
    narracoes: dict[str, str] | list[str] | None = None


class MensagemPublic(SQLModel):
    mensagem: str


class NarracoesPublic(SQLModel):
    mensagem: str
    arquivos: list[str]
    final: str | None = None


class PlanilhaRequest(SQLModel):
    url: str | None = None


class MockModeUpdate(SQLModel):
    mock_mode: bool
