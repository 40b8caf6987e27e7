import uuid
from typing import Any

from fastapi import APIRouter, HTTPException, Query, status
from sqlmodel import col, select

from app import crud
from app.api.deps import CurrentAdmin, CurrentUser, SessionDep
from app.models import (
    Message,
    Topico,
    TopicoCreate,
    TopicoPublic,
    TopicosPublic,
    TopicoUpdate,
    UserTopico,
)

router = APIRouter(prefix="/topicos", tags=["topicos"])


def _clean_nome(nome: str | None) -> str:
    cleaned = (nome or "").strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail="Nome do tópico é obrigatório")
    return cleaned


# Global catalog, copied into every new account

@router.get("/catalogo", response_model=list[TopicoPublic])
def list_catalogo(session: SessionDep, current_user: CurrentUser) -> Any:
    statement = select(Topico).where(Topico.ativo == True).order_by(Topico.nome)  # noqa: E712
    return session.exec(statement).all()


@router.post("/catalogo", response_model=TopicoPublic, status_code=status.HTTP_201_CREATED)
def create_catalogo(session: SessionDep, current_admin: CurrentAdmin, topico_in: TopicoCreate) -> Any:
    nome = _clean_nome(topico_in.nome)
    if session.exec(select(Topico).where(Topico.nome == nome)).first():
        raise HTTPException(status_code=400, detail="Já existe um tópico com este nome")
    topico = Topico(nome=nome, descricao=topico_in.descricao)
    session.add(topico)
    session.commit()
    session.refresh(topico)
    return topico


@router.put("/catalogo/{topico_id}", response_model=TopicoPublic)
def update_catalogo(
    session: SessionDep, current_admin: CurrentAdmin, topico_id: uuid.UUID, topico_in: TopicoUpdate
) -> Any:
    topico = session.get(Topico, topico_id)
    if not topico:
        raise HTTPException(status_code=404, detail="Tópico não encontrado")
    update_data = topico_in.model_dump(exclude_unset=True, exclude_none=True)
    if "nome" in update_data:
        update_data["nome"] = _clean_nome(update_data["nome"])
        duplicate = session.exec(
            select(Topico).where(Topico.nome == update_data["nome"], Topico.id != topico_id)
        ).first()
        if duplicate:
            raise HTTPException(status_code=400, detail="Já existe um tópico com este nome")
    topico.sqlmodel_update(update_data)
    session.add(topico)
    session.commit()
    session.refresh(topico)
    return topico


@router.delete("/catalogo/{topico_id}", response_model=Message)
def delete_catalogo(session: SessionDep, current_admin: CurrentAdmin, topico_id: uuid.UUID) -> Any:
    topico = session.get(Topico, topico_id)
    if not topico or not topico.ativo:
        raise HTTPException(status_code=404, detail="Tópico não encontrado")
    topico.ativo = False
    session.add(topico)
    session.commit()
    return Message(message="Tópico removido com sucesso")


# Per-user topics

def _get_user_topico(session: SessionDep, user_id: uuid.UUID, topico_id: uuid.UUID) -> UserTopico:
    topico = session.get(UserTopico, topico_id)
    if not topico or topico.user_id != user_id or not topico.ativo:
        raise HTTPException(status_code=404, detail="Tópico não encontrado")
    return topico


def _active_duplicate(
    session: SessionDep, user_id: uuid.UUID, nome: str, exclude_id: uuid.UUID | None = None
) -> UserTopico | None:
    statement = select(UserTopico).where(
        UserTopico.user_id == user_id,
        UserTopico.ativo == True,  # noqa: E712
        UserTopico.nome == nome,
    )
    if exclude_id:
        statement = statement.where(UserTopico.id != exclude_id)
    return session.exec(statement).first()


@router.get("/", response_model=TopicosPublic)
def list_topicos(
    session: SessionDep,
    current_user: CurrentUser,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str | None = None,
) -> Any:
    statement = select(UserTopico).where(
        UserTopico.user_id == current_user.id,
        UserTopico.ativo == True,  # noqa: E712
    )
    if search and search.strip():
        statement = statement.where(crud.search_filter(search, UserTopico.nome, UserTopico.descricao))
    statement = statement.order_by(col(UserTopico.created_at).desc())

    topicos, pagination = crud.paginate(session=session, statement=statement, page=page, limit=limit)
    return TopicosPublic(
        topicos=[TopicoPublic.model_validate(topico) for topico in topicos],
        pagination=pagination,
    )


@router.get("/{topico_id}", response_model=TopicoPublic)
def read_topico(session: SessionDep, current_user: CurrentUser, topico_id: uuid.UUID) -> Any:
    return _get_user_topico(session, current_user.id, topico_id)


@router.post("/", response_model=TopicoPublic, status_code=status.HTTP_201_CREATED)
def create_topico(session: SessionDep, current_user: CurrentUser, topico_in: TopicoCreate) -> Any:
    nome = _clean_nome(topico_in.nome)
    if _active_duplicate(session, current_user.id, nome):
        raise HTTPException(status_code=400, detail="Você já possui um tópico com este nome")
    topico = UserTopico(nome=nome, descricao=topico_in.descricao, user_id=current_user.id)
    session.add(topico)
    session.commit()
    session.refresh(topico)
    return topico


@router.put("/{topico_id}", response_model=TopicoPublic)
def update_topico(
    session: SessionDep, current_user: CurrentUser, topico_id: uuid.UUID, topico_in: TopicoUpdate
) -> Any:
    topico = _get_user_topico(session, current_user.id, topico_id)
    update_data = topico_in.model_dump(exclude_unset=True, exclude_none=True)
    update_data.pop("ativo", None)
    if "nome" in update_data:
        update_data["nome"] = _clean_nome(update_data["nome"])
        if _active_duplicate(session, current_user.id, update_data["nome"], exclude_id=topico_id):
            raise HTTPException(status_code=400, detail="Você já possui um tópico com este nome")
    topico.sqlmodel_update(update_data)
    session.add(topico)
    session.commit()
    session.refresh(topico)
    return topico


@router.delete("/{topico_id}", response_model=Message)
def delete_topico(session: SessionDep, current_user: CurrentUser, topico_id: uuid.UUID) -> Any:
    topico = _get_user_topico(session, current_user.id, topico_id)
    topico.ativo = False
    session.add(topico)
    session.commit()
    return Message(message="Tópico removido com sucesso")
