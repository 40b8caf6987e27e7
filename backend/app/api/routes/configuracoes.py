import logging
import uuid
from typing import Any

from fastapi import APIRouter, HTTPException, status
from sqlmodel import select

from app.api.deps import CurrentAdmin, CurrentUser, SessionDep
from app.core.config_manager import clear_config_cache, initialize_default_configs, set_user_config
from app.models import (
    Configuracao,
    ConfiguracaoCreate,
    ConfiguracaoPublic,
    ConfiguracaoUpdate,
    Message,
    UserConfiguracao,
    UserConfiguracaoPublic,
    UserConfiguracaoValor,
    get_datetime_utc,
)

router = APIRouter(prefix="/configuracoes", tags=["configuracoes"])
logger = logging.getLogger(__name__)


# Overrides owned by the current user

@router.get("/usuario/minhas", response_model=list[UserConfiguracaoPublic])
def read_my_configs(session: SessionDep, current_user: CurrentUser) -> Any:
    return session.exec(
        select(UserConfiguracao)
        .where(UserConfiguracao.user_id == current_user.id, UserConfiguracao.ativo == True)  # noqa: E712
        .order_by(UserConfiguracao.categoria, UserConfiguracao.chave)
    ).all()


@router.put("/usuario/minhas/{chave}", response_model=UserConfiguracaoPublic)
def upsert_my_config(
    session: SessionDep, current_user: CurrentUser, chave: str, body: UserConfiguracaoValor
) -> Any:
    if body.valor is None:
        raise HTTPException(status_code=400, detail="Valor é obrigatório")
    override = set_user_config(session, current_user, chave, body.valor)
    logger.info("User %s set override for %s", current_user.email, chave)
    return override


@router.delete("/usuario/minhas/{chave}", response_model=Message)
def delete_my_config(session: SessionDep, current_user: CurrentUser, chave: str) -> Any:
    override = session.exec(
        select(UserConfiguracao).where(
            UserConfiguracao.user_id == current_user.id, UserConfiguracao.chave == chave
        )
    ).first()
    if not override:
        raise HTTPException(status_code=404, detail="Configuração não encontrada")
    session.delete(override)
    session.commit()
    clear_config_cache()
    return Message(message="Configuração pessoal removida com sucesso")


# Global configuration (admin)

@router.get("/", response_model=list[ConfiguracaoPublic])
def read_configs(session: SessionDep, current_admin: CurrentAdmin) -> Any:
    return session.exec(
        select(Configuracao)
        .where(Configuracao.ativo == True)  # noqa: E712
        .order_by(Configuracao.categoria, Configuracao.chave)
    ).all()


@router.post("/inicializar")
def initialize_configs(session: SessionDep, current_admin: CurrentAdmin) -> Any:
    created = initialize_default_configs(session)
    clear_config_cache()
    return {"message": "Configurações padrão inicializadas com sucesso", "criadas": created}


@router.get("/{chave}", response_model=ConfiguracaoPublic)
def read_config(session: SessionDep, current_admin: CurrentAdmin, chave: str) -> Any:
    config = session.exec(select(Configuracao).where(Configuracao.chave == chave)).first()
    if not config:
        raise HTTPException(status_code=404, detail="Configuração não encontrada")
    return config


@router.post("/", response_model=ConfiguracaoPublic, status_code=status.HTTP_201_CREATED)
def create_config(session: SessionDep, current_admin: CurrentAdmin, config_in: ConfiguracaoCreate) -> Any:
    if not all(
        [config_in.chave, config_in.valor is not None, config_in.nome, config_in.descricao, config_in.categoria]
    ):
        raise HTTPException(
            status_code=400,
            detail="Campos obrigatórios: chave, valor, nome, descricao, categoria",
        )
    if session.exec(select(Configuracao).where(Configuracao.chave == config_in.chave)).first():
        raise HTTPException(status_code=400, detail="Já existe uma configuração com esta chave")
    config = Configuracao.model_validate(config_in)
    session.add(config)
    session.commit()
    session.refresh(config)
    clear_config_cache()
    logger.info("Admin %s created configuration %s", current_admin.email, config.chave)
    return config


@router.put("/{config_id}", response_model=ConfiguracaoPublic)
def update_config(
    session: SessionDep, current_admin: CurrentAdmin, config_id: uuid.UUID, config_in: ConfiguracaoUpdate
) -> Any:
    config = session.get(Configuracao, config_id)
    if not config:
        raise HTTPException(status_code=404, detail="Configuração não encontrada")
    config.sqlmodel_update(config_in.model_dump(exclude_unset=True), update={"updated_at": get_datetime_utc()})
    session.add(config)
    session.commit()
    session.refresh(config)
    clear_config_cache()
    logger.info("Admin %s updated configuration %s", current_admin.email, config.chave)
    return config


@router.delete("/{config_id}", response_model=Message)
def delete_config(session: SessionDep, current_admin: CurrentAdmin, config_id: uuid.UUID) -> Any:
    config = session.get(Configuracao, config_id)
    if not config or not config.ativo:
        raise HTTPException(status_code=404, detail="Configuração não encontrada")
    config.ativo = False
    config.updated_at = get_datetime_utc()
    session.add(config)
    session.commit()
    clear_config_cache()
    return Message(message="Configuração removida com sucesso")
