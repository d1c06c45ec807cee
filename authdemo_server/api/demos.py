"""Custom demos saved from the builder"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from authdemo.catalog import generate_env_id, resolve_template
from authdemo_server.api.deps import require_client
from authdemo_server.api.templates import stored_config
from authdemo_server.database import get_db
from authdemo_server.models.demo import DemoEnvironment
from authdemo_server.schemas.environment import DemoCreate, DemoDetailResponse, DemoResponse
from authdemo_server.utils.logger import logger

router = APIRouter(prefix="/demos", tags=["demos"])


def _get_demo_or_404(db: Session, env_id: str) -> DemoEnvironment:
    demo = db.query(DemoEnvironment).filter(DemoEnvironment.env_id == env_id).first()
    if not demo:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Demo {env_id} not found"
        )
    return demo


def _resolve(db: Session, template_id: str, config_overrides):
    try:
        return resolve_template(template_id, config_overrides, stored=stored_config(db, template_id))
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"config_overrides do not describe a valid template: {e.error_count()} error(s)",
        )


@router.post("", response_model=DemoResponse, status_code=status.HTTP_201_CREATED)
def create_demo(
    data: DemoCreate,
    db: Session = Depends(get_db),
    _: str = Depends(require_client),
):
    """
    Save a custom demo.

    The env_id is derived from auth0_sub and template_id unless given.
    Returns 409 if the env_id is already taken and 404 if the template cannot be resolved.
    """
    env_id = data.env_id or generate_env_id(data.auth0_sub, data.template_id)
    if db.query(DemoEnvironment).filter(DemoEnvironment.env_id == env_id).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Demo {env_id} already exists"
        )

    if _resolve(db, data.template_id, data.config_overrides) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Template {data.template_id} not found"
        )

    demo = DemoEnvironment(
        env_id=env_id,
        auth0_sub=data.auth0_sub,
        template_id=data.template_id,
        env_type=data.env_type,
        config_overrides=data.config_overrides,
    )
    db.add(demo)
    db.commit()
    db.refresh(demo)

    logger.info(f"Saved custom demo: {env_id}", extra={"env_id": env_id, "template_id": data.template_id,
                                                        "action": "create_demo"})
    return demo


@router.get("", response_model=List[DemoResponse])
def list_demos(
    auth0_sub: Optional[str] = Query(None, description="Only demos owned by this identity"),
    db: Session = Depends(get_db),
    _: str = Depends(require_client),
):
    query = db.query(DemoEnvironment)
    if auth0_sub:
        query = query.filter(DemoEnvironment.auth0_sub == auth0_sub)
    return query.order_by(DemoEnvironment.created_at.desc(), DemoEnvironment.id.desc()).all()


@router.get("/{env_id}", response_model=DemoDetailResponse)
def get_demo(
    env_id: str,
    db: Session = Depends(get_db),
    _: str = Depends(require_client),
):
    """Saved demo with the template a session should run with"""
    demo = _get_demo_or_404(db, env_id)
    template = _resolve(db, demo.template_id, demo.config_overrides)
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Template {demo.template_id} for demo {env_id} no longer exists"
        )
    return DemoDetailResponse(
        env_id=demo.env_id,
        auth0_sub=demo.auth0_sub,
        template_id=demo.template_id,
        env_type=demo.env_type,
        config_overrides=demo.config_overrides,
        created_at=demo.created_at,
        updated_at=demo.updated_at,
        template=template,
    )


@router.delete("/{env_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_demo(
    env_id: str,
    db: Session = Depends(get_db),
    _: str = Depends(require_client),
):
    demo = _get_demo_or_404(db, env_id)
    db.delete(demo)
    db.commit()

    logger.info(f"Deleted custom demo: {env_id}", extra={"env_id": env_id, "action": "delete_demo"})
