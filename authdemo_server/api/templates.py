"""Template, tool, feature and autopilot catalogs"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from authdemo.autopilot import AutopilotScript, get_script
from authdemo.catalog import DEMO_TEMPLATES, FEATURE_LIBRARY, GLOBAL_CATALOG, DemoTemplate, FeatureDef, ToolDef, get_template_by_id
from authdemo_server.agent.generator import generate_template
from authdemo_server.agent.runtime import AgentError
from authdemo_server.agent.script import generate_demo_script
from authdemo_server.api.deps import require_admin, require_client
from authdemo_server.database import get_db
from authdemo_server.models.demo import StoredTemplate
from authdemo_server.schemas.template import (
    GenerateRequest,
    GenerateResponse,
    ScriptRequest,
    ScriptResponse,
    TemplateCreate,
    TemplateSummary,
)
from authdemo_server.utils.logger import logger

router = APIRouter(tags=["templates"])


def stored_config(db: Session, template_id: str) -> Optional[dict]:
    """DemoTemplate-shaped config of a stored template, or None"""
    row = db.query(StoredTemplate).filter(StoredTemplate.template_id == template_id).first()
    return dict(row.config) if row else None


def find_template(db: Session, template_id: str) -> Optional[DemoTemplate]:
    """Stored templates win over built-in ones with the same id"""
    config = stored_config(db, template_id)
    if config is not None:
        try:
            return DemoTemplate.model_validate({**config, "id": template_id})
        except ValidationError:
            logger.error("Stored template config is invalid", extra={"template_id": template_id})
            return None
    return get_template_by_id(template_id)


def _summary(template: DemoTemplate, source: str) -> TemplateSummary:
    return TemplateSummary(
        id=template.id,
        name=template.name,
        description=template.description,
        icon=template.icon,
        color=template.color,
        tool_count=len(template.tools),
        source=source,
    )


@router.get("/templates", response_model=List[TemplateSummary])
def list_templates(db: Session = Depends(get_db)):
    """List built-in templates followed by stored ones"""
    summaries = [_summary(t, "builtin") for t in DEMO_TEMPLATES]
    builtin_ids = {t.id for t in DEMO_TEMPLATES}
    for row in db.query(StoredTemplate).order_by(StoredTemplate.created_at).all():
        template = find_template(db, row.template_id)
        if template is None:
            continue
        if row.template_id in builtin_ids:
            summaries = [s for s in summaries if s.id != row.template_id]
        summaries.append(_summary(template, "stored"))
    return summaries


@router.get("/templates/{template_id}", response_model=DemoTemplate)
def get_template(template_id: str, db: Session = Depends(get_db)):
    template = find_template(db, template_id)
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Template {template_id} not found")
    return template


@router.post("/templates", response_model=DemoTemplate, status_code=status.HTTP_201_CREATED)
def create_template(
    data: TemplateCreate,
    db: Session = Depends(get_db),
    _: str = Depends(require_admin),
):
    """
    Store an admin-authored template (Admin only)

    Returns 409 if a stored template with this id already exists.
    """
    existing = db.query(StoredTemplate).filter(StoredTemplate.template_id == data.id).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Template {data.id} already exists",
        )

    config = data.model_dump()
    db.add(StoredTemplate(template_id=data.id, name=data.name, description=data.description, config=config))
    db.commit()

    logger.info(f"Stored template: {data.id}", extra={"template_id": data.id, "action": "create_template"})
    return DemoTemplate.model_validate(config)


@router.get("/tools", response_model=List[ToolDef])
def list_tools(industry: Optional[str] = Query(None, description="Filter by industry, e.g. travel")):
    catalog = GLOBAL_CATALOG.by_industry(industry) if industry else GLOBAL_CATALOG
    return catalog.tools()


@router.get("/features", response_model=List[FeatureDef])
def list_features():
    return FEATURE_LIBRARY


@router.get("/templates/{template_id}/autopilot", response_model=AutopilotScript)
def get_autopilot_script(template_id: str):
    script = get_script(template_id)
    if script is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No autopilot script for template {template_id}",
        )
    return script


@router.post("/templates/{template_id}/script", response_model=ScriptResponse)
def create_demo_script(
    template_id: str,
    data: ScriptRequest,
    db: Session = Depends(get_db),
    _: str = Depends(require_client),
):
    """Write a presenter script for a template (Claude when configured, outline otherwise)"""
    template = find_template(db, template_id)
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Template {template_id} not found")

    try:
        text, generated_by = generate_demo_script(template, get_script(template_id), data.customer_name)
    except AgentError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    return ScriptResponse(template_id=template_id, script=text, generated_by=generated_by)


@router.post("/templates/generate", response_model=GenerateResponse)
def generate_demo_template(
    data: GenerateRequest,
    _: str = Depends(require_client),
):
    """
    Draft a customer-specific template from a company description

    Tools and features are always taken from the global libraries. The result
    is not stored; save it with ``POST /templates`` or ``POST /demos``.
    """
    try:
        template, script, customer, generated_by = generate_template(
            data.description, data.company_url, data.customer_name
        )
    except AgentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    logger.info(
        f"Generated template: {template.id}",
        extra={"template_id": template.id, "action": "generate_template"},
    )
    return GenerateResponse(template=template, autopilot=script, customer_name=customer, generated_by=generated_by)
