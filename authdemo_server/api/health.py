"""Health check endpoints"""
import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, text
from sqlalchemy.orm import Session

from authdemo.catalog import DEMO_TEMPLATES, TOOL_LIBRARY
from authdemo_server.config import settings
from authdemo_server.database import get_db
from authdemo_server.models.approval import ApprovalRecord
from authdemo_server.models.conversation import ConversationTurn
from authdemo_server.models.demo import DemoEnvironment, StoredTemplate

router = APIRouter(prefix="/health", tags=["health"])

STARTUP_TIME = time.time()


def _agent_runtime() -> str:
    return "anthropic" if settings.ANTHROPIC_API_KEY else "scripted"


@router.get("")
def health_check():
    """Returns 200 while the service is running"""
    return {
        "status": "healthy",
        "service": "AuthDemo",
        "version": "0.1.0",
        "agent_runtime": _agent_runtime(),
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/ready")
def readiness_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Readiness check - content store reachable and catalog loaded

    Returns 200 if ready to serve demos, 503 if not
    """
    checks = {
        "database": False,
        "database_latency_ms": None,
        "catalog_templates": len(DEMO_TEMPLATES),
        "agent_runtime": _agent_runtime(),
    }

    try:
        start = time.time()
        db.execute(text("SELECT 1"))
        checks["database"] = True
        checks["database_latency_ms"] = round((time.time() - start) * 1000, 2)
    except Exception as e:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "checks": checks, "message": f"Content store unreachable: {e}"},
        )

    return {"status": "ready", "checks": checks, "timestamp": datetime.utcnow().isoformat()}


@router.get("/live")
def liveness_check():
    return {
        "status": "alive",
        "uptime_seconds": round(time.time() - STARTUP_TIME, 2),
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/stats")
def demo_stats(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Demo usage: active environments, open approvals, saved demos and catalog size"""
    active_environments = db.query(func.count(func.distinct(ConversationTurn.env_id))).scalar() or 0
    return {
        "environments": {
            "active": active_environments,
            "saved_demos": db.query(DemoEnvironment).count(),
        },
        "approvals": {
            "pending": db.query(ApprovalRecord).filter(ApprovalRecord.status == "pending").count(),
            "decided": db.query(ApprovalRecord).filter(ApprovalRecord.status != "pending").count(),
        },
        "catalog": {
            "builtin_templates": len(DEMO_TEMPLATES),
            "stored_templates": db.query(StoredTemplate).count(),
            "tools": len(TOOL_LIBRARY),
        },
        "agent_runtime": _agent_runtime(),
        "uptime_seconds": round(time.time() - STARTUP_TIME, 2),
        "timestamp": datetime.utcnow().isoformat()
    }
