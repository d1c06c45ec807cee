"""Template catalog schemas"""
from typing import List, Optional

from pydantic import BaseModel, Field

from authdemo.autopilot import AutopilotScript
from authdemo.catalog import DemoTemplate, FeatureDef, ToolDef


class TemplateCreate(BaseModel):
    """Schema for storing an admin-authored template"""

    id: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9][a-z0-9\-]*$")
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    icon: str = "Wrench"
    color: str = "hsl(45 90% 55%)"
    tools: List[ToolDef] = Field(..., min_length=1)
    features: List[FeatureDef] = Field(default_factory=list)
    system_prompt_parts: List[str] = Field(default_factory=list)
    knowledge_pack: str = ""


class TemplateSummary(BaseModel):
    """Catalog listing entry"""

    id: str
    name: str
    description: str
    icon: str
    color: str
    tool_count: int
    source: str  # builtin | stored


class ScriptRequest(BaseModel):
    """Schema for presenter script generation"""

    customer_name: Optional[str] = Field(None, max_length=255)


class ScriptResponse(BaseModel):
    """Generated presenter script"""

    template_id: str
    script: str
    generated_by: str  # anthropic | outline


class GenerateRequest(BaseModel):
    """Schema for generating a template from a company description"""

    description: str = Field(..., min_length=3, max_length=2000)
    company_url: Optional[str] = Field(None, max_length=500)
    customer_name: Optional[str] = Field(None, max_length=255)


class GenerateResponse(BaseModel):
    """Generated template with its walkthrough"""

    template: DemoTemplate
    autopilot: AutopilotScript
    customer_name: Optional[str] = None
    generated_by: str  # anthropic | keywords
