"""Generate a customer-specific demo template from a short description.

Claude picks tools and features from the global libraries when a key is
configured. Otherwise the description is matched against industry keywords
and a workflow is assembled from that industry's tools.
"""
import json
import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import anthropic
from pydantic import ValidationError

from authdemo.autopilot import AutopilotScript, AutopilotStep
from authdemo.catalog import FEATURE_LIBRARY, GLOBAL_CATALOG, INDUSTRY_GROUPS, DemoTemplate, FeatureDef, ToolDef
from authdemo_server.agent.runtime import AgentError
from authdemo_server.config import settings
from authdemo_server.utils.logger import logger

MAX_TOOLS = 6
MAX_STEPS = 5

INDUSTRY_KEYWORDS: Dict[str, List[str]] = {
    "travel": ["travel", "flight", "airline", "hotel", "trip", "booking", "vacation", "airport", "loyalty"],
    "healthcare": ["health", "patient", "clinic", "hospital", "medical", "pharmacy", "doctor", "hipaa", "care"],
    "fintech": ["bank", "finance", "fintech", "payment", "wealth", "trading", "invest", "portfolio", "wire", "account"],
    "hr": ["hr", "employee", "payroll", "benefit", "hiring", "recruit", "people", "workforce", "talent"],
    "legal": ["legal", "law", "contract", "agreement", "court", "compliance", "signature", "counsel"],
    "devops": ["devops", "deploy", "engineering", "developer", "code", "repo", "incident", "cloud", "infrastructure"],
    "retail": ["retail", "shop", "store", "ecommerce", "commerce", "order", "product", "inventory", "customer"],
    "insurance": ["insurance", "claim", "policy", "coverage", "underwriting", "insurer"],
    "realestate": ["real estate", "property", "listing", "home", "realtor", "mortgage", "apartment"],
    "communication": ["email", "calendar", "meeting", "assistant", "executive", "schedule", "inbox", "productivity"],
}

INDUSTRY_COLORS: Dict[str, str] = {
    "travel": "hsl(200 80% 50%)",
    "healthcare": "hsl(160 70% 40%)",
    "fintech": "hsl(220 70% 45%)",
    "hr": "hsl(280 60% 55%)",
    "legal": "hsl(30 60% 45%)",
    "devops": "hsl(270 70% 60%)",
    "retail": "hsl(330 80% 60%)",
    "insurance": "hsl(190 60% 40%)",
    "realestate": "hsl(15 70% 50%)",
    "communication": "hsl(160 60% 45%)",
    "custom": "hsl(45 90% 55%)",
}

_GENERATOR_SYSTEM = """You are a senior Auth0 solutions engineer building realistic, customer-specific AI agent demos.

AVAILABLE TOOLS (pick 4-6 that form one coherent workflow, never mix unrelated industries):
{tools}

AVAILABLE AUTH0 FEATURES (pick 2-4 that address this company's security needs):
{features}

Rules:
1. Every tool id and feature id must come from the lists above.
2. Rewrite each tool and feature description in the company's own context.
3. systemPromptParts read like a production system prompt naming the company and the user role.
4. autopilotSteps (3-5) start with a read-only lookup and escalate to an action that needs approval.

Return ONLY valid JSON:
{{
  "name": "...",
  "description": "...",
  "customerName": "...",
  "tools": [{{"id": "...", "description": "..."}}],
  "auth0Features": [{{"id": "...", "description": "..."}}],
  "systemPromptParts": ["..."],
  "knowledgePack": "...",
  "autopilotSteps": [{{"label": "...", "message": "...", "explanation": "...", "feature": "..."}}]
}}"""


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:60].strip("-") or "custom"


def customer_from_url(company_url: Optional[str]) -> Optional[str]:
    """Brand name guessed from the host, e.g. ``https://www.acme-air.com`` -> ``Acme Air``"""
    if not company_url:
        return None
    url = company_url if "://" in company_url else f"https://{company_url}"
    host = (urlparse(url).hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    label = host.split(".")[0] if host else ""
    if not label:
        return None
    return " ".join(part.capitalize() for part in re.split(r"[-_]+", label) if part)


def detect_industry(description: str) -> str:
    """Industry whose keywords appear most often; ``custom`` when none match"""
    text = description.lower()
    best, best_score = "custom", 0
    for industry, keywords in INDUSTRY_KEYWORDS.items():
        score = sum(1 for k in keywords if re.search(rf"\b{re.escape(k)}", text))
        if score > best_score:
            best, best_score = industry, score
    return best


def _pick_tools(industry: str) -> List[ToolDef]:
    tools = GLOBAL_CATALOG.by_industry(industry).tools()
    # keep read-only lookups first so the walkthrough escalates
    tools.sort(key=lambda t: t.requires_approval)
    return tools[:MAX_TOOLS]


def _pick_features(tools: List[ToolDef]) -> List[FeatureDef]:
    wanted = ["token-vault", "fga"]
    if any(t.requires_approval for t in tools):
        wanted.insert(1, "async-auth")
    wanted.append("audit")
    by_id = {f.id: f for f in FEATURE_LIBRARY}
    return [by_id[i] for i in wanted]


def _walkthrough(template_id: str, title: str, tools: List[ToolDef]) -> AutopilotScript:
    chosen = [t for t in tools if not t.requires_approval][:2] + [t for t in tools if t.requires_approval][:3]
    steps = []
    for n, tool in enumerate(chosen[:MAX_STEPS], start=1):
        if tool.requires_approval:
            explanation = (
                f"{tool.name} needs {', '.join(tool.scopes)}. The agent pauses for human approval "
                "before a delegated token is issued."
            )
            feature = "Async Authorization"
        else:
            explanation = f"{tool.name} runs on a read-only token scoped to {', '.join(tool.scopes)}."
            feature = "Fine-Grained Authorization"
        steps.append(AutopilotStep(
            id=f"step-{n}",
            label=tool.name,
            user_message=f"Please {tool.name.lower()} for me",
            explanation=explanation,
            highlight_feature=feature,
        ))
    return AutopilotScript(
        template_id=template_id,
        title=f"{title} Walkthrough",
        description=f"Guided tour of the {title} demo",
        steps=steps,
    )


def outline_template(description: str, customer_name: Optional[str]) -> Tuple[DemoTemplate, AutopilotScript]:
    """Deterministic template from industry keywords"""
    industry = detect_industry(description)
    tools = _pick_tools(industry)
    company = customer_name or "Your Company"
    title = f"{company} {INDUSTRY_GROUPS[industry]} Agent"
    template_id = slugify(title)
    gated = [t.name for t in tools if t.requires_approval]

    template = DemoTemplate(
        id=template_id,
        name=title,
        description=f"AI agent for {company}: {description.strip()}"[:500],
        color=INDUSTRY_COLORS[industry],
        tools=tools,
        features=_pick_features(tools),
        system_prompt_parts=[
            f"You are the {INDUSTRY_GROUPS[industry].lower()} assistant for {company}.",
            "Read-only lookups run immediately on narrowly scoped tokens.",
            f"Always ask for human approval before: {', '.join(gated)}." if gated else
            "Never act outside the scopes granted to you.",
            f"Speak like a member of the {company} team and keep answers concise.",
        ],
        knowledge_pack=(
            f"Token Vault keeps {company} credentials away from the agent, Fine-Grained Authorization limits "
            "each tool to its scopes, and every action lands in the audit trail."
        ),
    )
    return template, _walkthrough(template_id, title, tools)


def build_generator_prompt() -> str:
    tools = [
        {"id": t.id, "name": t.name, "description": t.description, "scopes": t.scopes,
         "requiresApproval": t.requires_approval, "industry": t.industry}
        for t in GLOBAL_CATALOG
    ]
    features = [{"id": f.id, "name": f.name, "description": f.description} for f in FEATURE_LIBRARY]
    return _GENERATOR_SYSTEM.format(tools=json.dumps(tools, indent=2), features=json.dumps(features, indent=2))


def _strip_fences(text: str) -> str:
    text = re.sub(r"^```(?:json)?\s*", "", text.strip(), flags=re.IGNORECASE)
    return re.sub(r"\s*```$", "", text).strip()


def template_from_config(config: Dict[str, Any], customer_name: Optional[str]) -> Tuple[DemoTemplate, AutopilotScript]:
    """Validate a model-written config against the tool and feature libraries.

    Raises:
        AgentError: If the config names no known tool or fails validation.
    """
    tools = []
    for entry in config.get("tools") or []:
        base = GLOBAL_CATALOG.lookup(entry.get("id", "")) if isinstance(entry, dict) else None
        if base is None:
            continue
        tools.append(base.model_copy(update={"description": entry.get("description") or base.description}))
    if not tools:
        raise AgentError("Incomplete config from AI. Please try again.")

    by_id = {f.id: f for f in FEATURE_LIBRARY}
    features = []
    for entry in config.get("auth0Features") or []:
        base = by_id.get(entry.get("id", "")) if isinstance(entry, dict) else None
        if base is not None:
            features.append(base.model_copy(update={"description": entry.get("description") or base.description}))

    name = config.get("name") or f"{customer_name or 'Custom'} Agent"
    template_id = slugify(name)
    try:
        template = DemoTemplate(
            id=template_id,
            name=name,
            description=config.get("description") or "",
            tools=tools,
            features=features,
            system_prompt_parts=[str(p) for p in config.get("systemPromptParts") or []],
            knowledge_pack=config.get("knowledgePack") or "",
        )
        steps = [
            AutopilotStep(
                id=f"step-{n}",
                label=s["label"],
                user_message=s["message"],
                explanation=s.get("explanation", ""),
                highlight_feature=s.get("feature"),
            )
            for n, s in enumerate(config.get("autopilotSteps") or [], start=1)
        ]
    except (AttributeError, KeyError, TypeError, ValidationError) as e:
        raise AgentError(f"AI returned an invalid config: {e}") from e

    script = AutopilotScript(
        template_id=template_id,
        title=f"{name} Walkthrough",
        description=template.description,
        steps=steps[:MAX_STEPS],
    )
    return template, script


def generate_template(
    description: str,
    company_url: Optional[str] = None,
    customer_name: Optional[str] = None,
) -> Tuple[DemoTemplate, AutopilotScript, Optional[str], str]:
    """Return ``(template, autopilot, customer_name, generated_by)``.

    Raises:
        AgentError: If the Anthropic call fails or returns an unusable config.
    """
    customer = customer_name or customer_from_url(company_url)
    if not settings.ANTHROPIC_API_KEY:
        template, script = outline_template(description, customer)
        return template, script, customer, "keywords"

    user_message = f'Create a demo for: "{description}"'
    if company_url:
        user_message += f"\nCustomer website: {company_url}"
    if customer:
        user_message += f"\nCompany: {customer}"

    try:
        client = anthropic.Anthropic(api_key=settings.ANTHROPIC_API_KEY)
        message = client.messages.create(
            model=settings.AGENT_MODEL,
            max_tokens=4000,
            system=build_generator_prompt(),
            messages=[{"role": "user", "content": user_message}],
        )
    except anthropic.APIError as e:
        logger.error(f"Anthropic API error during template generation: {e}")
        raise AgentError(f"AI service error: {e}") from e

    raw = "".join(block.text for block in message.content if block.type == "text")
    try:
        config = json.loads(_strip_fences(raw))
    except ValueError as e:
        logger.error("Template generator returned invalid JSON", extra={"action": "generate_template"})
        raise AgentError("AI returned invalid JSON. Please try again.") from e
    if not isinstance(config, dict):
        raise AgentError("AI returned invalid JSON. Please try again.")

    template, script = template_from_config(config, customer)
    return template, script, config.get("customerName") or customer, "anthropic"
