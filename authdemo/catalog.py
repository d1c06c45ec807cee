"""Tool, feature and demo template catalogs"""
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field


class ToolDef(BaseModel):
    """A simulated tool the agent may call"""

    id: str
    name: str
    description: str
    scopes: List[str] = Field(default_factory=list)
    requires_approval: bool = False
    mock_delay: int = 1000  # milliseconds, cosmetic only
    industry: str = "custom"


class FeatureDef(BaseModel):
    """An identity-platform feature highlighted by a demo"""

    id: str
    name: str
    description: str
    icon: str = "Shield"


class DemoTemplate(BaseModel):
    """Industry tool set plus the narrative fed to the agent"""

    id: str
    name: str
    description: str = ""
    icon: str = "Wrench"
    color: str = "hsl(45 90% 55%)"
    tools: List[ToolDef] = Field(default_factory=list)
    features: List[FeatureDef] = Field(default_factory=list)
    system_prompt_parts: List[str] = Field(default_factory=list)
    knowledge_pack: str = ""

    model_config = {"frozen": True}


def _tool(id, name, description, scopes, requires_approval, industry, mock_delay):
    return ToolDef(
        id=id,
        name=name,
        description=description,
        scopes=scopes,
        requires_approval=requires_approval,
        industry=industry,
        mock_delay=mock_delay,
    )


TOOL_LIBRARY: List[ToolDef] = [
    # Travel
    _tool("search_flights", "Search Flights", "Search available flights by route and date", ["flights:read"], False, "travel", 1500),
    _tool("book_flight", "Book Flight", "Book a flight on behalf of user", ["flights:write", "payments:charge"], True, "travel", 2000),
    _tool("search_hotels", "Search Hotels", "Search available hotels by location and dates", ["hotels:read"], False, "travel", 1200),
    _tool("book_hotel", "Book Hotel", "Book a hotel on behalf of user", ["hotels:write", "payments:charge"], True, "travel", 2000),
    _tool("get_itinerary", "Get Itinerary", "Retrieve user's travel itinerary", ["itinerary:read"], False, "travel", 800),
    _tool("manage_loyalty", "Manage Loyalty Points", "View and redeem travel loyalty points", ["loyalty:read", "loyalty:redeem"], True, "travel", 1000),
    # Healthcare
    _tool("access_patient_records", "Access Patient Records", "View patient medical records (HIPAA-scoped)", ["records:read", "hipaa:compliant"], False, "healthcare", 1000),
    _tool("order_prescription", "Order Prescription", "Submit a prescription order for pharmacist review", ["rx:write", "clinical:approve"], True, "healthcare", 2000),
    _tool("schedule_appointment", "Schedule Appointment", "Book a patient appointment with a provider", ["calendar:write"], True, "healthcare", 1500),
    _tool("check_insurance", "Check Insurance Coverage", "Verify insurance eligibility and benefits", ["insurance:read"], False, "healthcare", 1200),
    _tool("request_lab_results", "Request Lab Results", "Retrieve lab test results for a patient", ["labs:read"], False, "healthcare", 800),
    _tool("send_clinical_note", "Send Clinical Note", "Submit a clinical note for physician sign-off", ["notes:write", "clinical:approve"], True, "healthcare", 1500),
    # Fintech
    _tool("check_balance", "Check Balance", "View account balance and available funds", ["accounts:read"], False, "fintech", 500),
    _tool("transfer_funds", "Transfer Funds", "Transfer money between accounts", ["accounts:write", "payments:transfer"], True, "fintech", 2500),
    _tool("view_transactions", "View Transactions", "List recent transactions with filters", ["transactions:read"], False, "fintech", 800),
    _tool("approve_wire", "Approve Wire Transfer", "Approve a high-value wire transfer", ["wire:approve", "compliance:check"], True, "fintech", 3000),
    _tool("view_portfolio", "View Portfolio", "View investment portfolio and positions", ["portfolio:read"], False, "fintech", 1000),
    _tool("execute_trade", "Execute Trade", "Place a buy or sell order for securities", ["trading:execute", "compliance:check"], True, "fintech", 2000),
    _tool("generate_report", "Generate Report", "Generate a financial summary or compliance report", ["reports:write"], False, "fintech", 2000),
    # HR
    _tool("search_employees", "Search Employees", "Search the employee directory by name or department", ["employees:read"], False, "hr", 800),
    _tool("approve_timeoff", "Approve Time Off", "Review and approve an employee time-off request", ["timeoff:approve"], True, "hr", 1500),
    _tool("update_benefits", "Update Benefits", "Modify an employee's benefits enrollment", ["benefits:write"], True, "hr", 1200),
    _tool("generate_offer_letter", "Generate Offer Letter", "Create a formal employment offer letter", ["offers:write", "hr:admin"], True, "hr", 2000),
    _tool("run_payroll_check", "Run Payroll Check", "Validate payroll calculations before processing", ["payroll:read", "compliance:check"], True, "hr", 2500),
    _tool("check_compliance", "Check HR Compliance", "Verify HR compliance status and deadlines", ["compliance:read"], False, "hr", 1000),
    # Legal
    _tool("search_contracts", "Search Contracts", "Search the contract database by party, date, or type", ["contracts:read"], False, "legal", 1000),
    _tool("generate_agreement", "Generate Agreement", "Draft a legal agreement from templates", ["contracts:write"], False, "legal", 2500),
    _tool("request_esign", "Request E-Signature", "Send a document for counter-party e-signature", ["esign:send"], True, "legal", 2000),
    _tool("audit_trail", "View Audit Trail", "Access the compliance and action audit log", ["audit:read"], False, "legal", 800),
    _tool("file_document", "File Document", "File a legal document with a court or registry", ["filing:write", "legal:admin"], True, "legal", 3000),
    # DevOps
    _tool("list_repos", "List Repositories", "List code repositories the user has access to", ["repos:read"], False, "devops", 800),
    _tool("trigger_deploy", "Trigger Deployment", "Trigger a CI/CD pipeline deployment", ["deploy:execute"], True, "devops", 2000),
    _tool("check_monitoring", "Check System Health", "View infrastructure health metrics and alerts", ["monitoring:read"], False, "devops", 600),
    _tool("create_incident", "Create Incident", "Open a P1/P2 incident and notify on-call team", ["incidents:write"], True, "devops", 1000),
    _tool("rollback_deploy", "Rollback Deployment", "Roll back to a previous stable deployment", ["deploy:rollback"], True, "devops", 2500),
    # Retail
    _tool("search_inventory", "Search Inventory", "Search product catalog and stock availability", ["inventory:read"], False, "retail", 800),
    _tool("process_order", "Process Order", "Process a customer purchase order with payment", ["orders:write", "payments:charge"], True, "retail", 2000),
    _tool("handle_return", "Handle Return", "Process a product return and issue a refund", ["returns:write", "refunds:process"], True, "retail", 1500),
    _tool("update_pricing", "Update Pricing", "Modify product pricing across the catalog", ["pricing:write"], True, "retail", 1000),
    _tool("view_order_history", "View Order History", "View a customer's purchase history", ["orders:read"], False, "retail", 800),
    # Insurance
    _tool("get_policy", "Get Policy Details", "Retrieve an insurance policy and coverage details", ["policies:read"], False, "insurance", 1000),
    _tool("file_claim", "File Claim", "Submit a new insurance claim with documentation", ["claims:write"], True, "insurance", 2000),
    _tool("check_claim_status", "Check Claim Status", "Query the current status of an open claim", ["claims:read"], False, "insurance", 800),
    _tool("update_coverage", "Update Coverage", "Modify an insurance policy's coverage terms", ["policies:write", "underwriting:approve"], True, "insurance", 2500),
    # Real estate
    _tool("search_listings", "Search Listings", "Search property listings by location, price, and criteria", ["listings:read"], False, "realestate", 1200),
    _tool("schedule_showing", "Schedule Showing", "Book a property viewing appointment", ["calendar:write", "listings:read"], True, "realestate", 1500),
    _tool("submit_offer", "Submit Offer", "Submit a purchase offer on a property", ["offers:write", "legal:sign"], True, "realestate", 3000),
    # Communication / productivity
    _tool("read_calendar", "Read Calendar", "Read the user's calendar events and availability", ["calendar:read"], False, "communication", 1000),
    _tool("schedule_meeting", "Schedule Meeting", "Create a calendar event with attendees", ["calendar:write"], True, "communication", 1500),
    _tool("draft_email", "Draft Email", "Compose an email draft for user review before sending", ["email:draft"], False, "communication", 1200),
    _tool("send_email", "Send Email", "Send an email on the user's behalf", ["email:send"], True, "communication", 1800),
    _tool("search_contacts", "Search Contacts", "Search the user's contact directory", ["contacts:read"], False, "communication", 800),
    # Generic
    _tool("read_data", "Read Data", "Read records from a data source", ["data:read"], False, "custom", 800),
    _tool("write_data", "Write Data", "Write or update records in a data source", ["data:write"], True, "custom", 1200),
    _tool("execute_action", "Execute Action", "Execute a sensitive business action", ["actions:execute"], True, "custom", 1500),
    _tool("query_api", "Query API", "Query an external third-party API", ["api:read"], False, "custom", 1000),
]

FEATURE_LIBRARY: List[FeatureDef] = [
    FeatureDef(id="token-vault", name="Token Vault", description="Securely delegates access to provider APIs without exposing user credentials to the AI.", icon="Shield"),
    FeatureDef(id="async-auth", name="Async Authorization", description="Human-in-the-loop approval for sensitive actions before the agent proceeds.", icon="UserCheck"),
    FeatureDef(id="fga", name="Fine-Grained Authorization", description="Granular, relationship-based permissions that determine exactly what the agent can access.", icon="Key"),
    FeatureDef(id="consent", name="Explicit Consent", description="User must explicitly approve before the agent takes any action on their behalf.", icon="UserCheck"),
    FeatureDef(id="delegation", name="Delegated Access", description="Agent acts on behalf of the user with scoped, time-limited OAuth tokens.", icon="ArrowRightLeft"),
    FeatureDef(id="scoped-access", name="Scoped Tool Access", description="Token scopes enforce which tools the agent can invoke. No scope, no access.", icon="Lock"),
    FeatureDef(id="audit", name="Audit Trail", description="Every agent action is logged with full identity context for compliance and forensics.", icon="FileText"),
    FeatureDef(id="identity-context", name="Identity Context", description="The agent uses the user's identity claims to personalize responses without exposing raw PII.", icon="User"),
    FeatureDef(id="token-exchange", name="Token Exchange", description="RFC 8693 token exchange enables the agent to obtain narrowly-scoped downstream tokens.", icon="ArrowRightLeft"),
    FeatureDef(id="step-up-auth", name="Step-Up Authentication", description="High-risk operations require re-authentication or MFA before proceeding.", icon="Shield"),
]

INDUSTRY_GROUPS: Dict[str, str] = {
    "travel": "Travel",
    "healthcare": "Healthcare",
    "fintech": "Fintech",
    "hr": "HR",
    "legal": "Legal",
    "devops": "DevOps",
    "retail": "Retail",
    "insurance": "Insurance",
    "realestate": "Real Estate",
    "communication": "Communication",
    "custom": "Generic",
}


class ToolCatalog:
    """Read-only lookup over a set of tool definitions.

    The global library and every template's tool list are both catalogs.
    Composition (industry subsets, allow-lists) returns a new catalog and never
    mutates the source.
    """

    def __init__(self, tools: Iterable[ToolDef]):
        self._tools: Dict[str, ToolDef] = {}
        for tool in tools:
            self._tools[tool.id] = tool

    def lookup(self, tool_id: str) -> Optional[ToolDef]:
        return self._tools.get(tool_id)

    def __contains__(self, tool_id: str) -> bool:
        return tool_id in self._tools

    def __iter__(self):
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def tools(self) -> List[ToolDef]:
        return list(self._tools.values())

    def by_industry(self, industry: str) -> "ToolCatalog":
        return ToolCatalog(t for t in self._tools.values() if t.industry == industry)

    def only(self, tool_ids: Iterable[str]) -> "ToolCatalog":
        """Allow-list in the order given; unknown ids are skipped"""
        return ToolCatalog(self._tools[i] for i in tool_ids if i in self._tools)


GLOBAL_CATALOG = ToolCatalog(TOOL_LIBRARY)


def _feature(feature_id: str, description: Optional[str] = None) -> FeatureDef:
    base = next(f for f in FEATURE_LIBRARY if f.id == feature_id)
    if description is None:
        return base
    return base.model_copy(update={"description": description})


DEMO_TEMPLATES: List[DemoTemplate] = [
    DemoTemplate(
        id="travel-agent",
        name="AI Travel Agent",
        description="Books flights & hotels, shows delegated access and approval gates for purchases.",
        icon="Plane",
        color="hsl(18 95% 54%)",
        tools=[
            _tool("search_flights", "Search Flights", "Search available flights", ["flights:read"], False, "travel", 1500),
            _tool("book_flight", "Book Flight", "Book a flight on behalf of user", ["flights:write", "payments:charge"], True, "travel", 2000),
            _tool("search_hotels", "Search Hotels", "Search available hotels", ["hotels:read"], False, "travel", 1200),
            _tool("book_hotel", "Book Hotel", "Book a hotel on behalf of user", ["hotels:write", "payments:charge"], True, "travel", 2000),
            _tool("get_itinerary", "Get Itinerary", "Retrieve user's travel itinerary", ["itinerary:read"], False, "travel", 800),
        ],
        features=[
            _feature("token-vault", "Securely delegates access to travel provider APIs without exposing user credentials to the AI."),
            _feature("async-auth", "Human-in-the-loop approval for booking actions that incur charges."),
            _feature("fga", "Scoped permissions control which travel actions the agent can perform."),
        ],
        system_prompt_parts=[
            "You are an AI Travel Agent. Help users plan and book travel.",
            "Always search before booking. Present options clearly with prices.",
            "Booking actions require user approval. Explain why before requesting.",
        ],
        knowledge_pack=(
            "This demo uses Auth0 Token Vault to securely delegate access to travel provider APIs (airlines, hotels). "
            "The AI agent never sees the user's payment credentials. When the agent wants to book, it triggers an "
            "Async Authorization flow and the user must explicitly approve the purchase. Fine-Grained Authorization "
            "(FGA) controls which actions the agent can perform based on scoped permissions in the user's token."
        ),
    ),
    DemoTemplate(
        id="exec-assistant",
        name="AI Executive Assistant",
        description="Sends emails, schedules meetings. Shows consent and Token Vault delegation.",
        icon="Briefcase",
        color="hsl(174 62% 47%)",
        tools=[
            _tool("read_calendar", "Read Calendar", "Read user's calendar events", ["calendar:read"], False, "communication", 1000),
            _tool("schedule_meeting", "Schedule Meeting", "Create a calendar event", ["calendar:write"], True, "communication", 1500),
            _tool("draft_email", "Draft Email", "Draft an email for review", ["email:draft"], False, "communication", 1200),
            _tool("send_email", "Send Email", "Send an email on user's behalf", ["email:send"], True, "communication", 1800),
            _tool("search_contacts", "Search Contacts", "Search user's contacts", ["contacts:read"], False, "communication", 800),
        ],
        features=[
            _feature("token-vault", "Delegates access to email and calendar providers without exposing OAuth tokens."),
            _feature("consent", "User must approve before the agent sends emails or creates events."),
            _feature("delegation", "The agent acts on behalf of the user with scoped, time-limited tokens."),
        ],
        system_prompt_parts=[
            "You are an AI Executive Assistant. Help users manage their schedule and communications.",
            "Draft emails before sending. Always confirm meeting details before scheduling.",
            "Sending emails and creating events require explicit user consent.",
        ],
        knowledge_pack=(
            "This demo shows how Auth0 enables an AI assistant to act on behalf of a user with delegated access. "
            "Token Vault securely stores and exchanges OAuth tokens for email and calendar providers. The agent never "
            "directly accesses the user's credentials. Every action that modifies data (sending email, creating "
            "events) requires explicit consent through Auth0's Async Authorization pattern."
        ),
    ),
    DemoTemplate(
        id="personal-shopper",
        name="AI Personal Shopper",
        description="Browses catalogs, places orders. Shows fine-grained authorization.",
        icon="ShoppingBag",
        color="hsl(262 60% 55%)",
        tools=[
            _tool("search_products", "Search Products", "Search product catalog", ["catalog:read"], False, "retail", 1000),
            _tool("get_recommendations", "Get Recommendations", "Get personalized recommendations", ["catalog:read", "profile:read"], False, "retail", 1500),
            _tool("add_to_cart", "Add to Cart", "Add item to shopping cart", ["cart:write"], False, "retail", 500),
            _tool("place_order", "Place Order", "Place an order and charge payment", ["orders:write", "payments:charge"], True, "retail", 2500),
            _tool("track_order", "Track Order", "Track existing order status", ["orders:read"], False, "retail", 800),
        ],
        features=[
            _feature("fga", "Granular permissions control what the shopper agent can access and do."),
            _feature("async-auth", "Purchase approval gates prevent unauthorized spending."),
            _feature("identity-context", "Agent uses identity data to personalize recommendations without accessing raw PII."),
        ],
        system_prompt_parts=[
            "You are an AI Personal Shopper. Help users discover products and make purchases.",
            "Provide personalized recommendations based on preferences.",
            "Adding to cart is allowed, but placing orders requires user approval.",
        ],
        knowledge_pack=(
            "This demo showcases Auth0's Fine-Grained Authorization (FGA) for AI agents. The shopper agent has "
            "granular permissions: it can browse and recommend freely, but purchasing requires explicit approval. "
            "Identity context from Auth0 enables personalization without exposing raw PII to the agent. The FGA "
            "model ensures the agent can only perform actions within its authorized scope."
        ),
    ),
    DemoTemplate(
        id="dev-copilot",
        name="AI Developer Copilot",
        description="Manages commits, deploys, documentation. Shows scoped tool access.",
        icon="Code",
        color="hsl(142 60% 45%)",
        tools=[
            _tool("list_repos", "List Repositories", "List user's repositories", ["repos:read"], False, "devops", 800),
            _tool("create_commit", "Create Commit", "Create a commit in a repository", ["repos:write"], True, "devops", 1500),
            _tool("trigger_deploy", "Trigger Deploy", "Trigger a deployment pipeline", ["deploy:execute"], True, "devops", 2000),
            _tool("generate_docs", "Generate Docs", "Generate documentation from code", ["docs:write"], False, "devops", 2500),
            _tool("review_pr", "Review PR", "Review a pull request", ["repos:read", "reviews:write"], False, "devops", 1800),
        ],
        features=[
            _feature("scoped-access", "Token scopes determine which dev tools the agent can use."),
            _feature("token-vault", "Secure delegation to GitHub/GitLab without exposing personal access tokens."),
            _feature("audit", "Every agent action is logged with identity context for compliance."),
        ],
        system_prompt_parts=[
            "You are an AI Developer Copilot. Help developers with commits, deployments, and documentation.",
            "Review code before committing. Explain deployment implications.",
            "Creating commits and triggering deploys require explicit approval.",
        ],
        knowledge_pack=(
            "This demo shows how Auth0 secures AI agents in developer workflows. Token scopes define exactly which "
            "tools the copilot can use: read-only access to repos, but write access requires approval. Token Vault "
            "delegates access to source control providers (GitHub, GitLab) without exposing personal access tokens. "
            "Every action is logged with full identity context for audit compliance."
        ),
    ),
    DemoTemplate(
        id="generic-agent",
        name="Generic Tool Agent",
        description="Configurable tools. Shows raw auth patterns and authorization mechanics.",
        icon="Wrench",
        color="hsl(45 90% 55%)",
        tools=[
            _tool("tool_a", "Read Data", "Read from a data source", ["data:read"], False, "custom", 800),
            _tool("tool_b", "Write Data", "Write to a data source", ["data:write"], True, "custom", 1200),
            _tool("tool_c", "Execute Action", "Execute a custom action", ["actions:execute"], True, "custom", 1500),
            _tool("tool_d", "Query API", "Query an external API", ["api:read"], False, "custom", 1000),
        ],
        features=[
            _feature("token-exchange", "MCP-style token exchange between agent and tools."),
            _feature("fga", "Granular permission checks on every tool call."),
            _feature("async-auth", "Human-in-the-loop for protected actions."),
        ],
        system_prompt_parts=[
            "You are a configurable AI agent demonstrating Auth0 authorization patterns.",
            "Show how identity controls AI behavior at every level.",
            "Protected actions require approval. Explain what Auth0 does at each step.",
        ],
        knowledge_pack=(
            "This is a generic demo showing raw Auth0 authorization mechanics for AI agents. It demonstrates "
            "MCP-style token exchange, Fine-Grained Authorization checks on every tool call, and Async Authorization "
            "for human-in-the-loop approval. Use this template to understand the foundational patterns that all "
            "other demos build upon."
        ),
    ),
]


def get_template_by_id(template_id: str) -> Optional[DemoTemplate]:
    """Return a built-in template or None"""
    return next((t for t in DEMO_TEMPLATES if t.id == template_id), None)


def _to_base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def generate_env_id(auth0_sub: str, template_id: str) -> str:
    """Derive a short, stable environment id for a user/template pair.

    Signed 32-bit rolling hash over UTF-16 code units, rendered in base 36, so
    ids match the ones the web client already persisted.
    """
    data = f"{auth0_sub}:{template_id}".encode("utf-16-le")
    value = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        value = (value << 5) - value + unit
        value = ((value + 2**31) % 2**32) - 2**31
    return _to_base36(abs(value))


def apply_builder_overlay(
    base: DemoTemplate,
    enabled_tools: Optional[Iterable[str]] = None,
    enabled_features: Optional[Iterable[str]] = None,
    extra_tools: Optional[Iterable[str]] = None,
    custom_prompt: str = "",
    custom_knowledge: str = "",
) -> DemoTemplate:
    """Derive a new template from ``base`` without touching it.

    Args:
        base:             Template to start from.
        enabled_tools:    Allow-list of the base template's tool ids (None keeps all).
        enabled_features: Allow-list of the base template's feature ids (None keeps all).
        extra_tools:      Global-library tool ids appended after the kept tools.
        custom_prompt:    Extra system prompt part.
        custom_knowledge: Text appended to the knowledge pack.
    """
    tools = list(base.tools)
    if enabled_tools is not None:
        allowed = set(enabled_tools)
        tools = [t for t in tools if t.id in allowed]
    if extra_tools:
        present = {t.id for t in tools}
        for tool_id in extra_tools:
            tool = GLOBAL_CATALOG.lookup(tool_id)
            if tool and tool_id not in present:
                tools.append(tool)
                present.add(tool_id)

    features = list(base.features)
    if enabled_features is not None:
        allowed = set(enabled_features)
        features = [f for f in features if f.id in allowed]

    prompt_parts = list(base.system_prompt_parts)
    if custom_prompt.strip():
        prompt_parts.append(custom_prompt.strip())

    knowledge = base.knowledge_pack
    if custom_knowledge.strip():
        knowledge = f"{knowledge}\n\n{custom_knowledge.strip()}" if knowledge else custom_knowledge.strip()

    return base.model_copy(
        update={
            "tools": tools,
            "features": features,
            "system_prompt_parts": prompt_parts,
            "knowledge_pack": knowledge,
        }
    )


def resolve_template(
    template_id: str,
    config_overrides: Optional[Dict[str, Any]] = None,
    stored: Optional[Dict[str, Any]] = None,
) -> Optional[DemoTemplate]:
    """Resolve the template a session runs with.

    ``stored`` is a DemoTemplate-shaped config for templates kept in the content
    store; it wins over the built-in catalog. ``config_overrides`` is either a
    full DemoTemplate-shaped object (has ``tools``) or builder overlay keys.
    """
    if stored:
        base: Optional[DemoTemplate] = DemoTemplate.model_validate({"id": template_id, **stored})
    else:
        base = get_template_by_id(template_id)

    overrides = config_overrides or {}
    if "tools" in overrides:
        merged = base.model_dump() if base else {"id": template_id, "name": template_id}
        merged.update(overrides)
        merged.setdefault("id", template_id)
        return DemoTemplate.model_validate(merged)

    if base is None:
        return None
    if not overrides:
        return base
    return apply_builder_overlay(
        base,
        enabled_tools=overrides.get("enabled_tools"),
        enabled_features=overrides.get("enabled_features"),
        extra_tools=overrides.get("extra_tools"),
        custom_prompt=overrides.get("custom_prompt", ""),
        custom_knowledge=overrides.get("custom_knowledge", ""),
    )
