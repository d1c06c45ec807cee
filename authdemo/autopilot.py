"""Scripted walkthroughs that drive the orchestrator like a typing user"""
from typing import Dict, List, Optional

from pydantic import BaseModel

from authdemo.orchestrator import Orchestrator


class AutopilotStep(BaseModel):
    id: str
    label: str
    user_message: str
    explanation: str
    highlight_feature: Optional[str] = None


class AutopilotScript(BaseModel):
    template_id: str
    title: str
    description: str
    steps: List[AutopilotStep]


def _step(n, label, user_message, explanation, highlight_feature):
    return AutopilotStep(
        id=f"step-{n}",
        label=label,
        user_message=user_message,
        explanation=explanation,
        highlight_feature=highlight_feature,
    )


AUTOPILOT_SCRIPTS: Dict[str, AutopilotScript] = {
    "travel-agent": AutopilotScript(
        template_id="travel-agent",
        title="AI Travel Agent Walkthrough",
        description="See how Auth0 secures an AI travel agent with delegated access, approval gates, and scoped permissions.",
        steps=[
            _step(1, "Search Flights", "Search for flights from New York to San Francisco next week",
                  "The agent calls the Search Flights tool automatically. Fine-Grained Authorization checks the token "
                  "for `flights:read` scope. No approval needed for read operations.",
                  "Fine-Grained Authorization"),
            _step(2, "Search Hotels", "Also search for hotels in San Francisco for 3 nights",
                  "Another read-only tool call using `hotels:read`. Token Vault delegates access to the hotel "
                  "provider API without exposing user credentials.",
                  "Token Vault"),
            _step(3, "Book a Flight", "Book the cheapest flight option",
                  "This triggers an Approval Gate. `book_flight` requires `flights:write` and `payments:charge`, so "
                  "Async Authorization pauses the agent and asks for explicit human consent before charging.",
                  "Async Authorization"),
            _step(4, "Book a Hotel", "Now book the Marriott hotel",
                  "Another approval gate for a write operation. The agent explains what it wants to do before "
                  "requesting approval: the human-in-the-loop pattern.",
                  "Async Authorization"),
            _step(5, "View Itinerary", "Show me my complete travel itinerary",
                  "The agent retrieves the itinerary using `itinerary:read`. Every action so far is on the audit "
                  "trail with full identity context: who approved what, and when.",
                  "Fine-Grained Authorization"),
        ],
    ),
    "exec-assistant": AutopilotScript(
        template_id="exec-assistant",
        title="AI Executive Assistant Walkthrough",
        description="See how Auth0 enables delegated access for an AI that manages your calendar and email.",
        steps=[
            _step(1, "Check Calendar", "What's on my calendar today?",
                  "The agent reads your calendar using `calendar:read`. Token Vault exchanges tokens with the "
                  "calendar provider; the AI never sees your OAuth credentials.",
                  "Token Vault"),
            _step(2, "Find Contacts", "Find Jane Smith's contact info",
                  "The agent searches contacts with `contacts:read`, a read-only operation authorized by the "
                  "token's permission set.",
                  "Fine-Grained Authorization"),
            _step(3, "Draft Email", "Draft an email to Jane about the product review meeting",
                  "Drafting uses `email:draft` and sends nothing. The split between draft and send scopes is what "
                  "least-privilege access looks like.",
                  "Delegated Access"),
            _step(4, "Send Email", "Send that email to Jane",
                  "Sending requires explicit consent. The `email:send` scope triggers the approval flow while Token "
                  "Vault handles the delegation.",
                  "Explicit Consent"),
            _step(5, "Schedule Meeting", "Schedule a 30-minute product review meeting with Jane tomorrow at 2 PM",
                  "Creating events requires `calendar:write` and another approval gate. The agent can read freely "
                  "but never modifies your schedule without consent.",
                  "Async Authorization"),
        ],
    ),
    "personal-shopper": AutopilotScript(
        template_id="personal-shopper",
        title="AI Personal Shopper Walkthrough",
        description="See how Fine-Grained Authorization controls what an AI shopping agent can access and purchase.",
        steps=[
            _step(1, "Browse Products", "Show me wireless headphones",
                  "The agent searches the catalog with `catalog:read`. Browsing is read-only and stays inside the "
                  "agent's permission boundary.",
                  "Fine-Grained Authorization"),
            _step(2, "Get Recommendations", "What would you recommend based on my preferences?",
                  "`catalog:read` plus `profile:read` personalize the results. Identity Context supplies "
                  "preferences without exposing raw PII.",
                  "Identity Context"),
            _step(3, "Add to Cart", "Add the Premium Wireless Headphones to my cart",
                  "Adding to cart uses `cart:write`, a low-risk write with no payment, so no approval is needed.",
                  "Fine-Grained Authorization"),
            _step(4, "Place Order", "Place the order",
                  "Purchasing requires `orders:write` and `payments:charge`, which triggers the approval gate. The "
                  "agent cannot spend your money without consent.",
                  "Async Authorization"),
            _step(5, "Track Order", "Track my recent order",
                  "Order tracking uses `orders:read`. The whole transaction is logged with identity context.",
                  "Fine-Grained Authorization"),
        ],
    ),
    "dev-copilot": AutopilotScript(
        template_id="dev-copilot",
        title="AI Developer Copilot Walkthrough",
        description="See how scoped tool access and Token Vault secure an AI that manages code and deployments.",
        steps=[
            _step(1, "List Repositories", "Show me my repositories",
                  "The agent lists repos using `repos:read`. Token Vault delegates access to GitHub/GitLab without "
                  "exposing your personal access token.",
                  "Token Vault"),
            _step(2, "Review PR", "Review pull request #42",
                  "PR review uses `repos:read` and `reviews:write`; lower risk than code changes, so the scoped "
                  "token authorizes it directly.",
                  "Scoped Tool Access"),
            _step(3, "Generate Docs", "Generate documentation for the auth0-ai-demo repo",
                  "Doc generation uses `docs:write`. It creates documentation without touching source or deploys.",
                  "Scoped Tool Access"),
            _step(4, "Create Commit", "Create a commit with the documentation changes",
                  "Code changes need approval: `repos:write` triggers the gate, and every AI commit is logged with "
                  "identity context.",
                  "Audit Trail"),
            _step(5, "Deploy", "Deploy to staging",
                  "Deployments require `deploy:execute` and explicit approval. No agent deploys without a human.",
                  "Async Authorization"),
        ],
    ),
    "generic-agent": AutopilotScript(
        template_id="generic-agent",
        title="Generic Agent Auth Patterns",
        description="Explore the raw authorization mechanics that power all Auth0 AI agent integrations.",
        steps=[
            _step(1, "Read Data", "Read data from the data store",
                  "`data:read` is checked against the token; if present the tool runs automatically.",
                  "Fine-Grained Authorization"),
            _step(2, "Query API", "Query the external API for status",
                  "External calls use `api:read`. Token exchange hands the API a narrowly scoped, short-lived token "
                  "instead of the user's credentials.",
                  "Token Exchange"),
            _step(3, "Write Data", "Write a new record to the data store",
                  "`data:write` triggers the human-in-the-loop flow: the agent pauses for explicit consent.",
                  "Async Authorization"),
            _step(4, "Execute Action", "Execute the custom action",
                  "`actions:execute` is the most privileged scope; it needs both a permission check and approval.",
                  "Async Authorization"),
        ],
    ),
}


def get_script(template_id: str) -> Optional[AutopilotScript]:
    return AUTOPILOT_SCRIPTS.get(template_id)


class AutopilotDriver:
    """Steps through a script by calling ``Orchestrator.send_user_message``.

    The driver never touches orchestrator state directly. ``step_index`` is the
    number of steps already sent; the script is complete when it equals the
    number of steps.
    """

    def __init__(self, orchestrator: Orchestrator, script: AutopilotScript):
        self.orchestrator = orchestrator
        self.script = script
        self.active = False
        self.step_index = 0
        self.waiting = False

    @property
    def is_complete(self) -> bool:
        return self.step_index >= len(self.script.steps)

    @property
    def current_step(self) -> Optional[AutopilotStep]:
        """Most recently sent step (the one whose explanation is on screen)"""
        if not self.active or self.step_index == 0:
            return None
        return self.script.steps[self.step_index - 1]

    @property
    def next_step(self) -> Optional[AutopilotStep]:
        if not self.active or self.is_complete:
            return None
        return self.script.steps[self.step_index]

    def start(self) -> None:
        self.active = True
        self.step_index = 0
        self.waiting = False

    def advance(self) -> Optional[AutopilotStep]:
        """Send the next scripted message; returns the step sent, or None"""
        if not self.active or self.is_complete:
            return None
        if not self.orchestrator.is_idle:
            return None

        step = self.script.steps[self.step_index]
        self.waiting = True
        self.step_index += 1
        try:
            self.orchestrator.send_user_message(step.user_message, feature=step.highlight_feature)
        finally:
            self.waiting = False
        return step

    def stop(self) -> None:
        self.active = False
        self.step_index = 0
        self.waiting = False
