"""Presenter demo script generation"""
from typing import Optional, Tuple

import anthropic

from authdemo.autopilot import AutopilotScript
from authdemo.catalog import DemoTemplate
from authdemo_server.agent.runtime import AgentError
from authdemo_server.config import settings
from authdemo_server.utils.logger import logger

_SCRIPT_SYSTEM = (
    "You are an expert Sales Engineer at Auth0 (by Okta), writing a detailed internal demo script for a colleague "
    "who will be presenting this AI agent demo to a prospect. Write in a professional but conversational tone "
    "suitable for a sales engineering presenter. Use markdown formatting with clear sections and headers."
)


def _tools_text(template: DemoTemplate) -> str:
    return "\n".join(
        f"- **{t.name}** (scopes: {', '.join(t.scopes)})"
        f"{' (REQUIRES APPROVAL)' if t.requires_approval else ''}: {t.description}"
        for t in template.tools
    )


def _features_text(template: DemoTemplate) -> str:
    return "\n".join(f"- **{f.name}**: {f.description}" for f in template.features)


def _steps_text(script: Optional[AutopilotScript]) -> str:
    if script is None or not script.steps:
        return "No pre-scripted steps. This is a freeform demo."
    return "\n\n".join(
        f"Step {i}: {s.label}\n  User says: \"{s.user_message}\"\n"
        f"  Auth0 feature: {s.highlight_feature or 'N/A'}\n  Technical context: {s.explanation}"
        for i, s in enumerate(script.steps, start=1)
    )


def build_script_prompt(template: DemoTemplate, script: Optional[AutopilotScript], customer_name: Optional[str]) -> str:
    customer = (
        f"This demo is tailored for: **{customer_name}**" if customer_name else "This is a general prospect demo."
    )
    return f"""Create a comprehensive, step-by-step demo script for the "{template.name}" demo.

{customer}

## Demo Overview
{template.description}

## Tools Available in This Demo
{_tools_text(template)}

## Auth0 Features Being Demonstrated
{_features_text(template)}

## Walkthrough Steps
{_steps_text(script)}

---

Please write a complete demo script that includes:

1. **Opening Hook** (30 seconds): why AI agents need identity security, relevant to the customer's pain points.
2. **Context Setting** (1 minute): what we're about to see and why Auth0 is the identity layer for agentic AI.
3. **Step-by-Step Walkthrough**: for each step, the talking points, what Auth0 does behind the scenes, the business value, the end-user value, and the live demo actions.
4. **Handling the Approval Gate**: talking points for when the approval modal appears.
5. **Auth0 Feature Deep Dives**: 2-3 sentences per feature.
6. **Competitive Differentiation**: 2-3 points.
7. **Closing & Discovery Questions**: 3-5 questions.
8. **Common Objections & Responses**: 3 objections.

Total length should be 800-1200 words."""


def outline_script(template: DemoTemplate, script: Optional[AutopilotScript], customer_name: Optional[str]) -> str:
    """Deterministic script skeleton built from the template alone"""
    audience = customer_name or "the prospect"
    lines = [
        f"# {template.name}: Demo Script",
        "",
        f"Prepared for {audience}.",
        "",
        "## Opening Hook",
        f"{template.description} Every action this agent takes runs on a delegated, scoped identity.",
        "",
        "## Tools in Play",
        _tools_text(template) or "- No tools configured.",
        "",
        "## Walkthrough",
    ]
    if script and script.steps:
        for i, step in enumerate(script.steps, start=1):
            lines.extend([
                f"### Step {i}: {step.label}",
                f"- **Type:** \"{step.user_message}\"",
                f"- **Highlight:** {step.highlight_feature or 'N/A'}",
                f"- **Say:** {step.explanation}",
                "",
            ])
    else:
        lines.extend(["Freeform demo: ask the agent to use a read-only tool first, then one that needs approval.", ""])

    approval_tools = [t.name for t in template.tools if t.requires_approval]
    if approval_tools:
        lines.extend([
            "## Handling the Approval Gate",
            f"When {', '.join(approval_tools)} comes up the agent pauses. Approve once and deny once so the "
            "audience sees both outcomes in the audit timeline.",
            "",
        ])

    lines.append("## Auth0 Features")
    lines.append(_features_text(template) or "- None selected.")
    lines.extend([
        "",
        "## Discovery Questions",
        "- Which actions would your agents need a human to approve?",
        "- How do your agents authenticate to third-party APIs today?",
        "- Who audits what your agents did on a user's behalf?",
    ])
    return "\n".join(lines)


def generate_demo_script(
    template: DemoTemplate,
    script: Optional[AutopilotScript],
    customer_name: Optional[str] = None,
) -> Tuple[str, str]:
    """Return ``(markdown, generated_by)``.

    Uses Claude when ``ANTHROPIC_API_KEY`` is configured, otherwise the outline.

    Raises:
        AgentError: If the Anthropic call fails.
    """
    if not settings.ANTHROPIC_API_KEY:
        return outline_script(template, script, customer_name), "outline"

    try:
        client = anthropic.Anthropic(api_key=settings.ANTHROPIC_API_KEY)
        message = client.messages.create(
            model=settings.AGENT_MODEL,
            max_tokens=2500,
            system=_SCRIPT_SYSTEM,
            messages=[{"role": "user", "content": build_script_prompt(template, script, customer_name)}],
        )
    except anthropic.APIError as e:
        logger.error(f"Anthropic API error during script generation: {e}", extra={"template_id": template.id})
        raise AgentError(f"AI service error: {e}") from e

    text = "".join(block.text for block in message.content if block.type == "text").strip()
    return text or "Script generation failed.", "anthropic"
