"""System prompt assembly for the demo agent"""
from typing import List

from authdemo.catalog import ToolDef


def tool_line(tool: ToolDef) -> str:
    line = f"- **{tool.name}** ({tool.id}): {tool.description} [scopes: {', '.join(tool.scopes)}]"
    if tool.requires_approval:
        line += " [REQUIRES APPROVAL]"
    return line


def tool_description(tool: ToolDef) -> str:
    """Description handed to the model's tool-use interface"""
    text = f"{tool.description}. Scopes: {', '.join(tool.scopes)}."
    if tool.requires_approval:
        text += " REQUIRES USER APPROVAL before execution."
    return text


def build_system_prompt(
    template_id: str,
    env_id: str,
    system_prompt_parts: List[str],
    knowledge_pack: str,
    tools: List[ToolDef],
) -> str:
    sections = [
        "You are an AI agent running inside an Auth0-secured demo environment.",
        "",
        "## Your Identity",
        f"- Template: {template_id}",
        f"- Environment ID: {env_id}",
        "",
        "## Auth0 Rules",
        "- Act only within the scopes provided by the user's Auth0 token",
        "- For tools marked as REQUIRES APPROVAL, you MUST call the tool; the system will handle showing the approval modal",
        "- After tool results, narrate what happened and what Auth0 did",
        "- Never pretend to have capabilities you don't have",
        "",
        "## Your Role",
        *system_prompt_parts,
        "",
        "## Auth0 Knowledge",
        knowledge_pack or "",
        "",
        "## Available Tools",
        *[tool_line(t) for t in tools],
        "",
        "## Response Guidelines",
        "- Use tools when the user requests an action; don't just describe what you'd do",
        "- After each tool result, explain what Auth0 did (token delegation, scope check, approval gate)",
        "- Use markdown formatting for clarity",
        "- Be conversational but professional",
    ]
    return "\n".join(sections)
