"""Agent runtimes that turn a conversation into text plus requested tool calls.

Two implementations share the ``run(system_prompt, history, tools, tool_results)``
signature:

- ``AnthropicAgent`` uses the Messages API tool-use interface.
- ``ScriptedAgent`` is deterministic: it matches the last user message against
  the tool catalog by keywords and narrates folded tool results. It backs the
  demo whenever no model key is configured, and the test suite.
"""
import json
import re
from typing import Any, Dict, List, Optional, Tuple

import anthropic
from pydantic import BaseModel, Field

from authdemo.catalog import ToolDef
from authdemo_server.agent.prompt import tool_description
from authdemo_server.config import settings
from authdemo_server.utils.logger import logger


class AgentError(Exception):
    """The agent runtime failed; mapped to an HTTP status by the gateway"""

    status_code = 502

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AgentRateLimitError(AgentError):
    status_code = 429


class AgentQuotaError(AgentError):
    status_code = 402


class ToolRequest(BaseModel):
    """A tool the agent asked to run"""

    tool_id: str
    args: Dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Outcome of an earlier tool call folded into this turn"""

    tool_id: str
    status: str  # approved_and_executed | denied_by_user
    result: Optional[Dict[str, Any]] = None
    message: Optional[str] = None


class AgentTurn(BaseModel):
    content: str = ""
    tool_requests: List[ToolRequest] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Scripted agent
# ---------------------------------------------------------------------------

_STOPWORDS = {
    "a", "an", "the", "to", "for", "of", "on", "in", "at", "my", "me", "i", "and", "or",
    "with", "from", "that", "this", "it", "is", "what", "s", "get", "tool", "please",
    "can", "you", "your", "now", "also", "be", "do",
}

_VERB_SYNONYMS = {
    "show": "search",
    "find": "search",
    "browse": "search",
    "look": "search",
    "lookup": "search",
}


def _stem(word: str) -> str:
    return word[:-1] if len(word) > 3 and word.endswith("s") else word


def _words(text: str) -> List[str]:
    return [_stem(w) for w in re.findall(r"[a-z0-9]+", text.lower()) if w not in _STOPWORDS]


def _same(a: str, b: str) -> bool:
    if a == b:
        return True
    return min(len(a), len(b)) >= 3 and (a.startswith(b) or b.startswith(a))


def _tool_terms(tool: ToolDef) -> Tuple[set, set]:
    """Split a tool's name and id into (verbs, nouns)"""
    verbs, nouns = set(), set()
    for source in (tool.name, tool.id.replace("_", " ")):
        raw = re.findall(r"[a-z0-9]+", source.lower())
        if not raw:
            continue
        head, rest = raw[0], raw[1:]
        if head not in _STOPWORDS:
            verbs.add(_stem(head))
        nouns.update(_stem(w) for w in rest if w not in _STOPWORDS)

    # "repo" and "repositorie" count once
    distinct: set = set()
    for noun in sorted(nouns - verbs, key=len):
        if not any(_same(noun, kept) for kept in distinct):
            distinct.add(noun)
    return verbs, distinct


def _score(tool: ToolDef, message_words: List[str]) -> int:
    verbs, nouns = _tool_terms(tool)
    score = 0
    for verb in verbs:
        if any(_same(verb, w) for w in message_words):
            score += 1
    for noun in nouns:
        if any(_same(noun, w) for w in message_words):
            score += 2
    return score


def match_tool(message: str, tools: List[ToolDef]) -> Optional[ToolDef]:
    """Best keyword match for ``message``; ties go to the earlier tool"""
    words = [_VERB_SYNONYMS.get(w, w) for w in _words(message)]
    best, best_score = None, 0
    for tool in tools:
        score = _score(tool, words)
        if score > best_score:
            best, best_score = tool, score
    return best


def _scopes(tool: Optional[ToolDef]) -> str:
    return ", ".join(tool.scopes) if tool and tool.scopes else "no scopes"


class ScriptedAgent:
    """Deterministic stand-in for a model"""

    name = "scripted"

    def run(
        self,
        system_prompt: str,
        history: List[Dict[str, str]],
        tools: List[ToolDef],
        tool_results: List[ToolResult],
    ) -> AgentTurn:
        if tool_results:
            return AgentTurn(content=self._narrate(tool_results, tools))

        message = next((m["content"] for m in reversed(history) if m["role"] == "user"), "")
        tool = match_tool(message, tools)
        if tool is None:
            return AgentTurn(content=self._capabilities(tools))

        reason = message if len(message) <= 120 else message[:120] + "..."
        if tool.requires_approval:
            content = (
                f"**{tool.name}** needs `{_scopes(tool)}`, so I'm asking for your approval before I go ahead."
            )
        else:
            content = (
                f"I'll use **{tool.name}** for that. Auth0 checks the delegated token for `{_scopes(tool)}` first."
            )
        return AgentTurn(content=content, tool_requests=[ToolRequest(tool_id=tool.id, args={"reason": reason})])

    def _narrate(self, tool_results: List[ToolResult], tools: List[ToolDef]) -> str:
        by_id = {t.id: t for t in tools}
        parts = []
        for outcome in tool_results:
            tool = by_id.get(outcome.tool_id)
            name = tool.name if tool else outcome.tool_id
            if outcome.status == "approved_and_executed":
                parts.append(
                    f"**{name}** completed.\n\n"
                    f"```json\n{json.dumps(outcome.result, indent=2, ensure_ascii=False)}\n```\n\n"
                    f"Auth0 issued a short-lived token scoped to `{_scopes(tool)}` for this call, "
                    "so your credentials never reached the agent."
                )
            else:
                parts.append(
                    f"You denied **{name}**, so I did not run it and no token was issued for `{_scopes(tool)}`. "
                    "I can suggest an alternative if you'd like."
                )
        return "\n\n".join(parts)

    def _capabilities(self, tools: List[ToolDef]) -> str:
        if not tools:
            return "I don't have any tools configured for this demo yet."
        lines = ["Here is what I can do in this demo:"]
        for tool in tools:
            marker = " (requires your approval)" if tool.requires_approval else ""
            lines.append(f"- **{tool.name}**: {tool.description}{marker}")
        lines.append("")
        lines.append("Tell me what you'd like to do.")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Anthropic agent
# ---------------------------------------------------------------------------

def to_anthropic_messages(history: List[Dict[str, str]], tool_results: List[ToolResult]) -> List[Dict[str, str]]:
    """Convert chat history into alternating user/assistant turns starting with a user turn"""
    messages: List[Dict[str, str]] = []
    for entry in history:
        role, content = entry.get("role"), (entry.get("content") or "").strip()
        if role not in ("user", "assistant") or not content:
            continue
        if not messages and role == "assistant":
            continue
        if messages and messages[-1]["role"] == role:
            messages[-1]["content"] += "\n\n" + content
        else:
            messages.append({"role": role, "content": content})

    if tool_results:
        payload = json.dumps([r.model_dump(exclude_none=True) for r in tool_results], default=str)
        text = f"Tool results:\n{payload}"
        if messages and messages[-1]["role"] == "user":
            messages[-1]["content"] += "\n\n" + text
        else:
            messages.append({"role": "user", "content": text})

    if not messages:
        messages.append({"role": "user", "content": "Hello"})
    return messages


class AnthropicAgent:
    """Claude-backed agent using tool use"""

    name = "anthropic"

    def __init__(self, api_key: str, model: str, max_tokens: int):
        self.client = anthropic.Anthropic(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens

    def run(
        self,
        system_prompt: str,
        history: List[Dict[str, str]],
        tools: List[ToolDef],
        tool_results: List[ToolResult],
    ) -> AgentTurn:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": system_prompt,
            "messages": to_anthropic_messages(history, tool_results),
        }
        if tools:
            kwargs["tools"] = [
                {
                    "name": t.id,
                    "description": tool_description(t),
                    "input_schema": {
                        "type": "object",
                        "properties": {
                            "reason": {"type": "string", "description": "Brief explanation of why you're using this tool"},
                        },
                        "required": ["reason"],
                    },
                }
                for t in tools
            ]

        try:
            response = self.client.messages.create(**kwargs)
        except anthropic.RateLimitError as e:
            logger.warning(f"Anthropic rate limit: {e}")
            raise AgentRateLimitError("Rate limits exceeded, please try again later.") from e
        except anthropic.APIStatusError as e:
            logger.error(f"Anthropic API error: {e}", extra={"status_code": e.status_code})
            if e.status_code == 402:
                raise AgentQuotaError("AI usage limit reached. Please add credits.") from e
            raise AgentError(f"AI service error: {e}") from e
        except anthropic.APIError as e:
            logger.error(f"Anthropic API error: {e}")
            raise AgentError(f"AI service error: {e}") from e

        text_parts, requests = [], []
        for block in response.content:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                requests.append(ToolRequest(tool_id=block.name, args=dict(block.input or {})))
        return AgentTurn(content="".join(text_parts).strip(), tool_requests=requests)


def get_agent():
    """Agent runtime for the current configuration"""
    if settings.ANTHROPIC_API_KEY:
        return AnthropicAgent(settings.ANTHROPIC_API_KEY, settings.AGENT_MODEL, settings.AGENT_MAX_TOKENS)
    return ScriptedAgent()
