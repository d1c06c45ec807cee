"""Demo agent: prompt assembly, mock tools and runtimes"""
from authdemo_server.agent.mock_tools import execute_mock_tool
from authdemo_server.agent.prompt import build_system_prompt
from authdemo_server.agent.runtime import (
    AgentError,
    AgentQuotaError,
    AgentRateLimitError,
    AgentTurn,
    AnthropicAgent,
    ScriptedAgent,
    ToolRequest,
    ToolResult,
    get_agent,
)

__all__ = [
    "AgentError",
    "AgentQuotaError",
    "AgentRateLimitError",
    "AgentTurn",
    "AnthropicAgent",
    "ScriptedAgent",
    "ToolRequest",
    "ToolResult",
    "build_system_prompt",
    "execute_mock_tool",
    "get_agent",
]
