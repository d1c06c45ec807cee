"""Fire-and-forget webhook notifications for approval events"""
import hashlib
import hmac
import json
import threading
from datetime import datetime
from typing import Any, Dict

import requests

from authdemo_server.config import settings
from authdemo_server.utils.logger import logger


def _deliver(url: str, body: bytes, headers: Dict[str, str]) -> None:
    """Deliver webhook payload in a daemon background thread (fire-and-forget)."""
    try:
        resp = requests.post(url, data=body, headers=headers, timeout=5)
        logger.debug(
            "Webhook delivered",
            extra={"action": "webhook", "status_code": resp.status_code},
        )
    except requests.RequestException as exc:
        logger.warning(
            f"Webhook delivery failed: {exc}",
            extra={"action": "webhook"},
        )


def _slack_body(event_type: str, payload: Dict[str, Any]) -> bytes:
    """Format an approval event as a Slack incoming-webhook message."""
    tool_name = payload.get("tool_name") or payload.get("tool_id", "unknown")
    env_id = payload.get("env_id", "unknown")
    scopes = ", ".join(payload.get("scopes") or [])
    scope_part = f" (`{scopes}`)" if scopes else ""
    ts = datetime.utcnow().strftime("%Y-%m-%d %H:%M UTC")

    if event_type == "approval.created":
        text = (
            f"*AuthDemo: Approval Required* :hourglass_flowing_sand:\n"
            f"The demo agent in `{env_id}` wants to run *{tool_name}*{scope_part}."
        )
        color = "#F59E0B"
    elif event_type == "approval.approved":
        text = (
            f"*AuthDemo: Action Approved* :white_check_mark:\n"
            f"*{tool_name}*{scope_part} in `{env_id}` was *approved* and executed."
        )
        color = "#10B981"
    else:  # approval.denied
        text = (
            f"*AuthDemo: Action Denied* :x:\n"
            f"*{tool_name}*{scope_part} in `{env_id}` was *denied*."
        )
        color = "#EF4444"

    slack_payload = {
        "attachments": [{
            "color": color,
            "text": text,
            "footer": f"AuthDemo | {ts}",
        }]
    }
    return json.dumps(slack_payload).encode()


def build_request(event_type: str, payload: Dict[str, Any], url: str) -> tuple:
    """Return ``(body, headers)`` for a delivery to ``url``"""
    headers: Dict[str, str] = {"Content-Type": "application/json"}
    if "hooks.slack.com" in url:
        return _slack_body(event_type, payload), headers

    body_dict: Dict[str, Any] = {
        "event": event_type,
        "timestamp": datetime.utcnow().isoformat() + "Z",
        **payload,
    }
    body = json.dumps(body_dict, default=str).encode()

    if settings.WEBHOOK_SECRET:
        sig = hmac.new(
            settings.WEBHOOK_SECRET.encode(), body, hashlib.sha256
        ).hexdigest()
        headers["X-AuthDemo-Signature"] = f"sha256={sig}"
    return body, headers


def send_webhook(event_type: str, payload: Dict[str, Any]) -> None:
    """
    Send a webhook notification for an approval event (non-blocking).

    Supported event types:
      - ``approval.created``   a tool call is waiting for the presenter's decision
      - ``approval.approved``  the presenter approved it and the mock tool ran
      - ``approval.denied``    the presenter denied it

    Configuration (.env):
      - ``WEBHOOK_URL``    destination URL; Slack incoming webhooks are auto-detected
                           and formatted with Slack's attachment format automatically.
      - ``WEBHOOK_SECRET`` if set, adds ``X-AuthDemo-Signature: sha256=<hex>`` header
                           so the receiver can verify authenticity.

    The call returns immediately; delivery happens in a daemon thread.
    """
    url = settings.WEBHOOK_URL
    if not url:
        return

    body, headers = build_request(event_type, payload, url)
    threading.Thread(target=_deliver, args=(url, body, headers), daemon=True).start()
