#!/usr/bin/env python3
"""AuthDemo autopilot walkthrough

Runs a template's scripted walkthrough against a running backend and prints
the conversation, the approval prompts and the audit timeline as they happen.

Usage:
    python run_walkthrough.py                              # travel agent, approve everything
    python run_walkthrough.py --template exec-assistant
    python run_walkthrough.py --deny                       # deny every approval
    python run_walkthrough.py --reset                      # reset the environment afterwards

Start the backend first:
    uvicorn authdemo_server.main:app --reload
"""
import argparse
import os
import sys

from authdemo import AgentGatewayClient, DemoSession

# Configuration
BACKEND_URL = os.getenv("AUTHDEMO_URL", "http://localhost:8000")
DEMO_KEY = os.getenv("DEMO_API_KEY", "demo-secret-key-change-in-production")


def print_event(event, payload):
    if event == "timeline":
        status = f" [{payload.status}]" if payload.status else ""
        feature = f" ({payload.feature})" if payload.feature else ""
        print(f"   · {payload.title}{status}{feature}")
    elif event == "notice":
        print(f"   ! {payload.message}")


def main():
    parser = argparse.ArgumentParser(description="Run an AuthDemo autopilot walkthrough")
    parser.add_argument("--template", default="travel-agent", help="Template id")
    parser.add_argument("--user", default="auth0|walkthrough", help="Identity subject")
    parser.add_argument("--deny", action="store_true", help="Deny approvals instead of approving")
    parser.add_argument("--reset", action="store_true", help="Reset the environment when done")
    args = parser.parse_args()

    print("=" * 60)
    print("AuthDemo Walkthrough")
    print("=" * 60)
    print()

    gateway = AgentGatewayClient(base_url=BACKEND_URL, token_provider=lambda: DEMO_KEY)
    try:
        session = DemoSession.from_template(gateway, args.template, args.user, identity=args.user)
    except ValueError as e:
        print(f"✗ {e}")
        sys.exit(1)

    if session.autopilot is None:
        print(f"✗ Template {args.template} has no autopilot script")
        sys.exit(1)

    orchestrator = session.orchestrator
    orchestrator.subscribe(print_event)
    print(f"Template: {session.template.name}")
    print(f"Environment: {session.env_id}")
    print()

    session.autopilot.start()
    while not session.autopilot.is_complete:
        step = session.autopilot.advance()
        if step is None:
            break
        print(f"{step.id}. {step.label}")
        print(f"   User: {step.user_message}")
        print(f"   Why it matters: {step.explanation}")

        approval = orchestrator.current_approval
        if approval is not None:
            decision = "denied" if args.deny else "approved"
            print(f"   ⏸  {approval.tool_name} needs approval for {', '.join(approval.scopes)}: {decision}")
            orchestrator.resolve_approval(decision)

        reply = orchestrator.messages[-1]
        for call in reply.tool_calls:
            print(f"   ⚙  {call.tool_name}: {call.status}")
        print(f"   Agent: {reply.content}")
        print()

    if args.reset:
        session.reset()
        print("✓ Environment reset")

    print("=" * 60)
    print("Walkthrough complete")
    print("=" * 60)


if __name__ == "__main__":
    main()
