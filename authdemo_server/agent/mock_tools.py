"""Mock tool execution: realistic fake payloads per tool id"""
import secrets
from typing import Any, Callable, Dict, Optional


def _ref(prefix: str, upper: bool = False) -> str:
    token = secrets.token_hex(3)
    return prefix + (token.upper() if upper else token)


_MOCKS: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    # Travel
    "search_flights": lambda args: {
        "flights": [
            {"airline": "United Airlines", "flight": "UA 2451", "depart": "10:30 AM", "arrive": "2:45 PM", "price": "$342", "class": "Economy"},
            {"airline": "Delta", "flight": "DL 1892", "depart": "1:15 PM", "arrive": "5:30 PM", "price": "$289", "class": "Economy"},
            {"airline": "American Airlines", "flight": "AA 776", "depart": "6:00 PM", "arrive": "10:15 PM", "price": "$415", "class": "Business"},
        ]
    },
    "book_flight": lambda args: {"confirmation": _ref("BK-", upper=True), "status": "confirmed", "charged": "$342.00"},
    "search_hotels": lambda args: {
        "hotels": [
            {"name": "The Ritz-Carlton", "rating": "5★", "price": "$450/night", "available": True},
            {"name": "Marriott Downtown", "rating": "4★", "price": "$189/night", "available": True},
            {"name": "Holiday Inn Express", "rating": "3★", "price": "$129/night", "available": True},
        ]
    },
    "book_hotel": lambda args: {"confirmation": _ref("HT-", upper=True), "status": "confirmed", "nights": 3, "total": "$567.00"},
    "get_itinerary": lambda args: {"trips": [{"destination": "San Francisco", "dates": "Mar 15-18", "status": "upcoming"}]},
    # Communication
    "read_calendar": lambda args: {
        "events": [
            {"title": "Team Standup", "time": "9:00 AM", "duration": "30min"},
            {"title": "Product Review", "time": "2:00 PM", "duration": "1hr"},
        ]
    },
    "schedule_meeting": lambda args: {"event_id": _ref("evt_"), "status": "created", "calendar": "primary"},
    "draft_email": lambda args: {"draft_id": _ref("draft_"), "status": "saved_as_draft"},
    "send_email": lambda args: {"message_id": _ref("msg_"), "status": "sent", "delivered": True},
    "search_contacts": lambda args: {
        "contacts": [{"name": "Jane Smith", "email": "jane@example.com"}, {"name": "Bob Wilson", "email": "bob@example.com"}]
    },
    # Retail
    "search_products": lambda args: {
        "products": [
            {"name": "Premium Wireless Headphones", "price": "$299", "rating": "4.8★"},
            {"name": "Smart Fitness Watch", "price": "$199", "rating": "4.6★"},
        ]
    },
    "get_recommendations": lambda args: {"recommendations": [{"name": "Noise-Canceling Earbuds", "price": "$149", "match": "95%"}]},
    "add_to_cart": lambda args: {"cart_items": 1, "subtotal": "$299.00"},
    "place_order": lambda args: {"order_id": _ref("ORD-", upper=True), "status": "processing", "total": "$299.00"},
    "track_order": lambda args: {"order_id": "ORD-A1B2C3", "status": "shipped", "eta": "Mar 12"},
    # DevOps
    "list_repos": lambda args: {
        "repos": [{"name": "auth0-ai-demo", "language": "TypeScript", "stars": 42}, {"name": "api-gateway", "language": "Go", "stars": 18}]
    },
    "create_commit": lambda args: {"sha": "a1b2c3d", "branch": "main", "message": args.get("message") or "Update code"},
    "trigger_deploy": lambda args: {"deployment_id": _ref("dep_"), "status": "deploying", "environment": "staging"},
    "generate_docs": lambda args: {"pages_generated": 12, "format": "markdown", "status": "complete"},
    "review_pr": lambda args: {"pr": "#42", "verdict": "approved", "comments": 3},
    # Generic
    "tool_a": lambda args: {"records": 42, "source": "data-store-alpha"},
    "tool_b": lambda args: {"written": True, "records_affected": 1},
    "tool_c": lambda args: {"executed": True, "result": "Action completed successfully"},
    "tool_d": lambda args: {"api_response": {"status": "ok", "latency": "45ms"}},
}


def execute_mock_tool(tool_id: str, args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Run the mock for ``tool_id``; unknown tools get a generic success payload"""
    mock = _MOCKS.get(tool_id)
    if mock is None:
        return {"result": "Tool executed successfully"}
    return mock(args or {})
