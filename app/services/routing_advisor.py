# app/services/routing_advisor.py
from app.config import CONFIDENCE_LEVELS

DEPARTMENT_NAMES = {
    "finance": "Finance Department",
    "procurement": "Procurement Department",
    "legal": "Legal Department",
    "operations": "Operations Department",
    "general": "General Administration",
}


def confidence_level(confidence: float, thresholds: dict = CONFIDENCE_LEVELS) -> str:
    if confidence >= thresholds["HIGH"]:
        return "high"
    if confidence >= thresholds["MEDIUM"]:
        return "medium"
    return "low"


def routing_recommendation(
    department: str, routing_confidence: float, thresholds: dict = CONFIDENCE_LEVELS
) -> str:
    """Human-readable routing advice for a department at a given routing confidence."""
    name = DEPARTMENT_NAMES.get(department, DEPARTMENT_NAMES["general"])

    level = confidence_level(routing_confidence, thresholds)
    if level == "high":
        return f"Recommended for automatic routing to {name}"
    if level == "medium":
        return f"Suggested routing to {name} - Manual review recommended"
    return f"Low confidence routing to {name} - Manual review required"
