"""
Agent Card helpers
Builds protocol agent cards from a bare name, a dict or an existing card
"""

from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlparse

from .types import PROTOCOL_VERSION, AgentCard


def create_minimal_agent_card(
    name: str,
    description: Optional[str] = None,
    url: str = "http://localhost:3000/a2a"
) -> AgentCard:
    """Create a minimal Agent Card with a single general-purpose skill"""
    return AgentCard.model_validate({
        "protocolVersion": PROTOCOL_VERSION,
        "name": name,
        "description": description or f"{name} agent",
        "url": url,
        "preferredTransport": "JSONRPC",
        "version": "1.0.0",
        "capabilities": {
            "streaming": True,
            "pushNotifications": False,
            "stateTransitionHistory": False
        },
        "defaultInputModes": ["text"],
        "defaultOutputModes": ["text"],
        "skills": [{
            "id": "general",
            "name": "General Assistant",
            "description": "General purpose assistance",
            "tags": ["general", "assistant"],
        }]
    })


def create_agent_card(card: Union[str, Dict[str, Any], AgentCard]) -> AgentCard:
    """
    Normalize the ``agent_card`` argument of ``create_agent``.

    A string is used as the agent name of a minimal card, a dict is merged
    over the minimal card for its ``name`` and validated.
    """
    if isinstance(card, AgentCard):
        return card
    if isinstance(card, str):
        return create_minimal_agent_card(card)

    base = create_minimal_agent_card(card.get("name", "Agent"), card.get("description"))
    merged = {**base.to_dict(), **card}
    return AgentCard.model_validate(merged)


def is_valid_url(url: str) -> bool:
    """Check whether a URL has both scheme and host"""
    try:
        result = urlparse(url)
        return all([result.scheme, result.netloc])
    except ValueError:
        return False


def validate_agent_card(card: AgentCard) -> List[str]:
    """Return a list of problems with the card, empty when it is usable"""
    errors = []
    if not card.name.strip():
        errors.append("Agent card name is empty")
    if not is_valid_url(card.url):
        errors.append(f"Agent card url is invalid: {card.url}")
    if not card.skills:
        errors.append("Agent card declares no skills")
    return errors
