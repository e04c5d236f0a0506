"""
Agent relay: a named registry of peer agents.

A relay lets one agent address many others by id. Entries are either
in-process ``Agent`` instances or ``A2AClient`` handles on remote agents; both
answer the same calls, except that a local agent's card is available
synchronously.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Union

from .protocol.client import A2AClient
from .protocol.types import (
    AgentCard,
    Message,
    MessageSendParams,
    Task,
    TaskIdParams,
    TaskQueryParams,
    create_message_send_params,
)
from .core.agent import Agent
from .exceptions import AgentNotFoundError, InvalidAgentsError

logger = logging.getLogger(__name__)

AgentType = Union[Agent, A2AClient]


@dataclass(frozen=True)
class RelayConfig:
    """Deferred relay construction parameters"""
    caller_id: str
    agents: Mapping[str, AgentType] = field(default_factory=dict)


def _card_matches(card: AgentCard, query: str) -> bool:
    needle = query.lower()
    haystack = [card.name, card.description]
    for skill in card.skills:
        haystack.extend([skill.name, skill.description, *skill.tags])
    return any(needle in value.lower() for value in haystack if value)


class AgentRelay:
    """Routes protocol calls to registered agents by id"""

    def __init__(self, caller_id: str, agents: Optional[Mapping[str, AgentType]] = None):
        self.caller_id = caller_id
        self._agents: Dict[str, AgentType] = {}
        for agent_id, agent in (agents or {}).items():
            self.register_agent(agent_id, agent)

    @classmethod
    def from_config(cls, config: RelayConfig) -> "AgentRelay":
        return cls(config.caller_id, config.agents)

    def __repr__(self) -> str:
        return f"AgentRelay({self.caller_id!r}, agents={list(self._agents)!r})"

    def register_agent(self, agent_id: str, agent: AgentType) -> None:
        if not isinstance(agent, (Agent, A2AClient)):
            raise InvalidAgentsError(agent)
        if agent_id == self.caller_id:
            logger.warning("Relay %s: not registering the caller itself", self.caller_id)
            return
        self._agents[agent_id] = agent
        logger.info("Relay %s: registered agent %s", self.caller_id, agent_id)

    def _get(self, agent_id: str) -> AgentType:
        agent = self._agents.get(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        return agent

    async def send_message(
        self,
        agent_id: str,
        params: Union[str, MessageSendParams]
    ) -> Union[Task, Message]:
        return await self._get(agent_id).send_message(create_message_send_params(params))

    async def get_task(self, agent_id: str, params: TaskQueryParams) -> Task:
        return await self._get(agent_id).get_task(params)

    async def cancel_task(self, agent_id: str, params: TaskIdParams) -> Task:
        return await self._get(agent_id).cancel_task(params)

    async def get_agent_card(self, agent_id: str) -> AgentCard:
        agent = self._get(agent_id)
        if isinstance(agent, Agent):
            return agent.agent_card
        return await agent.agent_card()

    async def get_agent_cards(self) -> List[AgentCard]:
        return [await self.get_agent_card(agent_id) for agent_id in self._agents]

    async def get_agent_ids(self) -> List[str]:
        return list(self._agents)

    async def search_agents(self, query: str) -> List[AgentCard]:
        """Cards whose name, description or skills mention the query"""
        cards = await self.get_agent_cards()
        return [card for card in cards if _card_matches(card, query)]
