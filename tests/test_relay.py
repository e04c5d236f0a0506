"""
Tests for the agent relay
"""

import pytest

from easy_a2a import (
    AgentNotFoundError,
    AgentRelay,
    EngineBuilder,
    InvalidAgentsError,
    TaskQueryParams,
    TaskState,
)


@pytest.fixture
def weather_agent():
    return EngineBuilder().text(lambda params: "Sunny").create_agent({
        "name": "Weather",
        "description": "Forecasts for any city",
        "skills": [{"id": "forecast", "name": "Forecast", "description": "Weather forecast", "tags": ["weather"]}],
    })


@pytest.fixture
def relay(echo_agent, weather_agent):
    return AgentRelay("main", {"echo": echo_agent, "weather": weather_agent})


class TestAgentRelay:
    """Test routing by agent id"""

    @pytest.mark.asyncio
    async def test_agent_ids(self, relay):
        assert await relay.get_agent_ids() == ["echo", "weather"]

    @pytest.mark.asyncio
    async def test_caller_not_registered(self, echo_agent):
        relay = AgentRelay("echo", {"echo": echo_agent})
        assert await relay.get_agent_ids() == []

    def test_invalid_entry_rejected(self):
        with pytest.raises(InvalidAgentsError):
            AgentRelay("main", {"bad": "not an agent"})

    @pytest.mark.asyncio
    async def test_send_and_fetch_task(self, relay):
        task = await relay.send_message("weather", "Paris?")
        fetched = await relay.get_task("weather", TaskQueryParams(id=task.id))

        assert fetched.status.state == TaskState.COMPLETED
        assert fetched.status.message.parts[0].text == "Sunny"

    @pytest.mark.asyncio
    async def test_unknown_agent(self, relay):
        with pytest.raises(AgentNotFoundError):
            await relay.send_message("nobody", "hi")

    @pytest.mark.asyncio
    async def test_cards(self, relay):
        cards = await relay.get_agent_cards()
        assert [card.name for card in cards] == ["Echo", "Weather"]
        assert (await relay.get_agent_card("weather")).name == "Weather"

    @pytest.mark.asyncio
    async def test_search_matches_tags_case_insensitively(self, relay):
        assert [card.name for card in await relay.search_agents("WEATHER")] == ["Weather"]
        assert [card.name for card in await relay.search_agents("repeat")] == ["Echo"]
        assert await relay.search_agents("translation") == []
