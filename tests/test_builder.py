"""
Tests for AI steps and the OpenAI engine builder
"""

import pytest

from easy_a2a import (
    AgentTargetKind,
    InvalidAgentsError,
    OpenAIEngineBuilder,
    TaskState,
    a2a,
    create_message,
    create_message_send_params,
    create_text_part,
    get_content,
)
from easy_a2a.session import AGENTS_PROMPT


class TestAIStep:
    """Test the AI step end to end through a built agent"""

    @pytest.mark.asyncio
    async def test_simple_prompt_answers(self, mock_client, completion):
        client = mock_client([completion("Hello!")])
        forwarded = []

        agent = (
            a2a(client)
            .ai("You are a helpful assistant.")
            .text(lambda params: forwarded.append(params.args) or "logged")
            .create_agent("Assistant")
        )

        task = await agent.send_message("Hi")

        assert task.status.state == TaskState.COMPLETED
        assert task.status.message.parts[0].text == "Hello!"
        assert len(forwarded[0]) == 1
        assert forwarded[0][0].choices[0].message.content == "Hello!"

        request = client.requests[0]
        assert request["model"] == "gpt-4o-mini"
        assert request["messages"] == [
            {"role": "system", "content": "You are a helpful assistant."},
            {"role": "user", "content": "Hi"},
        ]
        assert "tools" not in request

    @pytest.mark.asyncio
    async def test_streamed_content(self, mock_client, completion):
        agent = a2a(mock_client([completion("Hello!")])).ai("Be brief.").create_agent("Assistant")

        events = [event async for event in agent.stream_message("Hi")]

        assert get_content(events[-1].status.message) == "Hello!"

    @pytest.mark.asyncio
    async def test_full_body_fields_kept(self, mock_client, completion):
        client = mock_client([completion("ok")])
        agent = a2a(client).ai({
            "model": "gpt-4o",
            "temperature": 0.2,
            "messages": [{"role": "system", "content": "Terse."}],
        }).create_agent("Assistant")

        await agent.send_message("Hi")

        request = client.requests[0]
        assert request["model"] == "gpt-4o"
        assert request["temperature"] == 0.2
        assert request["messages"][-1] == {"role": "user", "content": "Hi"}

    @pytest.mark.asyncio
    async def test_default_model_from_environment(self, monkeypatch, mock_client, completion):
        monkeypatch.setenv("EASY_A2A_DEFAULT_MODEL", "local-llama")
        client = mock_client([completion("ok")])

        await a2a(client).ai("prompt").create_agent("Assistant").send_message("Hi")

        assert client.requests[0]["model"] == "local-llama"

    @pytest.mark.asyncio
    async def test_request_options_applied(self, mock_client, completion):
        client = mock_client([completion("ok")])

        await a2a(client).ai("prompt", max_retries=5, timeout=10).create_agent("A").send_message("Hi")

        assert client.options == [{"max_retries": 5, "timeout": 10}]

    @pytest.mark.asyncio
    async def test_previous_args_become_system_message(self, mock_client, completion):
        client = mock_client([completion("ok")])
        agent = (
            a2a(client)
            .text(lambda params: {"parts": "prepared", "args": ["context-a", 42]})
            .ai("prompt")
            .create_agent("A")
        )

        await agent.send_message("Hi")

        assert {"role": "system", "content": '["context-a", 42]'} in client.requests[0]["messages"]

    @pytest.mark.asyncio
    async def test_inclusion_flags_off(self, mock_client, completion):
        client = mock_client([completion("ok")])
        agent = (
            a2a(client)
            .text(lambda params: {"parts": "prepared", "args": [1]})
            .ai("prompt", include_history=False, include_args=False, include_content=False)
            .create_agent("A")
        )

        await agent.send_message("Hi")

        assert client.requests[0]["messages"] == [{"role": "system", "content": "prompt"}]

    @pytest.mark.asyncio
    async def test_history_carries_current_turn_when_content_excluded(self, mock_client, completion):
        client = mock_client([completion("4")])
        agent = a2a(client).ai("prompt", include_content=False).create_agent("A")

        await agent.send_message("What is 2+2?")

        assert client.requests[0]["messages"] == [
            {"role": "system", "content": "prompt"},
            {"role": "user", "content": "What is 2+2?"},
        ]

    @pytest.mark.asyncio
    async def test_current_turn_sent_once_with_history_and_content(self, mock_client, completion):
        client = mock_client([completion("4")])
        agent = a2a(client).ai("prompt").create_agent("A")

        await agent.send_message("What is 2+2?")

        user_turns = [m for m in client.requests[0]["messages"] if m["role"] == "user"]
        assert user_turns == [{"role": "user", "content": "What is 2+2?"}]

    @pytest.mark.asyncio
    async def test_history_of_follow_up_turn(self, mock_client, completion):
        client = mock_client([completion("first answer"), completion("second answer")])
        agent = a2a(client).ai("prompt").create_agent("A")

        task = await agent.send_message("first question")

        follow_up = create_message("user", [create_text_part("second question")], task.context_id, task.id)
        await agent.send_message(create_message_send_params(follow_up))

        assert client.requests[1]["messages"] == [
            {"role": "system", "content": "prompt"},
            {"role": "user", "content": "first question"},
            {"role": "assistant", "content": "first answer"},
            {"role": "user", "content": "second question"},
        ]

    @pytest.mark.asyncio
    async def test_empty_completion_content(self, mock_client, completion):
        agent = a2a(mock_client([completion(None)])).ai("prompt").create_agent("A")

        task = await agent.send_message("Hi")

        assert task.status.state == TaskState.COMPLETED
        assert task.status.message.parts == []

    @pytest.mark.asyncio
    async def test_model_errors_propagate(self, mock_client):
        agent = a2a(mock_client([ConnectionError("network down")])).ai("prompt").create_agent("A")

        with pytest.raises(ConnectionError):
            await agent.send_message("Hi")


class TestAIStepWithAgents:
    """Test AI steps that expose peer agents as tools"""

    @pytest.mark.asyncio
    async def test_peer_agent_called_through_tools(self, mock_client, completion, echo_agent):
        client = mock_client([
            completion(tool_calls=[{"name": "message-send", "arguments": {"message": "hello"}}]),
            completion("The echo agent said: Echo: hello"),
        ])
        agent = a2a(client, echo_agent).ai("Use the echo agent.").create_agent("Main")

        task = await agent.send_message("say hello via echo")

        assert get_content(task.status.message) == "The echo agent said: Echo: hello"
        first, second = client.requests
        assert {tool["function"]["name"] for tool in first["tools"]} == {
            "message-send", "get-agent-card", "tasks-get", "tasks-cancel",
        }
        assert first["messages"][-1] == {"role": "system", "content": AGENTS_PROMPT}
        tool_message = second["messages"][-1]
        assert tool_message["role"] == "tool"
        assert "Echo: hello" in tool_message["content"]

    @pytest.mark.asyncio
    async def test_disable_agents_makes_plain_completion(self, mock_client, completion, echo_agent):
        client = mock_client([completion("plain")])
        agent = a2a(client, echo_agent).ai("prompt", disable_agents=True).create_agent("Main")

        task = await agent.send_message("Hi")

        assert get_content(task.status.message) == "plain"
        assert len(client.requests) == 1
        request = client.requests[0]
        assert "tools" not in request
        assert request["messages"] == [
            {"role": "system", "content": "prompt"},
            {"role": "user", "content": "Hi"},
            {"role": "system", "content": AGENTS_PROMPT},
        ]


class TestOpenAIEngineBuilder:
    """Test builder wiring"""

    def test_agents_and_client_survive_add_step(self, mock_client, echo_agent):
        client = mock_client([])
        builder = a2a(client, {"echo": echo_agent})
        extended = builder.text(lambda params: "x").ai("prompt")

        assert isinstance(extended, OpenAIEngineBuilder)
        assert extended.client is client
        assert extended.agents is builder.agents
        assert extended.agents.kind is AgentTargetKind.RELAY
        assert builder.steps == ()

    def test_single_agent_target(self, mock_client, echo_agent):
        assert a2a(mock_client([]), echo_agent).agents.kind is AgentTargetKind.SINGLE_AGENT

    def test_invalid_agents_fail_at_configuration(self, mock_client):
        with pytest.raises(InvalidAgentsError):
            a2a(mock_client([]), object())

    def test_client_options_create_async_openai(self):
        from openai import AsyncOpenAI

        builder = a2a({"api_key": "test-key", "base_url": "http://localhost:4000/v1"})

        assert isinstance(builder.client, AsyncOpenAI)
        assert str(builder.client.base_url).startswith("http://localhost:4000/v1")
