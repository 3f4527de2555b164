"""Tests for request body validation."""
from __future__ import annotations

import pytest

from service.errors import RequestValidationError
from service.schemas import (
    ChatCompletionRequestSchema,
    CompletionRequestSchema,
    EmbeddingRequestSchema,
)
from synthesis.models import ChatGenerationRequest, EmbeddingRequest, GenerationRequest

WEATHER_TOOL = {
    "type": "function",
    "function": {"name": "get_weather", "parameters": {"type": "object"}},
}


def test_completion_schema_builds_engine_request() -> None:
    schema = CompletionRequestSchema.from_dict(
        {
            "model": "text-davinci-003",
            "prompt": ["first", "second"],
            "max_tokens": 32,
            "stop": "\n",
            "n": 2,
            "echo": True,
            "temperature": 0.5,
        }
    )
    request = schema.to_request()

    assert isinstance(request, GenerationRequest)
    assert request.prompts == ("first", "second")
    assert request.stop == ("\n",)
    assert request.n == 2
    assert request.echo is True
    assert request.temperature == 0.5


@pytest.mark.parametrize(
    ("payload", "param"),
    [
        ({"prompt": "hi"}, "model"),
        ({"model": "  ", "prompt": "hi"}, "model"),
        ({"model": "m", "prompt": ""}, "prompt"),
        ({"model": "m", "prompt": []}, "prompt"),
        ({"model": "m", "prompt": ["ok", " "]}, "prompt"),
        ({"model": "m", "prompt": 42}, "prompt"),
        ({"model": "m", "prompt": "hi", "max_tokens": 0}, "max_tokens"),
        ({"model": "m", "prompt": "hi", "max_tokens": 5000}, "max_tokens"),
        ({"model": "m", "prompt": "hi", "temperature": 2.5}, "temperature"),
        ({"model": "m", "prompt": "hi", "top_p": -0.1}, "top_p"),
        ({"model": "m", "prompt": "hi", "n": 21}, "n"),
        ({"model": "m", "prompt": "hi", "logprobs": 6}, "logprobs"),
        ({"model": "m", "prompt": "hi", "presence_penalty": 3}, "presence_penalty"),
        ({"model": "m", "prompt": "hi", "stop": ["a", "b", "c", "d", "e"]}, "stop"),
        ({"model": "m", "prompt": "hi", "stream": True}, "stream"),
        ({"model": "m", "prompt": "hi", "echo": "yes"}, "echo"),
    ],
)
def test_completion_schema_rejects_invalid_bodies(payload, param) -> None:
    with pytest.raises(RequestValidationError) as excinfo:
        CompletionRequestSchema.from_dict(payload)
    assert excinfo.value.param == param
    assert excinfo.value.status == 400


def test_chat_schema_parses_tools_and_named_choice() -> None:
    schema = ChatCompletionRequestSchema.from_dict(
        {
            "model": "gpt-4",
            "messages": [
                {"role": "system", "content": "Be brief."},
                {"role": "user", "content": "Weather in Paris?"},
                {
                    "role": "assistant",
                    "content": None,
                    "tool_calls": [
                        {
                            "id": "call_1",
                            "type": "function",
                            "function": {"name": "get_weather", "arguments": "{}"},
                        }
                    ],
                },
                {"role": "tool", "content": "sunny", "tool_call_id": "call_1"},
            ],
            "tools": [WEATHER_TOOL],
            "tool_choice": {"type": "function", "function": {"name": "get_weather"}},
        }
    )
    request = schema.to_request()

    assert isinstance(request, ChatGenerationRequest)
    assert [message.role for message in request.messages] == ["system", "user", "assistant", "tool"]
    assert request.messages[2].tool_calls[0].name == "get_weather"
    assert request.tools[0].name == "get_weather"
    assert request.tool_choice == {"type": "function", "function": {"name": "get_weather"}}


@pytest.mark.parametrize(
    ("messages", "fragment"),
    [
        ([{"role": "user", "content": ""}], "Content cannot be empty"),
        ([{"role": "wizard", "content": "hi"}], "role must be one of"),
        ([{"role": "assistant"}], "either content or tool_calls"),
        ([{"role": "tool", "content": "result"}], "tool_call_id"),
        ([{"role": "tool", "tool_call_id": "call_1"}], "Tool messages must have content"),
        (["not a message"], "must be an object"),
    ],
)
def test_chat_schema_rejects_invalid_messages(messages, fragment) -> None:
    with pytest.raises(RequestValidationError) as excinfo:
        ChatCompletionRequestSchema.from_dict({"model": "gpt-4", "messages": messages})
    assert fragment in excinfo.value.message
    assert excinfo.value.message.startswith("Invalid message at index 0")


def test_chat_schema_rejects_empty_messages() -> None:
    with pytest.raises(RequestValidationError, match="Messages array cannot be empty"):
        ChatCompletionRequestSchema.from_dict({"model": "gpt-4", "messages": []})


def test_chat_schema_tool_choice_rules() -> None:
    messages = [{"role": "user", "content": "hi"}]

    with pytest.raises(RequestValidationError, match="only allowed when tools"):
        ChatCompletionRequestSchema.from_dict(
            {"model": "gpt-4", "messages": messages, "tool_choice": "auto"}
        )
    with pytest.raises(RequestValidationError, match="unknown function"):
        ChatCompletionRequestSchema.from_dict(
            {
                "model": "gpt-4",
                "messages": messages,
                "tools": [WEATHER_TOOL],
                "tool_choice": {"type": "function", "function": {"name": "send_email"}},
            }
        )
    with pytest.raises(RequestValidationError, match="tool_choice must be one of"):
        ChatCompletionRequestSchema.from_dict(
            {"model": "gpt-4", "messages": messages, "tools": [WEATHER_TOOL], "tool_choice": "always"}
        )
    with pytest.raises(RequestValidationError, match="function tool"):
        ChatCompletionRequestSchema.from_dict(
            {"model": "gpt-4", "messages": messages, "tools": [{"type": "retrieval"}]}
        )


def test_embedding_schema_accepts_every_input_shape() -> None:
    for value in ("text", ["a", "b"], [1, 2, 3], [[1, 2], [3]]):
        request = EmbeddingRequestSchema.from_dict(
            {"model": "text-embedding-ada-002", "input": value}
        ).to_request()
        assert isinstance(request, EmbeddingRequest)

    nested = EmbeddingRequestSchema.from_dict({"model": "m", "input": [[1, 2], [3]]}).to_request()
    assert nested.input == ((1, 2), (3,))


@pytest.mark.parametrize(
    ("payload", "param"),
    [
        ({"model": "m", "input": ""}, "input"),
        ({"model": "m", "input": []}, "input"),
        ({"model": "m", "input": ["ok", ""]}, "input"),
        ({"model": "m", "input": [[1], []]}, "input"),
        ({"model": "m", "input": [1, "a"]}, "input"),
        ({"model": "m", "input": [-1, 2]}, "input"),
        ({"model": "m", "input": [[3], [4, -5]]}, "input"),
        ({"model": "m", "input": {"text": "hi"}}, "input"),
        ({"model": "m", "input": "hi", "encoding_format": "hex"}, "encoding_format"),
        ({"model": "m", "input": "hi", "dimensions": 0}, "dimensions"),
        ({"model": "m", "input": "hi", "dimensions": 4096}, "dimensions"),
        ({"input": "hi"}, "model"),
    ],
)
def test_embedding_schema_rejects_invalid_bodies(payload, param) -> None:
    with pytest.raises(RequestValidationError) as excinfo:
        EmbeddingRequestSchema.from_dict(payload)
    assert excinfo.value.param == param
