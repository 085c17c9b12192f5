import asyncio
import copy
import json

import httpx
import pytest

from services.booking_api import BookingAPI
from services.llm import ModelFunctionCall, ModelProtocolError, ModelReply
from services.router import build_router

BASE_URL = "https://booking.test/api"


class RecordingBackend:
    """httpx.MockTransport handler that records every request it sees."""

    def __init__(self):
        self.requests = []
        self.routes = {}

    def on(self, method, path, status=200, json=None):
        self.routes[(method, path)] = (status, json)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len("/api"):]
        status, body = self.routes.get((request.method, path), (404, {"message": "not found"}))
        return httpx.Response(status, json=body)

    def json_body(self, i=-1):
        return json.loads(self.requests[i].content)


class FakeLLM:
    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    async def complete(self, messages, functions=None):
        self.calls.append({"messages": copy.deepcopy(messages), "functions": functions})
        if not self.replies:
            raise ModelProtocolError("No response from OpenAI")
        return self.replies.pop(0)


def text_reply(text):
    return ModelReply(content=text)


def call_reply(name, args, call_id="call_1"):
    raw = args if isinstance(args, str) else json.dumps(args)
    return ModelReply(content="", function_call=ModelFunctionCall(id=call_id, name=name, arguments=raw))


@pytest.fixture
def run():
    return asyncio.run


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def api(backend):
    return BookingAPI(base_url=BASE_URL, token="secret-token", timeout=5, transport=httpx.MockTransport(backend))


@pytest.fixture
def router(api):
    return build_router(api)


@pytest.fixture
def replies():
    # exposes the reply builders to tests without importing conftest
    class _Replies:
        text = staticmethod(text_reply)
        call = staticmethod(call_reply)
        llm = FakeLLM
    return _Replies
