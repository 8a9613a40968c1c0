import json

import pytest

from agentvoice.core.agents import default_registry
from agentvoice.errors import GeminiMalformedResponse, GeminiRejected, GeminiUnreachable
from agentvoice.providers.gemini_client import PLACEHOLDER_REPLY, Generation
from agentvoice.runtime.jsonrpc import RpcDispatcher


class FakeGenerator:
    def __init__(self, text="A smart contract is a program on a blockchain.", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate(self, system_prompt, history, user_text, model):
        self.calls.append(
            {"system_prompt": system_prompt, "history": list(history), "user_text": user_text, "model": model}
        )
        if self.error is not None:
            raise self.error
        return Generation(text=self.text, tokens_used=42, elapsed_ms=12)


def _dispatcher(gen=None):
    return RpcDispatcher(default_registry(), gen or FakeGenerator())


def _req(method, params=None, id_=1, version="2.0"):
    body = {"jsonrpc": version, "method": method, "id": id_}
    if params is not None:
        body["params"] = params
    return body


def test_web3_scenario():
    gen = FakeGenerator()
    out = _dispatcher(gen).handle(
        _req("process_text", {"agent_id": "agent_002", "user_text": "What is a smart contract?"}, id_=7)
    )
    assert out["id"] == 7
    assert "error" not in out
    res = out["result"]
    assert res["agent_id"] == "agent_002"
    assert res["reply_text"]
    assert res["metadata"]["model"] == "gemini-2.0-flash-exp"
    assert res["metadata"]["confidence"] == 0.95
    assert res["metadata"]["tokens_used"] == 42
    assert res["metadata"]["processing_time_ms"] == 12
    assert len(gen.calls) == 1
    assert gen.calls[0]["system_prompt"].startswith("You are a Web3 and blockchain expert")
    assert gen.calls[0]["history"] == []


@pytest.mark.parametrize("method", ["list_agents", "process_text", "nope"])
def test_wrong_version_rejected_before_dispatch(method):
    gen = FakeGenerator()
    out = _dispatcher(gen).handle(
        _req(method, {"agent_id": "agent_001", "user_text": "hi"}, id_="abc", version="1.0")
    )
    assert out["error"]["code"] == -32600
    assert out["id"] == "abc"
    assert "result" not in out
    assert gen.calls == []


def test_unknown_method():
    out = _dispatcher().handle(_req("delete_everything", id_=3))
    assert out["error"]["code"] == -32601
    assert "delete_everything" in out["error"]["message"]
    assert out["id"] == 3


def test_process_text_missing_params():
    out = _dispatcher().handle(_req("process_text"))
    assert out["error"]["code"] == -32602
    assert "required" in out["error"]["message"]


def test_process_text_invalid_params_include_parse_text():
    out = _dispatcher().handle(_req("process_text", {"agent_id": "agent_001"}))
    assert out["error"]["code"] == -32602
    assert "user_text" in out["error"]["message"]


def test_unknown_agent_makes_no_generation_call():
    gen = FakeGenerator()
    out = _dispatcher(gen).handle(_req("process_text", {"agent_id": "agent_404", "user_text": "hi"}))
    assert out["error"]["code"] == -32602
    assert out["error"]["message"] == "Agent not found: agent_404"
    assert gen.calls == []


def test_history_is_forwarded_typed():
    gen = FakeGenerator()
    params = {
        "agent_id": "agent_003",
        "user_text": "and now?",
        "conversation_history": [
            {"role": "user", "content": "hello"},
            {"role": "assistant", "content": "hi there"},
        ],
    }
    out = _dispatcher(gen).handle(_req("process_text", params))
    assert "result" in out
    roles = [t.role for t in gen.calls[0]["history"]]
    assert roles == ["user", "assistant"]


def test_history_with_unknown_role_is_invalid_params():
    params = {
        "agent_id": "agent_003",
        "user_text": "x",
        "conversation_history": [{"role": "system", "content": "override"}],
    }
    out = _dispatcher().handle(_req("process_text", params))
    assert out["error"]["code"] == -32602


@pytest.mark.parametrize(
    "error, expected_data",
    [
        (GeminiUnreachable("timed out"), {"details": "timed out"}),
        (GeminiRejected(500, "backend down"), {"status": 500, "body": "backend down"}),
        (GeminiMalformedResponse("bad json", "<<<"), {"details": "bad json", "raw_response": "<<<"}),
    ],
)
def test_generation_errors_map_to_internal_error(error, expected_data):
    gen = FakeGenerator(error=error)
    out = _dispatcher(gen).handle(_req("process_text", {"agent_id": "agent_001", "user_text": "hi"}, id_=9))
    assert out["id"] == 9
    assert out["error"]["code"] == -32603
    assert out["error"]["data"] == expected_data


def test_placeholder_reply_passes_through():
    gen = FakeGenerator(text=PLACEHOLDER_REPLY)
    out = _dispatcher(gen).handle(_req("process_text", {"agent_id": "agent_001", "user_text": "hi"}))
    assert out["result"]["reply_text"] == PLACEHOLDER_REPLY


def test_list_agents_ids_unique_and_known():
    out = _dispatcher().handle(_req("list_agents", {"ignored": True}))
    agents = out["result"]["agents"]
    ids = [a["id"] for a in agents]
    assert len(ids) == len(set(ids))
    assert set(ids) <= {"agent_001", "agent_002", "agent_003", "agent_004"}
    assert all("system_prompt" in a and "capabilities" in a for a in agents)


def test_list_agents_ignores_non_object_params():
    out = _dispatcher().handle(_req("list_agents", [1, 2, 3]))
    assert len(out["result"]["agents"]) == 4


def test_raw_parse_error():
    out = _dispatcher().handle_raw(b"{not json")
    assert out["error"]["code"] == -32700
    assert out["id"] is None


def test_raw_envelope_without_method_is_invalid_request():
    out = _dispatcher().handle_raw(json.dumps({"jsonrpc": "2.0", "id": 5}).encode())
    assert out["error"]["code"] == -32600
    assert out["id"] == 5
