import pytest

from agentvoice import cli


@pytest.fixture
def served(monkeypatch):
    calls = []

    def fake_run(app, host, port, log_config):
        calls.append((app, host, port))

    monkeypatch.setattr(cli.uvicorn, "run", fake_run)
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    return calls


def test_runtime_uses_port_override(monkeypatch, served):
    monkeypatch.setenv("GEMINI_API_KEY", "g-test")
    assert cli.main(["runtime", "--port", "9101"]) == 0
    app, host, port = served[0]
    assert port == 9101
    assert app.title == "agentvoice runtime"


def test_gateway_uses_configured_host(monkeypatch, tmp_path, served):
    monkeypatch.setenv("AUDIO_DIR", str(tmp_path / "audio"))
    monkeypatch.setenv("ELEVENLABS_API_KEY", "el-test")
    monkeypatch.setenv("GATEWAY_HOST", "0.0.0.0")
    monkeypatch.delenv("GATEWAY_PORT", raising=False)
    assert cli.main(["gateway"]) == 0
    _, host, port = served[0]
    assert host == "0.0.0.0"
    assert port == 8000


def test_unknown_service_exits(served):
    with pytest.raises(SystemExit):
        cli.main(["worker"])
    assert served == []
