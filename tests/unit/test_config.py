"""
Tests for backend configuration and environment-driven infrastructure setup.
"""

import pytest

from config import Config
from inference import BackendConfig, OllamaGateway, StubGateway
from inference.types import DEFAULT_BASE_URL, DEFAULT_MODEL_NAME, DEFAULT_TIMEOUT_MS
from engine.tracing import NoOpTracer, StoreTracer
from infra import InfraConfig, bootstrap_engine

_ENV_KEYS = [
    "LLM_BACKEND",
    "OLLAMA_BASE_URL",
    "OLLAMA_MODEL",
    "OLLAMA_MODEL_FAMILY",
    "AI_TIMEOUT_MS",
    "AI_TEMPERATURE",
    "AI_MAX_TOKENS",
    "AI_PROBE_INTERVAL_S",
    "AI_STATUS_TTL_S",
    "TRACER_BACKEND",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestBackendConfig:
    def test_defaults(self):
        cfg = BackendConfig()
        assert cfg.base_url == DEFAULT_BASE_URL
        assert cfg.model_name == DEFAULT_MODEL_NAME
        assert cfg.timeout_ms == DEFAULT_TIMEOUT_MS
        assert cfg.temperature == 0.7
        assert cfg.max_tokens == 1000

    @pytest.mark.parametrize("temperature", [0.0, 2.0])
    def test_temperature_bounds_inclusive(self, temperature):
        assert BackendConfig(temperature=temperature).temperature == temperature

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"temperature": -0.1},
            {"temperature": 2.1},
            {"max_tokens": 49},
            {"max_tokens": 4001},
            {"timeout_ms": 0},
            {"model_name": ""},
            {"base_url": ""},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            BackendConfig(**kwargs)

    def test_family_defaults_to_name_prefix(self):
        assert BackendConfig(model_name="gpt-oss:20b").family == "gpt-oss"
        assert BackendConfig(model_name="gpt-oss:20b", model_family="gpt").family == "gpt"

    def test_server_root_strips_openai_suffix(self):
        assert BackendConfig(base_url="http://localhost:11434/v1/").server_root == "http://localhost:11434"
        assert BackendConfig(base_url="http://box:11434").server_root == "http://box:11434"

    def test_with_overrides_returns_copy(self):
        cfg = BackendConfig()
        changed = cfg.with_overrides(temperature=0.2, max_tokens=None)

        assert changed is not cfg
        assert changed.temperature == 0.2
        assert changed.max_tokens == cfg.max_tokens
        assert cfg.temperature == 0.7


class TestInfraConfig:
    def test_defaults_from_env(self, clean_env):
        cfg = InfraConfig.from_env()

        assert cfg.llm_backend == "ollama"
        assert cfg.ollama_base_url == DEFAULT_BASE_URL
        assert cfg.ollama_model == DEFAULT_MODEL_NAME
        assert cfg.ollama_model_family is None
        assert cfg.timeout_ms == DEFAULT_TIMEOUT_MS
        assert cfg.probe_interval_s == 30.0
        assert cfg.status_ttl_s == 30.0
        assert cfg.tracer_backend == "noop"

    def test_overrides_from_env(self, clean_env):
        clean_env.setenv("LLM_BACKEND", "STUB")
        clean_env.setenv("OLLAMA_MODEL", "llama3:8b")
        clean_env.setenv("AI_TIMEOUT_MS", "5000")
        clean_env.setenv("AI_TEMPERATURE", "0.1")
        clean_env.setenv("AI_MAX_TOKENS", "256")
        clean_env.setenv("TRACER_BACKEND", "local")

        cfg = InfraConfig.from_env()
        backend = cfg.backend_config()

        assert cfg.llm_backend == "stub"
        assert backend.model_name == "llama3:8b"
        assert backend.timeout_ms == 5000
        assert backend.temperature == 0.1
        assert backend.max_tokens == 256

    def test_out_of_range_env_rejected(self, clean_env):
        clean_env.setenv("AI_TEMPERATURE", "5")
        with pytest.raises(ValueError):
            InfraConfig.from_env().backend_config()

    def test_gateway_selection(self, clean_env):
        assert isinstance(InfraConfig.from_env().create_gateway(), OllamaGateway)
        clean_env.setenv("LLM_BACKEND", "stub")
        assert isinstance(InfraConfig.from_env().create_gateway(), StubGateway)


class TestBootstrap:
    def test_wires_shared_components(self, clean_env):
        clean_env.setenv("LLM_BACKEND", "stub")
        clean_env.setenv("TRACER_BACKEND", "local")

        svc = bootstrap_engine()

        assert isinstance(svc.gateway, StubGateway)
        assert isinstance(svc.tracer, StoreTracer)
        assert svc.tracer.store is svc.store
        assert svc.engine.monitor is svc.monitor
        assert svc.engine.gateway is svc.processor.gateway is svc.gateway
        assert svc.sessions.engine is svc.engine

    def test_injected_gateway_wins(self, clean_env):
        gateway = StubGateway()
        svc = bootstrap_engine(gateway=gateway)

        assert svc.gateway is gateway
        assert isinstance(svc.tracer, NoOpTracer)


class TestServiceConfig:
    def test_valid_defaults(self, monkeypatch):
        monkeypatch.setattr(Config, "LLM_BACKEND", "ollama")
        monkeypatch.setattr(Config, "OLLAMA_MODEL", "gpt-oss:20b")
        assert Config.validate() is True

    def test_unknown_backend_logged(self, monkeypatch, caplog):
        monkeypatch.setattr(Config, "LLM_BACKEND", "openai")
        with caplog.at_level("WARNING", logger="config"):
            assert Config.validate() is False
        assert "Unknown LLM_BACKEND 'openai'" in caplog.text

    def test_missing_model_logged(self, monkeypatch, caplog, capsys):
        monkeypatch.setattr(Config, "LLM_BACKEND", "ollama")
        monkeypatch.setattr(Config, "OLLAMA_MODEL", "")
        with caplog.at_level("WARNING", logger="config"):
            assert Config.validate() is False
        assert "OLLAMA_MODEL" in caplog.text
        assert capsys.readouterr().out == ""

    def test_stub_backend_needs_no_ollama_settings(self, monkeypatch):
        monkeypatch.setattr(Config, "LLM_BACKEND", "stub")
        monkeypatch.setattr(Config, "OLLAMA_MODEL", "")
        assert Config.validate() is True
