import os
import tempfile

import pytest

# Keep generated files out of the source tree; must run before shortreel.config is imported
os.environ.setdefault("SHORTREEL_OUTPUT_DIR", tempfile.mkdtemp(prefix="shortreel-test-"))

CAPABILITY_ENV_VARS = (
    "LLM_PROVIDER",
    "GEMINI_API_KEY",
    "OLLAMA_HOST",
    "ELEVENLABS_API_KEY",
    "GOOGLE_CLOUD_TTS_KEY",
    "GEMINI_TTS_VOICE",
    "EDGE_TTS_VOICE",
    "UNSPLASH_ACCESS_KEY",
    "PEXELS_API_KEY",
)


@pytest.fixture(autouse=True)
def clear_capability_env(monkeypatch):
    """No test talks to a real vendor unless it sets credentials itself."""
    for name in CAPABILITY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def fresh_job_manager():
    """Each test gets an empty registry and no live runner."""
    from shortreel.services.infrastructure.orchestration import reset_job_manager, set_job_runner

    manager = reset_job_manager()
    yield manager
    reset_job_manager()
    set_job_runner(None)
