import pytest
import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from dotenv import load_dotenv

from codar_assistant.config import Settings
from codar_assistant.llm.client import LLMClient
from codar_assistant.llm.models import ModelOption
from codar_assistant.pipeline.dispatch import CompletionDispatcher
from codar_assistant.router import EventRouter, SlackIO
from codar_assistant.schemas.conversation import BotIdentity
from codar_assistant.store.preferences import ModelPreferenceStore

DEFAULT_MODEL = "meta-llama/llama-4-maverick"
BOT = BotIdentity(user_id="UBOT", bot_id="BBOT")

@pytest.fixture(scope="session", autouse=True)
def _load_env():
    # Load .env once per session to avoid side-effects on import time
    load_dotenv()

def _truthy(v: str | None) -> bool:
    return v is not None and v.strip().lower() not in ("", "0", "false", "no")

@pytest.fixture(scope="session")
def allow_integration(_load_env) -> bool:
    return _truthy(os.getenv("RUN_INTEGRATION_TESTS"))

@pytest.fixture
def settings():
    """Settings built from explicit values so tests never depend on the environment."""
    return Settings(
        _env_file=None,
        SLACK_BOT_TOKEN="xoxb-test",
        SLACK_APP_TOKEN="xapp-test",
        OPENROUTER_API_KEY="sk-or-test",
    )

def completion_response(content):
    """Shape of an OpenAI chat completion with a single choice."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=None,
    )

@pytest.fixture
def make_completion():
    return completion_response

@pytest.fixture
def openai_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=completion_response("Model answer"))
    return client

@pytest.fixture
def llm(openai_client):
    return LLMClient(api_key="sk-or-test", client=openai_client)

@pytest.fixture
def store():
    return ModelPreferenceStore(default_model=DEFAULT_MODEL)

@pytest.fixture
def dispatcher(llm, store):
    return CompletionDispatcher(llm, store, system="SYSTEM")

@pytest.fixture
def catalog():
    return [
        ModelOption(name="Llama 4 Maverick", id=DEFAULT_MODEL),
        ModelOption(name="GPT-4o", id="openai/gpt-4o"),
    ]

@pytest.fixture
def router(dispatcher, store, catalog):
    return EventRouter(dispatcher, store, catalog)

@pytest.fixture
def slack_client():
    """AsyncWebClient stand-in: every API method is an AsyncMock."""
    client = AsyncMock()
    client.conversations_replies.return_value = {"ok": True, "messages": []}
    client.conversations_history.return_value = {"ok": True, "messages": []}
    client.chat_postMessage.return_value = {"ok": True, "ts": "999.000"}
    return client

@pytest.fixture
def say():
    return AsyncMock(return_value={"ok": True})

@pytest.fixture
def io(slack_client, say):
    return SlackIO(
        client=slack_client,
        bot=BOT,
        say=say,
        ack=AsyncMock(),
        set_status=AsyncMock(),
        set_title=AsyncMock(),
        set_suggested_prompts=AsyncMock(),
        save_thread_context=AsyncMock(),
        get_thread_context=AsyncMock(return_value=None),
        complete=AsyncMock(),
        fail=AsyncMock(),
    )
