import pytest
import git

from ai_commit.config import Settings
from ai_commit.providers import LLMProvider

_ENV_VARS = (
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "XAI_API_KEY",
    "GEMINI_API_KEY",
    "OLLAMA_BASE_URL",
    "OLLAMA_MODEL",
    "AI_COMMIT_PROVIDER",
    "MODEL_NAME",
    "PROMPT_VERSION",
    "AI_COMMIT_LANGUAGE",
    "AI_COMMIT_MAX_OUTPUT_TOKENS",
    "AI_COMMIT_MAX_ATTEMPTS",
    "AI_COMMIT_RETRY_DELAY",
    "AI_COMMIT_REQUEST_TIMEOUT",
    "LANGUAGE",
    "PROVIDER",
    "MAX_ATTEMPTS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keeps the developer's environment out of the settings under test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class FakeProvider(LLMProvider):
    """
    Scripted provider: each call consumes the next reply (the last one
    repeats). Exceptions in the script are raised instead of returned.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    async def complete(self, model, prompt, max_output_tokens, temperature):
        self.calls.append(
            {
                "model": model,
                "prompt": prompt,
                "max_output_tokens": max_output_tokens,
                "temperature": temperature,
            }
        )
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def fake_provider():
    """Factory fixture: fake_provider('{"subject": "..."}', ...)."""
    return FakeProvider


@pytest.fixture
def settings():
    return Settings(_env_file=None, openai_api_key="sk-test", retry_delay=0)


@pytest.fixture
def temp_git_repo(tmp_path):
    """
    Creates a temporary git repo with one commit.
    returns the path to the repo.
    """
    repo_dir = tmp_path / "test_repo"
    repo_dir.mkdir()

    repo = git.Repo.init(repo_dir)

    # Configure author (required for commits)
    repo.config_writer().set_value("user", "name", "Test Bot").release()
    repo.config_writer().set_value("user", "email", "test@bot.com").release()
    repo.config_writer().set_value("commit", "gpgsign", "false").release()

    # Create a file and commit it (History)
    file_path = repo_dir / "hello.py"
    file_path.write_text("print('Hello World')\n")
    repo.index.add([str(file_path)])
    repo.index.commit("Initial commit")
    repo.close()

    return repo_dir
