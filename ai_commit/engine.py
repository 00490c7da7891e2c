import logging

from ai_commit.config import Settings
from ai_commit.exceptions import (
    EmptyDiff,
    EmptyResponse,
    GenerationFailed,
    MissingRequiredField,
    ProviderError,
    SensitiveContentDetected,
)
from ai_commit.formatter import format_commit_message
from ai_commit.parsing import extract_record
from ai_commit.providers import LLMProvider
from ai_commit.retry import run_with_retry
from ai_commit.scanner import scan
from ai_commit.schemas import CommitMsg, GenerationRequest
from ai_commit.template_loader import PromptRegistry

logger = logging.getLogger(__name__)

TEMPERATURE = 0.3


class CommitEngine:
    """
    Turns a diff into a validated, formatted commit message.
    Orchestrates Prompt -> Provider (with retry) -> Parse -> Scan -> Format.

    The engine holds no per-call state, so one instance can serve
    concurrent generate() calls.
    """

    def __init__(
        self,
        settings: Settings,
        provider: LLMProvider,
        registry: PromptRegistry | None = None,
    ):
        settings.validate_for(settings.provider)
        self.settings = settings
        self.provider = provider
        self.registry = registry or PromptRegistry()

    async def generate(self, request: GenerationRequest) -> CommitMsg:
        """
        Runs the whole pipeline for one request.

        Any failure is raised as GenerationFailed, with the original
        exception available as ``cause``.
        """
        try:
            return await self._generate(request)
        except GenerationFailed:
            raise
        except Exception as e:
            logger.debug(f"Commit message generation failed: {e!r}")
            raise GenerationFailed(e) from e

    async def _generate(self, request: GenerationRequest) -> CommitMsg:
        if not request.diff.strip():
            raise EmptyDiff("Diff is empty, nothing to describe")

        template = self.registry.resolve(request.prompt_version)
        prompt = self.registry.render(template, request.diff, request.language)
        logger.info(
            f"Requesting {request.model} with {template.version.value} "
            f"({len(prompt)} chars, language={request.language})"
        )

        raw_reply = await run_with_retry(
            lambda: self.provider.complete(
                request.model, prompt, self.settings.max_output_tokens, TEMPERATURE
            ),
            max_attempts=self.settings.max_attempts,
            initial_delay=self.settings.retry_delay,
            retry_on=(ProviderError,),
        )
        if not raw_reply or not raw_reply.strip():
            raise EmptyResponse("Model returned an empty response")
        logger.debug(f"Raw model reply: {raw_reply!r}")

        candidate = extract_record(raw_reply)

        report = scan(f"{candidate.subject}\n{candidate.body}")
        if report.has_secrets:
            raise SensitiveContentDetected(report.issues)

        formatted = format_commit_message(candidate.subject, candidate.body)
        if not formatted.subject:
            # e.g. a subject that was only a terminator
            raise MissingRequiredField("subject")
        return CommitMsg(
            subject=formatted.subject,
            body=formatted.body,
            breaking=candidate.breaking,
            score=candidate.score,
            reason=candidate.reason,
        )
