import math
from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ai_commit.utils import get_default_language

DIFF_PLACEHOLDER = "{{diff}}"
LANGUAGE_PLACEHOLDER = "{{language}}"


class PromptVersion(str, Enum):
    A = "prompt_A"
    B = "prompt_B"
    C = "prompt_C"


class TemplateMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: PromptVersion
    description: str


class TemplatePrompts(BaseModel):
    model_config = ConfigDict(frozen=True)

    system: str | None = None
    user: str

    @field_validator("user")
    @classmethod
    def _single_diff_placeholder(cls, value: str) -> str:
        count = value.count(DIFF_PLACEHOLDER)
        if count != 1:
            raise ValueError(
                f"user prompt must contain exactly one {DIFF_PLACEHOLDER} placeholder, found {count}"  # noqa: E501
            )
        return value


class PromptTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    meta: TemplateMeta
    prompts: TemplatePrompts

    @property
    def version(self) -> PromptVersion:
        return self.meta.name


class GenerationRequest(BaseModel):
    """Input to CommitEngine.generate.

    prompt_version stays a plain string here; it is checked against the
    registered versions inside the pipeline.
    """

    model_config = ConfigDict(frozen=True)

    diff: str
    model: str
    prompt_version: str = PromptVersion.A.value
    language: str = Field(default_factory=get_default_language)


class CommitMsgCandidate(BaseModel):
    """Record parsed out of a raw model reply, before scanning and formatting."""

    model_config = ConfigDict(extra="ignore")

    subject: str
    body: str = ""
    breaking: bool = False
    score: int = 0
    reason: str = ""

    @field_validator("body", "reason", "breaking", "score", mode="before")
    @classmethod
    def _null_means_default(cls, value, info):
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("score", mode="before")
    @classmethod
    def _whole_score(cls, value):
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError("score must be a finite number")
            return int(value)
        return value


class CommitMsg(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject: str
    body: str = ""
    breaking: bool = False
    score: int = 0
    reason: str = ""

    @property
    def full_message(self) -> str:
        """Message text as handed to git."""
        if self.body:
            return f"{self.subject}\n\n{self.body}"
        return self.subject


class SensitiveInfoReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_secrets: bool
    issues: Tuple[str, ...] = ()


class DatasetRow(BaseModel):
    """One line of an evaluation dataset."""

    model_config = ConfigDict(extra="ignore")

    diff: str
    ground_truth: str
    type: str
    breaking: bool = False

    @field_validator("diff", "ground_truth", "type")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class EvaluationResult(BaseModel):
    model: str
    prompt_version: str
    style: float
    semantic: float
    safety: float
    processed: int
    total: int
