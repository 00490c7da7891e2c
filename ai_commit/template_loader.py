import json
import logging
from pathlib import Path
from typing import Dict, Mapping
from pydantic import ValidationError
from ai_commit.exceptions import UnsupportedPromptVersion
from ai_commit.schemas import (
    DIFF_PLACEHOLDER,
    LANGUAGE_PLACEHOLDER,
    PromptTemplate,
    PromptVersion,
)

logger = logging.getLogger(__name__)

# Packaged prompt templates live next to this module -> <package>/templates
TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


def load_templates() -> Dict[PromptVersion, PromptTemplate]:
    """
    Scans the 'templates/' directory, validates each file against the
    PromptTemplate schema and returns the valid ones keyed by version.
    """
    templates: Dict[PromptVersion, PromptTemplate] = {}

    if not TEMPLATE_DIR.is_dir():
        logger.warning(f"Template directory '{TEMPLATE_DIR}' not found.")
        return templates

    for file_path in sorted(TEMPLATE_DIR.glob("*.json")):
        try:
            with file_path.open("r", encoding="utf-8") as f:
                data = json.load(f)

            validated_template = PromptTemplate.model_validate(data)
            if validated_template.version in templates:
                logger.warning(
                    f"Duplicate template for '{validated_template.version.value}' in '{file_path.name}', ignoring."  # noqa: E501
                )
                continue
            templates[validated_template.version] = validated_template

        except ValidationError as e:
            logger.error(f"Validation failed for '{file_path.name}': {e}")
        except json.JSONDecodeError:
            logger.error(f"Invalid JSON in '{file_path.name}'.")
        except OSError as e:
            logger.error(f"Failed to load template '{file_path.name}': {e}", exc_info=True)

    return templates


def render_prompt(template: PromptTemplate, diff: str, language: str) -> str:
    """
    Fills the template's placeholders. The template is split at {{diff}}
    first, so neither the diff nor the language value is ever scanned for
    placeholders.
    """
    head, _, tail = template.prompts.user.partition(DIFF_PLACEHOLDER)
    head = head.replace(LANGUAGE_PLACEHOLDER, language)
    tail = tail.replace(LANGUAGE_PLACEHOLDER, language)
    return f"{head}{diff}{tail}"


class PromptRegistry:
    """Read-only lookup of prompt templates by version."""

    def __init__(self, templates: Mapping[PromptVersion, PromptTemplate] | None = None):
        self._templates: Dict[PromptVersion, PromptTemplate] = dict(
            load_templates() if templates is None else templates
        )

    @property
    def versions(self) -> list[PromptVersion]:
        return [v for v in PromptVersion if v in self._templates]

    def resolve(self, version: str) -> PromptTemplate:
        try:
            key = PromptVersion(version)
        except ValueError:
            raise UnsupportedPromptVersion(str(version)) from None
        template = self._templates.get(key)
        if template is None:
            raise UnsupportedPromptVersion(key.value)
        return template

    def render(self, template: PromptTemplate, diff: str, language: str) -> str:
        return render_prompt(template, diff, language)
