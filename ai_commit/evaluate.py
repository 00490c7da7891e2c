"""Offline evaluation of model / prompt-version combinations.

A dataset is a JSONL file whose lines carry ``diff``, ``ground_truth``
(e.g. ``"feat: add login"``), ``type`` (e.g. ``"feat"``) and optionally
``breaking``. Every combination is scored on three ratios:

- style: subject starts with the expected type, fits in 50 characters and
  does not open with a past-tense filler word
- semantic: the ground-truth description appears in the subject
- safety: no API key, email address or private IP in subject or body; a
  message the engine rejects as sensitive still counts as processed
"""

import json
import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ai_commit.engine import CommitEngine
from ai_commit.exceptions import DatasetError, GenerationFailed, SensitiveContentDetected
from ai_commit.formatter import SUBJECT_MAX_LENGTH
from ai_commit.scanner import API_KEY, EMAIL, PRIVATE_IP, scan
from ai_commit.schemas import CommitMsg, DatasetRow, EvaluationResult, GenerationRequest

logger = logging.getLogger(__name__)

_NON_IMPERATIVE = re.compile(r"^(updated?|modified?|changed?|fixed?)\s", re.IGNORECASE)
_UNSAFE_ISSUES = {API_KEY, EMAIL, PRIVATE_IP}


def load_dataset(path: str | Path) -> List[DatasetRow]:
    """Reads a JSONL dataset, skipping blank, unparsable and incomplete lines."""
    dataset_path = Path(path)
    try:
        lines = dataset_path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise DatasetError(f"Failed to load dataset '{dataset_path}': {e}") from e

    rows: List[DatasetRow] = []
    for line_number, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            rows.append(DatasetRow.model_validate(json.loads(line)))
        except json.JSONDecodeError:
            logger.warning(f"Skipping line {line_number}: invalid JSON")
        except ValidationError as e:
            logger.warning(f"Skipping line {line_number}: missing required fields ({e.error_count()} errors)")

    if not rows:
        raise DatasetError(f"Dataset '{dataset_path}' is empty or malformed")

    logger.info(f"Loaded {len(rows)} rows from {dataset_path}")
    return rows


def expected_description(ground_truth: str) -> str:
    parts = ground_truth.split(":")
    return parts[1].strip() if len(parts) > 1 else ground_truth


def score_prediction(prediction: CommitMsg, row: DatasetRow) -> Tuple[bool, bool, bool]:
    """Returns (style_ok, semantic_ok, safe) for one generated message."""
    subject = prediction.subject
    style_ok = (
        subject.startswith(row.type)
        and len(subject) <= SUBJECT_MAX_LENGTH
        and not _NON_IMPERATIVE.match(subject)
    )
    semantic_ok = expected_description(row.ground_truth).lower() in subject.lower()
    report = scan(f"{subject}\n{prediction.body}")
    safe = not _UNSAFE_ISSUES.intersection(report.issues)
    return style_ok, semantic_ok, safe


async def evaluate(
    engine: CommitEngine,
    rows: Sequence[DatasetRow],
    model: str,
    prompt_version: str,
    language: Optional[str] = None,
) -> EvaluationResult:
    style = semantic = safety = processed = 0

    logger.info(f"Evaluating model={model} prompt={prompt_version}")
    for index, row in enumerate(rows, start=1):
        request_fields = {"diff": row.diff, "model": model, "prompt_version": prompt_version}
        if language:
            request_fields["language"] = language
        try:
            prediction = await engine.generate(GenerationRequest(**request_fields))
        except GenerationFailed as e:
            if isinstance(e.cause, SensitiveContentDetected):
                # Rejected messages still count; only the safety checks can score them
                logger.warning(f"Row {index} produced sensitive content: {e}")
                safety += not _UNSAFE_ISSUES.intersection(e.cause.issues)
                processed += 1
                continue
            logger.warning(f"Skipping row {index}, generation failed: {e}")
            continue

        style_ok, semantic_ok, safe = score_prediction(prediction, row)
        style += style_ok
        semantic += semantic_ok
        safety += safe
        processed += 1

    if processed == 0:
        raise DatasetError(f"No rows could be processed for {model} / {prompt_version}")

    return EvaluationResult(
        model=model,
        prompt_version=prompt_version,
        style=style / processed,
        semantic=semantic / processed,
        safety=safety / processed,
        processed=processed,
        total=len(rows),
    )


async def run_evaluation(
    engine: CommitEngine,
    rows: Sequence[DatasetRow],
    models: Iterable[str],
    prompt_versions: Iterable[str],
    language: Optional[str] = None,
) -> List[EvaluationResult]:
    """Evaluates every model x prompt version pair; failed pairs are left out."""
    versions = list(prompt_versions)
    results: List[EvaluationResult] = []
    for model in models:
        for version in versions:
            try:
                results.append(await evaluate(engine, rows, model, version, language))
            except DatasetError as e:
                logger.error(f"Evaluation failed ({model}, {version}): {e}")
    return results


def pick_best(results: Sequence[EvaluationResult]) -> Optional[EvaluationResult]:
    if not results:
        return None
    return max(results, key=lambda r: r.style + r.semantic)


def render_results(console: Console, results: Sequence[EvaluationResult]) -> None:
    table = Table(title="Evaluation results")
    table.add_column("Model")
    table.add_column("Prompt")
    table.add_column("Style", justify="right")
    table.add_column("Semantic", justify="right")
    table.add_column("Safety", justify="right")
    table.add_column("Processed", justify="right")

    for result in results:
        table.add_row(
            result.model,
            result.prompt_version,
            f"{result.style:.2%}",
            f"{result.semantic:.2%}",
            f"{result.safety:.2%}",
            f"{result.processed}/{result.total}",
        )
    console.print(table)
