"""CLI entry point for ai-commit."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel

import ai_commit.tui as tui
from ai_commit.config import Settings, load_settings
from ai_commit.core import apply_commit, get_last_commit_diff, get_staged_diff, read_diff_file
from ai_commit.engine import CommitEngine
from ai_commit.evaluate import load_dataset, pick_best, render_results, run_evaluation
from ai_commit.exceptions import AICommitError, ConfigurationError, GenerationFailed, GitError
from ai_commit.model_config import ModelConfigManager
from ai_commit.providers import get_provider
from ai_commit.schemas import CommitMsg, GenerationRequest
from ai_commit.services.output_handler import copy_to_clipboard, save_message_to_file
from ai_commit.template_loader import PromptRegistry
from ai_commit.utils import count_tokens, get_default_language, save_data_to_file, setup_logging

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="ai-commit",
    help="Generate policy-compliant commit messages from diffs with an LLM",
    add_completion=False,
)
console = Console()

PROVIDER_HELP = ", ".join(ModelConfigManager.providers())


def _is_interactive() -> bool:
    return sys.stdin.isatty()


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/] {message}")
    raise typer.Exit(code=1)


def _settings_for(provider: Optional[str]) -> Settings:
    settings = load_settings()
    if provider:
        settings = settings.model_copy(update={"provider": provider})
    return settings


def _read_diff(repo: str, diff: Optional[str], file: Optional[Path], last: bool) -> str:
    if diff is not None:
        return diff
    if file is not None:
        return read_diff_file(str(file))
    if last:
        return get_last_commit_diff(repo)
    return get_staged_diff(repo)


async def _generate_message(settings: Settings, request: GenerationRequest) -> CommitMsg:
    provider = get_provider(settings.provider, settings)
    async with provider:
        engine = CommitEngine(settings, provider)
        return await engine.generate(request)


def _print_message(message: CommitMsg) -> None:
    title = "Commit message"
    if message.breaking:
        title += " [bold red](BREAKING)[/]"
    console.print(Panel(message.full_message, title=title, expand=False))
    if message.score or message.reason:
        console.print(f"   Score: {message.score}  {message.reason}", style="dim")


def _commit(repo: str, message: CommitMsg, amend: bool, yes: bool) -> None:
    if not yes and _is_interactive() and not tui.confirm_commit(message.subject, amend=amend):
        console.print("Commit cancelled.", style="yellow")
        return
    try:
        sha = apply_commit(repo, message.full_message, amend=amend)
    except GitError as e:
        logger.error("Commit failed", exc_info=True)
        _fail(str(e))
    console.print(f"✅ {'Amended' if amend else 'Committed'} {sha[:7]}", style="bold green")


def _handle_action(action: Optional[str], repo: str, message: CommitMsg, yes: bool) -> None:
    if action in ("commit", "amend"):
        _commit(repo, message, amend=action == "amend", yes=yes)
    elif action == "clipboard":
        if copy_to_clipboard(message.full_message):
            console.print("✅ Message copied to clipboard.", style="bold green")
    elif action == "file":
        filename = tui.get_message_filename()
        if filename and save_message_to_file(message.full_message, filename):
            console.print(f"✅ Saved to {filename}", style="green")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
) -> None:
    setup_logging(logging.DEBUG if verbose else logging.INFO)


@app.command()
def generate(
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model name"),
    prompt: Optional[str] = typer.Option(None, "--prompt", "-p", help="Prompt version"),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Output language"),
    provider: Optional[str] = typer.Option(None, "--provider", help=PROVIDER_HELP),
    diff: Optional[str] = typer.Option(None, "--diff", help="Use this diff text"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read the diff from a file"),
    last: bool = typer.Option(False, "--last", help="Describe the last commit instead of staged changes"),
    repo: str = typer.Option(".", "--repo", help="Repository path"),
    commit: bool = typer.Option(False, "--commit", "-c", help="Commit staged changes with the message"),
    amend: bool = typer.Option(False, "--amend", help="Amend the last commit with the message"),
    copy: bool = typer.Option(False, "--copy", help="Copy the message to the clipboard"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the message to a file"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Generate a commit message for staged changes (or another diff source)."""
    settings = _settings_for(provider)

    try:
        diff_text = _read_diff(repo, diff, file, last)
    except GitError as e:
        _fail(str(e))

    if not diff_text.strip():
        staged = diff is None and file is None and not last
        console.print("No staged changes." if staged else "Diff is empty.")
        return

    console.print(f"   📊  Diff size: ~{count_tokens(diff_text)} tokens", style="dim")

    request = GenerationRequest(
        diff=diff_text,
        model=model or settings.resolve_model(),
        prompt_version=prompt or settings.prompt_version,
        language=language or settings.language or get_default_language(),
    )

    try:
        message = asyncio.run(_generate_message(settings, request))
    except (GenerationFailed, ConfigurationError) as e:
        logger.error("Generation failed", exc_info=True)
        _fail(str(e))

    _print_message(message)

    if amend or commit:
        _commit(repo, message, amend=amend, yes=yes)
    if copy:
        _handle_action("clipboard", repo, message, yes)
    if output is not None:
        if save_message_to_file(message.full_message, str(output)):
            console.print(f"✅ Saved to {output}", style="green")

    if not (amend or commit or copy or output) and _is_interactive():
        _handle_action(tui.get_commit_action(), repo, message, yes=True)


@app.command()
def evaluate(
    dataset: Path = typer.Argument(..., help="JSONL dataset with diff, ground_truth and type"),
    model: Optional[List[str]] = typer.Option(None, "--model", "-m", help="Model(s) to evaluate"),
    prompt: Optional[List[str]] = typer.Option(None, "--prompt", "-p", help="Prompt version(s)"),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Output language"),
    provider: Optional[str] = typer.Option(None, "--provider", help=PROVIDER_HELP),
    compare: bool = typer.Option(False, "--compare", help="Report the best combination"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save results as JSON"),
) -> None:
    """Score model and prompt-version combinations against a dataset."""
    settings = _settings_for(provider)
    models = model or [settings.resolve_model()]
    registry = PromptRegistry()
    versions = prompt or [v.value for v in registry.versions]

    try:
        rows = load_dataset(dataset)
    except AICommitError as e:
        _fail(str(e))

    console.print(f"Models: {', '.join(models)}  Prompts: {', '.join(versions)}")

    async def _run():
        llm = get_provider(settings.provider, settings)
        async with llm:
            engine = CommitEngine(settings, llm, registry)
            return await run_evaluation(engine, rows, models, versions, language or settings.language)

    try:
        results = asyncio.run(_run())
    except ConfigurationError as e:
        _fail(str(e))

    if not results:
        _fail("No evaluation produced results.")

    render_results(console, results)

    if compare:
        best = pick_best(results)
        console.print(
            f"🏆 Best combo: {best.model} / {best.prompt_version} "
            f"(style {best.style:.2%}, semantic {best.semantic:.2%})",
            style="bold green",
        )

    if output is not None and save_data_to_file(results, str(output)):
        console.print(f"✅ Saved results to {output}", style="green")


def run_app():
    app()


if __name__ == "__main__":
    run_app()
