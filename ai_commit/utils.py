import json
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable
import tiktoken
from appdirs import AppDirs
from pydantic import BaseModel

# Initialize AppDirs
dirs = AppDirs("ai-commit", "ai-commit")
LOG_DIR = Path(dirs.user_log_dir)
LOG_FILE_NAME = "ai_commit.log"

ENGLISH_ALIASES = {"en", "english", "eng"}


def count_tokens(text: str, model: str = "gpt-4") -> int:
    """
    Returns the number of tokens in a text string using tiktoken.
    Falls back to cl100k_base for models tiktoken does not know.
    """
    try:
        encoding = tiktoken.encoding_for_model(model)
        return len(encoding.encode(text))
    except Exception as e:
        encoding = tiktoken.get_encoding("cl100k_base")
        logging.getLogger(__name__).debug(
            f"No tiktoken encoding for '{model}', falling back: {e}"
        )
        return len(encoding.encode(text, disallowed_special=()))


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configures application-wide logging with rotation and UTF-8 support."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_handler = RotatingFileHandler(
        LOG_DIR / LOG_FILE_NAME,
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=1,
        encoding="utf-8",
    )
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[log_handler],
    )
    return logging.getLogger("ai_commit")


def get_default_language() -> str:
    """Picks the output language from the system locale ('en' or 'zh')."""
    locale = (
        os.environ.get("LANG")
        or os.environ.get("LC_ALL")
        or os.environ.get("LC_CTYPE")
        or "zh_CN.UTF-8"
    )
    return "en" if locale.startswith("en") else "zh"


def is_english(language: str) -> bool:
    return language.strip().lower() in ENGLISH_ALIASES


def save_data_to_file(data: Iterable[BaseModel], output_path: str) -> bool:
    """
    Writes a sequence of Pydantic models to a JSON file.
    """
    try:
        output_path_obj = Path(output_path)
        output_path_obj.parent.mkdir(parents=True, exist_ok=True)

        data_as_dicts = [item.model_dump(mode="json") for item in data]

        with open(output_path_obj, "w", encoding="utf-8") as f:
            json.dump(data_as_dicts, f, indent=4, ensure_ascii=False)

        return True
    except (TypeError, IOError) as e:
        logging.getLogger(__name__).error(
            f"Failed to save data to {output_path}: {e}", exc_info=True
        )
        return False
