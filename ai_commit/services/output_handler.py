import logging
import pyperclip

logger = logging.getLogger(__name__)


def save_message_to_file(message: str, filepath: str) -> bool:
    """Saves a commit message to a file, e.g. for `git commit -F`."""
    try:
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(message if message.endswith("\n") else message + "\n")
        return True
    except OSError as e:
        logger.error(f"Failed to save commit message: {e}")
        return False


def copy_to_clipboard(text: str) -> bool:
    """Copies the given text to the system clipboard."""
    try:
        pyperclip.copy(text)
        return True
    except pyperclip.PyperclipException as e:
        logger.error(f"Clipboard error: {e}")
        return False
