# ai_commit/tui.py

"""
Terminal prompts used when the CLI is run without an explicit action.
"""

import questionary


def get_commit_action():
    """Asks what to do with a generated commit message."""
    return questionary.select(
        "What do you want to do with this message?",
        choices=[
            questionary.Choice("✅ Commit staged changes", value="commit"),
            questionary.Choice("✏️  Amend the last commit", value="amend"),
            questionary.Separator(),
            questionary.Choice("📋 Copy to Clipboard", value="clipboard"),
            questionary.Choice("💾 Save to File", value="file"),
            questionary.Separator(),
            questionary.Choice("❌ Cancel", value="cancel"),
        ],
    ).ask()


def get_message_filename(default_name="COMMIT_MSG.txt"):
    return questionary.text("Enter filename:", default=default_name).ask()


def confirm_commit(subject: str, amend: bool = False):
    verb = "Amend the last commit" if amend else "Commit"
    return questionary.confirm(f"{verb} with:\n   📝 {subject}").ask()
