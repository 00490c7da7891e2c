"""Pattern checks for secrets that should never land in commit history."""

import re
from typing import List, Pattern, Tuple

from ai_commit.schemas import SensitiveInfoReport

API_KEY = "possible API key"
EMAIL = "email address"
PRIVATE_IP = "private IP address"
PASSWORD = "possible password"

# Order here is the order of SensitiveInfoReport.issues.
CHECKS: Tuple[Tuple[str, Pattern[str]], ...] = (
    (API_KEY, re.compile(r"sk-[A-Za-z0-9]{20,}")),
    (EMAIL, re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")),
    (
        PRIVATE_IP,
        re.compile(
            r"\b(?:10(?:\.\d{1,3}){3}"
            r"|172\.(?:1[6-9]|2[0-9]|3[01])(?:\.\d{1,3}){2}"
            r"|192\.168(?:\.\d{1,3}){2})\b"
        ),
    ),
    (PASSWORD, re.compile(r"password\s*[:=]\s*['\"]?[^\s'\"]+", re.IGNORECASE)),
)


def scan(text: str) -> SensitiveInfoReport:
    """Runs every check against ``text``; each match adds its label once."""
    issues: List[str] = [label for label, pattern in CHECKS if pattern.search(text)]
    return SensitiveInfoReport(has_secrets=bool(issues), issues=tuple(issues))
