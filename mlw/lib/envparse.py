"""
Safe KEY=value config file parser.

Reads env-style files without shell execution. Values that look like
shell expansion or command chaining are rejected outright.
"""

import re
from pathlib import Path

FORBIDDEN_PATTERNS = [
    r'`',           # backticks
    r'\$\(',        # command substitution
    r'\$\{',        # variable expansion
    r';',           # command chaining
    r'\|',          # pipe / OR chaining
    r'&&',          # AND chaining
]

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def load_env(path: Path) -> dict[str, str]:
    """
    Parse an env file and return its keys and values.

    Blank lines and lines starting with '#' are skipped. An optional
    leading 'export ' is accepted.

    Raises:
        FileNotFoundError: if file doesn't exist
        ValueError: if syntax invalid or forbidden pattern found
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    result: dict[str, str] = {}
    for lineno, raw in enumerate(path.read_text().splitlines(), 1):
        line = raw.strip()
        if not line or line.startswith('#'):
            continue
        if line.startswith('export '):
            line = line[len('export '):].lstrip()

        key, sep, value = line.partition('=')
        if not sep:
            raise ValueError(f"{path.name}:{lineno}: expected KEY=value")

        key = key.strip()
        if not KEY_PATTERN.match(key):
            raise ValueError(f"{path.name}:{lineno}: invalid key '{key}'")

        value = _unquote(value.strip())
        if any(re.search(p, value) for p in FORBIDDEN_PATTERNS):
            raise ValueError(f"{path.name}:{lineno}: forbidden pattern in value for '{key}'")

        result[key] = value

    return result
