"""Loading of ``.env``-style files used as configuration defaults."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

from ..errors import ConfigurationError


class DotenvLoader:
    """Reads ``KEY=value`` pairs from a dotenv file."""

    @staticmethod
    def load_from_file(path: Path) -> Dict[str, str]:
        """
        Load key-value pairs from ``path``.

        Missing files yield an empty mapping. Blank lines, comments and lines
        without ``=`` are skipped; surrounding quotes are stripped from values.

        Raises:
            ConfigurationError: If the file exists but cannot be read
        """
        if not path.exists():
            return {}

        try:
            lines = path.read_text().splitlines()
        except OSError as exc:  # policy_guard: allow-silent-handler
            raise ConfigurationError.load_failed("dotenv defaults", str(path)) from exc

        values: Dict[str, str] = {}
        for line in lines:
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or "=" not in stripped:
                continue
            key, raw_value = stripped.split("=", 1)
            key = key.strip()
            if key.startswith("export "):
                key = key[len("export ") :].strip()
            if key:
                values[key] = raw_value.strip().strip("'").strip('"')
        return values
