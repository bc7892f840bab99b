# concept_approacher/scoring/params_io.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from concept_approacher.scoring.params import ParameterTable

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

HEADER = (
    "# Concept approacher parameters\n"
    "# Format: parameter_name=value\n"
)


def _strip_whitespace(text: str) -> str:
    return "".join(text.split())


def save_parameters(params: ParameterTable, path: PathLike) -> Path:
    """
    Write the table as ``name=value`` lines sorted by name, after a
    comment header. Parent directories are created as needed.
    """
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    lines = [f"{name}={params[name]!r}" for name in sorted(params)]
    output_path.write_text(HEADER + "\n".join(lines) + "\n", encoding="utf-8")

    logger.info("Saved %d parameters to %s", len(lines), output_path)
    return output_path


def load_parameters(path: PathLike, params: ParameterTable) -> int:
    """
    Read ``name=value`` lines into `params` and return how many were set.

    Blank lines and ``#`` comments are ignored. All whitespace is removed
    from names and values. Lines without ``=`` or with a value that is not
    a number are skipped with a warning. A missing file raises
    FileNotFoundError.
    """
    p = Path(path)
    loaded = 0

    with p.open("r", encoding="utf-8") as f:
        for line_number, raw in enumerate(f, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            name, sep, value = line.partition("=")
            if not sep:
                logger.warning("%s:%d: missing '=', skipping %r", p, line_number, line)
                continue

            name, value = _strip_whitespace(name), _strip_whitespace(value)
            try:
                params[name] = float(value)
            except ValueError:
                logger.warning("%s:%d: invalid value for %s: %r", p, line_number, name, value)
                continue

            loaded += 1

    logger.info("Loaded %d parameters from %s", loaded, p)
    return loaded
