"""Turn CLI input into the ordered list of examples to run."""

from __future__ import annotations

import logging
from pathlib import Path

from eh_common.errors import ConflictingInputs, NoInputSpecified, UsageError
from eh_runner.models.results import ExampleSpec

logger = logging.getLogger(__name__)


def _is_skipped(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("#")


def parse_list_file(list_file: Path) -> list[Path]:
    """Read config paths from a list file, one per line.

    Blank lines and lines whose first non-whitespace character is ``#`` are
    ignored. Surrounding whitespace is trimmed; file order is preserved.
    """
    try:
        text = list_file.read_text(encoding="utf-8")
    except OSError as exc:
        raise UsageError(
            f"cannot read list file: {list_file}",
            context={"list_file": list_file},
            cause=exc,
        ) from exc
    return [Path(line.strip()) for line in text.splitlines() if not _is_skipped(line)]


def resolve_examples(
    config: Path | None = None,
    list_file: Path | None = None,
) -> list[ExampleSpec]:
    """Resolve exactly one of ``config`` or ``list_file`` into examples."""
    if config is not None and list_file is not None:
        raise ConflictingInputs("choose either -c or -l, not both.")
    if config is not None:
        paths = [config]
    elif list_file is not None:
        paths = parse_list_file(list_file)
        if not paths:
            raise UsageError(
                f"list file contains no example configs: {list_file}",
                context={"list_file": list_file},
            )
    else:
        raise NoInputSpecified("must provide -c CONFIG.json or -l LIST.txt")

    examples = [ExampleSpec.from_config_path(path) for path in paths]
    logger.debug("Resolved %s example(s)", len(examples))
    return examples
