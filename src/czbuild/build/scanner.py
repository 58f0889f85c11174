"""Source unit discovery.

Finds every ``.cz`` file under the project root, recursively, and returns the
units in a deterministic order: sorted by path relative to the root, compared
as POSIX strings. Hidden directories (``.git``, ``.cache`` ...) are skipped.
"""

import logging
from pathlib import Path
from typing import List

from ..errors import NoSourcesError
from ..models import SOURCE_SUFFIX, TranslationUnit

logger = logging.getLogger(__name__)


class SourceScanner:
    """Discovers translation units under a project root."""

    def __init__(self, root: Path):
        self.root = root

    def _is_hidden(self, path: Path) -> bool:
        relative = path.relative_to(self.root)
        return any(part.startswith(".") for part in relative.parts[:-1])

    def find_sources(self) -> List[Path]:
        """All .cz source paths under the root, sorted.

        Raises:
            NoSourcesError: If the root is not a directory
        """
        if not self.root.is_dir():
            raise NoSourcesError(f"Source root is not a directory: {self.root}", stage="discover")

        sources = [
            path
            for path in self.root.rglob(f"*{SOURCE_SUFFIX}")
            if path.is_file() and path.name != SOURCE_SUFFIX and not self._is_hidden(path)
        ]
        return sorted(sources, key=lambda p: p.relative_to(self.root).as_posix())

    def scan(self) -> List[TranslationUnit]:
        """Create one TranslationUnit per source, in discovery order.

        Raises:
            NoSourcesError: If no source units are found
        """
        sources = self.find_sources()
        if not sources:
            raise NoSourcesError(f"No {SOURCE_SUFFIX} source units found under {self.root}", stage="discover")
        logger.debug(f"Discovered {len(sources)} unit(s) under {self.root}")
        return [TranslationUnit.from_source(path) for path in sources]
