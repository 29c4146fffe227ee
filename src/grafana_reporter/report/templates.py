"""Registry of LaTeX report templates."""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping

import structlog

from grafana_reporter.core.errors import ConfigurationError, TemplateNotFoundError

logger = structlog.get_logger()


class TemplateRegistry:
    """Immutable mapping of template name to template body."""

    def __init__(self, templates: Mapping[str, str]) -> None:
        self._templates = MappingProxyType(dict(templates))

    @classmethod
    def from_directories(cls, directories: Iterable[Path], default_template: str) -> TemplateRegistry:
        """Load every file of ``directories``; later directories override earlier ones.

        Missing directories are skipped. The default template must exist.
        """
        templates: dict[str, str] = {}
        searched = []
        for directory in directories:
            searched.append(str(directory))
            if not directory.is_dir():
                logger.debug("templates_directory_missing", path=str(directory))
                continue
            for entry in sorted(directory.iterdir()):
                if entry.is_file():
                    templates[entry.name] = entry.read_text(encoding="utf-8")

        if default_template not in templates:
            raise ConfigurationError(
                f"could not find default template in directories {', '.join(searched)}",
                {"template": default_template},
            )
        logger.info("templates_loaded", templates=sorted(templates))
        return cls(templates)

    def names(self) -> list[str]:
        return sorted(self._templates)

    def get(self, name: str) -> str:
        try:
            return self._templates[name]
        except KeyError:
            raise TemplateNotFoundError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._templates
