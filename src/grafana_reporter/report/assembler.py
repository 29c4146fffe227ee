"""Turn a structured dashboard and its panel images into a PDF.

Templates are LaTeX documents rendered with Jinja2. The delimiters are
changed to ``[[ ... ]]`` for expressions, ``[% ... %]`` for statements and
``[# ... #]`` for comments so they never clash with LaTeX braces and
percent signs. The rendered ``.tex`` file is compiled with ``pdflatex``.
"""

from __future__ import annotations

import asyncio
import subprocess
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

import structlog
from jinja2 import Environment, StrictUndefined, TemplateError

from grafana_reporter.core.errors import AssemblyError
from grafana_reporter.dashboards.models import StructuredDashboard
from grafana_reporter.report.fetcher import Variables, panels_dir_path
from grafana_reporter.timerange import TimeRange

logger = structlog.get_logger()

PDFLATEX_TIMEOUT_SECONDS = 300

_TEX_SPECIAL_CHARS = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}


def decrement(value: int) -> int:
    return value - 1


def remove_dollars(value: str) -> str:
    return value.replace("$", "")


def tex_escape(value: Any) -> str:
    return "".join(_TEX_SPECIAL_CHARS.get(char, char) for char in str(value))


def create_environment() -> Environment:
    env = Environment(
        variable_start_string="[[",
        variable_end_string="]]",
        block_start_string="[%",
        block_end_string="%]",
        comment_start_string="[#",
        comment_end_string="#]",
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["decrm"] = decrement
    env.filters["rmdlr"] = remove_dollars
    env.filters["texescape"] = tex_escape
    return env


def encode_variables(variables: Variables) -> str:
    """Variables as shown in the report header: ``var-a=1 var-b=2``."""
    ordered = sorted(variables, key=lambda item: item[0])
    return urlencode(ordered).replace("&", " ")


class DocumentAssembler:
    """Render a report template and compile it to PDF."""

    def __init__(
        self,
        *,
        reports_dir: Path,
        scratch_dir: Path,
        screen_width: int = 1920,
        save_temp_images: bool = False,
        pdflatex_command: str = "pdflatex",
        timeout: float = PDFLATEX_TIMEOUT_SECONDS,
    ) -> None:
        self._reports_dir = reports_dir
        self._scratch_dir = scratch_dir
        self._screen_width = screen_width
        self._save_temp_images = save_temp_images
        self._pdflatex_command = pdflatex_command
        self._timeout = timeout
        self._env = create_environment()

    def render(
        self,
        template_body: str,
        dashboard: StructuredDashboard,
        time_range: TimeRange,
        variables: Variables,
    ) -> str:
        """Substitute the dashboard data into a template body."""
        context = {
            "dashboard": dashboard,
            "time_from": time_range.time_from,
            "time_to": time_range.time_to,
            "timestamp_from": time_range.display_from,
            "timestamp_to": time_range.display_to,
            "vars": encode_variables(variables),
            "panels_dir": panels_dir_path(self._scratch_dir, dashboard.scratch_name).as_posix(),
            "screen_width": self._screen_width,
        }
        try:
            return self._env.from_string(template_body).render(**context)
        except TemplateError as exc:
            raise AssemblyError(
                f"failed to render report template: {exc}",
                {"request_id": dashboard.request_id},
            ) from exc

    async def assemble(
        self,
        template_body: str,
        dashboard: StructuredDashboard,
        time_range: TimeRange,
        variables: Variables,
    ) -> bytes:
        """Produce the PDF bytes for ``dashboard``.

        Panel images are removed afterwards unless ``save_temp_images`` is set.
        """
        try:
            tex_source = self.render(template_body, dashboard, time_range, variables)
            return await asyncio.to_thread(self._compile, dashboard.scratch_name, tex_source)
        finally:
            if not self._save_temp_images:
                await asyncio.to_thread(self.cleanup_images, dashboard.scratch_name)

    def _compile(self, scratch_name: str, tex_source: str) -> bytes:
        self._reports_dir.mkdir(parents=True, exist_ok=True)
        tex_path = self._reports_dir / f"{scratch_name}.tex"
        tex_path.write_text(tex_source, encoding="utf-8")

        cmd = [
            self._pdflatex_command,
            "-interaction=nonstopmode",
            f"--output-dir={self._reports_dir}",
            str(tex_path),
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self._timeout)
        except FileNotFoundError as exc:
            raise AssemblyError(f"{self._pdflatex_command} is not installed") from exc
        except subprocess.TimeoutExpired as exc:
            raise AssemblyError(
                f"{self._pdflatex_command} timed out after {self._timeout} seconds",
                {"scratch_name": scratch_name},
            ) from exc

        logger.debug("pdflatex_output", scratch_name=scratch_name, output=result.stdout)
        if result.returncode != 0:
            logger.error(
                "pdflatex_failed",
                scratch_name=scratch_name,
                returncode=result.returncode,
                tex_file=str(tex_path),
            )
            raise AssemblyError(
                f"{self._pdflatex_command} exited with code {result.returncode}; "
                f"more details in {tex_path.with_suffix('.log')}",
                {"scratch_name": scratch_name},
            )
        return self.read_report(scratch_name)

    def read_report(self, scratch_name: str) -> bytes:
        """Read back the compiled PDF. Missing or empty output is an error."""
        pdf_path = self._reports_dir / f"{scratch_name}.pdf"
        try:
            content = pdf_path.read_bytes()
        except FileNotFoundError as exc:
            raise AssemblyError(f"report file {pdf_path} was not produced") from exc
        if not content:
            raise AssemblyError("report is empty", {"path": str(pdf_path)})
        return content

    def cleanup_images(self, scratch_name: str) -> None:
        panels_dir = panels_dir_path(self._scratch_dir, scratch_name)
        if not panels_dir.is_dir():
            return
        for image in panels_dir.glob("*.png"):
            try:
                image.unlink()
            except OSError as exc:
                logger.error("image_delete_failed", file=str(image), error=str(exc))
        try:
            panels_dir.rmdir()
        except OSError as exc:
            logger.debug("panels_dir_not_removed", path=str(panels_dir), error=str(exc))
