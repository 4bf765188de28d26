from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Iterable

from loguru import logger

from mdmirror.errors import ConversionError, PreconditionError
from mdmirror.settings import Settings

INCLUDE_FLAGS = (
    ("--include-in-header", "in-header.html"),
    ("--include-before-body", "before-body.html"),
    ("--include-after-body", "after-body.html"),
)


def resolve_converter(name: str = "pandoc") -> str:
    path = shutil.which(name)
    if not path:
        raise PreconditionError(f"{name} was not found in PATH")
    return path


def base_options(settings: Settings) -> list[str]:
    options = [f"--from={settings.source_format}", f"--to={settings.target_format}"]
    if settings.includes:
        for flag, name in INCLUDE_FLAGS:
            fragment = settings.include_dir / name
            if fragment.is_file():
                options.append(f"{flag}={fragment}")
            else:
                logger.debug(f"include fragment missing, skipped: {fragment}")
    if settings.standalone:
        options.append("--standalone")
    options.extend(settings.extra_args)
    return options


def title_for(source: Path) -> str:
    name = source.name
    return name[: -len(".md")] if name.endswith(".md") else source.stem


class PandocConverter:
    def __init__(self, executable: str, options: list[str], page_title: bool = False):
        self.executable = executable
        self.options = options
        self.page_title = page_title

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        extra_args: Iterable[str] = (),
        page_title: bool = False,
    ) -> "PandocConverter":
        executable = resolve_converter(settings.pandoc)
        return cls(executable, base_options(settings) + list(extra_args), page_title=page_title)

    def metadata(self, source: Path) -> list[str]:
        if not self.page_title:
            return []
        return [f"--metadata=pagetitle:{title_for(source)}"]

    def command(self, source: Path, target: Path) -> list[str]:
        return [self.executable, *self.options, *self.metadata(source), str(source), "-o", str(target)]

    def convert(self, source: Path, target: Path) -> None:
        cmd = self.command(source, target)
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise ConversionError(source, -1, str(exc)) from exc

        if result.returncode != 0:
            details = "\n".join([result.stdout.strip(), result.stderr.strip()]).strip()
            raise ConversionError(source, result.returncode, details)
