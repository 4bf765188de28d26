from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft7Validator
from loguru import logger

from mdmirror.errors import PreconditionError, ReplicationError

HOME_ENV = "MDMIRROR_HOME"
CONFIG_NAME = "config.yaml"
INCLUDE_NAMES = ("in-header.html", "before-body.html", "after-body.html")
EXAMPLE_TEMPLATE = "example-variable.template"
SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "config.schema.json"

MARKDOWN_EXTENSIONS = (
    "backtick_code_blocks",
    "definition_lists",
    "emoji",
    "fancy_lists",
    "fenced_code_attributes",
    "line_blocks",
    "markdown_in_html_blocks",
    "yaml_metadata_block",
)
DEFAULT_FROM = "+".join(("markdown",) + MARKDOWN_EXTENSIONS)
DEFAULT_TO = "html5"


@dataclass(frozen=True)
class Settings:
    home: Path
    pandoc: str = "pandoc"
    source_format: str = DEFAULT_FROM
    target_format: str = DEFAULT_TO
    standalone: bool = True
    includes: bool = True
    extra_args: tuple[str, ...] = ()

    @property
    def include_dir(self) -> Path:
        return self.home / "include"

    @property
    def template_dir(self) -> Path:
        return self.home / "templates"


def default_home() -> Path:
    env = os.getenv(HOME_ENV)
    if env:
        return Path(env).expanduser()
    return Path.home() / ".mdmirror"


def ensure_config_home(home: Path) -> bool:
    """Create the config home with empty include fragments on first run.

    Returns True when the home was created, False when it already existed.
    """
    if os.access(home, os.R_OK):
        return False

    logger.debug(f"creating new config home: {home}")
    try:
        settings = Settings(home=home)
        include_dir = settings.include_dir
        include_dir.mkdir(parents=True, exist_ok=True)
        for name in INCLUDE_NAMES:
            (include_dir / name).touch()
        template_dir = settings.template_dir
        template_dir.mkdir(parents=True, exist_ok=True)
        (template_dir / EXAMPLE_TEMPLATE).write_text("$example-variable$\n", encoding="utf-8")
    except OSError as exc:
        raise ReplicationError(f"could not create config home {home}: {exc}") from exc
    return True


def _load_schema(schema_path: Path) -> dict:
    return json.loads(schema_path.read_text(encoding="utf-8"))


def validate_config(data: Any, schema_path: Path = SCHEMA_PATH) -> list[str]:
    validator = Draft7Validator(_load_schema(schema_path))
    return [err.message for err in sorted(validator.iter_errors(data), key=str)]


def load_settings(home: Path) -> Settings:
    config_path = home / CONFIG_NAME
    if not config_path.exists():
        return Settings(home=home)

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise PreconditionError(f"could not read config file {config_path}: {exc}") from exc
    if data is None:
        data = {}

    errors = validate_config(data)
    if errors:
        raise PreconditionError(f"invalid config file {config_path}: " + "; ".join(errors))

    logger.debug(f"config: {config_path}")
    return Settings(
        home=home,
        pandoc=data.get("pandoc", "pandoc"),
        source_format=data.get("from", DEFAULT_FROM),
        target_format=data.get("to", DEFAULT_TO),
        standalone=data.get("standalone", True),
        includes=data.get("includes", True),
        extra_args=tuple(data.get("extra_args", [])),
    )
