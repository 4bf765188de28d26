from __future__ import annotations

from pathlib import Path

import pytest

from mdmirror.errors import PreconditionError
from mdmirror.settings import DEFAULT_FROM, Settings, default_home, ensure_config_home, load_settings, validate_config


def test_default_home_prefers_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MDMIRROR_HOME", str(tmp_path / "custom"))
    assert default_home() == tmp_path / "custom"


def test_default_home_falls_back_to_user_directory(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MDMIRROR_HOME", raising=False)
    assert default_home() == Path.home() / ".mdmirror"


def test_ensure_config_home_seeds_includes_and_template(tmp_path: Path) -> None:
    home = tmp_path / "home"

    assert ensure_config_home(home) is True

    for name in ("in-header.html", "before-body.html", "after-body.html"):
        fragment = home / "include" / name
        assert fragment.is_file()
        assert fragment.read_text(encoding="utf-8") == ""
    template = Settings(home=home).template_dir / "example-variable.template"
    assert template.read_text(encoding="utf-8").strip() == "$example-variable$"


def test_ensure_config_home_leaves_existing_home_alone(tmp_path: Path) -> None:
    home = tmp_path / "home"
    home.mkdir()

    assert ensure_config_home(home) is False
    assert not (home / "include").exists()


def test_load_settings_uses_defaults_without_config(tmp_path: Path) -> None:
    settings = load_settings(tmp_path)
    assert settings.pandoc == "pandoc"
    assert settings.source_format == DEFAULT_FROM
    assert settings.target_format == "html5"
    assert settings.standalone is True
    assert settings.extra_args == ()


def test_load_settings_reads_yaml_config(tmp_path: Path) -> None:
    (tmp_path / "config.yaml").write_text(
        "pandoc: pandoc-3\n"
        "to: html4\n"
        "includes: false\n"
        "extra_args:\n"
        "  - --toc\n",
        encoding="utf-8",
    )

    settings = load_settings(tmp_path)

    assert settings.pandoc == "pandoc-3"
    assert settings.target_format == "html4"
    assert settings.includes is False
    assert settings.extra_args == ("--toc",)
    assert settings.source_format == DEFAULT_FROM


def test_load_settings_accepts_empty_config(tmp_path: Path) -> None:
    (tmp_path / "config.yaml").write_text("", encoding="utf-8")
    assert load_settings(tmp_path).pandoc == "pandoc"


def test_load_settings_rejects_unknown_keys(tmp_path: Path) -> None:
    (tmp_path / "config.yaml").write_text("theme: dark\n", encoding="utf-8")
    with pytest.raises(PreconditionError, match="theme"):
        load_settings(tmp_path)


def test_load_settings_rejects_malformed_yaml(tmp_path: Path) -> None:
    (tmp_path / "config.yaml").write_text("extra_args: [--toc\n", encoding="utf-8")
    with pytest.raises(PreconditionError, match="could not read config file"):
        load_settings(tmp_path)


def test_validate_config_reports_type_errors() -> None:
    errors = validate_config({"standalone": "yes", "extra_args": "--toc"})
    assert len(errors) == 2
