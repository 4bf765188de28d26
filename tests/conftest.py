from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
from loguru import logger


@pytest.fixture
def fake_pandoc(monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
    calls: list[list[str]] = []

    monkeypatch.setattr("mdmirror.pandoc.shutil.which", lambda name: f"/usr/bin/{name}")

    def fake_run(cmd: list[str], capture_output: bool, text: bool, check: bool) -> subprocess.CompletedProcess[str]:
        calls.append(cmd)
        source = Path(cmd[-3])
        Path(cmd[-1]).write_text(f"<html>{source.name}</html>", encoding="utf-8")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr("mdmirror.pandoc.subprocess.run", fake_run)
    return calls


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger.remove()
