import textwrap
from pathlib import Path
from typing import Callable

import pytest
from fastapi import FastAPI

from silmod.config.settings import Config
from silmod.core.host import HostContext
from silmod.core.templates import TemplateNamespaceRegistry


@pytest.fixture
def clean_config(monkeypatch: pytest.MonkeyPatch) -> Config:
    """不受外部环境变量影响的配置"""
    for key in (
        "SILMOD_MODULE_PATHS",
        "SILMOD_TEMPLATE_PATHS",
        "SILMOD_TEMPLATE_AUTO_RELOAD",
        "DEBUG",
        "ENVIRONMENT",
    ):
        monkeypatch.delenv(key, raising=False)
    return Config()


@pytest.fixture
def host(clean_config: Config) -> HostContext:
    return HostContext(FastAPI(), TemplateNamespaceRegistry(), clean_config)


@pytest.fixture
def make_module(tmp_path: Path) -> Callable[..., Path]:
    """在 tmp_path 下创建模块目录并写入 autoload.py"""

    def _make(relative: str, source: str = "") -> Path:
        directory = tmp_path / relative
        directory.mkdir(parents=True, exist_ok=True)
        entry_point = directory / "autoload.py"
        entry_point.write_text(textwrap.dedent(source), encoding="utf-8")
        return entry_point

    return _make
