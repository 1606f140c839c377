"""Pytest configuration and fixtures for tsinject tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest


@pytest.fixture(autouse=True)
def _isolate_home(tmp_path: Path, monkeypatch):
    """Keep config files and backups out of the real home directory."""
    home = tmp_path / "tsinject-home"
    monkeypatch.setattr("tsinject_cli.config.BASE_DIR", home)
    monkeypatch.setattr("tsinject_cli.config.BACKUP_DIR", home / "backups")
    monkeypatch.setattr("tsinject_cli.config.CONFIG_FILE", home / "config.toml")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to the sample Angular app."""
    return Path(__file__).parent / "fixtures" / "sample_app"


@pytest.fixture
def sample_app(temp_dir: Path, sample_project_path: Path) -> Path:
    """A writable copy of the sample app; returns its src/app folder."""
    target = temp_dir / "sample_app"
    shutil.copytree(sample_project_path, target)
    return target / "src" / "app"


@pytest.fixture
def empty_class_source() -> str:
    return "export class HeroListComponent {}\n"


@pytest.fixture
def component_source() -> str:
    """Decorated component with members but no constructor."""
    return '''import { Component, OnInit } from '@angular/core';

@Component({
  selector: 'app-hero-list',
  templateUrl: './hero-list.component.html',
})
export class HeroListComponent implements OnInit {
  heroes: string[] = [];

  ngOnInit(): void {}
}
'''
