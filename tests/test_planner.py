"""Tests for injection planning and the properties it guarantees."""

import dataclasses
from pathlib import Path

import pytest

from helpers import apply_directives, strip_insertions
from tsinject_cli import planner as planner_module
from tsinject_cli.edit_batch import EditBatch
from tsinject_cli.errors import StructureError
from tsinject_cli.parser import parse_source
from tsinject_cli.planner import InjectionPlanner, build_injection_context, plan_injection
from tsinject_cli.storage import FileHost


def _plan(source: str, class_name: str = "HeroListComponent"):
    return plan_injection(source, class_name, "Logger", "./logger.service", path="hero-list.component.ts")


SCENARIOS = {
    "empty body": "export class HeroListComponent {}\n",
    "no constructor": (
        "import { Component } from '@angular/core';\n\n"
        "@Component({ selector: 'app-hero-list' })\n"
        "export class HeroListComponent {\n  heroes = [];\n}\n"
    ),
    "zero parameters": "class HeroListComponent {\n  constructor() {}\n}\n",
    "n parameters": "class HeroListComponent {\n  constructor(a: A, b: B) {}\n}\n",
    "unicode": "// Ünïcödé héader\nexport class HeroListComponent {\n  constructor(a: A) {}\n}\n",
}


class TestPlanInjection:

    def test_no_constructor_returns_two_directives(self, empty_class_source: str):
        directives = _plan(empty_class_source)

        assert len(directives) == 2
        constructor_edit, import_edit = directives
        assert "constructor(" in constructor_edit.text
        assert import_edit.text.startswith("import { Logger }")

        result = apply_directives(empty_class_source, directives)
        tree = parse_source(result)
        assert not tree.has_error
        assert result.count("constructor(") == 1
        assert result.count(": Logger") == 1

    def test_order_is_constructor_then_import(self):
        source = "import { A } from 'a';\nclass HeroListComponent {\n  constructor() {}\n}\n"
        constructor_edit, import_edit = _plan(source)

        assert constructor_edit.text == "private logger: Logger"
        assert import_edit.offset < constructor_edit.offset

    def test_zero_parameter_constructor(self):
        result = apply_directives(SCENARIOS["zero parameters"], _plan(SCENARIOS["zero parameters"]))
        assert "constructor(private logger: Logger) {}" in result

    def test_n_parameter_constructor_keeps_order(self):
        result = apply_directives(SCENARIOS["n parameters"], _plan(SCENARIOS["n parameters"]))
        assert "constructor(a: A, b: B, private logger: Logger) {}" in result

    @pytest.mark.parametrize("scenario", sorted(SCENARIOS))
    def test_bytes_outside_insertions_are_preserved(self, scenario: str):
        source = SCENARIOS[scenario]
        directives = _plan(source)
        result = EditBatch(directives[0].path, directives).apply(source.encode("utf-8"))

        assert strip_insertions(result, directives) == source.encode("utf-8")
        assert not parse_source(result).has_error

    @pytest.mark.parametrize("scenario", sorted(SCENARIOS))
    def test_second_run_is_noop(self, scenario: str):
        source = SCENARIOS[scenario]
        once = apply_directives(source, _plan(source))
        again = _plan(once)

        assert len(again) == 2
        assert all(d.is_noop for d in again)

    def test_existing_parameter_of_type_is_not_duplicated(self):
        source = (
            "import { Logger } from './logger.service';\n"
            "class HeroListComponent {\n  constructor(private audit: Logger) {}\n}\n"
        )
        directives = _plan(source)
        assert all(d.is_noop for d in directives)

    def test_name_mismatch_rejected(self, empty_class_source: str):
        with pytest.raises(StructureError) as exc_info:
            _plan(empty_class_source, class_name="VillainListComponent")
        assert exc_info.value.cause == "class name mismatch"
        assert "hero-list.component.ts" in str(exc_info.value)

    def test_accepts_bytes(self, empty_class_source: str):
        directives = plan_injection(empty_class_source.encode("utf-8"), "HeroListComponent", "Logger", "./logger")
        assert directives[0].path == "<memory>"


class TestBuildInjectionContext:

    def test_from_dependency_file(self, sample_project_path: Path):
        app_dir = sample_project_path / "src" / "app"
        context = build_injection_context(
            app_dir / "hero-list.component.ts",
            dependency_file=app_dir / "logger.service.ts",
        )

        assert context.class_name == "HeroListComponent"
        assert context.dependency_name == "LoggerService"
        assert context.dependency_module == "./logger.service"
        assert Path(context.file_path).is_absolute()

    def test_from_module(self, temp_dir: Path):
        context = build_injection_context(
            temp_dir / "api.service.ts", dependency_name="HttpClient", module="@angular/common/http",
        )
        assert context.dependency_name == "HttpClient"
        assert context.dependency_module == "@angular/common/http"
        assert context.class_name == "ApiService"

    def test_needs_exactly_one_source(self, temp_dir: Path):
        with pytest.raises(ValueError):
            build_injection_context(temp_dir / "a.ts", dependency_name="X")
        with pytest.raises(ValueError):
            build_injection_context(temp_dir / "a.ts", dependency_name="X", dependency_file="x.ts", module="x")


class TestInjectionPlanner:

    def test_inject_stages_new_content(self, sample_app: Path):
        host = FileHost(sample_app)
        context = build_injection_context(
            sample_app / "hero-list.component.ts", dependency_file=sample_app / "logger.service.ts",
        )
        result = InjectionPlanner(host).inject(context)

        assert result.changed
        staged = host.read(context.file_path).decode("utf-8")
        assert "constructor(private loggerService: LoggerService)" in staged
        assert "import { LoggerService } from './logger.service';" in staged
        # disk is untouched until the changes are written
        assert "LoggerService" not in (sample_app / "hero-list.component.ts").read_text()

    def test_inject_extends_multiline_constructor(self, sample_app: Path):
        host = FileHost(sample_app)
        context = build_injection_context(
            sample_app / "hero.service.ts", dependency_file=sample_app / "logger.service.ts",
        )
        InjectionPlanner(host).inject(context)

        staged = host.read(context.file_path).decode("utf-8")
        assert (
            "    private readonly heroesUrl: string,\n"
            "    private loggerService: LoggerService\n"
            "  ) {}"
        ) in staged

    def test_inject_twice_changes_nothing(self, sample_app: Path):
        host = FileHost(sample_app)
        context = build_injection_context(
            sample_app / "hero-list.component.ts", dependency_file=sample_app / "logger.service.ts",
        )
        planner = InjectionPlanner(host)
        first = planner.inject(context)
        second = planner.inject(context)

        assert first.changed
        assert not second.changed
        assert second.new_content == first.new_content

    def test_structure_error_stages_nothing(self, sample_app: Path):
        host = FileHost(sample_app)
        context = build_injection_context(
            sample_app / "hero-list.component.ts",
            dependency_file=sample_app / "logger.service.ts",
            class_name="SomethingElse",
        )
        with pytest.raises(StructureError):
            InjectionPlanner(host).inject(context)
        assert host.changes() == []

    def test_invalid_result_stages_nothing(self, sample_app: Path, monkeypatch):
        real_parse = planner_module.parse_source
        calls = []

        def parse_then_break(source, path="<memory>"):
            tree = real_parse(source, path)
            calls.append(path)
            # the reparse of the edited text reports a syntax error
            return dataclasses.replace(tree, has_error=True) if len(calls) > 1 else tree

        monkeypatch.setattr(planner_module, "parse_source", parse_then_break)
        host = FileHost(sample_app)
        context = build_injection_context(
            sample_app / "hero-list.component.ts", dependency_file=sample_app / "logger.service.ts",
        )

        with pytest.raises(StructureError, match="edit produced invalid syntax"):
            InjectionPlanner(host).inject(context)
        assert len(calls) == 2
        assert host.changes() == []

    def test_missing_file(self, sample_app: Path):
        context = build_injection_context(
            sample_app / "missing.component.ts", dependency_name="Logger", module="./logger",
        )
        with pytest.raises(StructureError, match="file not found"):
            InjectionPlanner(FileHost(sample_app)).plan(context)
