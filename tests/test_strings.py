"""Tests for casing and module path helpers."""

import pytest

from tsinject_cli.strings import (
    build_relative_path,
    camelize,
    class_name_from_file,
    classify,
    dasherize,
    decamelize,
    join_path,
)


@pytest.mark.parametrize("value, expected", [
    ("HttpClient", "httpClient"),
    ("hero-list", "heroList"),
    ("logger_service", "loggerService"),
    ("Logger", "logger"),
    ("x", "x"),
])
def test_camelize(value, expected):
    assert camelize(value) == expected


def test_classify():
    assert classify("hero-list") == "HeroList"
    assert classify("logger") == "Logger"
    assert classify("HttpClient") == "HttpClient"
    assert classify("hero.list") == "Hero.List"


def test_dasherize_and_decamelize():
    assert decamelize("innerHTML") == "inner_html"
    assert dasherize("HeroList") == "hero-list"
    assert dasherize("action_name") == "action-name"


def test_class_name_from_file():
    assert class_name_from_file("src/app/hero-list.component.ts") == "HeroListComponent"
    assert class_name_from_file("logger.service.ts") == "LoggerService"
    assert class_name_from_file("types.d.ts") == "Types"


def test_join_path():
    assert join_path("src", "app/", "../lib", "x.ts") == "src/lib/x.ts"


def test_build_relative_path():
    assert build_relative_path("/p/src/app/a.component.ts", "/p/src/app/logger.service.ts") == "./logger.service"
    assert build_relative_path("/p/src/app/a.ts", "/p/src/core/log.ts") == "../core/log"
    assert build_relative_path("/p/a.ts", "/p/shared/deep/x.tsx") == "./shared/deep/x"
