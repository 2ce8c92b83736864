"""Tests for document-level annotations."""

from __future__ import annotations

from swagnote.annotations import GeneralInfoParser
from swagnote.models import SwaggerDocument


def test_all_tags_applied() -> None:
    document = SwaggerDocument()
    applied = GeneralInfoParser(document).parse_lines(
        [
            "@Version 1.0.0",
            "@Title Petstore API",
            "@Description Everything about your pets",
            "@TermsOfServiceUrl http://example.com/terms",
            "@ContactName Petstore Team",
            "@ContactEmail team@example.com",
            "@ContactUrl http://example.com",
            "@LicenseName MIT",
            "@LicenseUrl http://opensource.org/licenses/MIT",
            "@BasePath /v1",
            "@Schemes http, https",
            "@Host api.example.com",
        ]
    )

    assert applied == 12
    data = document.to_dict()
    assert data["info"] == {
        "title": "Petstore API",
        "description": "Everything about your pets",
        "termsOfService": "http://example.com/terms",
        "contact": {"name": "Petstore Team", "url": "http://example.com", "email": "team@example.com"},
        "license": {"name": "MIT", "url": "http://opensource.org/licenses/MIT"},
        "version": "1.0.0",
    }
    assert data["basePath"] == "/v1"
    assert data["schemes"] == ["http", "https"]
    assert data["host"] == "api.example.com"


def test_repeated_tag_overwrites() -> None:
    document = SwaggerDocument()
    GeneralInfoParser(document).parse_lines(["@Title First", "@Title Second"])
    assert document.info.title == "Second"


def test_unknown_tags_and_text_ignored() -> None:
    document = SwaggerDocument()
    applied = GeneralInfoParser(document).parse_lines(
        ["@APIVersion 2", "package main", "", "@Router /x [get]"]
    )
    assert applied == 0
    assert document.to_dict() == {"swagger": "2.0", "info": {"title": ""}, "paths": {}}


def test_empty_schemes_are_dropped() -> None:
    document = SwaggerDocument()
    GeneralInfoParser(document).parse_lines(["@Schemes https,,"])
    assert document.schemes == ["https"]
