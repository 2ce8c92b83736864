"""Tests for the Go declaration scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from swagnote.source.scanner import GoSourceScanner, is_package_file
from swagnote.source.typeexpr import ArrayOf, Ident, Primitive, Qualified, StructType


# ---------------------------------------------------------------------------
# Fixtures: Go source to scan
# ---------------------------------------------------------------------------


CONTROLLER_SOURCE = '''\
package controllers

import (
	"fmt"
	m "example.com/petstore/models"
	_ "example.com/driver"
)

type (
	A struct {
		// Identifier of A
		ID, Alt int `json:"id"`
		m.Base
		*Inner
		Items []string // the items
		Buf [4]byte
		Nested struct {
			X int
		}
	}
	Alias = m.Pet
	List[T any] []T
)

var x = map[string]int{"a": 1}

const (
	C = 1
)

// Index does things.
// @Router / [get]
func (c *Ctrl) Index() {
	if true {
		fmt.Println("}")
	}
}

func Plain(a int) (int, error) { return a, nil }

// detached comment

func NoDoc() {}
'''


@pytest.fixture
def scanned():
    return GoSourceScanner().scan_source(CONTROLLER_SOURCE, "controllers/a.go")


class TestTopLevel:
    def test_package_clause(self, scanned) -> None:
        assert scanned.package == "controllers"
        assert scanned.path == "controllers/a.go"

    def test_imports(self, scanned) -> None:
        assert [(i.path, i.alias, i.local_name) for i in scanned.imports] == [
            ("fmt", None, "fmt"),
            ("example.com/petstore/models", "m", "m"),
            ("example.com/driver", "_", "driver"),
        ]

    def test_types(self, scanned) -> None:
        types = {t.name: t for t in scanned.types}
        assert set(types) == {"A", "Alias", "List"}
        assert types["Alias"].underlying == Qualified("m", "Pet")
        assert types["List"].underlying == ArrayOf(Ident("T"))
        assert types["A"].is_struct

    def test_functions(self, scanned) -> None:
        funcs = {f.name: f for f in scanned.functions}
        assert list(funcs) == ["Index", "Plain", "NoDoc"]
        assert funcs["Index"].receiver == "Ctrl"
        assert funcs["Index"].doc == ["Index does things.", "@Router / [get]"]
        assert funcs["Plain"].receiver is None
        assert funcs["Plain"].doc == []

    def test_detached_comment_is_not_doc(self, scanned) -> None:
        no_doc = next(f for f in scanned.functions if f.name == "NoDoc")
        assert no_doc.doc == []

    def test_comments_collects_every_line(self, scanned) -> None:
        assert "Identifier of A" in scanned.comments
        assert "detached comment" in scanned.comments
        assert "@Router / [get]" in scanned.comments


class TestStructFields:
    @pytest.fixture
    def fields(self, scanned):
        decl = next(t for t in scanned.types if t.name == "A")
        return decl.fields

    def test_multiple_names_share_type_and_tag(self, fields) -> None:
        first = fields[0]
        assert first.names == ("ID", "Alt")
        assert first.type == Primitive("int")
        assert first.tag == 'json:"id"'
        assert first.comment == "Identifier of A"

    def test_embedded_fields(self, fields) -> None:
        assert fields[1].embedded and fields[1].type == Qualified("m", "Base")
        assert fields[2].embedded and fields[2].type == Ident("Inner")

    def test_slice_and_array_fields_are_named(self, fields) -> None:
        assert fields[3].names == ("Items",)
        assert fields[3].type == ArrayOf(Primitive("string"))
        assert fields[3].comment == "the items"
        assert fields[4].names == ("Buf",)
        assert fields[4].type == ArrayOf(Primitive("byte"))

    def test_nested_struct(self, fields) -> None:
        nested = fields[5]
        assert nested.names == ("Nested",)
        assert isinstance(nested.type, StructType)
        assert [f.names for f in nested.type.fields] == [("X",)]


class TestScanPackage:
    def test_only_package_files_are_scanned(self, tmp_path: Path) -> None:
        (tmp_path / "a.go").write_text("package p\n\ntype A struct{}\n", encoding="utf-8")
        (tmp_path / "a_test.go").write_text("package p\n\ntype T struct{}\n", encoding="utf-8")
        (tmp_path / ".hidden.go").write_text("package p\n\ntype H struct{}\n", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("type N struct{}\n", encoding="utf-8")

        decls = GoSourceScanner().scan_package(tmp_path)

        assert decls.name == "p"
        assert sorted(decls.types) == ["A"]

    def test_undecodable_bytes_are_replaced(self, tmp_path: Path) -> None:
        (tmp_path / "b.go").write_bytes(b"package p\n\n// caf\xe9\ntype B struct{}\n")
        decls = GoSourceScanner().scan_package(tmp_path)
        assert decls.type("B") is not None

    def test_files_are_merged_in_name_order(self, tmp_path: Path) -> None:
        (tmp_path / "b.go").write_text("package p\n\nfunc B() {}\n", encoding="utf-8")
        (tmp_path / "a.go").write_text("package p\n\nfunc A() {}\n", encoding="utf-8")
        decls = GoSourceScanner().scan_package(tmp_path)
        assert [f.name for f in decls.functions] == ["A", "B"]

    def test_is_package_file(self, tmp_path: Path) -> None:
        go = tmp_path / "x.go"
        go.write_text("package p\n", encoding="utf-8")
        assert is_package_file(go)
        assert not is_package_file(tmp_path / "missing.go")
