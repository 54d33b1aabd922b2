"""Shared fixtures for rust-arch-metrics tests."""

import textwrap

import pytest

from rust_arch_metrics.extract import extract_types
from rust_arch_metrics.parse import parse_source


@pytest.fixture
def extract():
    """Extract TypeRecords from an inline Rust snippet."""

    def _extract(source: str, file_path: str = "sample.rs"):
        tree = parse_source(textwrap.dedent(source).encode("utf-8"), file_path)
        return extract_types(tree, file_path)

    return _extract


@pytest.fixture
def method(extract):
    """Extract the single method of a one-struct snippet."""

    def _method(source: str):
        records = extract(source)
        assert len(records) == 1
        assert len(records[0].methods) == 1
        return records[0].methods[0]

    return _method


@pytest.fixture
def write_crate(tmp_path):
    """Write {relative_path: source} into tmp_path and return the root."""

    def _write(files: dict[str, str]):
        for rel, source in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(source), encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def sample_crate(write_crate):
    """A small crate: two coupled structs, a trait impl, and one broken file."""
    return write_crate({
        "src/user.rs": """
            use std::fmt;

            pub struct User {
                name: String,
                email: String,
                address: Address,
            }

            impl User {
                pub fn name(&self) -> &str {
                    &self.name
                }

                pub fn email(&self) -> &str {
                    &self.email
                }

                pub fn describe(&self) -> String {
                    if self.email.is_empty() {
                        self.name.clone()
                    } else {
                        format!("{} <{}>", self.name, self.email)
                    }
                }
            }

            impl fmt::Display for User {
                fn fmt(&self, f: &mut fmt::Formatter) -> fmt::Result {
                    write!(f, "{}", self.name)
                }
            }
        """,
        "src/address.rs": """
            pub struct Address {
                street: String,
                city: String,
            }

            impl Address {
                pub fn new(street: String, city: String) -> Self {
                    Address { street, city }
                }

                pub fn city(&self) -> &str {
                    &self.city
                }
            }
        """,
        "src/broken.rs": """
            pub struct Broken {
                field: u32,
        """,
    })
