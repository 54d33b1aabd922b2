"""Tests for two-pass struct / impl extraction."""

from rust_arch_metrics.models import FieldRecord


def test_struct_fields_in_declaration_order(extract):
    records = extract("""
        pub struct User {
            pub name: String,
            // a comment between fields
            #[serde(default)]
            addresses: Vec<Address>,
            manager: Option<Box<User>>,
        }
    """)

    assert len(records) == 1
    user = records[0]
    assert user.name == "User"
    assert user.fields == [
        FieldRecord("name", "String"),
        FieldRecord("addresses", "Vec<Address>"),
        FieldRecord("manager", "Option<Box<User>>"),
    ]
    assert user.methods == []
    assert user.traits_implemented == set()
    assert user.file_path == "sample.rs"
    assert user.line == 2


def test_reference_field_types_are_kept_raw(extract):
    records = extract("""
        struct View<'a> {
            text: &'a str,
            buf: &'a mut Vec<u8>,
        }
    """)

    assert [f.declared_type for f in records[0].fields] == ["&'a str", "&'a mut Vec<u8>"]


def test_tuple_and_unit_structs_have_no_named_fields(extract):
    records = extract("""
        struct Meters(f64);
        struct Marker;
    """)

    assert [r.name for r in records] == ["Meters", "Marker"]
    assert all(r.fields == [] for r in records)


def test_structs_in_declaration_order(extract):
    records = extract("""
        struct B { x: u8 }
        struct A { y: u8 }
        struct C { z: u8 }
    """)

    assert [r.name for r in records] == ["B", "A", "C"]


def test_inherent_impl_methods_attached_in_order(extract):
    records = extract("""
        struct Stack { items: Vec<u32> }

        impl Stack {
            fn push(&mut self, v: u32) { self.items.push(v); }
            fn len(&self) -> usize { self.items.len() }
            fn new() -> Self { Stack { items: Vec::new() } }
        }
    """)

    stack = records[0]
    assert [m.name for m in stack.methods] == ["push", "len", "new"]
    assert stack.methods[0].fields_accessed == {"items"}
    assert stack.methods[2].fields_accessed == set()


def test_multiple_impl_blocks_accumulate(extract):
    records = extract("""
        struct Point { x: i32, y: i32 }
        impl Point { fn x(&self) -> i32 { self.x } }
        impl Point { fn y(&self) -> i32 { self.y } }
    """)

    assert [m.name for m in records[0].methods] == ["x", "y"]


def test_generic_impl_matches_by_base_name(extract):
    records = extract("""
        struct Wrapper<T> { inner: T }
        impl<T: Clone> Wrapper<T> {
            fn get(&self) -> T { self.inner.clone() }
        }
    """)

    assert [m.name for m in records[0].methods] == ["get"]


def test_trait_impl_records_trait_and_skips_methods(extract):
    records = extract("""
        struct Point { x: i32 }

        impl std::fmt::Display for Point {
            fn fmt(&self, f: &mut std::fmt::Formatter) -> std::fmt::Result {
                write!(f, "{}", self.x)
            }
        }

        impl From<i32> for Point {
            fn from(x: i32) -> Self { Point { x } }
        }

        impl Default for Point {
            fn default() -> Self { Point { x: 0 } }
        }
    """)

    point = records[0]
    assert point.methods == []
    assert point.traits_implemented == {"Display", "From", "Default"}


def test_impl_for_unknown_type_is_ignored(extract):
    records = extract("""
        struct Known { v: u8 }
        impl Elsewhere {
            fn f(&self) {}
        }
        impl Clone for Elsewhere {
            fn clone(&self) -> Self { Elsewhere }
        }
    """)

    assert len(records) == 1
    assert records[0].methods == []
    assert records[0].traits_implemented == set()


def test_impl_before_struct_still_attaches(extract):
    records = extract("""
        impl Late {
            fn v(&self) -> u8 { self.v }
        }
        struct Late { v: u8 }
    """)

    assert [m.name for m in records[0].methods] == ["v"]


def test_nested_declarations_are_not_extracted(extract):
    records = extract("""
        struct Outer { v: u8 }

        fn helper() {
            struct Local { w: u8 }
        }

        mod inner {
            pub struct Hidden { h: u8 }
        }
    """)

    assert [r.name for r in records] == ["Outer"]


def test_no_structs(extract):
    assert extract("fn main() {}\n") == []


def test_multiline_field_type_is_collapsed(extract):
    records = extract("""
        struct Cache {
            entries: HashMap<String,
                             Vec<u8>>,
        }
    """)

    assert records[0].fields[0].declared_type == "HashMap<String, Vec<u8>>"
