import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from adapters.java_adapter import JavaAdapter
from cir.model import MemberSignature, Parameter, TypeDescriptor, TypeRef
from implementor.collector import collect_abstract_members
from implementor.errors import ResolutionError
from implementor.identity import identity_key
from implementor.implementor import Implementor


def adapter_for(*codes):
    adapter = JavaAdapter()
    for code in codes:
        adapter.add_source(code)
    return adapter


def collect(adapter, name):
    return collect_abstract_members(adapter.resolve(name), adapter)


def test_identity_ignores_exceptions_and_modifiers():
    a = MemberSignature(
        name="read", declaring_type="p.A",
        parameters=(Parameter("buf", TypeRef("byte[]")),),
        return_type=TypeRef("int"),
        exceptions=(TypeRef("java.io.IOException"),),
        modifiers=("abstract", "public"),
    )
    b = MemberSignature(
        name="read", declaring_type="p.B",
        parameters=(Parameter("data", TypeRef("byte[]")),),
        return_type=TypeRef("int"),
        modifiers=("abstract", "protected"),
    )
    c = MemberSignature(name="read", declaring_type="p.C", return_type=TypeRef("int"))

    assert identity_key(a) == identity_key(b)
    assert identity_key(a) != identity_key(c)
    assert identity_key(a).parameter_types == ("byte[]",)


def test_interface_members_merged_across_superinterfaces():
    adapter = adapter_for(
        "package s; public interface Sized { int size(); }",
        "package s; public interface Container { int size(); boolean isEmpty(); }",
        "package s; public interface Bag extends Sized, Container { default void clear() {} }",
    )
    members = collect(adapter, "s.Bag")

    assert sorted(m.name for m in members) == ["isEmpty", "size"]


def test_non_public_abstract_members_from_superclass_chain():
    adapter = adapter_for(
        """
        package p;
        public abstract class Base {
            abstract void hidden();
            protected abstract int count();
            public abstract String name();
        }
        """,
        """
        package p;
        public abstract class Mid extends Base {
            public String name() { return "mid"; }
        }
        """,
    )
    members = collect(adapter, "p.Mid")

    # name() is abstract on Base, so it is kept even though Mid overrides it
    assert [m.name for m in members] == ["hidden", "count", "name"]
    assert [m.declaring_type for m in members] == ["p.Base"] * 3


def test_member_reachable_by_both_paths_appears_once():
    adapter = adapter_for(
        "package g; public abstract class Figure { public abstract double area(); }",
        "package g; public interface Measurable { double area(); }",
        "package g; public abstract class Square extends Figure implements Measurable { }",
    )
    members = collect(adapter, "g.Square")

    assert [m.name for m in members] == ["area"]
    # the class chain is scanned before interfaces
    assert members[0].declaring_type == "g.Figure"


def test_concrete_interface_implementation_is_not_collected():
    adapter = adapter_for(
        "package r; public interface Runner { void run(); void stop(); }",
        "package r; public abstract class Half implements Runner { public void run() {} }",
    )
    members = collect(adapter, "r.Half")

    assert [m.name for m in members] == ["stop"]


def test_unavailable_superclass_is_a_resolution_error():
    adapter = adapter_for("""
    package q;
    public abstract class Custom extends java.util.AbstractList<String> {
        public abstract void extra();
    }
    """)

    with pytest.raises(ResolutionError, match="java.util.AbstractList"):
        collect(adapter, "q.Custom")


def test_superclass_walk_fails_when_provider_cannot_resolve():
    class Missing:
        def resolve(self, identifier):
            raise ResolutionError(f"Can't find class: {identifier}")

    custom = TypeDescriptor(
        name="q.Custom", simple_name="Custom", kind="class", package="q",
        modifiers=("abstract", "public"), superclass="q.Gone",
    )

    with pytest.raises(ResolutionError, match="q.Gone"):
        collect_abstract_members(custom, Missing())


def test_jdk_superinterface_needs_its_source():
    task = "package r; public interface Task extends Runnable { int id(); }"

    with pytest.raises(ResolutionError, match="java.lang.Runnable"):
        Implementor(adapter_for(task)).generate("r.Task")

    adapter = adapter_for(task, "package java.lang; public interface Runnable { void run(); }")
    text = Implementor(adapter).generate("r.Task").text

    assert "public void run() {" in text
    assert "public int id() {" in text


def test_collection_is_deterministic():
    adapter = adapter_for(
        "package d; public interface Many { void a(); int b(); long c(String s); char d(int[] x); }",
    )
    first = [identity_key(m) for m in collect(adapter, "d.Many")]
    second = [identity_key(m) for m in collect(adapter, "d.Many")]

    assert first == second
    assert [k.name for k in first] == ["a", "b", "c", "d"]
