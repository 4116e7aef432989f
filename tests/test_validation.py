import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from adapters.java_adapter import JavaAdapter
from implementor.errors import InvalidTargetError, ResolutionError
from implementor.implementor import Implementor
from implementor.validation import validate_target

SOURCES = [
    "package v; public final class Sealed {}",
    "package v; public class Outer { private static abstract class Hidden {} }",
    "package v; public enum Color { RED, GREEN }",
    "package v; public @interface Marker {}",
    "package v; public abstract class Lonely { private Lonely() {} }",
    "package v; public abstract class Open { protected Open(int x) {} private Open() {} }",
    "package v; public interface Api { void call(); }",
]


@pytest.fixture
def adapter():
    adapter = JavaAdapter()
    for code in SOURCES:
        adapter.add_source(code)
    return adapter


@pytest.mark.parametrize(
    "type_name",
    [
        "v.Sealed",         # final
        "v.Outer.Hidden",   # private
        "v.Color",          # enum
        "v.Marker",         # annotation
        "v.Lonely",         # no accessible constructor
        "int",
        "void",
        "v.Api[]",
        "java.lang.Enum",
        "java.lang.Record",
    ],
)
def test_rejected_targets_write_nothing(adapter, tmp_path, type_name):
    with pytest.raises(InvalidTargetError):
        validate_target(adapter, type_name, tmp_path)

    with pytest.raises(InvalidTargetError):
        Implementor(adapter).implement(type_name, tmp_path)
    assert list(tmp_path.rglob("*")) == []


@pytest.mark.parametrize("type_name, root", [(None, "out"), ("v.Api", None), ("", "out"), ("v.Api", " ")])
def test_missing_arguments(adapter, type_name, root):
    with pytest.raises(InvalidTargetError):
        validate_target(adapter, type_name, root)


def test_unknown_type_is_a_resolution_error(adapter, tmp_path):
    with pytest.raises(ResolutionError):
        validate_target(adapter, "v.Nowhere", tmp_path)


def test_private_constructors_are_not_mirrored(adapter, tmp_path):
    target = validate_target(adapter, "v.Open", tmp_path)

    assert target.descriptor.name == "v.Open"
    assert len(target.constructors) == 1
    assert target.constructors[0].modifiers == ("protected",)


def test_interface_has_no_constructors(adapter, tmp_path):
    target = validate_target(adapter, "v.Api", tmp_path)

    assert target.descriptor.is_interface
    assert target.constructors == ()
