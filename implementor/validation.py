from pathlib import Path
from typing import NamedTuple, Optional, Tuple, Union

from cir.model import MemberSignature, TypeDescriptor
from implementor.collector import TypeProvider
from implementor.errors import InvalidTargetError

# The roots of enum and record types cannot be extended directly either.
VALUE_TYPE_ROOTS = frozenset({"java.lang.Enum", "java.lang.Record"})


class ValidatedTarget(NamedTuple):
    descriptor: TypeDescriptor
    constructors: Tuple[MemberSignature, ...]


def _blank(value) -> bool:
    return value is None or not str(value).strip()


def check_type(descriptor: TypeDescriptor) -> Tuple[MemberSignature, ...]:
    """
    Raises InvalidTargetError when no subtype of ``descriptor`` can be
    written. Returns the constructors a generated subclass can call.
    """
    if descriptor.kind in ("array", "primitive"):
        raise InvalidTargetError(f"{descriptor.name} is not a class or interface")
    if descriptor.kind in ("enum", "annotation") or descriptor.name in VALUE_TYPE_ROOTS:
        raise InvalidTargetError(f"can't implement {descriptor.kind} type {descriptor.name}")
    if descriptor.is_final:
        raise InvalidTargetError(f"can't implement final class {descriptor.name}")
    if descriptor.is_private:
        raise InvalidTargetError(f"can't implement private class {descriptor.name}")

    constructors = tuple(c for c in descriptor.constructors if not c.is_private)
    if not descriptor.is_interface and not constructors:
        raise InvalidTargetError(
            f"{descriptor.name} is a class and no non-private constructors were found"
        )
    return constructors


def validate_target(
    provider: TypeProvider,
    type_name: Optional[str],
    root: Optional[Union[str, Path]],
) -> ValidatedTarget:
    if _blank(type_name) or _blank(root):
        raise InvalidTargetError("the class name or root is missing")

    name = str(type_name).strip()
    if name.replace("$", ".") in VALUE_TYPE_ROOTS:
        raise InvalidTargetError(f"can't implement {name}")

    descriptor = provider.resolve(name)
    return ValidatedTarget(descriptor, check_type(descriptor))
