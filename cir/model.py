from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, Tuple

Kind = Literal["class", "interface", "enum", "annotation", "array", "primitive"]

PRIMITIVE_TYPES = frozenset(
    {"boolean", "byte", "short", "int", "long", "char", "float", "double", "void"}
)

@dataclass(frozen=True)
class TypeRef:
    name: str                 # erased canonical name (e.g. java.util.List, int[])
    resolved: bool = True

    @property
    def is_void(self) -> bool:
        return self.name == "void"

    @property
    def is_array(self) -> bool:
        return self.name.endswith("[]")

    @property
    def is_primitive(self) -> bool:
        return self.name in PRIMITIVE_TYPES

@dataclass(frozen=True)
class Parameter:
    name: str
    type: TypeRef
    varargs: bool = False

@dataclass(frozen=True)
class MemberSignature:
    name: str
    declaring_type: str
    parameters: Tuple[Parameter, ...] = ()
    return_type: Optional[TypeRef] = None   # None marks a constructor
    exceptions: Tuple[TypeRef, ...] = ()
    modifiers: Tuple[str, ...] = ()

    @property
    def is_constructor(self) -> bool:
        return self.return_type is None

    @property
    def is_abstract(self) -> bool:
        return "abstract" in self.modifiers

    @property
    def is_private(self) -> bool:
        return "private" in self.modifiers

    @property
    def is_public(self) -> bool:
        return "public" in self.modifiers

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers

    @property
    def parameter_types(self) -> Tuple[TypeRef, ...]:
        return tuple(p.type for p in self.parameters)

@dataclass(frozen=True)
class TypeDescriptor:
    name: str                 # canonical name (e.g. a.b.Outer.Inner)
    simple_name: str
    kind: Kind
    package: Optional[str] = None
    modifiers: Tuple[str, ...] = ()
    superclass: Optional[str] = None
    interfaces: Tuple[str, ...] = ()
    methods: Tuple[MemberSignature, ...] = ()          # declared on this type
    public_methods: Tuple[MemberSignature, ...] = ()   # declared + inherited, public only
    constructors: Tuple[MemberSignature, ...] = ()     # declared on this type
    origin: Optional[Path] = None                      # source root it was read from

    @property
    def is_interface(self) -> bool:
        return self.kind in ("interface", "annotation")

    @property
    def is_final(self) -> bool:
        return "final" in self.modifiers

    @property
    def is_private(self) -> bool:
        return "private" in self.modifiers

    @property
    def is_abstract(self) -> bool:
        return "abstract" in self.modifiers
