import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import config
from cir.model import PRIMITIVE_TYPES, MemberSignature, TypeDescriptor, TypeRef
from implementor.errors import RenderError

logger = logging.getLogger("implgen.renderer")

# java.lang.reflect.Modifier.toString order
MODIFIER_ORDER = (
    "public", "protected", "private", "abstract", "static", "final",
    "transient", "volatile", "synchronized", "native", "strictfp",
)
STRIPPED_MODIFIERS = frozenset({"abstract", "transient", "native"})

JAVA_KEYWORDS = frozenset({
    "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char",
    "class", "const", "continue", "default", "do", "double", "else", "enum",
    "extends", "final", "finally", "float", "for", "goto", "if", "implements",
    "import", "instanceof", "int", "interface", "long", "native", "new",
    "package", "private", "protected", "public", "return", "short", "static",
    "strictfp", "super", "switch", "synchronized", "this", "throw", "throws",
    "transient", "try", "void", "volatile", "while", "true", "false", "null", "_",
})


@dataclass(frozen=True)
class GeneratedUnit:
    package: Optional[str]
    class_name: str
    text: str

    @property
    def file_name(self) -> str:
        return self.class_name + config.SOURCE_EXT


def impl_class_name(descriptor: TypeDescriptor) -> str:
    return descriptor.simple_name + config.IMPL_SUFFIX


def default_value(return_type: TypeRef) -> Optional[str]:
    """
    Literal a stub returns: None for void, false for boolean, 0 for the
    other primitives and null for every reference type.
    """
    if return_type.is_void:
        return None
    if return_type.name == "boolean":
        return "false"
    if return_type.is_primitive:
        return "0"
    return "null"


class SourceRenderer:
    """
    Builds the text of <SimpleName>Impl for a validated type: header,
    pass-through constructors, one stub per abstract member, closing brace.
    """

    def __init__(self, indent: str = config.INDENT, line_separator: str = config.LINE_SEPARATOR) -> None:
        self.indent = indent
        self.ls = line_separator

    # ---------------- Names ----------------

    def _identifier(self, name: str, what: str) -> str:
        if not name or not name.replace("$", "_").isidentifier() or name in JAVA_KEYWORDS:
            raise RenderError(f"invalid {what} identifier: {name!r}")
        return name

    def _qualified(self, name: str, what: str) -> str:
        for part in name.split("."):
            self._identifier(part, what)
        return name

    def _type_name(self, ref: TypeRef, owner: str) -> str:
        if not ref.resolved:
            raise RenderError(f"cannot resolve type {ref.name!r} used by {owner}")
        base = ref.name
        while base.endswith("[]"):
            base = base[:-2]
        if base not in PRIMITIVE_TYPES:
            self._qualified(base, "type")
        return ref.name

    # ---------------- Pieces ----------------

    def _modifiers(self, modifiers: Iterable[str]) -> str:
        kept = set(modifiers) - STRIPPED_MODIFIERS
        return " ".join(m for m in MODIFIER_ORDER if m in kept)

    def _parameters(self, member: MemberSignature, typed: bool, owner: str) -> str:
        params: List[str] = []
        for index, p in enumerate(member.parameters):
            name = self._identifier(p.name or f"arg{index}", "parameter")
            if not typed:
                params.append(name)
                continue
            type_name = self._type_name(p.type, owner)
            if p.varargs and index == len(member.parameters) - 1 and type_name.endswith("[]"):
                type_name = type_name[:-2] + "..."
            params.append(f"{type_name} {name}")
        return "(" + ", ".join(params) + ")"

    def _exceptions(self, member: MemberSignature, owner: str) -> str:
        if not member.exceptions:
            return ""
        return " throws " + ", ".join(self._type_name(e, owner) for e in member.exceptions)

    def _signature(self, member: MemberSignature, head: str, owner: str) -> str:
        modifiers = self._modifiers(member.modifiers)
        return (
            self.indent
            + (modifiers + " " if modifiers else "")
            + head
            + self._parameters(member, True, owner)
            + self._exceptions(member, owner)
            + " {"
            + self.ls
        )

    def _close(self) -> str:
        return self.indent + "}" + self.ls

    def render_constructor(self, ctor: MemberSignature, class_name: str) -> str:
        owner = f"constructor of {ctor.declaring_type}"
        call = "super" + self._parameters(ctor, False, owner) + ";"
        return (
            self._signature(ctor, class_name, owner)
            + self.indent * 2 + call + self.ls
            + self._close()
        )

    def render_method(self, method: MemberSignature) -> str:
        owner = f"{method.declaring_type}.{method.name}"
        return_type = method.return_type or TypeRef("void")
        head = f"{self._type_name(return_type, owner)} {self._identifier(method.name, 'method')}"
        value = default_value(return_type)
        body = "" if value is None else self.indent * 2 + f"return {value};" + self.ls
        return self._signature(method, head, owner) + body + self._close()

    def render_header(self, descriptor: TypeDescriptor, class_name: str) -> str:
        lines = []
        if descriptor.package:
            lines.append(f"package {self._qualified(descriptor.package, 'package')};")
            lines.append("")
        relation = "implements" if descriptor.is_interface else "extends"
        target = self._qualified(descriptor.name, "type")
        lines.append(f"public class {self._identifier(class_name, 'class')} {relation} {target} {{")
        return self.ls.join(lines) + self.ls

    # ---------------- Unit ----------------

    def render(
        self,
        descriptor: TypeDescriptor,
        constructors: Sequence[MemberSignature],
        members: Sequence[MemberSignature],
    ) -> GeneratedUnit:
        class_name = impl_class_name(descriptor)
        parts = [self.render_header(descriptor, class_name)]

        if not descriptor.is_interface:
            for ctor in constructors:
                parts.append(self.ls + self.render_constructor(ctor, class_name))

        for member in members:
            parts.append(self.ls + self.render_method(member))

        parts.append("}" + self.ls)
        logger.debug(
            "rendered %s: %d constructors, %d methods",
            class_name, 0 if descriptor.is_interface else len(constructors), len(members),
        )
        return GeneratedUnit(package=descriptor.package, class_name=class_name, text="".join(parts))
