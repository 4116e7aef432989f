import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import javalang  # type: ignore

from cir.graph import CIRGraph
from cir.model import PRIMITIVE_TYPES, MemberSignature, Parameter, TypeDescriptor, TypeRef
from implementor.errors import ResolutionError

logger = logging.getLogger("implgen.adapter")

OBJECT = "java.lang.Object"

# Public top-level types of java.lang, visible without an import.
JAVA_LANG_TYPES = frozenset({
    # interfaces
    "Appendable", "AutoCloseable", "CharSequence", "Cloneable", "Comparable",
    "Iterable", "ProcessHandle", "Readable", "Runnable",
    # classes
    "Boolean", "Byte", "Character", "Class", "ClassLoader", "ClassValue",
    "Double", "Enum", "Float", "InheritableThreadLocal", "Integer", "Long",
    "Math", "Module", "ModuleLayer", "Number", "Object", "Package", "Process",
    "ProcessBuilder", "Record", "Runtime", "RuntimePermission",
    "SecurityManager", "Short", "StackTraceElement", "StackWalker",
    "StrictMath", "String", "StringBuffer", "StringBuilder", "System",
    "Thread", "ThreadGroup", "ThreadLocal", "Throwable", "Void",
    # exceptions
    "ArithmeticException", "ArrayIndexOutOfBoundsException",
    "ArrayStoreException", "ClassCastException", "ClassNotFoundException",
    "CloneNotSupportedException", "EnumConstantNotPresentException",
    "Exception", "IllegalAccessException", "IllegalArgumentException",
    "IllegalCallerException", "IllegalMonitorStateException",
    "IllegalStateException", "IllegalThreadStateException",
    "IndexOutOfBoundsException", "InstantiationException",
    "InterruptedException", "LayerInstantiationException", "MatchException",
    "NegativeArraySizeException", "NoSuchFieldException",
    "NoSuchMethodException", "NullPointerException", "NumberFormatException",
    "ReflectiveOperationException", "RuntimeException", "SecurityException",
    "StringIndexOutOfBoundsException", "TypeNotPresentException",
    "UnsupportedOperationException", "WrongThreadException",
    # errors
    "AbstractMethodError", "AssertionError", "BootstrapMethodError",
    "ClassCircularityError", "ClassFormatError", "Error",
    "ExceptionInInitializerError", "IllegalAccessError",
    "IncompatibleClassChangeError", "InstantiationError", "InternalError",
    "LinkageError", "NoClassDefFoundError", "NoSuchFieldError",
    "NoSuchMethodError", "OutOfMemoryError", "StackOverflowError",
    "ThreadDeath", "UnknownError", "UnsatisfiedLinkError",
    "UnsupportedClassVersionError", "VerifyError", "VirtualMachineError",
    # annotations
    "Deprecated", "FunctionalInterface", "Override", "SafeVarargs",
    "SuppressWarnings",
})

# Members of common JDK packages, used to resolve on-demand imports of
# packages that are not part of the parsed sources.
JDK_PACKAGES: Dict[str, frozenset] = {
    "java.util": frozenset({
        "AbstractCollection", "AbstractList", "AbstractMap", "AbstractSet",
        "ArrayDeque", "ArrayList", "Arrays", "BitSet", "Calendar", "Collection",
        "Collections", "Comparator", "ConcurrentModificationException", "Date",
        "Deque", "EnumMap", "EnumSet", "Enumeration", "EventListener",
        "HashMap", "HashSet", "Iterator", "LinkedHashMap", "LinkedHashSet",
        "LinkedList", "List", "ListIterator", "Locale", "Map", "NavigableMap",
        "NavigableSet", "NoSuchElementException", "Objects", "Optional",
        "OptionalInt", "PriorityQueue", "Properties", "Queue", "Random",
        "RandomAccess", "Set", "SortedMap", "SortedSet", "Spliterator",
        "Stack", "TreeMap", "TreeSet", "UUID", "Vector",
    }),
    "java.util.function": frozenset({
        "BiConsumer", "BiFunction", "BiPredicate", "BinaryOperator",
        "BooleanSupplier", "Consumer", "Function", "IntFunction",
        "IntPredicate", "Predicate", "Supplier", "ToIntFunction", "UnaryOperator",
    }),
    "java.util.concurrent": frozenset({
        "Callable", "CompletableFuture", "CompletionStage", "ConcurrentHashMap",
        "ConcurrentMap", "ExecutionException", "Executor", "ExecutorService",
        "Future", "ThreadFactory", "TimeUnit", "TimeoutException",
    }),
    "java.util.stream": frozenset({"Collector", "Collectors", "IntStream", "Stream"}),
    "java.io": frozenset({
        "BufferedReader", "BufferedWriter", "Closeable", "File",
        "FileNotFoundException", "Flushable", "IOException", "InputStream",
        "OutputStream", "PrintStream", "Reader", "Serializable",
        "UncheckedIOException", "Writer",
    }),
    "java.nio.file": frozenset({"Files", "Path", "Paths"}),
    "java.math": frozenset({"BigDecimal", "BigInteger"}),
    "java.time": frozenset({"Duration", "Instant", "LocalDate", "LocalDateTime"}),
}

INTERFACE_KINDS = ("interface", "annotation")


@dataclass
class TypeDecl:
    """
    One parsed type declaration together with the compilation unit
    context needed to resolve names used inside it.
    """
    id: str                     # canonical name
    name: str                   # simple name
    kind: str
    package: Optional[str]
    modifiers: Tuple[str, ...]
    node: Any                   # javalang declaration
    imports: Tuple[Any, ...] = ()
    enclosing: Tuple[str, ...] = ()          # enclosing type ids, innermost first
    type_params: Dict[str, Any] = field(default_factory=dict)  # name -> first bound node
    origin: Optional[Path] = None
    source_file: Optional[str] = None


@dataclass
class _Scope:
    package: Optional[str]
    imports: Tuple[Any, ...]
    enclosing: Tuple[str, ...]
    type_params: Dict[str, Any]


class JavaAdapter:
    """
    Java sources → type descriptors.

    Parses compilation units with javalang, indexes every (nested) type
    declaration by canonical name and links them on a CIRGraph with
    INHERITS / IMPLEMENTS edges. resolve() then answers the questions a
    reflection facility would: declared members, public members including
    inherited ones, constructors and the supertype references, all with
    erased canonical type names.
    """

    language = "java"

    def __init__(self) -> None:
        self._decls: Dict[str, TypeDecl] = {}
        self.graph = CIRGraph()
        self.parse_errors: List[Dict[str, str]] = []
        self._linked = False

    # ---------------- Helpers ----------------

    def _visibility_from_mods(self, mods: Iterable[str] | None) -> str:
        mods = set(mods or ())
        if "public" in mods:
            return "public"
        if "private" in mods:
            return "private"
        if "protected" in mods:
            return "protected"
        return "package"

    def _kind_of(self, node) -> str:
        return type(node).__name__.replace("Declaration", "").lower()

    def _body_members(self, node) -> List[Any]:
        body = getattr(node, "body", None) or []
        # enum bodies wrap their members after the constant list
        if hasattr(body, "declarations"):
            body = body.declarations or []
        return list(body)

    # ---------------- Parsing entry points ----------------

    def parse_to_ast(self, code: str):
        try:
            return javalang.parse.parse(code)
        except javalang.parser.JavaSyntaxError as e:
            raise ValueError(f"Java syntax error: {e}")
        except Exception as e:
            raise ValueError(f"Failed to parse Java code: {e}")

    def add_source(self, code: str, filename: str | None = None, origin: Path | None = None) -> List[str]:
        """
        Index one compilation unit. Returns the canonical names it declares.
        """
        tree = self.parse_to_ast(code)
        package_name = getattr(getattr(tree, "package", None), "name", None)
        imports = tuple(imp for imp in (tree.imports or []) if not imp.static)

        declared: List[str] = []
        for t in tree.types:
            self._register(t, package_name, imports, (), {}, origin, filename, declared)
        self._linked = False
        return declared

    def load_sources(self, roots: Iterable[Path]) -> CIRGraph:
        """
        Project-level loader: every *.java file below each root.
        Skips invalid Java files but continues parsing the rest.
        """
        for root in roots:
            root = Path(root)
            if not root.is_dir():
                logger.warning("source root %s is not a directory, skipped", root)
                continue
            for path in sorted(root.rglob("*.java")):
                try:
                    code = path.read_text(encoding="utf-8")
                    self.add_source(code, filename=str(path), origin=root.resolve())
                except (OSError, UnicodeDecodeError, ValueError) as e:
                    logger.warning("skipping %s: %s", path, e)
                    self.parse_errors.append({"file": str(path), "error": str(e)})
                    continue

        self._ensure_linked()
        # attach errors so API can return them
        self.graph.g.graph["parse_errors"] = list(self.parse_errors)
        return self.graph

    def _register(
        self,
        node,
        package_name: Optional[str],
        imports: Tuple[Any, ...],
        enclosing: Tuple[str, ...],
        outer_params: Dict[str, Any],
        origin: Optional[Path],
        source_file: Optional[str],
        declared: List[str],
    ) -> None:
        if enclosing:
            full_name = f"{enclosing[0]}.{node.name}"
        else:
            full_name = f"{package_name}.{node.name}" if package_name else node.name

        kind = self._kind_of(node)
        mods = set(node.modifiers or ())
        if enclosing:
            outer = self._decls[enclosing[0]]
            if outer.kind in INTERFACE_KINDS:
                mods.update({"public", "static"})
            if kind != "class":
                mods.add("static")

        params = dict(outer_params)
        for tp in getattr(node, "type_parameters", None) or []:
            params[tp.name] = tp.extends[0] if tp.extends else None

        if full_name in self._decls:
            logger.warning("duplicate declaration of %s in %s ignored", full_name, source_file)
            return

        self._decls[full_name] = TypeDecl(
            id=full_name,
            name=node.name,
            kind=kind,
            package=package_name,
            modifiers=tuple(sorted(mods)),
            node=node,
            imports=imports,
            enclosing=enclosing,
            type_params=params,
            origin=origin,
            source_file=source_file,
        )
        declared.append(full_name)

        for member in self._body_members(node):
            if isinstance(member, javalang.tree.TypeDeclaration):
                self._register(
                    member, package_name, imports, (full_name,) + enclosing,
                    params, origin, source_file, declared,
                )

    # ---------------- Linking ----------------

    def _ensure_linked(self) -> None:
        if self._linked:
            return
        graph = CIRGraph()
        for type_id, decl in self._decls.items():
            graph.add_node(type_id, "TypeDecl", decl)

        for type_id, decl in self._decls.items():
            superclass, interfaces = self._supertype_refs(decl)
            if superclass is not None:
                graph.add_edge(type_id, superclass.name, "INHERITS")
            for order, iface in enumerate(interfaces):
                graph.add_edge(type_id, iface.name, "IMPLEMENTS", order=order)

        graph.g.graph["parse_errors"] = list(self.parse_errors)
        self.graph = graph
        self._linked = True

    def hierarchy(self) -> CIRGraph:
        self._ensure_linked()
        return self.graph

    def _supertype_refs(self, decl: TypeDecl) -> Tuple[Optional[TypeRef], List[TypeRef]]:
        scope = self._scope(decl)
        node = decl.node
        if decl.kind in INTERFACE_KINDS:
            extends = getattr(node, "extends", None) or []
            return None, [self.resolve_type(t, scope) for t in extends]

        interfaces = [self.resolve_type(t, scope) for t in getattr(node, "implements", None) or []]
        if decl.kind != "class":
            return None, interfaces
        extends = getattr(node, "extends", None)
        if extends is not None:
            return self.resolve_type(extends, scope), interfaces
        if decl.id == OBJECT:
            return None, interfaces
        return TypeRef(OBJECT), interfaces

    # ---------------- Name resolution ----------------

    def _scope(self, decl: TypeDecl, member=None) -> _Scope:
        params = dict(decl.type_params)
        for tp in getattr(member, "type_parameters", None) or []:
            params[tp.name] = tp.extends[0] if tp.extends else None
        return _Scope(
            package=decl.package,
            imports=decl.imports,
            enclosing=(decl.id,) + decl.enclosing,
            type_params=params,
        )

    def resolve_type(self, t, scope: _Scope, _visiting: Optional[Set[str]] = None) -> TypeRef:
        """
        Erased canonical TypeRef for a javalang Type node (None means void).
        """
        if t is None:
            return TypeRef("void")

        dims = "[]" * len(getattr(t, "dimensions", None) or [])
        if isinstance(t, javalang.tree.BasicType):
            return TypeRef(t.name + dims)

        segments: List[str] = []
        part = t
        while part is not None:
            segments.append(part.name)
            part = getattr(part, "sub_type", None)

        base = self._resolve_qualified(segments, scope, _visiting or set())
        return TypeRef(base.name + dims, base.resolved)

    def _resolve_qualified(self, segments: List[str], scope: _Scope, visiting: Set[str]) -> TypeRef:
        first = segments[0]

        if len(segments) == 1 and first in scope.type_params:
            if first in visiting:
                return TypeRef(OBJECT)
            bound = scope.type_params[first]
            if bound is None:
                return TypeRef(OBJECT)
            return self.resolve_type(bound, scope, visiting | {first})

        head = self._resolve_simple(first, scope)
        if head is not None:
            return TypeRef(".".join([head] + segments[1:]))
        if len(segments) > 1:
            # already fully qualified
            return TypeRef(".".join(segments))
        return TypeRef(first, resolved=False)

    def _resolve_simple(self, name: str, scope: _Scope) -> Optional[str]:
        for enclosing in scope.enclosing:
            if enclosing.split(".")[-1] == name:
                return enclosing
            candidate = f"{enclosing}.{name}"
            if candidate in self._decls:
                return candidate

        for imp in scope.imports:
            if not imp.wildcard and imp.path.split(".")[-1] == name:
                return imp.path

        candidate = f"{scope.package}.{name}" if scope.package else name
        if candidate in self._decls:
            return candidate

        for imp in scope.imports:
            if not imp.wildcard:
                continue
            candidate = f"{imp.path}.{name}"
            if candidate in self._decls or name in JDK_PACKAGES.get(imp.path, ()):
                return candidate

        if name in JAVA_LANG_TYPES:
            return f"java.lang.{name}"
        return None

    # ---------------- Members ----------------

    def _parameter(self, p, scope: _Scope) -> Parameter:
        ref = self.resolve_type(p.type, scope)
        if getattr(p, "varargs", False):
            ref = TypeRef(ref.name + "[]", ref.resolved)
            return Parameter(name=p.name, type=ref, varargs=True)
        return Parameter(name=p.name, type=ref)

    def _exceptions(self, member, scope: _Scope) -> Tuple[TypeRef, ...]:
        refs = []
        for qualified in getattr(member, "throws", None) or []:
            refs.append(self._resolve_qualified(qualified.split("."), scope, set()))
        return tuple(refs)

    def _method_signature(self, decl: TypeDecl, method) -> MemberSignature:
        scope = self._scope(decl, method)
        mods = set(method.modifiers or ())
        if decl.kind in INTERFACE_KINDS:
            if "private" not in mods:
                mods.add("public")
            if method.body is None and not mods & {"static", "default", "private"}:
                mods.add("abstract")
            mods.discard("default")

        return MemberSignature(
            name=method.name,
            declaring_type=decl.id,
            parameters=tuple(self._parameter(p, scope) for p in method.parameters or []),
            return_type=self.resolve_type(method.return_type, scope),
            exceptions=self._exceptions(method, scope),
            modifiers=tuple(sorted(mods)),
        )

    def _constructor_signature(self, decl: TypeDecl, ctor) -> MemberSignature:
        scope = self._scope(decl, ctor)
        return MemberSignature(
            name=decl.name,
            declaring_type=decl.id,
            parameters=tuple(self._parameter(p, scope) for p in ctor.parameters or []),
            exceptions=self._exceptions(ctor, scope),
            modifiers=tuple(sorted(set(ctor.modifiers or ()))),
        )

    def declared_methods(self, decl: TypeDecl) -> Tuple[MemberSignature, ...]:
        return tuple(
            self._method_signature(decl, m)
            for m in self._body_members(decl.node)
            if isinstance(m, javalang.tree.MethodDeclaration)
        )

    def declared_constructors(self, decl: TypeDecl) -> Tuple[MemberSignature, ...]:
        ctors = tuple(
            self._constructor_signature(decl, c)
            for c in self._body_members(decl.node)
            if isinstance(c, javalang.tree.ConstructorDeclaration)
        )
        if ctors or decl.kind != "class":
            return ctors

        # implicit default constructor takes the class's own access level
        access = self._visibility_from_mods(decl.modifiers)
        mods = () if access == "package" else (access,)
        return (MemberSignature(name=decl.name, declaring_type=decl.id, modifiers=mods),)

    def public_methods(self, decl: TypeDecl) -> Tuple[MemberSignature, ...]:
        """
        Public methods declared on the type or inherited, like reflection's
        getMethods(): the class chain is scanned before any interface, and a
        method already found under the same name and parameter types hides
        later ones. Every supertype other than java.lang.Object must be in
        the index.
        """
        found: Dict[Tuple[str, Tuple[TypeRef, ...]], MemberSignature] = {}

        def visit(type_id: str) -> None:
            other = self._decls.get(type_id)
            if other is None:
                if type_id == OBJECT:
                    return
                raise ResolutionError(f"Can't find class: {type_id} (supertype of {decl.id})")
            for m in self.declared_methods(other):
                if not m.is_public:
                    continue
                if m.is_static and other.kind in INTERFACE_KINDS:
                    continue
                found.setdefault((m.name, m.parameter_types), m)

        chain = [decl.id] + self.graph.superclass_chain(decl.id)
        for type_id in chain:
            visit(type_id)

        seen: Set[str] = set()
        for type_id in chain:
            for iface in self.graph.superinterfaces(type_id):
                if iface not in seen:
                    seen.add(iface)
                    visit(iface)

        return tuple(found.values())

    # ---------------- Descriptors ----------------

    def known_types(self) -> List[str]:
        return sorted(self._decls)

    def resolve(self, identifier: str) -> TypeDescriptor:
        """
        Canonical or binary name (a.b.Outer.Inner, a.b.Outer$Inner),
        primitive name or array form → TypeDescriptor.
        """
        if identifier is None or not str(identifier).strip():
            raise ResolutionError("Empty type identifier")
        name = str(identifier).strip().replace("$", ".")

        if name.endswith("[]"):
            element = name[:-2].strip()
            package, _, simple = element.rpartition(".")
            return TypeDescriptor(
                name=name, simple_name=f"{simple}[]", kind="array",
                package=package or None, modifiers=("abstract", "final", "public"),
            )
        if name in PRIMITIVE_TYPES:
            return TypeDescriptor(
                name=name, simple_name=name, kind="primitive",
                modifiers=("abstract", "final", "public"),
            )

        self._ensure_linked()
        decl = self._decls.get(name)
        if decl is None:
            raise ResolutionError(f"Can't find class: {name}")

        cycle = self.graph.hierarchy_cycle(decl.id)
        if cycle:
            raise ResolutionError(f"Cyclic inheritance involving {' -> '.join(cycle)}")

        superclass, interfaces = self._supertype_refs(decl)
        return TypeDescriptor(
            name=decl.id,
            simple_name=decl.name,
            kind=decl.kind,
            package=decl.package,
            modifiers=decl.modifiers,
            superclass=superclass.name if superclass is not None else None,
            interfaces=tuple(i.name for i in interfaces),
            methods=self.declared_methods(decl),
            public_methods=self.public_methods(decl),
            constructors=self.declared_constructors(decl),
            origin=decl.origin,
        )
