import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union

import config
from implementor.collector import TypeProvider, collect_abstract_members
from implementor.errors import CompilationError, DestinationError, InvalidTargetError
from implementor.renderer import GeneratedUnit, SourceRenderer
from implementor.sink import unit_path, write_unit
from implementor.toolchain import compile_source, package_jar
from implementor.validation import ValidatedTarget, check_type, validate_target

logger = logging.getLogger("implgen.implementor")

PathLike = Union[str, Path]


class Implementor:
    """
    Generates <SimpleName>Impl for a class or interface known to the
    provider, either as a .java file below a root directory or compiled and
    packed into a single-entry .jar.
    """

    def __init__(self, provider: TypeProvider, renderer: Optional[SourceRenderer] = None) -> None:
        self.provider = provider
        self.renderer = renderer or SourceRenderer()

    def generate(self, type_name: str) -> GeneratedUnit:
        """
        Validate, collect and render without touching the filesystem.
        """
        if type_name is None or not str(type_name).strip():
            raise InvalidTargetError("the class name is missing")
        descriptor = self.provider.resolve(str(type_name).strip())
        constructors = check_type(descriptor)
        members = collect_abstract_members(descriptor, self.provider)
        return self.renderer.render(descriptor, constructors, members)

    def implement(self, type_name: str, root: PathLike) -> Path:
        """
        Writes the implementation to $root/<package path>/<SimpleName>Impl.java.
        """
        target = validate_target(self.provider, type_name, root)
        return write_unit(self._render(target), Path(root))

    def _render(self, target: ValidatedTarget) -> GeneratedUnit:
        members = collect_abstract_members(target.descriptor, self.provider)
        logger.info(
            "implementing %s: %d constructors, %d abstract methods",
            target.descriptor.name, len(target.constructors), len(members),
        )
        return self.renderer.render(target.descriptor, target.constructors, members)

    def implement_jar(self, type_name: str, jar_file: PathLike) -> Path:
        """
        Generates, compiles and packs the implementation into ``jar_file``.
        Intermediate files live in a temporary directory next to the jar.
        """
        target = validate_target(self.provider, type_name, jar_file)
        jar_file = Path(jar_file)
        try:
            jar_file.parent.mkdir(parents=True, exist_ok=True)
            tmp_dir = Path(tempfile.mkdtemp(prefix="tmp", dir=jar_file.parent))
        except OSError as e:
            raise DestinationError(f"Error while creating temp directory: {e}") from e

        try:
            unit = self._render(target)
            source_file = write_unit(unit, tmp_dir)
            classpath = [tmp_dir]
            if target.descriptor.origin is not None:
                classpath.append(target.descriptor.origin)

            result = compile_source(source_file, tmp_dir, classpath)
            if not result.ok:
                raise CompilationError(
                    f"Error while compiling generated class: compiler returned {result.returncode}",
                    diagnostics=result.diagnostics,
                )

            class_file = unit_path(tmp_dir, unit, config.CLASS_EXT)
            entry_name = "/".join(filter(None, [(unit.package or "").replace(".", "/"), unit.class_name + config.CLASS_EXT]))
            return package_jar(class_file, entry_name, jar_file)
        finally:
            # cleanup failures don't change the outcome
            shutil.rmtree(tmp_dir, ignore_errors=True)
