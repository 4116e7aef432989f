import logging
from typing import Dict, Iterable, List, Protocol

from cir.model import MemberSignature, TypeDescriptor
from implementor.errors import ResolutionError
from implementor.identity import MemberIdentityKey, identity_key

logger = logging.getLogger("implgen.collector")

OBJECT = "java.lang.Object"


class TypeProvider(Protocol):
    def resolve(self, identifier: str) -> TypeDescriptor: ...


def _put_abstract(members: Iterable[MemberSignature], found: Dict[MemberIdentityKey, MemberSignature]) -> None:
    for member in members:
        if member.is_abstract:
            # first occurrence wins
            found.setdefault(identity_key(member), member)


def collect_abstract_members(descriptor: TypeDescriptor, provider: TypeProvider) -> List[MemberSignature]:
    """
    Every abstract method a concrete subtype of ``descriptor`` must provide,
    one per identity key.

    The public member list is scanned first, then each level of the
    superclass chain contributes its declared members, including non-public
    ones the public list never shows. A member seen as abstract anywhere is
    kept even if another path overrides it concretely; no further override
    resolution is attempted.
    """
    found: Dict[MemberIdentityKey, MemberSignature] = {}
    _put_abstract(descriptor.public_methods, found)

    visited = set()
    current = descriptor
    while current is not None:
        if current.name in visited:
            raise ResolutionError(f"Cyclic superclass chain at {current.name}")
        visited.add(current.name)
        _put_abstract(current.methods, found)

        parent = current.superclass
        if parent is None or parent == OBJECT:
            break
        try:
            current = provider.resolve(parent)
        except ResolutionError as e:
            logger.error("superclass %s of %s is not available", parent, current.name)
            raise ResolutionError(f"Can't find superclass {parent} of {current.name}: {e}") from e

    logger.debug("collected %d abstract members for %s", len(found), descriptor.name)
    return list(found.values())
