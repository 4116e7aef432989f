from typing import NamedTuple, Tuple

from cir.model import MemberSignature


class MemberIdentityKey(NamedTuple):
    """
    Name, return type and parameter types of a member.
    Exceptions and modifiers are not part of the identity: two members with
    equal keys are satisfied by one stub.
    """
    name: str
    return_type: str
    parameter_types: Tuple[str, ...]


def identity_key(member: MemberSignature) -> MemberIdentityKey:
    return_type = member.return_type.name if member.return_type is not None else "<init>"
    return MemberIdentityKey(
        name=member.name,
        return_type=return_type,
        parameter_types=tuple(t.name for t in member.parameter_types),
    )
