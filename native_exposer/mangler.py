"""
Deterministic symbol names for exported methods

A mangled name looks like `_N<name>E[t]<params>`: the method name (the
declaring type's name for constructors), `t` for instance methods, then one
character per parameter type. Return types and parameter names never take
part, so two overloads that differ only in return type collide.
"""

from .constants import MANGLE_CHAR_MAP, REFERENCE_MANGLE_CHAR
from .symbols import MethodSymbol, TypeRef


def mangle_type(type_ref: TypeRef) -> str:
    if type_ref.is_reference_type:
        return REFERENCE_MANGLE_CHAR
    if type_ref.kind in MANGLE_CHAR_MAP:
        return MANGLE_CHAR_MAP[type_ref.kind]
    return type_ref.short_name[0]


def mangle(method: MethodSymbol) -> str:
    name = method.containing_type.name if method.is_constructor else method.name

    parts = ["_N", name, "E"]
    if not method.is_static:
        parts.append("t")
    parts.extend(mangle_type(param.type) for param in method.parameters)
    return "".join(parts)


def find_collisions(methods: list[MethodSymbol]) -> dict[str, list[MethodSymbol]]:
    """Group methods sharing a mangled name; only groups of two or more are returned"""
    groups = {}
    for method in methods:
        groups.setdefault(mangle(method), []).append(method)
    return {name: group for name, group in groups.items() if len(group) > 1}
