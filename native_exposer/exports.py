"""
Selection of the types and methods exposed to native callers
"""

from collections.abc import Iterator

from .symbols import MethodSymbol, NamespaceSymbol, TypeSymbol


def is_exported(symbol) -> bool:
    """True if the symbol carries the export marker, or is a type with an exported method

    Propagation is one level only: a namespace is never exported and a type is
    not exported through its nested types.
    """
    if isinstance(symbol, TypeSymbol) and any(is_exported(m) for m in symbol.methods):
        return True
    return bool(getattr(symbol, "export_marker", False))


def all_types(root: NamespaceSymbol) -> Iterator[TypeSymbol]:
    """Yield every type declared in `root` and its child namespaces, in declaration order"""
    yield from root.types
    for child in root.namespaces:
        yield from all_types(child)


def exported_types(root: NamespaceSymbol) -> Iterator[TypeSymbol]:
    return (t for t in all_types(root) if is_exported(t))


def exported_methods(type_symbol: TypeSymbol) -> list[MethodSymbol]:
    return [m for m in type_symbol.methods if is_exported(m)]
