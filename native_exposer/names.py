"""
Qualified and assembly-qualified names built from the containment chain
"""

from .symbols import MethodSymbol, NamespaceSymbol, TypeRef, TypeSymbol


def qualified_name(symbol, delimiter: str) -> str:
    """Join the names from the outermost namespace down to `symbol`

    Blank names (the global namespace) contribute nothing.
    """
    parts = []
    while isinstance(symbol, (NamespaceSymbol, TypeSymbol, MethodSymbol)):
        if symbol.name.strip():
            parts.append(symbol.name)
        symbol = symbol.containing_symbol
    parts.reverse()
    return delimiter.join(parts)


def _is_root_namespace(symbol) -> bool:
    return isinstance(symbol, NamespaceSymbol) and symbol.is_global


def assembly_qualified_name(symbol, assembly) -> str:
    """Build the runtime lookup key for `symbol`, e.g. `A.B.Outer+Inner, Asm, Version=...`

    Returns an empty string for None or the global namespace. Two type
    segments are separated by `+`, every other boundary by `.`.
    """
    if symbol is None or _is_root_namespace(symbol):
        return ""

    name = getattr(symbol, "metadata_name", symbol.name)
    last = symbol
    current = symbol.containing_symbol
    while current is not None and not _is_root_namespace(current):
        separator = "+" if isinstance(current, TypeSymbol) and isinstance(last, TypeSymbol) else "."
        display = getattr(current, "display_name", current.name)
        name = display + separator + name
        last = current
        current = current.containing_symbol

    return f"{name}, {assembly}"


def type_ref_of(type_symbol: TypeSymbol) -> TypeRef:
    """TypeRef naming a declared type, used for constructor results"""
    name = qualified_name(type_symbol, ".")
    if type_symbol.is_reference_type:
        return TypeRef.reference(name)
    return TypeRef.other(name)
