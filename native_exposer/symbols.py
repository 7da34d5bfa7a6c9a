"""
Symbol model consumed by the binding generator

A SymbolModel is a read-only snapshot of one analyzed assembly: its namespace
forest, the types and methods declared in it, the assembly identity and the
diagnostics reported while analyzing it. Symbols are assembled once by a
provider and are not modified afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Protocol

from .constants import DEFAULT_RUNTIME_VERSION, PrimitiveKind


class Severity(IntEnum):
    """Diagnostic severity, ordered from least to most severe"""
    HIDDEN = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class Diagnostic:
    """A message reported while analyzing the project"""
    severity: Severity
    id: str
    message: str
    path: str | None = None
    line: int | None = None
    column: int | None = None

    def format(self) -> str:
        """Render as `path(line,col): severity ID: message`"""
        location = ""
        if self.path:
            location = self.path
            if self.line is not None:
                location += f"({self.line},{self.column or 1})"
            location += ": "
        return f"{location}{self.severity.name.lower()} {self.id}: {self.message}"


@dataclass(frozen=True)
class AssemblyIdentity:
    """Name and version of the analyzed assembly"""
    name: str
    version: tuple[int, int, int] = (1, 0, 0)

    def __str__(self) -> str:
        major, minor, build = self.version
        return f"{self.name}, Version={major}.{minor}.{build}.0, Culture=neutral, PublicKeyToken=null"


class TypeCategory(Enum):
    PRIMITIVE = "primitive"
    REFERENCE = "reference"
    POINTER = "pointer"
    OTHER = "other"


@dataclass(frozen=True)
class TypeRef:
    """Reference to a type as used by a parameter or return value

    `name` is the dot-separated qualified name of the type. Pointers carry
    their pointee instead of a name of their own.
    """
    category: TypeCategory
    name: str = ""
    kind: PrimitiveKind | None = None
    pointee: "TypeRef | None" = None

    @classmethod
    def primitive(cls, kind: PrimitiveKind) -> "TypeRef":
        return cls(TypeCategory.PRIMITIVE, kind.value, kind=kind)

    @classmethod
    def reference(cls, name: str) -> "TypeRef":
        return cls(TypeCategory.REFERENCE, name)

    @classmethod
    def pointer(cls, pointee: "TypeRef") -> "TypeRef":
        return cls(TypeCategory.POINTER, pointee=pointee)

    @classmethod
    def other(cls, name: str) -> "TypeRef":
        return cls(TypeCategory.OTHER, name)

    @property
    def is_reference_type(self) -> bool:
        return self.category == TypeCategory.REFERENCE

    @property
    def is_void(self) -> bool:
        return self.kind == PrimitiveKind.VOID

    @property
    def segments(self) -> list[str]:
        """Qualified name split into its non-blank segments"""
        if self.category == TypeCategory.POINTER:
            return self.pointee.segments[:-1] + [self.short_name]
        return [part for part in self.name.split(".") if part]

    @property
    def short_name(self) -> str:
        if self.category == TypeCategory.POINTER:
            return self.pointee.short_name + "*"
        return self.name.rsplit(".", 1)[-1]


VOID = TypeRef.primitive(PrimitiveKind.VOID)


@dataclass(eq=False)
class Parameter:
    name: str
    type: TypeRef


@dataclass(eq=False)
class MethodSymbol:
    """A method or instance constructor declared by a type"""
    name: str
    parameters: list[Parameter] = field(default_factory=list)
    return_type: TypeRef = VOID
    is_static: bool = False
    is_constructor: bool = False
    attributes: tuple[str, ...] = ()
    export_marker: bool = False
    containing_type: "TypeSymbol | None" = field(default=None, repr=False)

    @property
    def containing_symbol(self):
        return self.containing_type


@dataclass(eq=False)
class TypeSymbol:
    """A named type with its declared methods and nested types"""
    name: str
    is_reference_type: bool = True
    type_parameters: tuple[str, ...] = ()
    attributes: tuple[str, ...] = ()
    export_marker: bool = False
    methods: list[MethodSymbol] = field(default_factory=list)
    nested_types: list["TypeSymbol"] = field(default_factory=list)
    namespace: "NamespaceSymbol | None" = field(default=None, repr=False)
    containing_type: "TypeSymbol | None" = field(default=None, repr=False)

    @property
    def containing_symbol(self):
        return self.containing_type if self.containing_type is not None else self.namespace

    @property
    def metadata_name(self) -> str:
        """Name as stored in metadata, generic types carry their arity (Foo`2)"""
        if self.type_parameters:
            return f"{self.name}`{len(self.type_parameters)}"
        return self.name

    @property
    def display_name(self) -> str:
        if self.type_parameters:
            return f"{self.name}<{', '.join(self.type_parameters)}>"
        return self.name

    def add_method(self, method: MethodSymbol) -> MethodSymbol:
        method.containing_type = self
        self.methods.append(method)
        return method

    def add_nested_type(self, nested: "TypeSymbol") -> "TypeSymbol":
        nested.containing_type = self
        nested.namespace = self.namespace
        self.nested_types.append(nested)
        return nested

    def find_nested_type(self, name: str, arity: int = 0) -> "TypeSymbol | None":
        for nested in self.nested_types:
            if nested.name == name and len(nested.type_parameters) == arity:
                return nested
        return None


@dataclass(eq=False)
class NamespaceSymbol:
    """A namespace; the global namespace has a blank name and no parent"""
    name: str = ""
    namespaces: list["NamespaceSymbol"] = field(default_factory=list)
    types: list[TypeSymbol] = field(default_factory=list)
    parent: "NamespaceSymbol | None" = field(default=None, repr=False)

    @property
    def is_global(self) -> bool:
        return self.parent is None

    @property
    def containing_symbol(self):
        return self.parent

    def get_namespace(self, name: str) -> "NamespaceSymbol":
        """Return the child namespace `name`, creating it on first use"""
        for child in self.namespaces:
            if child.name == name:
                return child
        child = NamespaceSymbol(name, parent=self)
        self.namespaces.append(child)
        return child

    def get_namespace_path(self, dotted: str) -> "NamespaceSymbol":
        namespace = self
        for part in dotted.split("."):
            if part:
                namespace = namespace.get_namespace(part)
        return namespace

    def add_type(self, type_symbol: TypeSymbol) -> TypeSymbol:
        type_symbol.namespace = self
        type_symbol.containing_type = None
        self.types.append(type_symbol)
        return type_symbol

    def find_type(self, name: str, arity: int = 0) -> TypeSymbol | None:
        for type_symbol in self.types:
            if type_symbol.name == name and len(type_symbol.type_parameters) == arity:
                return type_symbol
        return None


@dataclass(frozen=True)
class SymbolModel:
    """Immutable snapshot of one analyzed assembly"""
    global_namespace: NamespaceSymbol
    assembly: AssemblyIdentity
    runtime_version: tuple[int, int, int] = DEFAULT_RUNTIME_VERSION
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def has_errors(self) -> bool:
        return any(d.severity >= Severity.ERROR for d in self.diagnostics)


class SymbolProvider(Protocol):
    """Anything able to produce a SymbolModel for a project path"""

    def load(self, project_path: str, progress=None) -> SymbolModel:
        ...


class InMemorySymbolProvider:
    """Provider returning a prebuilt snapshot, used for fixtures and embedding"""

    def __init__(self, model: SymbolModel):
        self.model = model

    def load(self, project_path: str, progress=None) -> SymbolModel:
        return self.model
