"""
C# project front end producing a SymbolModel

Reads an SDK-style .csproj file, parses its C# sources with tree-sitter and
builds the namespace/type/method forest the generator consumes. This is a
declaration-level analysis: method bodies are never inspected, and type names
are resolved against the declarations of the project, its using directives
and a small table of well-known BCL types.
"""

import glob
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

import tree_sitter_c_sharp
from tree_sitter import Language, Parser

from .config import ExposerConfig, parse_version
from .constants import (
    BCL_REFERENCE_TYPES,
    BCL_VALUE_TYPES,
    CSHARP_BUILTIN_MAP,
    CSHARP_KEYWORD_MAP,
    DEFAULT_RUNTIME_VERSION,
    IMPLICIT_USINGS,
    PrimitiveKind,
)
from .names import qualified_name
from .progress import Progress
from .symbols import (
    VOID,
    AssemblyIdentity,
    Diagnostic,
    MethodSymbol,
    NamespaceSymbol,
    Parameter,
    Severity,
    SymbolModel,
    TypeRef,
    TypeSymbol,
)


class ProjectLoadError(RuntimeError):
    """The project file or one of its sources could not be read"""


SYNTAX_ERROR = "NE0001"
UNRESOLVED_TYPE = "NE0002"
DUPLICATE_TYPE = "NE0003"
UNNECESSARY_USING = "NE0004"
NESTED_EXPORT = "NE0005"
GENERIC_EXPORT = "NE0006"

# Declarations that introduce a named type: node type -> is reference type
TYPE_DECLARATIONS = {
    "class_declaration": True,
    "interface_declaration": True,
    "record_declaration": True,
    "struct_declaration": False,
    "record_struct_declaration": False,
    "enum_declaration": False,
    "delegate_declaration": True,
}

SYSTEM_PRIMITIVES = {kind.value: kind for kind in PrimitiveKind}

_PARSER: Parser | None = None


def _get_parser() -> Parser:
    """Initialize and return the tree-sitter parser with the C# grammar"""
    global _PARSER
    if _PARSER is None:
        _PARSER = Parser(Language(tree_sitter_c_sharp.language()))
    return _PARSER


def _text(node) -> str:
    return node.text.decode("utf8") if node is not None and node.text else ""


def _clean_name(text: str) -> str:
    """Strip whitespace and a `global::` qualifier from a written name"""
    text = re.sub(r"\s+", "", text)
    if text.startswith("global::"):
        text = text[len("global::"):]
    return text


def _local_tag(element) -> str:
    return element.tag.rsplit("}", 1)[-1]


@dataclass
class ProjectInfo:
    """Properties and compile items read from a project file"""
    path: Path
    assembly_name: str
    version: tuple[int, int, int] = (1, 0, 0)
    runtime_version: tuple[int, int, int] = DEFAULT_RUNTIME_VERSION
    sources: list[Path] = field(default_factory=list)
    usings: list[str] = field(default_factory=list)
    aliases: list[tuple[str, str]] = field(default_factory=list)


def _runtime_version(target_framework: str) -> tuple[int, int, int] | None:
    """`net8.0` -> (8, 0, 0), `netcoreapp3.1` -> (3, 1, 0); None for other frameworks"""
    match = re.fullmatch(r"net(?:coreapp)?(\d+)\.(\d+)(?:-.*)?", target_framework.strip())
    if not match:
        return None
    return int(match.group(1)), int(match.group(2)), 0


def _expand_items(project_dir: Path, items: str) -> list[Path]:
    """Expand a `;`-separated MSBuild item list relative to the project"""
    paths = []
    for pattern in items.split(";"):
        pattern = pattern.strip().replace("\\", "/")
        if not pattern:
            continue
        full = pattern if Path(pattern).is_absolute() else str(project_dir / pattern)
        if glob.has_magic(full):
            paths.extend(Path(p) for p in glob.glob(full, recursive=True))
        else:
            paths.append(Path(full))
    return [p.resolve() for p in paths]


def _apply_using_items(info: ProjectInfo, items):
    """Add `<Using>` items, which become global using directives of every file"""
    for element in items:
        include = (element.get("Include") or "").strip()
        remove = (element.get("Remove") or "").strip()
        if remove in info.usings:
            info.usings.remove(remove)
        if not include or element.get("Static", "").lower() == "true":
            continue
        alias = (element.get("Alias") or "").strip()
        if alias:
            info.aliases.append((alias, include))
        elif include not in info.usings:
            info.usings.append(include)


def read_project(project_path) -> ProjectInfo:
    """Read assembly properties and compile items from a .csproj file"""
    path = Path(project_path)
    if path.suffix.lower() != ".csproj":
        raise ProjectLoadError(f"{path}: project doesn't support compilation")

    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise ProjectLoadError(f"{path}: XML parsing error: {e}")
    except OSError as e:
        raise ProjectLoadError(f"{path}: {e.strerror or e}")

    properties = {}
    includes, removals = [], []
    using_items = []
    for element in root.iter():
        tag = _local_tag(element)
        if tag == "Compile":
            if element.get("Include"):
                includes.append(element.get("Include"))
            if element.get("Remove"):
                removals.append(element.get("Remove"))
        elif tag == "Using":
            using_items.append(element)
        elif element.text and element.text.strip() and len(element) == 0:
            properties.setdefault(tag, element.text.strip())

    project_dir = path.resolve().parent
    info = ProjectInfo(path=path, assembly_name=properties.get("AssemblyName", path.stem))

    version = properties.get("AssemblyVersion") or properties.get("Version")
    if version:
        try:
            info.version = parse_version(version.split("-", 1)[0].split("+", 1)[0])
        except ValueError:
            raise ProjectLoadError(f"{path}: invalid assembly version '{version}'")

    frameworks = properties.get("TargetFramework") or properties.get("TargetFrameworks", "")
    for framework in frameworks.split(";"):
        runtime = _runtime_version(framework)
        if runtime:
            info.runtime_version = runtime
            break

    if properties.get("ImplicitUsings", "").lower() in ("enable", "true"):
        info.usings.extend(IMPLICIT_USINGS)
    _apply_using_items(info, using_items)

    sources = set()
    if properties.get("EnableDefaultCompileItems", "true").lower() != "false":
        for source in project_dir.rglob("*.cs"):
            relative = source.relative_to(project_dir).parts
            if relative[0] not in ("bin", "obj"):
                sources.add(source.resolve())
    for items in includes:
        sources.update(_expand_items(project_dir, items))
    for items in removals:
        sources.difference_update(_expand_items(project_dir, items))

    info.sources = sorted(sources, key=lambda p: p.as_posix())
    return info


@dataclass(frozen=True)
class Scope:
    """Name lookup context of a declaration"""
    namespace: str = ""
    usings: tuple[str, ...] = ()
    aliases: tuple[tuple[str, str], ...] = ()
    types: tuple[TypeSymbol, ...] = ()

    def enter_namespace(self, name: str) -> "Scope":
        full = f"{self.namespace}.{name}" if self.namespace else name
        return Scope(full, self.usings, self.aliases, ())

    def enter_type(self, type_symbol: TypeSymbol) -> "Scope":
        return Scope(self.namespace, self.usings, self.aliases, self.types + (type_symbol,))

    def namespace_prefixes(self) -> list[str]:
        """Enclosing namespaces from innermost to the global namespace"""
        prefixes = []
        namespace = self.namespace
        while namespace:
            prefixes.append(namespace)
            namespace = namespace.rpartition(".")[0]
        prefixes.append("")
        return prefixes

    def candidates(self, name: str) -> list[str]:
        """Fully qualified names `name` may refer to, in lookup order"""
        first, _, rest = name.partition(".")
        result = []
        for alias, target in self.aliases:
            if alias == first:
                result.append(f"{target}.{rest}" if rest else target)
        for prefix in self.namespace_prefixes():
            result.append(f"{prefix}.{name}" if prefix else name)
        for using in self.usings:
            result.append(f"{using}.{name}")
        return result


@dataclass
class _PendingMember:
    method: MethodSymbol
    node: object
    scope: Scope
    path: Path


class CSharpProjectLoader:
    """SymbolModel provider for C# projects"""

    def __init__(self, config: ExposerConfig | None = None):
        self.config = config or ExposerConfig()

    def load(self, project_path: str, progress: Progress | None = None) -> SymbolModel:
        progress = progress or Progress()

        with progress.watch(f"evaluate {Path(project_path).stem}"):
            info = read_project(project_path)

        with progress.watch("compile project"):
            return _ProjectAnalyzer(info, self.config).analyze()


class _ProjectAnalyzer:
    """Builds the symbol forest for one project"""

    def __init__(self, info: ProjectInfo, config: ExposerConfig):
        self.info = info
        self.config = config
        self.global_namespace = NamespaceSymbol()
        self.diagnostics: list[Diagnostic] = []
        self.pending: list[_PendingMember] = []
        self.partial_types: set[int] = set()
        self.type_index: dict[tuple[str, int], TypeSymbol] = {}

    def analyze(self) -> SymbolModel:
        parser = _get_parser()
        trees = []
        for path in self.info.sources:
            try:
                source = path.read_bytes()
                source.decode("utf-8")
            except OSError as e:
                raise ProjectLoadError(f"{path}: {e.strerror or e}")
            except UnicodeDecodeError as e:
                raise ProjectLoadError(f"{path}: source file is not UTF-8 encoded: {e}")
            trees.append((path, parser.parse(source)))

        # global usings apply to every file, wherever they are declared
        scope = Scope(usings=tuple(self.info.usings), aliases=tuple(self.info.aliases))
        for path, tree in trees:
            scope = self._add_global_usings(tree.root_node, scope, path)

        for path, tree in trees:
            self._report_syntax_errors(tree.root_node, path)
            self._walk_members(tree.root_node, scope, self.global_namespace, path)

        self._index_types(self.global_namespace.types)
        self._index_namespaces(self.global_namespace)
        for member in self.pending:
            self._resolve_signature(member)

        return SymbolModel(
            global_namespace=self.global_namespace,
            assembly=AssemblyIdentity(self.info.assembly_name, self.info.version),
            runtime_version=self.info.runtime_version,
            diagnostics=tuple(self.diagnostics),
        )

    def _report(self, severity: Severity, code: str, message: str, path: Path, node=None):
        line = column = None
        if node is not None:
            line = node.start_point[0] + 1
            column = node.start_point[1] + 1
        self.diagnostics.append(Diagnostic(severity, code, message, str(path), line, column))

    def _report_syntax_errors(self, node, path: Path):
        if not node.has_error:
            return
        if node.type == "ERROR":
            self._report(Severity.ERROR, SYNTAX_ERROR, f"Syntax error near '{_text(node)[:40]}'", path, node)
            return
        if node.is_missing:
            self._report(Severity.ERROR, SYNTAX_ERROR, f"'{node.type}' expected", path, node)
            return
        for child in node.children:
            self._report_syntax_errors(child, path)

    # declarations

    def _walk_members(self, node, scope: Scope, container, path: Path):
        seen_usings = set()
        for child in node.named_children:
            kind = child.type
            if kind == "using_directive":
                scope = self._add_using(child, scope, seen_usings, path)
            elif kind == "file_scoped_namespace_declaration":
                name = _clean_name(_text(child.child_by_field_name("name")))
                scope = scope.enter_namespace(name)
                container = container.get_namespace_path(name)
                self._walk_members(child, scope, container, path)
            elif kind == "namespace_declaration":
                name = _clean_name(_text(child.child_by_field_name("name")))
                body = child.child_by_field_name("body")
                if body is not None:
                    self._walk_members(body, scope.enter_namespace(name),
                                       container.get_namespace_path(name), path)
            elif kind in TYPE_DECLARATIONS:
                self._declare_type(child, scope, container, path)
            elif kind in ("method_declaration", "constructor_declaration"):
                if isinstance(container, TypeSymbol):
                    self._declare_method(child, scope, container, path)
            elif kind == "declaration_list":
                self._walk_members(child, scope, container, path)

    @staticmethod
    def _is_global_using(node) -> bool:
        return any(_text(c) == "global" for c in node.children if not c.is_named)

    def _add_global_usings(self, root, scope: Scope, path: Path) -> Scope:
        """Fold the `global using` directives of one file into the project-wide scope"""
        seen = set()
        for child in root.named_children:
            if child.type == "using_directive" and self._is_global_using(child):
                scope = self._apply_using(child, scope, seen, path)
        return scope

    def _add_using(self, node, scope: Scope, seen: set, path: Path) -> Scope:
        if self._is_global_using(node):
            return scope
        return self._apply_using(node, scope, seen, path)

    def _apply_using(self, node, scope: Scope, seen: set, path: Path) -> Scope:
        tokens = [_text(c) for c in node.children if not c.is_named]
        if "static" in tokens:
            return scope
        named = [c for c in node.named_children if c.type != "comment"]
        if not named:
            return scope
        if "=" in tokens:
            alias = _text(named[0])
            target = _clean_name(_text(named[-1]))
            return Scope(scope.namespace, scope.usings, scope.aliases + ((alias, target),), scope.types)

        namespace = _clean_name(_text(named[-1]))
        if namespace in seen or namespace in scope.usings:
            self._report(Severity.HIDDEN, UNNECESSARY_USING, "Unnecessary using directive", path, node)
            return scope
        seen.add(namespace)
        return Scope(scope.namespace, scope.usings + (namespace,), scope.aliases, scope.types)

    @staticmethod
    def _modifiers(node) -> set[str]:
        return {_text(c) for c in node.named_children if c.type == "modifier"}

    @staticmethod
    def _type_parameters(node) -> tuple[str, ...]:
        for child in node.named_children:
            if child.type == "type_parameter_list":
                names = []
                for param in child.named_children:
                    if param.type != "type_parameter":
                        continue
                    name = param.child_by_field_name("name")
                    if name is None:
                        name = next((c for c in param.named_children if c.type == "identifier"), None)
                    names.append(_text(name))
                return tuple(names)
        return ()

    def _attributes(self, node, scope: Scope, targets: tuple[str, ...]) -> tuple[str, ...]:
        """Resolve the attributes applied to a declaration for the given targets"""
        resolved = []
        for attribute_list in node.named_children:
            if attribute_list.type != "attribute_list":
                continue
            target = ""
            for child in attribute_list.named_children:
                if child.type == "attribute_target_specifier":
                    target = _text(child).rstrip(":").strip()
            if target and target not in targets:
                continue
            for attribute in attribute_list.named_children:
                if attribute.type == "attribute":
                    name = _clean_name(_text(attribute.child_by_field_name("name")))
                    resolved.append(self._resolve_attribute(name, scope))
        return tuple(resolved)

    def _resolve_attribute(self, name: str, scope: Scope) -> str:
        candidates = []
        for written in (name + "Attribute", name):
            candidates.extend(scope.candidates(written))
        for candidate in candidates:
            if candidate == self.config.export_attribute:
                return candidate
        return name if name.endswith("Attribute") else name + "Attribute"

    def _declare_type(self, node, scope: Scope, container, path: Path):
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        name = _text(name_node)
        type_parameters = self._type_parameters(node)
        is_reference = TYPE_DECLARATIONS[node.type]
        if node.type == "record_declaration":
            is_reference = not any(_text(c) == "struct" for c in node.children if not c.is_named)
        is_partial = "partial" in self._modifiers(node)

        if isinstance(container, NamespaceSymbol):
            existing = container.find_type(name, len(type_parameters))
        else:
            existing = container.find_nested_type(name, len(type_parameters))

        if existing is not None:
            if not (is_partial and id(existing) in self.partial_types):
                self._report(Severity.ERROR, DUPLICATE_TYPE,
                             f"The type '{qualified_name(existing, '.')}' is already defined", path, name_node)
            type_symbol = existing
        else:
            type_symbol = TypeSymbol(name, is_reference_type=is_reference, type_parameters=type_parameters)
            if isinstance(container, NamespaceSymbol):
                container.add_type(type_symbol)
            else:
                container.add_nested_type(type_symbol)
            if is_partial:
                self.partial_types.add(id(type_symbol))

        inner = scope.enter_type(type_symbol)
        attributes = self._attributes(node, scope, ("type",))
        type_symbol.attributes += attributes
        type_symbol.export_marker = type_symbol.export_marker or self.config.export_attribute in attributes
        if self.config.export_attribute in attributes and type_symbol.containing_type is not None:
            self._report_nested_export(type_symbol, path, name_node)

        body = node.child_by_field_name("body")
        if body is not None and node.type != "enum_declaration":
            self._walk_members(body, inner, type_symbol, path)

    def _declare_method(self, node, scope: Scope, type_symbol: TypeSymbol, path: Path):
        modifiers = self._modifiers(node)
        is_constructor = node.type == "constructor_declaration"
        if is_constructor and "static" in modifiers:
            # type initializers are never callable
            return

        attributes = self._attributes(node, scope, ("method",))
        method = MethodSymbol(
            name=_text(node.child_by_field_name("name")),
            is_static="static" in modifiers,
            is_constructor=is_constructor,
            attributes=attributes,
            export_marker=self.config.export_attribute in attributes,
        )
        type_symbol.add_method(method)
        self.pending.append(_PendingMember(method, node, scope, path))
        if method.export_marker and type_symbol.containing_type is not None:
            self._report_nested_export(method, path, node.child_by_field_name("name"))

    def _report_nested_export(self, symbol, path: Path, node):
        # only types declared directly in a namespace are exposed
        self._report(Severity.WARNING, NESTED_EXPORT,
                     f"'{qualified_name(symbol, '.')}' is declared inside a nested type and is not exposed",
                     path, node)

    # type resolution

    def _index_types(self, types: list[TypeSymbol]):
        for type_symbol in types:
            key = (qualified_name(type_symbol, "."), len(type_symbol.type_parameters))
            self.type_index.setdefault(key, type_symbol)
            self._index_types(type_symbol.nested_types)

    def _index_namespaces(self, namespace: NamespaceSymbol):
        for child in namespace.namespaces:
            self._index_types(child.types)
            self._index_namespaces(child)

    def _lookup(self, name: str, arity: int, scope: Scope) -> TypeSymbol | None:
        for enclosing in reversed(scope.types):
            found = self.type_index.get((f"{qualified_name(enclosing, '.')}.{name}", arity))
            if found is not None:
                return found
        for candidate in scope.candidates(name):
            found = self.type_index.get((candidate, arity))
            if found is not None:
                return found
        return None

    @staticmethod
    def _return_type_node(node):
        returns = node.child_by_field_name("returns") or node.child_by_field_name("type")
        if returns is not None:
            return returns
        name = node.child_by_field_name("name")
        previous = None
        for child in node.named_children:
            if name is not None and child.start_byte == name.start_byte:
                return previous
            if child.type not in ("modifier", "attribute_list", "explicit_interface_specifier"):
                previous = child
        return None

    def _resolve_signature(self, member: _PendingMember):
        node, method = member.node, member.method

        if not method.is_constructor:
            returns = self._return_type_node(node)
            method.return_type = self._resolve_type(returns, member) if returns is not None else VOID

        parameters = node.child_by_field_name("parameters")
        if parameters is None:
            return
        for param in parameters.named_children:
            if param.type not in ("parameter", "parameter_array"):
                continue
            type_node = param.child_by_field_name("type")
            if type_node is None:
                type_node = next((c for c in param.named_children if c.type != "identifier"
                                  and c.type not in ("modifier", "attribute_list")), None)
            param_type = self._resolve_type(type_node, member) if type_node is not None else TypeRef.reference("System.Object")
            method.parameters.append(Parameter(_text(param.child_by_field_name("name")), param_type))

    def _type_parameters_in_scope(self, member: _PendingMember) -> set[str]:
        names = set(self._type_parameters(member.node))
        for enclosing in member.scope.types:
            names.update(enclosing.type_parameters)
        return names

    def _resolve_named(self, name: str, arity: int, node, member: _PendingMember) -> TypeRef:
        if arity == 0 and name in self._type_parameters_in_scope(member):
            if member.method.export_marker:
                self._report(Severity.ERROR, GENERIC_EXPORT,
                             f"'{qualified_name(member.method, '.')}' uses the type parameter '{name}'; "
                             f"generic signatures cannot be exposed to native code",
                             member.path, node)
            return TypeRef.reference(name)

        declared = self._lookup(name, arity, member.scope)
        if declared is not None:
            full = qualified_name(declared, ".")
            return TypeRef.reference(full) if declared.is_reference_type else TypeRef.other(full)

        if arity == 0:
            system_names = [name] if name.startswith("System.") else []
            if "System" in member.scope.usings or member.scope.namespace.split(".")[0] == "System":
                system_names.append(f"System.{name}")
            for system_name in system_names:
                if system_name in SYSTEM_PRIMITIVES:
                    return TypeRef.primitive(SYSTEM_PRIMITIVES[system_name])

        short = name.rsplit(".", 1)[-1]
        full = name if "." in name else f"System.{short}"
        if short in BCL_REFERENCE_TYPES or arity > 0:
            return TypeRef.reference(full if short in BCL_REFERENCE_TYPES else name)
        if short in BCL_VALUE_TYPES:
            return TypeRef.other(full)

        self._report(Severity.WARNING, UNRESOLVED_TYPE,
                     f"The type name '{name}' could not be resolved; it is passed as an opaque handle",
                     member.path, node)
        return TypeRef.reference(name)

    def _resolve_type(self, node, member: _PendingMember) -> TypeRef:
        kind = node.type
        text = _clean_name(_text(node))

        if text == "void":
            return VOID
        if kind == "predefined_type" or text in CSHARP_KEYWORD_MAP or text in CSHARP_BUILTIN_MAP:
            if text in CSHARP_KEYWORD_MAP:
                return TypeRef.primitive(CSHARP_KEYWORD_MAP[text])
            full, is_reference = CSHARP_BUILTIN_MAP.get(text, ("System.Object", True))
            return TypeRef.reference(full) if is_reference else TypeRef.other(full)
        if kind in ("identifier", "qualified_name", "alias_qualified_name"):
            return self._resolve_named(text, 0, node, member)
        if kind == "generic_name":
            name_node = next((c for c in node.named_children if c.type == "identifier"), None)
            arguments = next((c for c in node.named_children if c.type == "type_argument_list"), None)
            arity = len(arguments.named_children) if arguments is not None else 0
            return self._resolve_named(_text(name_node), arity, node, member)
        if kind == "array_type":
            return TypeRef.reference("System.Array")
        if kind == "pointer_type":
            inner = node.child_by_field_name("type") or node.named_children[0]
            return TypeRef.pointer(self._resolve_type(inner, member))
        if kind == "nullable_type":
            inner = self._resolve_type(node.child_by_field_name("type") or node.named_children[0], member)
            return inner if inner.is_reference_type else TypeRef.other("System.Nullable")
        if kind in ("ref_type", "scoped_type"):
            return self._resolve_type(node.child_by_field_name("type") or node.named_children[-1], member)
        if kind == "tuple_type":
            return TypeRef.other("System.ValueTuple")
        if kind == "function_pointer_type":
            return TypeRef.primitive(PrimitiveKind.INTPTR)

        self._report(Severity.WARNING, UNRESOLVED_TYPE,
                     f"The type '{text}' is not supported; it is passed as an opaque handle", member.path, node)
        return TypeRef.reference(text)
