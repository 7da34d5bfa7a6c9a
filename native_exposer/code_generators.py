"""
Code generation for the native header, source and build descriptor
"""

from importlib import resources

from .code_writer import CodeWriter
from .config import ExposerConfig
from .constants import (
    BUILD_FILE,
    HANDLE_TYPE,
    HEADER_FILE,
    LIBRARY_PLACEHOLDER,
    RUNTIME_VERSION_PLACEHOLDER,
    SOURCE_FILE,
    TEMPLATE_COMMENT,
    UNMANAGED_CALLERS_ONLY,
)
from .exports import all_types, exported_methods, exported_types
from .mangler import find_collisions, mangle
from .names import assembly_qualified_name, qualified_name, type_ref_of
from .symbols import MethodSymbol, SymbolModel, TypeSymbol
from .type_mapper import TypeMapper


class GenerationError(RuntimeError):
    """The symbol model violates an invariant the generated code relies on"""


def load_template(name: str) -> str:
    """Read a boilerplate file shipped in the resources directory"""
    return resources.files("native_exposer").joinpath("resources", name).read_text(encoding="utf-8")


def sanitize_library_name(name: str) -> str:
    """Replace every non-alphanumeric character with an underscore"""
    return "".join(ch if ch.isalnum() else "_" for ch in name)


class CodeGenerator:
    """Shared state and helpers of the three emitters"""

    def __init__(self, model: SymbolModel, type_mapper: TypeMapper | None = None,
                 config: ExposerConfig | None = None):
        self.model = model
        self.type_mapper = type_mapper or TypeMapper()
        self.config = config or ExposerConfig()

    def exported_methods(self, type_symbol: TypeSymbol) -> list[MethodSymbol]:
        """Exported methods of a type, rejecting overloads that share a mangled name"""
        methods = exported_methods(type_symbol)
        collisions = find_collisions(methods)
        if collisions:
            name, group = next(iter(collisions.items()))
            type_name = qualified_name(type_symbol, ".")
            raise GenerationError(
                f"{len(group)} exported methods of '{type_name}' mangle to '{name}'; "
                f"overloads must differ in static-ness or parameter types")
        return methods

    @staticmethod
    def parameter_name(method: MethodSymbol, index: int) -> str:
        return method.parameters[index].name or f"param{index}"

    def write_signature(self, method: MethodSymbol, prefix: str, writer: CodeWriter):
        """Write `ret prefix name(params)`, constructors have no return type"""
        if method.is_constructor:
            writer.write(f"{prefix}{method.containing_type.name}(")
        else:
            writer.write(f"{self.type_mapper.display_type(method.return_type)} {prefix}{method.name}(")

        params = []
        for i, param in enumerate(method.parameters):
            params.append(f"{self.type_mapper.display_type(param.type)} {self.parameter_name(method, i)}")
        writer.write(", ".join(params))
        writer.write(")")


class HeaderGenerator(CodeGenerator):
    """Generates class declarations for every exported type"""

    def generate(self, writer: CodeWriter):
        writer.write_line(load_template(HEADER_FILE))

        for type_symbol in exported_types(self.model.global_namespace):
            namespace = type_symbol.namespace
            if not namespace.is_global:
                writer.write_line(f"namespace {qualified_name(namespace, '::')} {{")
                writer.indent += 1

            self.generate_class(type_symbol, writer)

            if not namespace.is_global:
                writer.indent -= 1
                writer.write_line("}")

    def generate_class(self, type_symbol: TypeSymbol, writer: CodeWriter):
        name = type_symbol.name
        writer.write_line(f"""class {name} {{
  {HANDLE_TYPE} _handle;

public:
  {name}(const {name}&) = delete;
  {name} &operator =(const {name}&) = delete;
  ~{name}();""")
        writer.indent += 1

        for method in self.exported_methods(type_symbol):
            writer.write("CLR_CALL ")
            if method.is_static:
                writer.write("static ")
            self.write_signature(method, "", writer)
            writer.write_line(";")

        writer.indent -= 1
        writer.write_line("};")


class SourceGenerator(CodeGenerator):
    """Generates destructor and method bodies that bind lazily to managed code"""

    def find_release_method(self) -> MethodSymbol:
        """Locate the single deallocation hook of the well-known internal type"""
        internal_type = self.config.internal_type
        candidates = [t for t in all_types(self.model.global_namespace)
                      if qualified_name(t, ".") == internal_type]
        if len(candidates) != 1:
            raise GenerationError(
                f"expected exactly one type '{internal_type}', found {len(candidates)}")

        release_name = self.config.release_method
        methods = [m for m in candidates[0].methods if m.name == release_name]
        if len(methods) != 1:
            raise GenerationError(
                f"expected exactly one method '{internal_type}.{release_name}', found {len(methods)}")

        release = methods[0]
        if len(release.parameters) != 1:
            raise GenerationError(
                f"'{internal_type}.{release_name}' must take the instance handle as its only parameter")
        return release

    def generate(self, writer: CodeWriter):
        writer.write_line(load_template(SOURCE_FILE))

        release = self.find_release_method()

        for type_symbol in exported_types(self.model.global_namespace):
            writer.write_line(f"{qualified_name(type_symbol, '::')}::~{type_symbol.name}() {{")
            writer.indent += 1
            self.write_method_body(release, writer, mangled=False, arguments=["_handle"])
            writer.indent -= 1
            writer.write_line("}")

            prefix = qualified_name(type_symbol, "::") + "::"
            for method in self.exported_methods(type_symbol):
                writer.write("\n")
                self.write_signature(method, prefix, writer)
                writer.write_line(" {")
                writer.indent += 1
                self.write_method_body(method, writer)
                writer.indent -= 1
                writer.write_line("}")

    def write_method_body(self, method: MethodSymbol, writer: CodeWriter,
                          mangled: bool = True, arguments: list[str] | None = None):
        """Write the per-thread function pointer slot, its lookup and the call"""
        mapper = self.type_mapper
        is_instance = not method.is_static and not method.is_constructor

        if method.is_constructor:
            return_type = mapper.bridge_type(type_ref_of(method.containing_type))
        else:
            return_type = mapper.bridge_type(method.return_type)

        slot_params = [HANDLE_TYPE] if is_instance else []
        slot_params.extend(mapper.bridge_type(p.type) for p in method.parameters)
        writer.write_line(f"thread_local {return_type} (MANAGED_CALL *_fp)({', '.join(slot_params)});")

        type_name = assembly_qualified_name(method.containing_type, self.model.assembly)
        method_name = mangle(method) if mangled else method.name
        writer.write_line(f"""if (!_fp) {{
  int r = ::clr::get_function_pointer("{type_name}", "{method_name}", {UNMANAGED_CALLERS_ONLY}, nullptr, nullptr, reinterpret_cast<void**>(&_fp));
  ::clr::assert_status_code(static_cast<clr::StatusCode>(r));
}}""")

        if method.is_constructor:
            writer.write("_handle = ")
        elif not method.return_type.is_void:
            writer.write("return ")

        if arguments is None:
            arguments = [self.parameter_name(method, i) for i in range(len(method.parameters))]
        call_args = ["_handle"] if is_instance else []
        call_args.extend(arguments)
        writer.write_line(f"_fp({', '.join(call_args)});")


class BuildGenerator(CodeGenerator):
    """Generates the build descriptor from its template"""

    def library_name(self) -> str:
        return sanitize_library_name(self.config.library_name or self.model.assembly.name)

    def runtime_version(self) -> str:
        version = self.config.runtime_version or self.model.runtime_version
        return ".".join(str(part) for part in version[:3])

    def generate(self, writer: CodeWriter):
        template = load_template(BUILD_FILE)
        template = template.replace(LIBRARY_PLACEHOLDER, self.library_name())
        template = template.replace(RUNTIME_VERSION_PLACEHOLDER, self.runtime_version())

        for line in template.splitlines():
            if line.startswith(TEMPLATE_COMMENT):
                continue
            writer.write_line(line)
