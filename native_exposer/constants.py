"""
Constants and mappings for native binding generation
"""

from enum import Enum


class PrimitiveKind(Enum):
    """Fixed-width primitive kinds that cross the native boundary by value"""
    VOID = "System.Void"
    INT8 = "System.SByte"
    INT16 = "System.Int16"
    INT32 = "System.Int32"
    INT64 = "System.Int64"
    UINT8 = "System.Byte"
    UINT16 = "System.UInt16"
    UINT32 = "System.UInt32"
    UINT64 = "System.UInt64"
    FLOAT16 = "System.Half"
    FLOAT32 = "System.Single"
    FLOAT64 = "System.Double"
    INTPTR = "System.IntPtr"
    UINTPTR = "System.UIntPtr"


# Mapping from primitive kinds to native C++ types
NATIVE_TYPE_MAP = {
    PrimitiveKind.VOID: "void",
    PrimitiveKind.INT8: "::std::int8_t",
    PrimitiveKind.INT16: "::std::int16_t",
    PrimitiveKind.INT32: "::std::int32_t",
    PrimitiveKind.INT64: "::std::int64_t",
    PrimitiveKind.UINT8: "::std::uint8_t",
    PrimitiveKind.UINT16: "::std::uint16_t",
    PrimitiveKind.UINT32: "::std::uint32_t",
    PrimitiveKind.UINT64: "::std::uint64_t",
    PrimitiveKind.FLOAT16: "::std::float16_t",
    PrimitiveKind.FLOAT32: "::std::float32_t",
    PrimitiveKind.FLOAT64: "::std::float64_t",
    PrimitiveKind.INTPTR: "::std::intptr_t",
    PrimitiveKind.UINTPTR: "::std::uintptr_t",
}

# Opaque handle type used for every reference-typed value
HANDLE_TYPE = NATIVE_TYPE_MAP[PrimitiveKind.INTPTR]

# One character per parameter type in mangled names
MANGLE_CHAR_MAP = {
    PrimitiveKind.INT8: "c",     # char
    PrimitiveKind.INT16: "s",    # short
    PrimitiveKind.INT32: "i",    # int
    PrimitiveKind.INT64: "l",    # long
    PrimitiveKind.UINT8: "b",    # byte
    PrimitiveKind.UINT16: "w",   # word
    PrimitiveKind.UINT32: "u",   # uint
    PrimitiveKind.UINT64: "q",   # qword
    PrimitiveKind.FLOAT16: "h",  # half
    PrimitiveKind.FLOAT32: "f",  # float
    PrimitiveKind.FLOAT64: "d",  # double
}
REFERENCE_MANGLE_CHAR = "p"

# C# keyword aliases for primitive kinds
CSHARP_KEYWORD_MAP = {
    "void": PrimitiveKind.VOID,
    "sbyte": PrimitiveKind.INT8,
    "short": PrimitiveKind.INT16,
    "int": PrimitiveKind.INT32,
    "long": PrimitiveKind.INT64,
    "byte": PrimitiveKind.UINT8,
    "ushort": PrimitiveKind.UINT16,
    "uint": PrimitiveKind.UINT32,
    "ulong": PrimitiveKind.UINT64,
    "float": PrimitiveKind.FLOAT32,
    "double": PrimitiveKind.FLOAT64,
    "nint": PrimitiveKind.INTPTR,
    "nuint": PrimitiveKind.UINTPTR,
}

# C# keyword aliases for non-primitive BCL types: name -> (qualified name, is reference)
CSHARP_BUILTIN_MAP = {
    "bool": ("System.Boolean", False),
    "char": ("System.Char", False),
    "decimal": ("System.Decimal", False),
    "string": ("System.String", True),
    "object": ("System.Object", True),
    "dynamic": ("System.Object", True),
}

# Well-known BCL reference types resolvable without a declaration in the project
BCL_REFERENCE_TYPES = {
    "String", "Object", "Exception", "Type", "Array", "Delegate",
    "Action", "Func", "Task", "Uri", "Stream",
}

# Well-known BCL value types resolvable without a declaration in the project
BCL_VALUE_TYPES = {
    "Boolean", "Char", "Decimal", "Guid", "DateTime", "DateTimeOffset",
    "TimeSpan", "Nullable", "ValueTuple",
}

# Namespaces imported into every file by `<ImplicitUsings>enable</ImplicitUsings>`
IMPLICIT_USINGS = (
    "System",
    "System.Collections.Generic",
    "System.IO",
    "System.Linq",
    "System.Net.Http",
    "System.Threading",
    "System.Threading.Tasks",
)

# Marker attribute selecting types and methods for export
EXPORT_ATTRIBUTE = "NativeExposer.ExportAttribute"

# Well-known internal type and its deallocation hook
INTERNAL_TYPE = "NativeExposer.Internal"
RELEASE_METHOD = "Free"

# Calling convention marker passed to the host resolver
UNMANAGED_CALLERS_ONLY = "UNMANAGEDCALLERSONLY_METHOD"

# Template substitution points and template-only comment prefix
LIBRARY_PLACEHOLDER = "@LIBRARY@"
RUNTIME_VERSION_PLACEHOLDER = "@DOTNET_RUNTIME_VERSION@"
TEMPLATE_COMMENT = "##"

# Default output file names
HEADER_FILE = "lib.h"
SOURCE_FILE = "lib.cxx"
BUILD_FILE = "CMakeLists.txt"

# Runtime version used when the project does not name a target framework
DEFAULT_RUNTIME_VERSION = (8, 0, 0)
