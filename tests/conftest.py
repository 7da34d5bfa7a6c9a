"""
Pytest configuration and fixtures
"""

import pytest

from native_exposer.constants import PrimitiveKind
from native_exposer.symbols import (
    AssemblyIdentity,
    MethodSymbol,
    NamespaceSymbol,
    Parameter,
    SymbolModel,
    TypeRef,
    TypeSymbol,
)

INT32 = TypeRef.primitive(PrimitiveKind.INT32)
INTPTR = TypeRef.primitive(PrimitiveKind.INTPTR)
STRING = TypeRef.reference("System.String")


def add_internal_type(root: NamespaceSymbol) -> TypeSymbol:
    """Declare NativeExposer.Internal with its Free(IntPtr) hook"""
    internal = root.get_namespace("NativeExposer").add_type(TypeSymbol("Internal"))
    internal.add_method(MethodSymbol("Free", [Parameter("handle", INTPTR)], is_static=True))
    return internal


@pytest.fixture
def foo_model():
    """One exported type with an exported constructor and an exported instance method"""
    root = NamespaceSymbol()
    add_internal_type(root)

    foo = root.get_namespace_path("NativeExposer.Test").add_type(TypeSymbol("Foo"))
    foo.add_method(MethodSymbol("Foo", [Parameter("i", INT32)], is_constructor=True, export_marker=True))
    foo.add_method(MethodSymbol("Bar", [Parameter("a", INT32), Parameter("b", INT32)],
                                return_type=INT32, export_marker=True))
    foo.add_method(MethodSymbol("Hidden", [Parameter("s", STRING)]))

    return SymbolModel(root, AssemblyIdentity("Test", (1, 0, 0)), runtime_version=(8, 0, 0))


@pytest.fixture
def nested_model():
    """Types nested inside other types within namespace A.B"""
    root = NamespaceSymbol()
    outer = root.get_namespace_path("A.B").add_type(TypeSymbol("Outer"))
    inner = outer.add_nested_type(TypeSymbol("Inner"))
    inner.add_method(MethodSymbol("Run", export_marker=True))
    return SymbolModel(root, AssemblyIdentity("Asm", (2, 3, 4)))


@pytest.fixture
def csharp_project(tmp_path):
    """Write a small C# project using the export attribute and release hook"""
    project_dir = tmp_path / "project"
    project_dir.mkdir()

    (project_dir / "Exposed.Test.csproj").write_text("""<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
    <AssemblyName>Exposed.Test</AssemblyName>
    <Version>2.1.0</Version>
    <AllowUnsafeBlocks>true</AllowUnsafeBlocks>
  </PropertyGroup>
</Project>
""")

    (project_dir / "Internal.cs").write_text("""using System;

namespace NativeExposer
{
    [AttributeUsage(AttributeTargets.Method | AttributeTargets.Class)]
    public sealed class ExportAttribute : Attribute
    {
    }

    public static class Internal
    {
        public static void Free(IntPtr handle)
        {
        }
    }
}
""")

    (project_dir / "Foo.cs").write_text("""using System;

namespace NativeExposer.Test;

public struct Point
{
    public int X;
}

public partial class Foo
{
    private int _i;

    [method: Export]
    public Foo(int i)
    {
        _i = i;
    }

    [Export]
    private int Bar(int a, int b)
    {
        Console.WriteLine("Hello from C#");
        return _i += a * b;
    }

    public void NotExported(string s)
    {
    }
}

public static class Helpers
{
    [Export]
    public static unsafe long Move(Point p, int* q, Foo owner)
    {
        return 0;
    }
}
""")

    # build outputs are never compiled
    (project_dir / "obj").mkdir()
    (project_dir / "obj" / "Generated.cs").write_text("this is not C#")

    return project_dir / "Exposed.Test.csproj"
