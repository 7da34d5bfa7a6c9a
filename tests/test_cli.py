"""
CLI integration tests
"""

import subprocess
import sys

from native_exposer.main import build_parser


def run_cli(*args):
    return subprocess.run(
        [sys.executable, "-m", "native_exposer.main", *args],
        capture_output=True,
        text=True
    )


def test_cli_generates_all_files(csharp_project, tmp_path):
    output_dir = tmp_path / "native"
    result = run_cli(str(csharp_project), str(output_dir))

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    for name in ("lib.h", "lib.cxx", "CMakeLists.txt"):
        assert (output_dir / name).exists(), f"{name} not created"

    assert "compile project" in result.stdout
    assert "generate header" in result.stdout
    assert "CLR_CALL Foo(::std::int32_t i);" in (output_dir / "lib.h").read_text()


def test_cli_quiet(csharp_project, tmp_path):
    result = run_cli("--quiet", str(csharp_project), str(tmp_path / "native"))

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    assert "compile project" not in result.stdout


def test_cli_requires_two_arguments(tmp_path):
    result = run_cli(str(tmp_path / "Only.csproj"))

    assert result.returncode != 0
    assert "usage:" in result.stderr


def test_cli_without_arguments():
    result = run_cli()

    assert result.returncode != 0
    assert "usage:" in result.stderr


def test_cli_missing_project(tmp_path):
    output_dir = tmp_path / "native"
    result = run_cli(str(tmp_path / "Missing.csproj"), str(output_dir))

    assert result.returncode == 1
    assert result.stderr.startswith("error:")
    assert not output_dir.exists()


def test_cli_compile_errors(tmp_path):
    project_dir = tmp_path / "broken"
    project_dir.mkdir()
    (project_dir / "Broken.csproj").write_text('<Project Sdk="Microsoft.NET.Sdk"></Project>')
    (project_dir / "Broken.cs").write_text("namespace Api { public class { }")
    output_dir = tmp_path / "native"

    result = run_cli(str(project_dir / "Broken.csproj"), str(output_dir))

    assert result.returncode == 1
    assert "Broken.cs(1," in result.stderr
    assert "error: failed to compile project" in result.stderr
    assert not output_dir.exists()


def test_cli_config_file(csharp_project, tmp_path):
    config_file = tmp_path / "exposer.xml"
    config_file.write_text('<exposer><library name="foo-native" runtime="9.0.1"/></exposer>')
    output_dir = tmp_path / "native"

    result = run_cli("-C", str(config_file), str(csharp_project), str(output_dir))

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    build = (output_dir / "CMakeLists.txt").read_text()
    assert "project(foo_native LANGUAGES CXX)" in build
    assert 'set(DOTNET_RUNTIME_VERSION "9.0.1"' in build


def test_cli_bad_config_file(csharp_project, tmp_path):
    config_file = tmp_path / "exposer.xml"
    config_file.write_text("<bindings/>")

    result = run_cli("-C", str(config_file), str(csharp_project), str(tmp_path / "native"))

    assert result.returncode == 1
    assert "reading config file" in result.stderr


def test_parser_positionals():
    args = build_parser().parse_args(["Lib.csproj", "out"])
    assert args.project == "Lib.csproj"
    assert args.output == "out"
    assert not args.quiet
    assert args.config is None


def test_cli_non_utf8_source(tmp_path):
    project_dir = tmp_path / "legacy"
    project_dir.mkdir()
    (project_dir / "Legacy.csproj").write_text('<Project Sdk="Microsoft.NET.Sdk"></Project>')
    (project_dir / "Cafe.cs").write_bytes(b"namespace N { public class Caf\xe9 { public void M(Caf\xe9 c) {} } }")
    output_dir = tmp_path / "native"

    result = run_cli("-q", str(project_dir / "Legacy.csproj"), str(output_dir))

    assert result.returncode == 1
    assert result.stderr.startswith("error:")
    assert "not UTF-8 encoded" in result.stderr
    assert "Traceback" not in result.stderr
    assert not output_dir.exists()
