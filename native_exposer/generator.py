"""
Main native bindings generator orchestration
"""

import io
import sys
from pathlib import Path

from .code_generators import BuildGenerator, HeaderGenerator, SourceGenerator
from .code_writer import CodeWriter
from .config import ExposerConfig
from .constants import BUILD_FILE, HEADER_FILE, SOURCE_FILE
from .progress import Progress
from .symbols import Severity, SymbolModel, SymbolProvider
from .type_mapper import TypeMapper


class CompilationError(RuntimeError):
    """The analyzed project reported error diagnostics"""


class NativeBindingsGenerator:
    """Main orchestrator for generating native bindings from a managed project"""

    def __init__(self, provider: SymbolProvider | None = None, config: ExposerConfig | None = None,
                 progress: Progress | None = None):
        self.config = config or ExposerConfig()
        if provider is None:
            from .frontend import CSharpProjectLoader
            provider = CSharpProjectLoader(self.config)
        self.provider = provider
        self.progress = progress or Progress()
        self.type_mapper = TypeMapper()

    def check_diagnostics(self, model: SymbolModel):
        """Print every non-hidden diagnostic; raise if any of them is an error"""
        has_errors = False
        for diagnostic in model.diagnostics:
            if diagnostic.severity == Severity.HIDDEN:
                continue
            if diagnostic.severity >= Severity.ERROR:
                has_errors = True
            print(diagnostic.format(), file=sys.stderr)

        if has_errors:
            raise CompilationError("failed to compile project")

    def emitters(self, model: SymbolModel) -> dict:
        """File name -> emitter for the three artifacts"""
        args = (model, self.type_mapper, self.config)
        return {
            HEADER_FILE: ("generate header", HeaderGenerator(*args)),
            SOURCE_FILE: ("generate source", SourceGenerator(*args)),
            BUILD_FILE: (f"generate {BUILD_FILE}", BuildGenerator(*args)),
        }

    def render(self, model: SymbolModel) -> dict[str, str]:
        """Generate all artifacts in memory and return file name -> content"""
        file_contents = {}
        for file_name, (title, emitter) in self.emitters(model).items():
            buffer = io.StringIO()
            with self.progress.watch(title):
                emitter.generate(CodeWriter(buffer))
            file_contents[file_name] = buffer.getvalue()
        return file_contents

    def generate(self, project_path: str, output: str) -> dict[str, str]:
        """Generate native bindings for a project into the output directory

        Args:
            project_path: Project file handed to the symbol provider
            output: Output directory, created if missing

        Returns:
            Dictionary mapping each written file name to its content
        """
        model = self.provider.load(project_path, self.progress)
        self.check_diagnostics(model)

        file_contents = self.render(model)

        output_path = Path(output)
        output_path.mkdir(parents=True, exist_ok=True)

        for file_name, content in file_contents.items():
            target = output_path / file_name
            target.write_text(content, encoding="utf-8", newline="\n")
            print(f"Generated {file_name}: {target}")

        return file_contents
