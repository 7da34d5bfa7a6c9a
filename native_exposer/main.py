#!/usr/bin/env python3
"""
CLI entry point for the native bindings generator
Generates a C++ header, source and CMakeLists.txt exposing exported managed members
"""

import argparse
import os
import sys

# Add parent directory to sys.path for direct execution
if __name__ == '__main__' and __package__ is None:
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from native_exposer.code_generators import GenerationError
from native_exposer.config import ExposerConfig, parse_config_file
from native_exposer.frontend import CSharpProjectLoader, ProjectLoadError
from native_exposer.generator import CompilationError, NativeBindingsGenerator
from native_exposer.progress import Progress, console_observer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="native-expose",
        description="Generate native C++ bindings for exported members of a C# project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s MyLibrary.csproj native/
  %(prog)s -C exposer.xml --quiet MyLibrary.csproj build/native
        """
    )

    parser.add_argument(
        "project",
        metavar="PROJECT",
        help="C# project file (.csproj) to analyze"
    )

    parser.add_argument(
        "output",
        metavar="OUTPUT_DIR",
        help="Output directory for lib.h, lib.cxx and CMakeLists.txt"
    )

    parser.add_argument(
        "-C", "--config",
        metavar="CONFIG_FILE",
        help="XML configuration file overriding the export attribute, release hook or library name"
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Do not report progress of the individual steps"
    )

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    config = ExposerConfig()
    if args.config:
        try:
            config = parse_config_file(args.config)
        except (ValueError, FileNotFoundError) as e:
            print(f"error: reading config file: {e}", file=sys.stderr)
            sys.exit(1)

    progress = Progress(None if args.quiet else console_observer)

    try:
        generator = NativeBindingsGenerator(CSharpProjectLoader(config), config=config, progress=progress)
        generator.generate(args.project, args.output)
    except (ProjectLoadError, CompilationError, GenerationError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
