"""
XML configuration file parsing for the native binding generator
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass

from .constants import EXPORT_ATTRIBUTE, INTERNAL_TYPE, RELEASE_METHOD


@dataclass
class ExposerConfig:
    """Configuration for native binding generation"""
    export_attribute: str = EXPORT_ATTRIBUTE
    internal_type: str = INTERNAL_TYPE
    release_method: str = RELEASE_METHOD
    library_name: str | None = None
    runtime_version: tuple[int, int, int] | None = None


def parse_version(text: str) -> tuple[int, int, int]:
    """Parse `major[.minor[.build]]`, missing components default to zero"""
    parts = text.strip().split(".")
    if not 1 <= len(parts) <= 4 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid version '{text}'")
    numbers = [int(p) for p in parts[:3]]
    numbers.extend([0] * (3 - len(numbers)))
    return tuple(numbers)


def parse_config_file(config_path) -> ExposerConfig:
    """Parse XML configuration file and return ExposerConfig object

    Example:

        <exposer>
          <export attribute="MyCompany.ExportAttribute"/>
          <release type="MyCompany.Internal" method="Free"/>
          <library name="mylib" runtime="8.0.0"/>
        </exposer>
    """
    try:
        tree = ET.parse(config_path)
        root = tree.getroot()

        if root.tag != "exposer":
            raise ValueError(f"Expected root element 'exposer', got '{root.tag}'")

        config = ExposerConfig()

        export = root.find("export")
        if export is not None:
            attribute = export.get("attribute")
            if not attribute:
                raise ValueError("Export element missing 'attribute' attribute")
            config.export_attribute = attribute.strip()

        release = root.find("release")
        if release is not None:
            type_name = release.get("type")
            method_name = release.get("method")
            if not type_name or not method_name:
                raise ValueError("Release element missing 'type' or 'method' attribute")
            config.internal_type = type_name.strip()
            config.release_method = method_name.strip()

        library = root.find("library")
        if library is not None:
            name = library.get("name")
            if name is not None:
                config.library_name = name.strip()
            runtime = library.get("runtime")
            if runtime is not None:
                config.runtime_version = parse_version(runtime)

        return config

    except ET.ParseError as e:
        raise ValueError(f"XML parsing error: {e}")
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
