"""
Platform preference metadata scanner.

Reads preference specifier files: a root file whose ``PreferenceSpecifiers``
list declares settings (``Key`` + ``DefaultValue``) and child panes
(``Type: PSChildPaneSpecifier`` + ``File``) that name further files. The
scanner collects every declared default so the container can register them
with the preference store and validate them against registered keys.

Files are parsed by extension: ``.plist`` via plistlib, ``.yaml``/``.yml``
via PyYAML, ``.json`` via json.
"""

import json
import logging
import plistlib
from pathlib import Path
from typing import Any, Dict, Optional, Set, Union
from xml.parsers.expat import ExpatError

import yaml

from layerprefs.errors import DecodeError
from layerprefs.preferences import PreferenceStore

logger = logging.getLogger(__name__)

CHILD_PANE_TYPE = "PSChildPaneSpecifier"


class BundleScanner:
    """Collects declared defaults from a directory of preference files."""

    def __init__(self, directory: Optional[Union[str, Path]], root: str = "Root.plist"):
        self.directory = Path(directory) if directory is not None else None
        self.root = root

    def scan(self) -> Dict[str, Any]:
        """
        Collect ``key -> default`` from the root file and its child panes.

        Returns:
            Declared defaults; empty if the directory or root file is missing
        """
        defaults: Dict[str, Any] = {}
        if self.directory is None or not self.directory.is_dir():
            logger.debug(f"🧩 No settings bundle at {self.directory}, nothing to scan")
            return defaults

        root_path = self.directory / self.root
        if not root_path.exists():
            logger.debug(f"🧩 Settings bundle has no {self.root}")
            return defaults

        self._scan_file(root_path, defaults, visited=set())
        return defaults

    def register(self, preferences: PreferenceStore) -> Dict[str, Any]:
        """Scan and add the declared defaults to the preference store."""
        defaults = self.scan()
        if defaults:
            preferences.register_defaults(defaults)
            logger.debug(f"🧩 Registered {len(defaults)} platform defaults")
        return defaults

    def _scan_file(self, path: Path, defaults: Dict[str, Any], visited: Set[Path]) -> None:
        resolved = path.resolve()
        if resolved in visited:
            return
        visited.add(resolved)

        logger.debug(f"🧩 Scanning preference file {path.name}")
        specifiers = self._read(path).get("PreferenceSpecifiers") or []
        extension = path.suffix

        for specifier in specifiers:
            if not isinstance(specifier, dict):
                continue
            if specifier.get("Type") == CHILD_PANE_TYPE and specifier.get("File"):
                child = path.with_name(f"{specifier['File']}{extension}")
                if child.exists():
                    self._scan_file(child, defaults, visited)
                else:
                    logger.warning(f"🧩 Child pane file {child.name} referenced by {path.name} is missing")
                continue
            key = specifier.get("Key")
            if key is not None and "DefaultValue" in specifier:
                defaults[key] = specifier["DefaultValue"]

    @staticmethod
    def _read(path: Path) -> Dict[str, Any]:
        data = path.read_bytes()
        try:
            if path.suffix == ".plist":
                content = plistlib.loads(data)
            elif path.suffix in (".yaml", ".yml"):
                content = yaml.safe_load(data)
            else:
                content = json.loads(data)
        except (plistlib.InvalidFileException, ExpatError, yaml.YAMLError, ValueError) as e:
            raise DecodeError(path.suffix.lstrip(".") or "preference", f"{path}: {e}") from e
        return content if isinstance(content, dict) else {}
