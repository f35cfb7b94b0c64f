# -*- coding: utf-8 -*-
"""
Component Scanner
"""

import importlib
import inspect
import sys
from pathlib import Path
from typing import Any, List, Optional, Set

from beancontext.di.interfaces import Scanner
from beancontext.observation.logger import get_logger


class ComponentScanner(Scanner):
    """
    Component Scanner

    Imports every module under the configured packages and paths and provides
    one instance of each @component class defined there. Classes are created
    with their no-argument constructor; dependencies come from injection points.
    """

    def __init__(self):
        self.scan_paths: List[str] = []
        self.scan_packages: List[str] = []
        self.exclude_paths: Set[str] = {
            '__pycache__',
            '.git',
            '.pytest_cache',
        }
        self.exclude_patterns: Set[str] = {'test_', '_test', 'tests'}
        self.include_patterns: Set[str] = set()
        self.recursive = True

        # Create a dedicated logger
        self.logger = get_logger(__name__)

    def add_scan_path(self, path: str) -> 'ComponentScanner':
        """Add scan path"""
        self.scan_paths.append(path)
        return self

    def add_scan_package(self, package: str) -> 'ComponentScanner':
        """Add scan package"""
        self.scan_packages.append(package)
        return self

    def exclude_path(self, path: str) -> 'ComponentScanner':
        """Exclude path"""
        self.exclude_paths.add(path)
        return self

    def exclude_pattern(self, pattern: str) -> 'ComponentScanner':
        """Exclude pattern"""
        self.exclude_patterns.add(pattern)
        return self

    def include_pattern(self, pattern: str) -> 'ComponentScanner':
        """Include pattern"""
        self.include_patterns.add(pattern)
        return self

    def set_recursive(self, recursive: bool) -> 'ComponentScanner':
        """Set whether to scan recursively"""
        self.recursive = recursive
        return self

    def beans(self) -> List[Any]:
        """Import the modules and instantiate the components they define"""
        self.logger.debug("Starting component scan...")
        instances = []
        for module_name in self.scan():
            module = sys.modules[module_name]
            for _, cls in inspect.getmembers(module, inspect.isclass):
                if cls.__module__ != module_name or not self._is_component(cls):
                    continue
                instances.append(cls())
                self.logger.debug("Component found: %s.%s", module_name, cls.__name__)
        self.logger.debug("Component scan completed, %d components", len(instances))
        return instances

    @staticmethod
    def _is_component(cls: type) -> bool:
        attrs = vars(cls)
        return bool(attrs.get('_di_component')) and not attrs.get('_di_skip', False)

    def scan(self) -> List[str]:
        """
        Import every module found

        Returns:
            List[str]: Imported module names, sorted

        Raises:
            ImportError: When a module can not be imported
        """
        module_names = set()
        for file_path in self._collect_python_files():
            module_name = self._file_to_module_name(file_path)
            if module_name:
                module_names.add(module_name)
        for package in self.scan_packages:
            module_names.add(package)

        imported = []
        for module_name in sorted(module_names):
            try:
                importlib.import_module(module_name)
            except ImportError as e:
                self.logger.error("Failed to import module %s: %s", module_name, e)
                raise
            imported.append(module_name)
        return imported

    def _collect_python_files(self) -> List[Path]:
        """Collect all Python files"""
        python_files = []

        # Scan paths
        if self.scan_paths:
            self.logger.debug("Scanning paths: %s", ', '.join(self.scan_paths))
        for scan_path in self.scan_paths:
            python_files.extend(self._collect_files_from_path(scan_path))

        # Scan packages
        if self.scan_packages:
            self.logger.debug("Scanning packages: %s", ', '.join(self.scan_packages))
        for package in self.scan_packages:
            python_files.extend(self._collect_files_from_package(package))

        return sorted(set(python_files))

    def _collect_files_from_path(self, path: str) -> List[Path]:
        """Collect Python files from path"""
        files = []
        path_obj = Path(path)

        if not path_obj.exists():
            self.logger.warning("Scan path does not exist: %s", path)
            return files

        if path_obj.is_file() and path_obj.suffix == '.py':
            if self._should_include_file(path_obj):
                files.append(path_obj)
        elif path_obj.is_dir():
            pattern = "**/*.py" if self.recursive else "*.py"
            for file_path in path_obj.glob(pattern):
                if self._should_include_file(file_path):
                    files.append(file_path)

        return files

    def _collect_files_from_package(self, package_name: str) -> List[Path]:
        """Collect Python files from package"""
        package = importlib.import_module(package_name)
        if getattr(package, '__file__', None):
            return self._collect_files_from_path(str(Path(package.__file__).parent))
        return []

    def _should_include_file(self, file_path: Path) -> bool:
        """Check if file should be included"""
        # Exclude special files
        if file_path.name.startswith('__') and file_path.name.endswith('__.py'):
            return False

        # Check excluded paths
        for exclude_path in self.exclude_paths:
            if exclude_path in str(file_path):
                return False

        # Check excluded patterns
        for pattern in self.exclude_patterns:
            if pattern in file_path.name:
                return False

        # Check included patterns
        if self.include_patterns:
            return any(pattern in file_path.name for pattern in self.include_patterns)

        return True

    def _file_to_module_name(self, file_path: Path) -> Optional[str]:
        """Convert file path to module name"""
        # Deeper sys.path entries first, so src.a.b resolves as a.b
        sorted_sys_paths = sorted(
            (path for path in sys.path if path),
            key=lambda p: len(Path(p).resolve().parts),
            reverse=True,
        )
        resolved = file_path.resolve()
        for sys_path in sorted_sys_paths:
            try:
                relative_path = resolved.relative_to(Path(sys_path).resolve())
            except ValueError:
                continue
            return ".".join(relative_path.with_suffix("").parts)
        return None
