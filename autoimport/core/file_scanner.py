"""
File scanner for JavaScript Auto Import.
Discovers JavaScript modules based on include/exclude patterns.
"""

import os
import fnmatch
from pathlib import Path
from typing import Iterator, List

from autoimport.config.config_manager import ConfigManager


class FileScanner:
    """Finds the JavaScript files a run should transform."""

    def __init__(self, config_manager: ConfigManager):
        """
        Initialize FileScanner with configuration.

        Args:
            config_manager: ConfigManager instance with loaded configuration
        """
        self.include_patterns = config_manager.get_include_patterns()
        self.exclude_patterns = config_manager.get_exclude_patterns()
        self.recursive = config_manager.is_recursive()

    def scan(self, target: str) -> List[Path]:
        """
        Collect matching files under a file or directory target.

        Args:
            target: File or directory path

        Returns:
            Sorted list of matching files

        Raises:
            FileNotFoundError: If the target does not exist
        """
        target_path = Path(target)

        if target_path.is_file():
            return self.scan_file(target)
        if target_path.is_dir():
            return self.scan_directory(target)

        raise FileNotFoundError(f"Target path does not exist: {target}")

    def scan_directory(self, directory: str) -> List[Path]:
        """
        Scan a directory for JavaScript files matching the configured patterns.

        Args:
            directory: Path to directory to scan

        Returns:
            Sorted list of matching files
        """
        root = Path(directory).resolve()

        if not root.exists():
            raise FileNotFoundError(f"Directory not found: {directory}")
        if not root.is_dir():
            raise ValueError(f"Path is not a directory: {directory}")

        return sorted(path for path in self._iter_files(root) if self._should_include_file(path, root))

    def scan_file(self, file_path: str) -> List[Path]:
        """
        Check a single file against the include/exclude patterns.

        Args:
            file_path: Path to the file to check

        Returns:
            List containing the file if it matches, empty list otherwise
        """
        path = Path(file_path).resolve()

        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        if not path.is_file():
            raise ValueError(f"Path is not a file: {file_path}")

        return [path] if self._should_include_file(path, path.parent) else []

    def _iter_files(self, root: Path) -> Iterator[Path]:
        if not self.recursive:
            for item in root.iterdir():
                if item.is_file():
                    yield item
            return

        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            # prune in place so os.walk never descends into excluded directories
            dirnames[:] = sorted(
                name for name in dirnames
                if not self._matches_any_pattern(current / name, root, self.exclude_patterns)
            )
            for name in filenames:
                yield current / name

    def _should_include_file(self, path: Path, root: Path) -> bool:
        if self._matches_any_pattern(path, root, self.exclude_patterns):
            return False
        return self._matches_any_pattern(path, root, self.include_patterns)

    @staticmethod
    def _matches_any_pattern(path: Path, root: Path, patterns: List[str]) -> bool:
        """
        Check if a path matches any glob pattern.

        A pattern matches the file name, the path relative to the scan root,
        or any trailing run of that relative path's components.

        Args:
            path: Path to check
            root: Directory the scan started from
            patterns: Glob patterns

        Returns:
            True if any pattern matches
        """
        try:
            parts = path.relative_to(root).parts
        except ValueError:
            parts = path.parts

        candidates = {path.name}
        candidates.update('/'.join(parts[i:]) for i in range(len(parts)))

        return any(
            fnmatch.fnmatch(candidate, pattern)
            for pattern in patterns
            for candidate in candidates
        )

    def validate_patterns(self) -> List[str]:
        """
        Validate the configured patterns.

        Returns:
            List of validation error messages (empty if all patterns are valid)
        """
        errors = []

        for pattern in self.include_patterns + self.exclude_patterns:
            if not pattern.strip():
                errors.append("Empty pattern found")

        if not self.include_patterns:
            errors.append("At least one include pattern is required")

        return errors
