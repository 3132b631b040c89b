"""
Path validation for files materialized into the scratch directory
"""
from pathlib import Path
from typing import Union


class PathValidator:
    """Keeps restored files inside their scratch directory"""

    @staticmethod
    def validate_safe_path(base_dir: Union[str, Path], filename: str) -> Path:
        """Ensure filename doesn't escape base directory

        Args:
            base_dir: Base directory path
            filename: Filename to validate

        Returns:
            Full resolved path if valid

        Raises:
            ValueError: If path would escape base directory
        """
        base_dir = Path(base_dir).resolve()
        full_path = (base_dir / filename).resolve()

        try:
            full_path.relative_to(base_dir)
        except ValueError:
            raise ValueError(f"Invalid filename: {filename} - path traversal detected")

        if full_path == base_dir:
            raise ValueError(f"Invalid filename: {filename!r} - resolves to the directory itself")

        return full_path

