"""Path validation utilities for output tables and logs."""

from pathlib import Path
from typing import Union


class PathValidationError(Exception):
    """Raised when path validation fails."""
    pass


def validate_path(path: Union[str, Path], must_exist: bool = False) -> Path:
    """Validate and resolve a file path.

    Args:
        path: Path to validate
        must_exist: If True, path must exist

    Returns:
        Validated Path object

    Raises:
        PathValidationError: If path is invalid or unsafe
    """
    if '..' in Path(path).parts:
        raise PathValidationError(f"Path contains directory traversal: {path}")

    try:
        path_obj = Path(path).resolve()
    except (ValueError, OSError) as e:
        raise PathValidationError(f"Invalid path: {path}") from e

    if must_exist and not path_obj.exists():
        raise PathValidationError(f"Path does not exist: {path}")

    return path_obj


def validate_output_path(path: Union[str, Path], create_parents: bool = True) -> Path:
    """Validate and prepare an output path.

    Args:
        path: Output path to validate
        create_parents: If True, create parent directories

    Returns:
        Validated Path object

    Raises:
        PathValidationError: If path is invalid
    """
    path_obj = validate_path(path, must_exist=False)

    if path_obj.is_dir():
        raise PathValidationError(f"Output path is a directory: {path}")

    if create_parents:
        try:
            path_obj.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PathValidationError(
                f"Cannot create parent directories for: {path}"
            ) from e

    return path_obj
