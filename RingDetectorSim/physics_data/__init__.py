"""Physics data package containing the bundled material tables.

The material database maps NIST material names to the bulk properties
needed to describe detector volumes.
"""

from pathlib import Path


def get_physics_data_dir() -> Path:
    """Get the physics data directory path.

    Returns:
        Path to the physics_data directory
    """
    return Path(__file__).parent


def get_material_database_path(database_name: str = 'nist_materials.json') -> Path:
    """Get path to a material database file.

    Args:
        database_name: Name of the database file (default: 'nist_materials.json')

    Returns:
        Path to the material database file

    Raises:
        FileNotFoundError: If the database file doesn't exist
    """
    db_path = get_physics_data_dir() / 'materials' / database_name
    if not db_path.exists():
        raise FileNotFoundError(
            f"Material database not found: {db_path}\n"
            f"Available databases: {list_material_databases()}"
        )
    return db_path


def list_material_databases() -> list:
    """List all available material databases.

    Returns:
        List of material database filenames
    """
    material_dir = get_physics_data_dir() / 'materials'
    if not material_dir.exists():
        return []
    return [f.name for f in material_dir.glob('*.json')]


try:
    DEFAULT_MATERIAL_DATABASE = str(get_material_database_path())
except FileNotFoundError:
    DEFAULT_MATERIAL_DATABASE = None


__all__ = [
    'get_physics_data_dir',
    'get_material_database_path',
    'list_material_databases',
    'DEFAULT_MATERIAL_DATABASE',
]
