"""Material database loader for NIST detector materials."""

import json
from pathlib import Path
from typing import Dict, List

from ..core.data_models import MaterialProperties
from ..utils.logging import get_logger
from ..utils.validation import InvalidConfigurationError


logger = get_logger()


class MaterialDatabase:
    """Manages material properties from a JSON database.

    Materials are looked up by their NIST name and handed out as
    immutable ``MaterialProperties``; the same instance is returned for
    repeated lookups of one name.

    Attributes:
        database_path: Path to JSON material database
        materials: Dictionary of loaded material properties
    """

    def __init__(self, database_path: str):
        """Initialize MaterialDatabase.

        Args:
            database_path: Path to JSON material database file
        """
        self.database_path = Path(database_path)
        self.materials: Dict[str, MaterialProperties] = {}

        if self.database_path.exists():
            self.load_database()
        else:
            logger.warning(f"Material database not found: {database_path}")

    def load_database(self) -> None:
        """Load material database from JSON file."""
        logger.debug(f"Loading material database from {self.database_path}")

        try:
            with open(self.database_path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in material database: {e}") from e

        for name, entry in data.items():
            try:
                self.materials[name] = MaterialProperties(
                    name=name,
                    density_g_cm3=float(entry['density_g_cm3']),
                    effective_z=float(entry['effective_z']),
                    state=entry.get('state', 'solid')
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"Malformed material entry '{name}': {e}") from e

        self.validate_database()
        logger.debug(f"Loaded {len(self.materials)} materials from database")

    def validate_database(self) -> None:
        """Check that every material has a physical density."""
        for name, material in self.materials.items():
            if material.density_g_cm3 <= 0:
                raise ValueError(
                    f"Material {name} has non-positive density {material.density_g_cm3}"
                )

    def find_or_build(self, name: str) -> MaterialProperties:
        """Get material properties by NIST name.

        Args:
            name: Material name (e.g., 'G4_Pb')

        Returns:
            MaterialProperties for the material

        Raises:
            InvalidConfigurationError: If the material is not in the database
        """
        try:
            return self.materials[name]
        except KeyError:
            raise InvalidConfigurationError(
                f"Material '{name}' not found in {self.database_path.name}. "
                f"Available: {sorted(self.materials)}"
            ) from None

    def names(self) -> List[str]:
        return list(self.materials)

    def __contains__(self, name: str) -> bool:
        return name in self.materials

    def __len__(self) -> int:
        return len(self.materials)
