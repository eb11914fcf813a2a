"""Generate the bundled NIST material database."""

import json
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from RingDetectorSim.physics.material_database import MaterialDatabase


# Densities in g/cm³ and effective atomic numbers (Mayneord power law)
MATERIALS = {
    'G4_Galactic': {'density_g_cm3': 1e-25, 'effective_z': 1.0, 'state': 'gas'},
    'G4_AIR': {'density_g_cm3': 0.00120479, 'effective_z': 7.36, 'state': 'gas'},
    'G4_WATER': {'density_g_cm3': 1.0, 'effective_z': 7.42, 'state': 'liquid'},
    'G4_lAr': {'density_g_cm3': 1.396, 'effective_z': 18.0, 'state': 'liquid'},
    'G4_Si': {'density_g_cm3': 2.33, 'effective_z': 14.0, 'state': 'solid'},
    'G4_Fe': {'density_g_cm3': 7.874, 'effective_z': 26.0, 'state': 'solid'},
    'G4_Cu': {'density_g_cm3': 8.96, 'effective_z': 29.0, 'state': 'solid'},
    'G4_W': {'density_g_cm3': 19.3, 'effective_z': 74.0, 'state': 'solid'},
    'G4_Pb': {'density_g_cm3': 11.35, 'effective_z': 82.0, 'state': 'solid'},
    'G4_PbWO4': {'density_g_cm3': 8.28, 'effective_z': 75.6, 'state': 'solid'},
    'G4_PLASTIC_SC_VINYLTOLUENE': {'density_g_cm3': 1.032, 'effective_z': 5.74, 'state': 'solid'},
}


def generate_material_database(output_path: str) -> str:
    """Write the material table and check it loads."""
    print("Generating material database...")

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(MATERIALS, f, indent=2)
        f.write('\n')

    database = MaterialDatabase(str(path))
    if len(database) == len(MATERIALS):
        print(f"✓ Material database generated: {path} ({len(database)} materials)")
    else:
        print(f"✗ Material database validation failed: {path}")

    return str(path)


def main():
    """Generate the bundled material database."""
    print("=" * 60)
    print("Generating Material Database")
    print("=" * 60)

    db_path = generate_material_database(
        'RingDetectorSim/physics_data/materials/nist_materials.json'
    )

    print("\n" + "=" * 60)
    print("Database Generation Complete")
    print("=" * 60)
    print(f"\nMaterial database: {db_path}")


if __name__ == '__main__':
    main()
