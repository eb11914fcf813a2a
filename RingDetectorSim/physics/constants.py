"""Default parameters and numerical constants for the ring detector setup.

Lengths are in cm, energies in MeV and fields in tesla.
"""

# Numerical constants
TOLERANCE = 1e-9  # Length tolerance for boundary comparisons in cm
EDGE_RTOL = 1e-12  # Relative slack on ring edges for floating-point rounding

# Detector layout
DEFAULT_TOTAL_RADIUS_CM = 100.0
DEFAULT_RING_WIDTH_CM = 1.0
DEFAULT_DETECTOR_HALF_THICKNESS_CM = 10.0
DEFAULT_ABSORBER_HALF_THICKNESS_CM = 5.0
DEFAULT_ABSORBER_RADIUS_CM = 50.0
DEFAULT_WORLD_HALF_LENGTH_CM = 250.0

# Beam
DEFAULT_PARTICLE = 'e-'
DEFAULT_INITIAL_ENERGY_MEV = 200.0
DEFAULT_ENERGY_STEP_MEV = 10.0
DEFAULT_INITIAL_FIELD_T = 0.1
DEFAULT_FIELD_STEP_T = 0.05
DEFAULT_MINOR_RAMP_INTERVAL = 10
DEFAULT_MAJOR_RAMP_INTERVAL = 100
DEFAULT_GUN_POSITION_CM = (0.0, 0.0, -250.0)
DEFAULT_GUN_DIRECTION = (0.0, 0.0, 1.0)

# Output table
GENERATED_COLUMN = 'Generated'
FIELD_COLUMN = 'Magnetic field'
NUM_BEAM_COLUMNS = 2
