# --- src/zvssim/constants.py ---
import logging

logger = logging.getLogger(__name__)

# --- Numerical Constants for the Integrator ---

#: Magnitude of the first mesh current above which an attempt is declared divergent.
#: Value: 1e10 A.
DIVERGENCE_CURRENT_LIMIT_A: float = 1.0e10

#: A time step is expected to resolve the resonant period by at least this factor.
#: Coarser steps only trigger a warning; the retry policy handles the consequences.
MIN_STEPS_PER_PERIOD: float = 100.0

# --- Retry Policy Thresholds ---

#: Below this damping inductance the inductance is doubled on divergence.
L1_DOUBLING_LIMIT_H: float = 1.0
L1_DOUBLING_FACTOR: float = 2.0
L1_INCREMENT_H: float = 2.0

#: Time steps above this value are halved on divergence once L1 >= L1_DOUBLING_LIMIT_H.
TIME_STEP_HALVING_THRESHOLD_S: float = 100e-9
TIME_STEP_HALVING_FACTOR: float = 2.0

#: Give-up region: L1 above this AND delta_t below TIME_STEP_GIVE_UP_S.
L1_GIVE_UP_H: float = 20.0
TIME_STEP_GIVE_UP_S: float = 0.01e-9

#: Upper bound on simulation attempts made by the retry controller.
DEFAULT_MAX_ATTEMPTS: int = 100

# --- Output Files ---

VSEC_FILE = "Vsec.dat"
VC_FILE = "VC.dat"
IL2_FILE = "IL2.dat"
ISOURCE_FILE = "ISource.dat"
IC_FILE = "IC.dat"
PARAMETERS_FILE = "parameters.dat"

#: Significant digits written for every sample.
OUTPUT_PRECISION: int = 15

logger.debug("Defined core constants: DIVERGENCE_CURRENT_LIMIT_A, retry thresholds, output file names")
