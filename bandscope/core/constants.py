"""Global constants for bandscope."""

# Audio processing defaults
DEFAULT_SR = 44100
DEFAULT_N_FFT = 2048
DEFAULT_SMOOTHING = 0.8  # Analyser-style smoothing between frames
DEFAULT_MIN_DECIBELS = -100.0
DEFAULT_MAX_DECIBELS = -30.0

# Byte-scaled analyser frames run 0..255
MAX_BYTE_MAGNITUDE = 255.0

# Temporal history
HISTORY_CAPACITY = 20
MIN_HISTORY = 5  # Samples needed before confidence is computed
CONFIDENCE_WINDOW = 5
NEUTRAL_CONFIDENCE = 0.5

# Percussive confidence
TRANSIENT_RATIO = 1.5
TRANSIENT_CONFIDENCE = 0.8
NO_TRANSIENT_CONFIDENCE = 0.4

# Sustained confidence: clamp(floor, cap, baseline - variance * weight)
SUSTAINED_BASELINE = 0.7
SUSTAINED_VARIANCE_WEIGHT = 5.0
SUSTAINED_FLOOR = 0.3
SUSTAINED_CAP = 0.9

# Overlap suppression
DEFAULT_SUPPRESSION_RATIO = 1.2
DEFAULT_SUPPRESSION_DAMPING = 0.7

# Batch band filtering
FILTER_ORDER = 4
