"""
Default values and limits for audio analysis.
"""

# Audio decoding
SUPPORTED_AUDIO_FORMATS = ['.mp3', '.wav', '.flac', '.ogg', '.m4a', '.aac']

# Frequency analyser (byte spectrum, 0-255 per bin)
FFT_SIZE = 256
MIN_FFT_SIZE = 32
MAX_FFT_SIZE = 32768
SMOOTHING_TIME_CONSTANT = 0.8
MIN_DECIBELS = -100.0
MAX_DECIBELS = -30.0
BYTE_MAGNITUDE_MAX = 255

# Beat detection
LOW_BAND_BIN_COUNT = 10
ENERGY_THRESHOLD = 200.0
REFRACTORY_PERIOD_SECONDS = 0.3
# Clock differences below this are treated as equal
TIME_EPSILON = 1e-9

# Waveform envelope
ENVELOPE_COLUMN_COUNT = 600
ENVELOPE_HEIGHT = 150

# Playback
TICK_RATE_HZ = 60.0

# Beat indicator
FLASH_DURATION_SECONDS = 0.1
THUMBNAIL_COUNT = 5
