"""Configuration constants for channel speech-to-text functionality."""

# Audio Configuration
SAMPLE_RATE = 48000  # Hz, decoded voice channel audio
CHANNELS = 2  # decoder output is interleaved stereo
FRAME_SIZE = 960  # samples per channel per decoded frame (20ms at 48kHz)
BYTES_PER_SAMPLE = 2  # 16-bit signed little-endian PCM

# Listener Behavior
READY_TIMEOUT = 20.0  # seconds to wait for a voice connection to become ready
SILENCE_DURATION_MS = 100  # end an utterance after this much continuous silence

# Recognition Service
RECOGNITION_ENDPOINT = "https://speech.googleapis.com/v1/speech:recognize"
RECOGNITION_ENCODING = "LINEAR16"
RECOGNITION_LANGUAGE_CODE = "en-US"
RECOGNITION_AUTOMATIC_PUNCTUATION = True
RECOGNITION_SUCCESS_STATUS = 200
DEFAULT_REQUEST_TIMEOUT = 30.0  # seconds

# Environment
API_KEY_ENV_VAR = "GOOGLE_SPEECH_API_KEY"
