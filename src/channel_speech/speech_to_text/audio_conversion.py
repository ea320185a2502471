"""PCM conversion helpers for decoded voice channel audio."""

import numpy as np

from .config import BYTES_PER_SAMPLE, SAMPLE_RATE

# Interleaved 16-bit little-endian samples
_PCM_DTYPE = np.dtype("<i2")


def stereo_to_mono(stereo_buffer: bytes) -> bytes:
    """
    Downmix interleaved 16-bit stereo PCM to the mono layout the recognizer expects.

    Every stride of four 16-bit words keeps its first two words and drops the
    other two, so the output holds half as many words as the input. Channels
    are not averaged.

    Args:
        stereo_buffer: Interleaved stereo PCM bytes

    Returns:
        Mono PCM bytes
    """
    usable = len(stereo_buffer) - len(stereo_buffer) % BYTES_PER_SAMPLE
    stereo = np.frombuffer(stereo_buffer[:usable], dtype=_PCM_DTYPE)

    mono_length = len(stereo) // 2
    kept = stereo[(np.arange(len(stereo)) % 4) < 2]

    return kept[:mono_length].astype(_PCM_DTYPE).tobytes()


def get_duration_seconds(mono_buffer: bytes) -> float:
    """Playback duration in seconds of 48kHz 16-bit mono PCM."""
    return len(mono_buffer) / SAMPLE_RATE / BYTES_PER_SAMPLE
