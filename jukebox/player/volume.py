"""
Per-sample volume transform for big-endian 16-bit PCM.
"""

import numpy as np

# Signed 16-bit big-endian, matching the decoder's s16be output
PCM_DTYPE = np.dtype(">i2")


def apply_volume(buffer: bytearray, volume: float, clipping: bool = False) -> None:
    """
    Rescale every sample in buffer by volume, in place.

    Each sample becomes int(sample * volume), truncated toward zero. When the
    result leaves the 16-bit range it either wraps (two's complement
    narrowing, the historical behaviour) or, with clipping, saturates to
    [-32768, 32767]. A trailing odd byte is left untouched.

    Args:
        buffer: Writable PCM buffer (s16be, interleaved)
        volume: Linear gain, >= 0
        clipping: Saturate instead of wrapping on overflow
    """
    if volume == 1.0:
        return

    count = len(buffer) // PCM_DTYPE.itemsize
    if count == 0:
        return

    # View over the caller's buffer: writes land directly in it
    samples = np.frombuffer(buffer, dtype=PCM_DTYPE, count=count)
    scaled = np.trunc(samples.astype(np.float32) * np.float32(volume))

    if clipping:
        np.clip(scaled, -32768.0, 32767.0, out=scaled)
        samples[:] = scaled.astype(np.int16)
    else:
        samples[:] = scaled.astype(np.int64).astype(np.int16)
