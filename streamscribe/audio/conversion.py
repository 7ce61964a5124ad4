"""Conversion of native input samples to 16-bit signed integer audio."""

import numpy as np

INT16_SCALE = 32768.0


def to_int16(samples: np.ndarray) -> np.ndarray:
    """Convert a buffer of native samples to a new int16 mono chunk.

    Float samples in [-1.0, 1.0] are scaled to the full signed 16-bit range
    and saturated; fixed-point samples are shifted to 16 bits.

    Args:
        samples: 1-D array of float32/float64, int8, uint8, int16 or int32.

    Returns:
        Contiguous 1-D int16 array that does not alias the input.

    Raises:
        ValueError: If the dtype is not a supported sample format.
    """
    samples = np.asarray(samples).reshape(-1)
    kind = samples.dtype

    if kind.kind == "f":
        scaled = samples * INT16_SCALE
        return np.clip(scaled, -32768, 32767).astype(np.int16)
    if kind == np.int16:
        return samples.copy()
    if kind == np.int32:
        return (samples >> 16).astype(np.int16)
    if kind == np.int8:
        return samples.astype(np.int16) << 8
    if kind == np.uint8:
        return (samples.astype(np.int16) - 128) << 8

    raise ValueError(f"Unsupported sample format: {kind}")
