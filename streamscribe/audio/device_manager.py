"""Device and stream configuration resolution.

This module picks the input device and a mono stream configuration before
the capture stream is built. It runs once, at startup, on the main thread.
"""

from typing import Optional, Union

import sounddevice as sd

from streamscribe.audio.stream_config import StreamConfig, SupportedConfig
from streamscribe.utils.exceptions import NoInputDeviceError, NoSuitableConfigError
from streamscribe.utils.logger import setup_logger

logger = setup_logger(__name__)

STANDARD_SAMPLE_RATES = (8000, 11025, 16000, 22050, 32000, 44100, 48000, 88200, 96000)

# Sample formats probed, in order of preference.
CANDIDATE_FORMATS = ("float32", "int16", "int32")

# Devices such as JACK ports can expose dozens of channels; only the
# low channel counts matter for mono capture.
MAX_PROBED_CHANNELS = 2


def resolve_input_device(
    host_api: Optional[str] = None, device: Optional[Union[int, str]] = None
) -> int:
    """Find the input device to capture from.

    Args:
        host_api: Host API name (substring match, case-insensitive) whose
            default input device should be used.
        device: Explicit device index or name; takes precedence.

    Returns:
        The device index.

    Raises:
        NoInputDeviceError: If no matching input device exists.
    """
    try:
        if device is not None:
            return _find_named_device(device)

        if host_api is not None:
            for api in sd.query_hostapis():
                if host_api.lower() in api["name"].lower():
                    index = api.get("default_input_device", -1)
                    if index is None or index < 0:
                        raise NoInputDeviceError(
                            f"Host API {api['name']!r} has no default input device"
                        )
                    logger.debug(f"Using default input of host API {api['name']}")
                    return int(index)
            raise NoInputDeviceError(f"Host API {host_api!r} is not available")

        index = sd.default.device[0]
        if index is None or index < 0:
            raise NoInputDeviceError("No input device available")
        return int(index)

    except sd.PortAudioError as e:
        raise NoInputDeviceError(f"Device query failed: {e}") from e


def _find_named_device(device: Union[int, str]) -> int:
    devices = sd.query_devices()

    if isinstance(device, int):
        if 0 <= device < len(devices) and devices[device]["max_input_channels"] > 0:
            return device
        raise NoInputDeviceError(f"Device {device} is not an input device")

    for i, info in enumerate(devices):
        if device.lower() in info["name"].lower() and info["max_input_channels"] > 0:
            return i
    raise NoInputDeviceError(f"No input device matches {device!r}")


def _input_settings_supported(
    device: int, channels: int, sample_format: str, sample_rate: int
) -> bool:
    try:
        sd.check_input_settings(
            device=device,
            channels=channels,
            dtype=sample_format,
            samplerate=sample_rate,
        )
        return True
    except (sd.PortAudioError, ValueError):
        return False


def list_supported_configs(device: int) -> list[SupportedConfig]:
    """Enumerate the input configurations a device accepts.

    Args:
        device: Device index.

    Returns:
        Candidates ordered by channel count, then sample format preference.
    """
    info = sd.query_devices(device)
    max_channels = min(int(info["max_input_channels"]), MAX_PROBED_CHANNELS)

    rates = set(STANDARD_SAMPLE_RATES)
    default_rate = info.get("default_samplerate")
    if default_rate:
        rates.add(int(default_rate))

    candidates = []
    for channels in range(1, max_channels + 1):
        for sample_format in CANDIDATE_FORMATS:
            supported = tuple(
                rate
                for rate in sorted(rates)
                if _input_settings_supported(device, channels, sample_format, rate)
            )
            if supported:
                candidates.append(
                    SupportedConfig(
                        channels=channels,
                        sample_format=sample_format,
                        sample_rates=supported,
                    )
                )

    logger.debug(f"Device {device} ({info['name']}): {len(candidates)} configs")
    return candidates


def resolve_stream_config(device: int, blocksize: int = 0) -> StreamConfig:
    """Pick the first mono configuration at its maximum sample rate.

    Args:
        device: Device index.
        blocksize: Frames per callback (0 lets the host choose).

    Returns:
        The stream configuration to open.

    Raises:
        NoSuitableConfigError: If the device offers no mono configuration.
    """
    for candidate in list_supported_configs(device):
        if candidate.channels == 1:
            stream_config = candidate.with_max_sample_rate(device, blocksize)
            logger.info(
                f"Input config: {stream_config.sample_rate}Hz, "
                f"{stream_config.sample_format}, mono"
            )
            return stream_config

    raise NoSuitableConfigError(f"No mono input config found for device {device}")
