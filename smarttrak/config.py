"""
Decoder configuration loaded from config.yaml with optional CLI overrides.

Example config.yaml:

    decoder:
      variant: tagged      # tagged | legacy
      workers: 4           # threads used when decoding scanned records
      device_id: 0x04692c61
    export:
      location: Murner See
      site: Turm
"""

import os
from dataclasses import dataclass
from typing import Optional, Union

import yaml

VARIANT_TAGGED = "tagged"
VARIANT_LEGACY = "legacy"
VARIANTS = (VARIANT_TAGGED, VARIANT_LEGACY)


@dataclass(frozen=True)
class DecoderConfig:
    """Options that select how .asd records are decoded.

    variant:   'tagged' for the streaming 195-byte summary + tagged block
               layout, 'legacy' for the older fixed 316-byte record
    workers:   thread count for decoding records found by a scan
    device_id: device id used to locate records in a raw buffer
    """
    variant: str = VARIANT_TAGGED
    workers: int = 1
    device_id: Optional[int] = None

    def __post_init__(self):
        if self.variant not in VARIANTS:
            raise ValueError(f"variant must be one of {VARIANTS}, got {self.variant!r}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.device_id is not None and not (0 <= self.device_id <= 0xFFFFFFFF):
            raise ValueError(f"device_id must fit in 32 bits, got {self.device_id}")


DEFAULT_CONFIG = DecoderConfig()


def parse_device_id(value: Union[int, str, None]) -> Optional[int]:
    """Accept a device id as int or as a decimal/hex string ('0x04692c61')."""
    if value is None or isinstance(value, int):
        return value
    return int(str(value).strip(), 0)


def load_effective_config(
    config_path: str = None,
    variant: str = None,
    workers: int = None,
    device_id: Union[int, str, None] = None,
) -> dict:
    """Load configuration from config.yaml with optional CLI overrides.

    Returns a dict with resolved settings:
        decoder:      DecoderConfig instance
        location:     str (divelogs export default)
        site:         str (divelogs export default)
        config_path:  str (resolved path)
        source:       'cli' | 'config' | 'default'
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)), "config.yaml"
        )

    settings = {
        "variant": DEFAULT_CONFIG.variant,
        "workers": DEFAULT_CONFIG.workers,
        "device_id": DEFAULT_CONFIG.device_id,
    }
    location = ""
    site = ""
    source = "default"

    if os.path.exists(config_path):
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}

        decoder_cfg = config.get("decoder", {}) or {}
        if decoder_cfg:
            settings["variant"] = str(decoder_cfg.get("variant", settings["variant"]))
            settings["workers"] = int(decoder_cfg.get("workers", settings["workers"]))
            settings["device_id"] = parse_device_id(decoder_cfg.get("device_id"))
            source = "config"

        export_cfg = config.get("export", {}) or {}
        location = str(export_cfg.get("location", location))
        site = str(export_cfg.get("site", site))

    overrides = {
        "variant": variant,
        "workers": workers,
        "device_id": parse_device_id(device_id),
    }
    for key, value in overrides.items():
        if value is not None:
            settings[key] = value
            source = "cli"

    return {
        "decoder": DecoderConfig(**settings),
        "location": location,
        "site": site,
        "config_path": config_path,
        "source": source,
    }
