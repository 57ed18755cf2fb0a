# retro_chip8/config/loader.py
import logging
import yaml
from typing import Any

from retro_chip8.arch.chip8.quirks import UnknownOpcodePolicy, quirks_for_profile
from .models import MachineConfig

logger = logging.getLogger(__name__)

_KNOWN_KEYS = {"cpu_hz", "tick_hz", "stack_depth", "quirks", "unknown_opcode_policy"}


# @intent:responsibility YAML形式のマシン設定を読み込み、MachineConfigへ変換します。
class ConfigLoader:
    def load_from_file(self, path: str) -> MachineConfig:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return self._parse_config(data)

    def load_from_string(self, text: str) -> MachineConfig:
        return self._parse_config(yaml.safe_load(text))

    def _parse_config(self, data: Any) -> MachineConfig:
        if data is None:
            return MachineConfig()
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")

        for key in sorted(set(data) - _KNOWN_KEYS):
            logger.warning("ignoring unknown config key '%s'", key)

        config = MachineConfig()
        if "cpu_hz" in data:
            config.cpu_hz = self._parse_positive(data["cpu_hz"], "cpu_hz")
        if "tick_hz" in data:
            config.tick_hz = self._parse_positive(data["tick_hz"], "tick_hz")
        if "stack_depth" in data:
            config.stack_depth = self._parse_positive(data["stack_depth"], "stack_depth")

        quirks_data = data.get("quirks") or {}
        if not isinstance(quirks_data, dict):
            raise ValueError("'quirks' must be a mapping")
        overrides = dict(quirks_data)
        config.quirk_profile = overrides.pop("profile", "modern")
        config.quirks = quirks_for_profile(config.quirk_profile, **overrides)

        if "unknown_opcode_policy" in data:
            config.unknown_opcode_policy = self._parse_policy(data["unknown_opcode_policy"])

        return config

    def _parse_policy(self, value: Any) -> UnknownOpcodePolicy:
        try:
            return UnknownOpcodePolicy(str(value).lower())
        except ValueError:
            raise ValueError(f"Invalid unknown_opcode_policy: {value}") from None

    def _parse_positive(self, value: Any, name: str) -> int:
        result = self._parse_int(value)
        if result <= 0:
            raise ValueError(f"{name} must be positive, got {result}")
        return result

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            if value.lower().startswith("0x"):
                return int(value, 16)
            return int(value)
        raise ValueError(f"Invalid integer format: {value}")
