"""
pcareg Configuration

Per-run key/value parameter store read by the registration components.

A parameter file is a YAML mapping from parameter key to a value or a list
of values ("entries"). Per-axis parameters hold one entry per image axis,
per-level parameters one entry per resolution level. A mapping keyed by a
component label (e.g. ``Metric0``) holds parameters that only apply to that
component and take precedence over top-level keys:

    NumberOfResolutions: 4
    SubtractMean: true
    Metric0:
      NumAdditionalSamplesFixed: [0, 2, 4, 8]
      MovingImageDerivativeScales: [1.0, 1.0, 0.0]

Config Hierarchy (highest to lowest priority):
1. overrides dict (from CLI args)
2. User parameter file
3. Config preset (pcareg/configs/<preset>.yaml)
4. Package defaults (pcareg/configs/default.yaml)
"""

import yaml
from pathlib import Path
from typing import Dict, List, Optional, Any, Tuple, Union
from copy import deepcopy

from ..utils.formatting import to_string, to_vector_of_strings
from ..utils.logging_config import get_logger

logger = get_logger("config")

# Paths to config directories
PCAREG_ROOT = Path(__file__).parent.parent
CONFIGS_DIR = PCAREG_ROOT / "configs"
DEFAULT_CONFIG_PATH = CONFIGS_DIR / "default.yaml"

_TRUE_WORDS = ("true",)
_FALSE_WORDS = ("false",)


class ParameterCastError(ValueError):
    """A parameter entry exists but cannot be converted to the requested type"""


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries, with override taking precedence

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = deepcopy(base)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result


def _cast_parameter(value: Any, target_type: Optional[type], key: str) -> Any:
    """Convert a raw YAML entry to the type of the requested default"""
    if target_type is None:
        return value

    if target_type is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in _TRUE_WORDS + _FALSE_WORDS:
            return value.lower() in _TRUE_WORDS
        raise ParameterCastError(f'Parameter "{key}": cannot read {value!r} as a boolean, use true or false')

    if target_type is int:
        if isinstance(value, bool):
            raise ParameterCastError(f'Parameter "{key}": cannot read boolean {value!r} as an integer')
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                pass
        raise ParameterCastError(f'Parameter "{key}": cannot read {value!r} as an integer')

    if target_type is float:
        if isinstance(value, bool):
            raise ParameterCastError(f'Parameter "{key}": cannot read boolean {value!r} as a number')
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ParameterCastError(f'Parameter "{key}": cannot read {value!r} as a number') from None

    if target_type is str:
        if isinstance(value, (dict, list)):
            raise ParameterCastError(f'Parameter "{key}": expected a single value, got {value!r}')
        return to_string(value)

    return target_type(value)


def _format_default(value: Any) -> str:
    if value is None:
        return "<none>"
    try:
        return to_string(value)
    except TypeError:
        pass
    try:
        return "[" + ", ".join(to_vector_of_strings(value)) + "]"
    except TypeError:
        return repr(value)


def _as_entries(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class Configuration:
    """
    Read-only parameter store for one registration run

    Components query it with ``read_parameter``; missing entries are reported
    through the returned flag, never raised.
    """

    def __init__(self, parameters: Optional[Dict[str, Any]] = None):
        parameters = parameters or {}
        _validate_parameters(parameters)
        self._parameters = deepcopy(parameters)

    @property
    def parameters(self) -> Dict[str, Any]:
        """Copy of the underlying parameter mapping"""
        return deepcopy(self._parameters)

    def _entries(self, key: str, component_label: Optional[str]) -> Optional[List[Any]]:
        if component_label:
            section = self._parameters.get(component_label)
            if isinstance(section, dict) and section.get(key) is not None:
                return _as_entries(section[key])
        value = self._parameters.get(key)
        if value is None or isinstance(value, dict):
            return None
        return _as_entries(value)

    def has_parameter(self, key: str, component_label: Optional[str] = None) -> bool:
        return self._entries(key, component_label) is not None

    def number_of_entries(self, key: str, component_label: Optional[str] = None) -> int:
        """Number of values given for a parameter (0 if absent)"""
        entries = self._entries(key, component_label)
        return len(entries) if entries is not None else 0

    def read_parameter(
        self,
        key: str,
        component_label: Optional[str] = None,
        entry_index: int = 0,
        default_entry_index: int = 0,
        default: Any = None,
        lenient: bool = False,
    ) -> Tuple[bool, Any]:
        """
        Read one entry of a parameter

        Args:
            key: Parameter name, e.g. "SubtractMean"
            component_label: Label of the reading component, e.g. "Metric0";
                its section is searched before the top level
            entry_index: Entry to read (axis for per-axis parameters,
                resolution level for per-level parameters)
            default_entry_index: Entry used when ``entry_index`` does not
                exist; -1 disables the fallback
            default: Returned when nothing is found; its type is the type
                the entry is converted to
            lenient: Do not warn when the parameter is missing

        Returns:
            (found, value) tuple

        Raises:
            ParameterCastError: If the entry exists but cannot be converted
        """
        entries = self._entries(key, component_label)
        if entries is not None:
            index = None
            if 0 <= entry_index < len(entries):
                index = entry_index
            elif 0 <= default_entry_index < len(entries):
                index = default_entry_index
            if index is not None:
                target_type = type(default) if default is not None else None
                return True, _cast_parameter(entries[index], target_type, key)

        if not lenient:
            default_text = _format_default(default)
            logger.warning(
                f'Parameter "{key}" (entry {entry_index}) not found for {component_label or "<global>"}; '
                f"using default {default_text}"
            )
        return False, default


def _validate_parameters(parameters: Any):
    """
    Validate a parameter mapping

    Raises:
        ValueError: If the mapping is malformed
    """
    if not isinstance(parameters, dict):
        raise ValueError(f"Parameter file must contain a mapping, got {type(parameters).__name__}")
    for key, value in parameters.items():
        if not isinstance(key, str):
            raise ValueError(f"Parameter keys must be strings, got {key!r}")
        if isinstance(value, dict):
            _validate_parameters(value)


def load_yaml_config(path: Path) -> Dict:
    """Load a YAML configuration file (empty dict if it does not exist)"""
    if path.exists():
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    return {}


def load_default_config() -> Dict:
    """Load the package default parameters"""
    if DEFAULT_CONFIG_PATH.exists():
        return load_yaml_config(DEFAULT_CONFIG_PATH)
    else:
        logger.warning(f"Default config not found at {DEFAULT_CONFIG_PATH}")
        return {}


def load_preset(preset_name: str) -> Dict:
    """
    Load a configuration preset from pcareg/configs/

    Args:
        preset_name: Name of preset (e.g., 'pca_metric3_groupwise')
                     Can include or omit .yaml extension

    Returns:
        Configuration dictionary from preset file

    Raises:
        FileNotFoundError: If preset file doesn't exist
    """
    if not preset_name.endswith('.yaml'):
        preset_name = f"{preset_name}.yaml"

    preset_path = CONFIGS_DIR / preset_name

    if not preset_path.exists():
        raise FileNotFoundError(
            f"Config preset '{preset_name}' not found in {CONFIGS_DIR}. "
            f"Available presets: {list_available_presets()}"
        )

    logger.info(f"Loading config preset: {preset_name}")
    return load_yaml_config(preset_path)


def list_available_presets() -> List[str]:
    """
    List available configuration presets

    Returns:
        List of preset names (without .yaml extension)
    """
    if not CONFIGS_DIR.exists():
        return []

    return sorted(f.stem for f in CONFIGS_DIR.glob("*.yaml") if f.stem != "default")


def load_parameter_file(path: Union[str, Path]) -> Configuration:
    """
    Load a single parameter file without package defaults

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a YAML mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Parameter file not found: {path}")
    logger.info(f"Loading parameter file: {path}")
    return Configuration(load_yaml_config(path))


def load_configuration(
    config_path: Optional[Union[str, Path]] = None,
    preset: Optional[str] = None,
    overrides: Optional[Dict] = None,
) -> Configuration:
    """
    Load run parameters with hierarchy support

    Args:
        config_path: Optional path to a user parameter file
        preset: Optional preset name
        overrides: Optional dictionary of override values

    Returns:
        Configuration instance

    Raises:
        FileNotFoundError: If the user file or the preset does not exist
    """
    config_dict = load_default_config()
    logger.debug(f"Loaded package defaults from {DEFAULT_CONFIG_PATH}")

    if preset:
        config_dict = _deep_merge(config_dict, load_preset(preset))

    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Parameter file not found: {config_path}")
        logger.info(f"Loading user config from: {config_path}")
        user_config = load_yaml_config(config_path)
        _validate_parameters(user_config)
        config_dict = _deep_merge(config_dict, user_config)

    if overrides:
        config_dict = _deep_merge(config_dict, overrides)

    return Configuration(config_dict)
