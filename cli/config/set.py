"""
inkwell config set command - Set configuration values.
"""

import json

from infra.config import ConfigManager, get_config_root, reload_config

LIST_KEYS = {"formats", "extensions"}


def cmd_config_set(args):
    """Set a configuration value. Invalid values raise ConfigError."""
    manager = ConfigManager(get_config_root())

    key = args.key
    parsed_value = _parse_value(args.value)
    if key in LIST_KEYS and not isinstance(parsed_value, list):
        parsed_value = [str(parsed_value)]

    # Nested keys (e.g., "retry.jitter_seconds")
    parts = key.split('.')
    updates = {}
    current = updates
    for part in parts[:-1]:
        current[part] = {}
        current = current[part]
    current[parts[-1]] = parsed_value

    config = manager.update(updates)
    reload_config()
    print(f"✓ Set {key} = {parsed_value}")

    result = config.model_dump(mode="json")
    for part in parts:
        result = result.get(part, {}) if isinstance(result, dict) else result
    print(f"  Current value: {result}")


def _parse_value(value: str):
    """
    Parse a string value into appropriate Python type.

    Handles:
    - Numbers (int, float)
    - Booleans (true, false)
    - JSON arrays and objects
    - Comma separated lists (e.g., "txt,json")
    - Strings (default)
    """
    # Boolean
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False

    # Number
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except ValueError:
        pass

    # JSON (arrays, objects)
    if value.startswith('[') or value.startswith('{'):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    if ',' in value:
        return [item.strip() for item in value.split(',') if item.strip()]

    # Default: string
    return value
