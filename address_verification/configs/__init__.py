import yaml
import os
import re
from pathlib import Path
from dotenv import dotenv_values
from typing import Union


def get_ancestor_dir(start_path: Union[str, Path], steps: int) -> Path:
    if not isinstance(steps, int) or steps < 0:
        raise ValueError("Steps must be a non-negative integer.")

    path = Path(start_path).resolve()
    if path.is_file():
        path = path.parent

    for _ in range(steps):
        original_path = path
        path = path.parent
        if path == original_path:
            raise ValueError(
                f"Cannot go up {steps} levels from '{start_path}'. "
                "Traversal went beyond the filesystem root."
            )

    return path


def _load_yaml_file(filepath: str):
    """Loads a single YAML file."""
    if os.path.exists(filepath):
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            print(f"Error loading YAML file '{filepath}': {e}")
            return {}
    return {}


def _load_env(filepath: str):
    """Loads environment variables from a .env file."""
    if os.path.exists(filepath):
        return dotenv_values(filepath)
    return {}


def _resolve_placeholders(data, values: dict):
    """
    Recursively replaces placeholder strings of the form '${key}' using
    values from the given mapping.
    """
    if isinstance(data, dict):
        return {k: _resolve_placeholders(v, values) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_placeholders(item, values) for item in data]
    elif isinstance(data, str):
        for match in re.findall(r"\$\{(\w+)\}", data):
            replacement_value = values.get(match)
            if replacement_value is None:
                continue
            data = data.replace(f"${{{match}}}", f"{replacement_value}")
        return data
    else:
        return data


def recursive_replace(data, old_value, new_value):
    """
    Recursively replace string values in nested dictionaries/lists.
    """
    if isinstance(data, dict):
        return {
            key: recursive_replace(value, old_value, new_value)
            for key, value in data.items()
        }
    elif isinstance(data, list):
        return [recursive_replace(item, old_value, new_value) for item in data]
    elif isinstance(data, str):
        return data.replace(old_value, new_value)
    else:
        return data


def handle_env_path(filedir) -> dict:
    filepath = os.path.join(filedir, ".env")
    if os.path.exists(filepath):
        loaded_data = _load_env(filepath)
    elif os.environ.get("ENV_FILE_DIR"):
        loaded_data = _load_env(os.path.join(os.environ["ENV_FILE_DIR"], ".env"))
    else:
        loaded_data = {}
    # Process environment wins over the file for the known keys
    for key in ENV_KEYS:
        if os.environ.get(key) is not None:
            loaded_data[key] = os.environ[key]
    for key, default in ENV_DEFAULTS.items():
        if not loaded_data.get(key):
            loaded_data[key] = default
    return dict(loaded_data)


ENV_KEYS = [
    "MONGO_URI",
    "MONGO_DB",
    "GEO_API_BASE_URL",
    "ADDRESS_SEED_FILE",
]

ENV_DEFAULTS = {
    "MONGO_URI": "mongodb://localhost:27017",
    "MONGO_DB": "adres-dogrulama",
    "GEO_API_BASE_URL": "https://turkiyeapi.dev/api/v1",
}

REPO_ROOT = get_ancestor_dir(__file__, 2)
CONFIGS_DIR = os.path.dirname(os.path.abspath(__file__))

replacements = {"<ROOT_PATH>": str(REPO_ROOT)}

env = handle_env_path(REPO_ROOT)

configs = _load_yaml_file(os.path.join(CONFIGS_DIR, "config.yaml"))
for key, value in replacements.items():
    configs = recursive_replace(configs, old_value=key, new_value=value)
configs = _resolve_placeholders(configs, env)
