import json
import os
from datetime import datetime

DEFAULT_CONFIG = {
    "tape_capacity": 2048,
    "blank_symbol": "_",
    "max_steps": 10_000,
    "history_limit": None,
    "log_frequency": 100,
    "output_directory": "logs/",
    "log_file_prefix": "turing_",
    "machines_directory": "machines/"
}

# Expected types for validation
CONFIG_SCHEMA = {
    "tape_capacity": int,
    "blank_symbol": str,
    "max_steps": int,
    "history_limit": (int, type(None)),
    "log_frequency": int,
    "output_directory": str,
    "log_file_prefix": str,
    "machines_directory": str
}

def validate_config(config):
    for key, expected_type in CONFIG_SCHEMA.items():
        if key not in config:
            raise ValueError(f"Missing required configuration key: {key}")
        # bool is an int subclass; reject it for numeric keys
        if isinstance(config[key], bool) or not isinstance(config[key], expected_type):
            raise TypeError(f"Config key '{key}' expected {expected_type}, got {type(config[key])}.")

    if config["tape_capacity"] <= 0:
        raise ValueError("tape_capacity must be positive.")
    if len(config["blank_symbol"]) != 1:
        raise ValueError("blank_symbol must be a single character.")
    if config["max_steps"] < 0:
        raise ValueError("max_steps must not be negative.")
    if config["history_limit"] is not None and config["history_limit"] <= 0:
        raise ValueError("history_limit must be positive or null.")
    if config["log_frequency"] <= 0:
        raise ValueError("log_frequency must be positive.")

def machine_options(config):
    """Keyword arguments for TuringMachine taken from a validated config."""
    return {
        "capacity": config["tape_capacity"],
        "blank": config["blank_symbol"],
        "history_limit": config["history_limit"],
    }

def load_config(path="config/runtime_config.json", verbose=False):
    if not os.path.exists(path):
        raise FileNotFoundError(f"Configuration file not found at: {path}")

    with open(path, "r", encoding="utf-8") as f:
        user_config = json.load(f)

    # Merge defaults with overrides
    config = DEFAULT_CONFIG.copy()
    config.update(user_config)

    validate_config(config)

    if verbose:
        print(f"[{datetime.now()}] Loaded config:")
        for key, value in config.items():
            print(f"  {key}: {value}")

    return config
