from __future__ import annotations

import re
import secrets

ADJECTIVES = [
    "active", "agile", "alert", "apt", "bright", "brisk", "calm", "capable", "clear",
    "clever", "confident", "cool", "crisp", "devoted", "diligent", "distinct", "dynamic",
    "eager", "effective", "efficient", "energetic", "exact", "fair", "fast", "firm", "flexible",
    "focused", "fresh", "global", "grand", "handy", "happy", "helpful", "ideal", "keen", "lively",
    "loyal", "master", "modern", "neat", "optimal", "original", "patient", "peak", "perfect",
    "planned", "polite", "potent", "precise", "prime", "prompt", "proud", "pure", "quick", "quiet",
    "rapid", "ready", "reliable", "robust", "secure", "sharp", "simple", "smart", "solid", "sound",
    "spare", "stable", "steady", "strong", "superb", "swift", "tactical", "technical", "tidy",
    "top", "true", "useful", "valid", "vital", "vivid", "warm", "wise", "whole", "willing",
]

NOUNS = [
    "agent", "anchor", "beacon", "bridge", "builder", "catalyst", "center", "cloud", "core",
    "data", "device", "driver", "element", "engine", "explorer", "field", "flow", "forge", "frame",
    "gateway", "grid", "guard", "handler", "helper", "hub", "interface", "kernel", "layer",
    "link", "manager", "mapper", "monitor", "network", "node", "observer", "operator", "panel",
    "parser", "pilot", "pointer", "portal", "processor", "provider", "reactor", "recorder",
    "reflector", "resolver", "router", "runner", "scanner", "scheduler", "sensor", "server",
    "signal", "source", "stream", "system", "tracker", "validator", "viewer", "worker",
]

MAX_DB_NAME_LENGTH = 63

_INVALID_CHARS = re.compile(r"[^a-z0-9_]")
_REPEATED_UNDERSCORES = re.compile(r"_+")

_rng = secrets.SystemRandom()


def generate_suffix() -> str:
    """Return a fresh ``<adjective>_<noun>`` suffix, e.g. ``swift_runner``."""
    return f"{_rng.choice(ADJECTIVES)}_{_rng.choice(NOUNS)}"


def sanitize_site_name(name: str) -> str:
    name = _INVALID_CHARS.sub("_", name.lower())
    name = _REPEATED_UNDERSCORES.sub("_", name)
    return name.strip("_")


def database_name(prefix: str, suffix: str, max_length: int = MAX_DB_NAME_LENGTH) -> str:
    """Join a sanitized prefix and a suffix, trimming the prefix to fit ``max_length``.

    The suffix is never shortened: it is the part cleanup matches on. The separator is
    always present, even for an empty prefix, so ``%_<suffix>`` finds every name.
    """
    sanitized = sanitize_site_name(prefix)
    max_prefix = max_length - len(suffix) - 1
    if len(sanitized) > max_prefix:
        sanitized = sanitized[:max(max_prefix, 0)].rstrip("_")
    return f"{sanitized}_{suffix}"


def generate_database_name(prefix: str, max_length: int = MAX_DB_NAME_LENGTH) -> str:
    return database_name(prefix, generate_suffix(), max_length)


def extract_suffix(db_name: str) -> str:
    """Pull the ``<adjective>_<noun>`` suffix back out of a generated name.

    Returns an empty string when the last two segments are not wordlist entries.
    """
    parts = db_name.split("_")
    if len(parts) < 2:
        return ""
    adjective, noun = parts[-2], parts[-1]
    if adjective in ADJECTIVES and noun in NOUNS:
        return f"{adjective}_{noun}"
    return ""
