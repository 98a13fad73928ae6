"""Column naming convention shared by the flattener and the post-processors."""

import re

# Separator between a parent column and the sub-key it was widened into
SEPARATOR = "_"

# List positions are 1-based when they become column names
INDEX_BASE = 1

SINGLETON_SUFFIX = f"{SEPARATOR}{INDEX_BASE}"

TIMESTAMP_PREFIX = "timestamp"

# Calibration models: model_features_<id> / model_params_<id>
CALIBRATION_PREFIX = "model"
CALIBRATION_GROUPS = ("features", "params")

CALIBRATION_SELECTOR = re.compile(
    rf"^{CALIBRATION_PREFIX}{SEPARATOR}({'|'.join(CALIBRATION_GROUPS)})"
)
CALIBRATION_COLUMN_PATTERN = re.compile(
    rf"^{CALIBRATION_PREFIX}{SEPARATOR}({'|'.join(CALIBRATION_GROUPS)})"
    rf"{SEPARATOR}([a-z0-9_]+)$"
)


def join_name(parent: str, sub_key: str) -> str:
    """Name of the column a sub-key of ``parent`` is widened into."""
    return f"{parent}{SEPARATOR}{sub_key}"


def position_key(index: int) -> str:
    """Sub-key used for the list element at zero-based ``index``."""
    return str(index + INDEX_BASE)


def strip_singleton_suffix(name: str) -> str:
    """Drop one trailing ``_1`` marker, if present."""
    if name.endswith(SINGLETON_SUFFIX) and len(name) > len(SINGLETON_SUFFIX):
        return name[: -len(SINGLETON_SUFFIX)]
    return name


def has_sibling_index(base: str, names) -> bool:
    """Check whether any column is ``<base>_<n>`` (optionally deeper) with n != 1.

    Such a sibling means the ``_1`` marker on ``<base>_1`` disambiguates list
    positions and must be kept.
    """
    pattern = re.compile(rf"^{re.escape(base)}{re.escape(SEPARATOR)}(\d+)(?:{re.escape(SEPARATOR)}|$)")
    for name in names:
        match = pattern.match(name)
        if match and int(match.group(1)) != INDEX_BASE:
            return True
    return False


def bare_group_column(group: str) -> str:
    """Calibration column name when a group was never widened, e.g. ``model_features``."""
    return join_name(CALIBRATION_PREFIX, group)
