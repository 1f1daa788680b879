"""Role permission policies and YAML loader.

Provides typed Pydantic models for per-role capability policies
and a loader function that parses the YAML config into those models.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class RolePolicy(BaseModel):
    """Capabilities granted to every user holding a role."""

    can_create: bool = False
    can_edit: bool = False
    can_delete: bool = False
    can_export: bool = False


_DEFAULT_POLICY = RolePolicy()

BUILTIN_POLICIES: dict[str, RolePolicy] = {
    "admin": RolePolicy(can_create=True, can_edit=True, can_delete=True, can_export=True),
    "supervisor": RolePolicy(can_create=True, can_edit=True, can_export=True),
    "technician": RolePolicy(can_create=True, can_edit=True),
    "viewer": RolePolicy(),
    "default": _DEFAULT_POLICY,
}


def load_role_policies(yaml_path: str) -> dict[str, RolePolicy]:
    """Parse a role policies YAML file into typed RolePolicy objects.

    Args:
        yaml_path: Path to the YAML configuration file.

    Returns:
        A dict mapping role names (and "default") to RolePolicy instances.
        If the file is missing or malformed, returns the built-in policies.
    """
    path = Path(yaml_path)

    if not path.exists():
        logger.warning("Role policies file not found at %s, using built-in defaults", yaml_path)
        return dict(BUILTIN_POLICIES)

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse role policies YAML at %s: %s", yaml_path, exc)
        return dict(BUILTIN_POLICIES)

    if not isinstance(raw, dict) or "roles" not in raw:
        logger.warning("Role policies YAML missing 'roles' key, using built-in defaults")
        return dict(BUILTIN_POLICIES)

    policies: dict[str, RolePolicy] = {}
    for role, config in (raw["roles"] or {}).items():
        try:
            policies[str(role)] = RolePolicy.model_validate(config or {})
        except Exception as exc:
            logger.error("Invalid policy for role '%s': %s, skipping", role, exc)

    # Unknown roles fall back to this one
    if "default" not in policies:
        policies["default"] = _DEFAULT_POLICY

    return policies
