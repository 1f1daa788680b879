"""Configuration module: settings and role policies."""

from eva_api.config.role_policies import BUILTIN_POLICIES, RolePolicy, load_role_policies
from eva_api.config.settings import EvaSettings

__all__ = [
    "BUILTIN_POLICIES",
    "EvaSettings",
    "RolePolicy",
    "load_role_policies",
]
