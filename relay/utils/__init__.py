"""Small shared utilities."""

from .env import env_flag, env_str

__all__ = ["env_flag", "env_str"]
