"""Application bootstrap helpers for the Prize2Pride project."""

from .runtime import Runtime, bootstrap, build_runtime
from .settings import AppSettings

__all__ = ["AppSettings", "Runtime", "bootstrap", "build_runtime"]
