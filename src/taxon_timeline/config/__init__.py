"""Configuration utilities for taxon_timeline."""

from .policies import (
    ChangeFilterPolicy,
    Policies,
    RecognitionPolicy,
    ReversionPolicy,
    load_policies,
)
from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "Policies",
    "load_policies",
    "ChangeFilterPolicy",
    "RecognitionPolicy",
    "ReversionPolicy",
]
