"""
Core utilities for TaskNest.
"""
from tasknest.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    decode_token,
)
from tasknest.core.policy import Action, Actor, Decision, DenyReason, Target, can_perform

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
    "Action",
    "Actor",
    "Decision",
    "DenyReason",
    "Target",
    "can_perform",
]
