"""Security constants."""
from enum import Enum


class UserRole(str, Enum):
    """Account roles.

    ADMIN accounts receive a notification for every audited mutation in the
    system. Ownership, not role, decides who may change a task or project.
    """

    ADMIN = "ADMIN"
    USER = "USER"
