# salesup/core/roles.py

import enum


class UserRole(str, enum.Enum):
    AGENT = "agent"      # logs daily entries, sees own performance
    MANAGER = "manager"  # invites agents, sees team performance


class InvitationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
