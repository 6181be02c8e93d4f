"""
Members component - membership, roles and profiles.

Adds people to stables, changes their role/access tier, removes them, and
edits the signed-in user's own profile and default passes.
"""

from .component import (
    run,
    run_add_member,
    run_remove_member,
    run_toggle_default_pass,
    run_update_member_role,
    run_update_profile,
)
from .models import (
    AddMemberInput,
    MemberOutput,
    RemoveMemberInput,
    ToggleDefaultPassInput,
    UpdateMemberRoleInput,
    UpdateProfileInput,
)

__all__ = [
    # Entry points
    "run",
    "run_add_member",
    "run_remove_member",
    "run_toggle_default_pass",
    "run_update_member_role",
    "run_update_profile",
    # Input models
    "AddMemberInput",
    "RemoveMemberInput",
    "ToggleDefaultPassInput",
    "UpdateMemberRoleInput",
    "UpdateProfileInput",
    # Output models
    "MemberOutput",
]
