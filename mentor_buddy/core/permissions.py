"""Role-based permissions.

Each platform role maps to a fixed set of permission names.  The names are
shared with the front-end, which hides controls the caller may not use; the
API enforces the same sets through require_permission() and the field-level
helpers below.
"""

from __future__ import annotations

from mentor_buddy.models.principal import Principal

# Mentor management
CAN_CREATE_MENTOR = "can_create_mentor"
CAN_EDIT_MENTOR = "can_edit_mentor"
CAN_DELETE_MENTOR = "can_delete_mentor"
CAN_VIEW_MENTORS = "can_view_mentors"

# Buddy management
CAN_CREATE_BUDDY = "can_create_buddy"
CAN_EDIT_BUDDY_ALL = "can_edit_buddy_all"
CAN_EDIT_BUDDY_NAME = "can_edit_buddy_name"
CAN_EDIT_BUDDY_ROLE = "can_edit_buddy_role"
CAN_EDIT_BUDDY_STATUS = "can_edit_buddy_status"
CAN_EDIT_BUDDY_MENTOR = "can_edit_buddy_mentor"
CAN_DELETE_BUDDY = "can_delete_buddy"
CAN_VIEW_BUDDIES = "can_view_buddies"
CAN_VIEW_OWN_PROFILE = "can_view_own_profile"

# Tasks
CAN_CREATE_TASK = "can_create_task"
CAN_EDIT_OWN_TASK = "can_edit_own_task"
CAN_EDIT_ANY_TASK = "can_edit_any_task"
CAN_DELETE_OWN_TASK = "can_delete_own_task"
CAN_DELETE_ANY_TASK = "can_delete_any_task"
CAN_UPDATE_TASK_STATUS = "can_update_task_status"
CAN_VIEW_TASKS = "can_view_tasks"

# Progress
CAN_UPDATE_OWN_PROGRESS = "can_update_own_progress"
CAN_UPDATE_ASSIGNED_BUDDY_PROGRESS = "can_update_assigned_buddy_progress"
CAN_UPDATE_ANY_PROGRESS = "can_update_any_progress"
CAN_VIEW_PROGRESS = "can_view_progress"

# Portfolios
CAN_CREATE_OWN_PORTFOLIO = "can_create_own_portfolio"
CAN_EDIT_OWN_PORTFOLIO = "can_edit_own_portfolio"
CAN_DELETE_OWN_PORTFOLIO = "can_delete_own_portfolio"
CAN_VIEW_PORTFOLIOS = "can_view_portfolios"

# Resources
CAN_CREATE_RESOURCE = "can_create_resource"
CAN_EDIT_RESOURCE = "can_edit_resource"
CAN_DELETE_RESOURCE = "can_delete_resource"
CAN_VIEW_RESOURCES = "can_view_resources"

# Topics
CAN_CREATE_TOPIC = "can_create_topic"
CAN_EDIT_TOPIC = "can_edit_topic"
CAN_DELETE_TOPIC = "can_delete_topic"
CAN_VIEW_TOPICS = "can_view_topics"

# Dashboard, analytics, curriculum authoring
CAN_VIEW_DASHBOARD = "can_view_dashboard"
CAN_VIEW_ANALYTICS = "can_view_analytics"
CAN_EXPORT_DATA = "can_export_data"
CAN_MANAGE_CURRICULUM = "can_manage_curriculum"
CAN_MANAGE_USERS = "can_manage_users"

_COMMON_VIEW = frozenset(
    {
        CAN_VIEW_MENTORS,
        CAN_VIEW_BUDDIES,
        CAN_VIEW_OWN_PROFILE,
        CAN_VIEW_TASKS,
        CAN_VIEW_PROGRESS,
        CAN_VIEW_PORTFOLIOS,
        CAN_VIEW_RESOURCES,
        CAN_VIEW_TOPICS,
        CAN_VIEW_DASHBOARD,
    }
)

ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    "manager": _COMMON_VIEW
    | {
        CAN_CREATE_MENTOR,
        CAN_EDIT_MENTOR,
        CAN_DELETE_MENTOR,
        CAN_CREATE_BUDDY,
        CAN_EDIT_BUDDY_ALL,
        CAN_EDIT_BUDDY_NAME,
        CAN_EDIT_BUDDY_ROLE,
        CAN_EDIT_BUDDY_STATUS,
        CAN_EDIT_BUDDY_MENTOR,
        CAN_DELETE_BUDDY,
        CAN_CREATE_TASK,
        CAN_EDIT_ANY_TASK,
        CAN_DELETE_ANY_TASK,
        CAN_UPDATE_ANY_PROGRESS,
        CAN_CREATE_RESOURCE,
        CAN_EDIT_RESOURCE,
        CAN_DELETE_RESOURCE,
        CAN_CREATE_TOPIC,
        CAN_EDIT_TOPIC,
        CAN_DELETE_TOPIC,
        CAN_VIEW_ANALYTICS,
        CAN_EXPORT_DATA,
        CAN_MANAGE_CURRICULUM,
        CAN_MANAGE_USERS,
    },
    "mentor": _COMMON_VIEW
    | {
        CAN_CREATE_TASK,
        CAN_EDIT_OWN_TASK,
        CAN_DELETE_OWN_TASK,
        CAN_UPDATE_ASSIGNED_BUDDY_PROGRESS,
        CAN_CREATE_RESOURCE,
    },
    "buddy": frozenset(
        {
            CAN_VIEW_OWN_PROFILE,
            CAN_EDIT_BUDDY_NAME,
            CAN_VIEW_TASKS,
            CAN_UPDATE_TASK_STATUS,
            CAN_UPDATE_OWN_PROGRESS,
            CAN_VIEW_PROGRESS,
            CAN_CREATE_OWN_PORTFOLIO,
            CAN_EDIT_OWN_PORTFOLIO,
            CAN_DELETE_OWN_PORTFOLIO,
            CAN_VIEW_PORTFOLIOS,
            CAN_VIEW_RESOURCES,
            CAN_VIEW_TOPICS,
        }
    ),
}

BUDDY_FIELDS = ("name", "email", "domainRole", "status", "assignedMentorId")


def permissions_for(role: str) -> frozenset[str]:
    return ROLE_PERMISSIONS.get(role, frozenset())


def can_edit_buddy_field(principal: Principal, buddy_user_id: str, field: str) -> bool:
    """Managers edit everything but email, mentors nothing, buddies their own name."""
    if principal.is_manager():
        return field != "email" and principal.has_permission(CAN_EDIT_BUDDY_ALL)
    if principal.is_buddy() and principal.user_id == buddy_user_id:
        return field == "name" and principal.has_permission(CAN_EDIT_BUDDY_NAME)
    return False


def can_update_buddy_progress(
    principal: Principal,
    buddy_user_id: str,
    assigned_mentor_user_id: str | None,
) -> bool:
    # Managers and unassigned mentors are deliberately excluded.
    if principal.is_mentor() and assigned_mentor_user_id == principal.user_id:
        return principal.has_permission(CAN_UPDATE_ASSIGNED_BUDDY_PROGRESS)
    if principal.is_buddy() and principal.user_id == buddy_user_id:
        return principal.has_permission(CAN_UPDATE_OWN_PROGRESS)
    return False


def can_edit_task(principal: Principal, task_creator_user_id: str | None) -> bool:
    if principal.has_permission(CAN_EDIT_ANY_TASK):
        return True
    if principal.is_mentor() and principal.user_id == task_creator_user_id:
        return principal.has_permission(CAN_EDIT_OWN_TASK)
    return False


def can_delete_task(principal: Principal, task_creator_user_id: str | None) -> bool:
    if principal.has_permission(CAN_DELETE_ANY_TASK):
        return True
    if principal.is_mentor() and principal.user_id == task_creator_user_id:
        return principal.has_permission(CAN_DELETE_OWN_TASK)
    return False


def can_update_task_status(principal: Principal, task_buddy_user_id: str) -> bool:
    if principal.is_manager() or principal.is_mentor():
        return principal.has_any_permission({CAN_EDIT_ANY_TASK, CAN_EDIT_OWN_TASK})
    if principal.is_buddy() and principal.user_id == task_buddy_user_id:
        return principal.has_permission(CAN_UPDATE_TASK_STATUS)
    return False
