"""Process-wide repository singletons.

API modules and services import the repos from here so that every request
sees the same in-memory state.  Tests call clear_all() between cases.
"""

from __future__ import annotations

from mentor_buddy.repos.activity_repo import InMemoryActivityRepo
from mentor_buddy.repos.curriculum_repo import InMemoryCurriculumRepo
from mentor_buddy.repos.enrollment_repo import InMemoryEnrollmentRepo
from mentor_buddy.repos.library_repo import (
    InMemoryBuddyTopicRepo,
    InMemoryPortfolioRepo,
    InMemoryResourceRepo,
    InMemoryTopicRepo,
)
from mentor_buddy.repos.people_repo import InMemoryBuddyRepo, InMemoryMentorRepo
from mentor_buddy.repos.settings_repo import InMemorySettingsRepo
from mentor_buddy.repos.submission_repo import InMemorySubmissionRepo
from mentor_buddy.repos.task_repo import InMemoryTaskRepo
from mentor_buddy.repos.user_repo import InMemoryUserRepo

user_repo = InMemoryUserRepo()
settings_repo = InMemorySettingsRepo()
mentor_repo = InMemoryMentorRepo()
buddy_repo = InMemoryBuddyRepo()
task_repo = InMemoryTaskRepo()
resource_repo = InMemoryResourceRepo()
topic_repo = InMemoryTopicRepo()
buddy_topic_repo = InMemoryBuddyTopicRepo()
portfolio_repo = InMemoryPortfolioRepo()
curriculum_repo = InMemoryCurriculumRepo()
enrollment_repo = InMemoryEnrollmentRepo()
submission_repo = InMemorySubmissionRepo()
activity_repo = InMemoryActivityRepo()

_ALL = (
    user_repo,
    settings_repo,
    mentor_repo,
    buddy_repo,
    task_repo,
    resource_repo,
    topic_repo,
    buddy_topic_repo,
    portfolio_repo,
    curriculum_repo,
    enrollment_repo,
    submission_repo,
    activity_repo,
)


def clear_all() -> None:
    for repo in _ALL:
        repo.clear()
