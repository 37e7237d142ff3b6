"""Project and content workflow statuses.

Projects move strictly forward through PROJECT_STATUS_ORDER and can be
archived from any status. Content follows CONTENT_STATUS_ORDER with a review
loop: a reviewer either approves content or sends it back for revision, and
revised content is submitted again.
"""

from enum import Enum

from pressroom.core.logging import get_logger

logger = get_logger(__name__)


class ProjectStatus(str, Enum):
    REQUESTED = "requested"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class ContentStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    IN_REVIEW = "in_review"
    NEEDS_REVISION = "needs_revision"
    APPROVED = "approved"


PROJECT_STATUS_ORDER: tuple[ProjectStatus, ...] = tuple(ProjectStatus)
CONTENT_STATUS_ORDER: tuple[ContentStatus, ...] = tuple(ContentStatus)

CONTENT_TRANSITIONS: dict[ContentStatus, frozenset[ContentStatus]] = {
    ContentStatus.DRAFT: frozenset({ContentStatus.SUBMITTED}),
    ContentStatus.SUBMITTED: frozenset({ContentStatus.IN_REVIEW}),
    ContentStatus.IN_REVIEW: frozenset({ContentStatus.NEEDS_REVISION, ContentStatus.APPROVED}),
    ContentStatus.NEEDS_REVISION: frozenset({ContentStatus.SUBMITTED}),
    ContentStatus.APPROVED: frozenset(),
}


def _project_status(value: ProjectStatus | str) -> ProjectStatus | None:
    try:
        return ProjectStatus(value)
    except ValueError:
        return None


def _content_status(value: ContentStatus | str) -> ContentStatus | None:
    try:
        return ContentStatus(value)
    except ValueError:
        return None


def project_targets(current: ProjectStatus | str) -> list[ProjectStatus]:
    """Statuses a project can move to from ``current``."""
    status = _project_status(current)
    if status is None or status is ProjectStatus.ARCHIVED:
        return []

    targets = []
    index = PROJECT_STATUS_ORDER.index(status)
    if index + 1 < len(PROJECT_STATUS_ORDER):
        targets.append(PROJECT_STATUS_ORDER[index + 1])
    if ProjectStatus.ARCHIVED not in targets:
        targets.append(ProjectStatus.ARCHIVED)
    return targets


def content_targets(current: ContentStatus | str) -> list[ContentStatus]:
    """Statuses a content item can move to from ``current``, in workflow order."""
    status = _content_status(current)
    if status is None:
        return []
    allowed = CONTENT_TRANSITIONS[status]
    return [s for s in CONTENT_STATUS_ORDER if s in allowed]


def can_transition_project(current: ProjectStatus | str, target: ProjectStatus | str) -> bool:
    """Whether a project may move from ``current`` to ``target``."""
    target_status = _project_status(target)
    return target_status is not None and target_status in project_targets(current)


def can_transition_content(current: ContentStatus | str, target: ContentStatus | str) -> bool:
    """Whether a content item may move from ``current`` to ``target``."""
    target_status = _content_status(target)
    return target_status is not None and target_status in content_targets(current)


def allowed_targets(entity: str, current: str) -> list[str]:
    """Allowed target statuses as plain strings ("project" or "content")."""
    if entity == "project":
        return [s.value for s in project_targets(current)]
    if entity == "content":
        return [s.value for s in content_targets(current)]
    raise ValueError(f"Unknown workflow entity: {entity}")


def status_progress(status: ProjectStatus | ContentStatus | str, entity: str = "project") -> int:
    """Percent through the workflow (0 for unknown statuses).

    Content that needs revision counts as far as submitted content.
    """
    if entity == "project":
        project_status = _project_status(status)
        if project_status is None:
            return 0
        index = PROJECT_STATUS_ORDER.index(project_status)
        return round(index * 100 / (len(PROJECT_STATUS_ORDER) - 1))

    content_status = _content_status(status)
    if content_status is None:
        return 0
    if content_status is ContentStatus.NEEDS_REVISION:
        content_status = ContentStatus.SUBMITTED
    if content_status is ContentStatus.APPROVED:
        return 100
    index = CONTENT_STATUS_ORDER.index(content_status)
    # needs_revision is a detour, not a step
    return round(index * 100 / (len(CONTENT_STATUS_ORDER) - 2))


def validate_transition(entity: str, current: str, target: str) -> bool:
    """Check a transition and log rejected ones."""
    if entity == "project":
        allowed = can_transition_project(current, target)
    elif entity == "content":
        allowed = can_transition_content(current, target)
    else:
        raise ValueError(f"Unknown workflow entity: {entity}")

    if not allowed:
        logger.info(
            "Workflow transition rejected",
            extra={"entity": entity, "current_status": current, "target_status": target},
        )
    return allowed
