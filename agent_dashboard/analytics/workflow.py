"""Issue board helpers: workflow stage and agent assignment from labels."""

from agent_dashboard.enums import WorkflowStage
from agent_dashboard.models.domain import BoardIssue, Issue, IssueTracking

AGENT_LABEL_PREFIX = "agent:"
IN_DEVELOPMENT_LABEL = "in-development"

# Checked in order; the first stage with a matching label wins.
_STAGE_LABELS: list[tuple[WorkflowStage, tuple[str, ...]]] = [
    (WorkflowStage.DEVELOPMENT, ("in-development", "development")),
    (WorkflowStage.REVIEW, ("in-review", "review")),
    (WorkflowStage.PLANNING, ("planning", "needs-planning")),
    (WorkflowStage.DEPLOY, ("ready-for-deployment", "deploy")),
]


def get_workflow_stage(labels: list[str]) -> WorkflowStage:
    for stage, stage_labels in _STAGE_LABELS:
        if any(label in labels for label in stage_labels):
            return stage
    return WorkflowStage.BACKLOG


def get_assigned_agent(labels: list[str]) -> str | None:
    """Agent id from the first ``agent:<id>`` label, if any."""
    for label in labels:
        if label.startswith(AGENT_LABEL_PREFIX):
            return label[len(AGENT_LABEL_PREFIX) :]
    return None


def relabel_for_agent(labels: list[str], agent_id: str) -> list[str]:
    """Labels after assigning an agent.

    Existing ``agent:*`` labels are replaced and the issue moves to
    development.
    """
    kept = [label for label in labels if not label.startswith(AGENT_LABEL_PREFIX)]
    return list(dict.fromkeys([*kept, f"{AGENT_LABEL_PREFIX}{agent_id}", IN_DEVELOPMENT_LABEL]))


def tracking_key(project: str, number: int) -> str:
    return f"{project}-{number}"


def build_board_issue(issue: Issue, tracking: IssueTracking | None = None) -> BoardIssue:
    """Board row for an issue, merged with its tracking analytics when known."""
    board_issue = BoardIssue(
        issue=issue,
        stage=get_workflow_stage(issue.labels),
        assigned_agent=get_assigned_agent(issue.labels),
    )
    if tracking is None:
        return board_issue

    board_issue.agent_estimate = tracking.agent_estimate
    board_issue.commit_reality = tracking.reality
    board_issue.manager_status = str(tracking.status)
    board_issue.completion_prediction = tracking.tracking.completion_prediction
    board_issue.coaching_insights = list(tracking.tracking.coaching_insights)
    board_issue.manager_flags = list(tracking.tracking.manager_flags)
    board_issue.commit_count = len(tracking.commits)
    board_issue.last_commit_date = tracking.reality.last_commit_date
    return board_issue
