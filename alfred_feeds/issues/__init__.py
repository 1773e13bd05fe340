"""Create-issue flow - parse a short command line into a Linear issue."""

from alfred_feeds.issues.prefs import PREFS_FILE, PrefsStore
from alfred_feeds.issues.schemas import CreatedIssue, IssueMetadata, IssueParams
from alfred_feeds.issues.service import METADATA_REFRESH_KEY, IssueService, IssueWorkflowError

__all__ = [
    "METADATA_REFRESH_KEY",
    "PREFS_FILE",
    "CreatedIssue",
    "IssueMetadata",
    "IssueParams",
    "IssueService",
    "IssueWorkflowError",
    "PrefsStore",
]
