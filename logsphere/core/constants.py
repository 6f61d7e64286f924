"""Global constants for the logsphere application."""

# Collections
USERS_COLLECTION = "users"
TEAMS_COLLECTION = "teams"
LOGS_COLLECTION = "logs"
NOTIFICATIONS_COLLECTION = "notifications"
INVITATIONS_COLLECTION = "invitations"
MILESTONES_COLLECTION = "milestones"

FIRESTORE_BATCH_LIMIT = 400
FIRESTORE_IN_QUERY_LIMIT = 30

# Roles
ROLE_MEMBER = "member"
ROLE_TEAM_LEAD = "team_lead"
ROLE_GUIDE = "guide"
ROLE_COORDINATOR = "coordinator"
ROLE_ADMIN = "admin"

ROLES = (ROLE_MEMBER, ROLE_TEAM_LEAD, ROLE_GUIDE, ROLE_COORDINATOR, ROLE_ADMIN)
ROLE_ALIASES = {"student": ROLE_MEMBER}
ROSTER_ROLES = (ROLE_MEMBER, ROLE_GUIDE)

# Log statuses
STATUS_DRAFT = "draft"
STATUS_PENDING_LEAD = "pending-lead"
STATUS_PENDING_GUIDE = "pending-guide"
STATUS_APPROVED = "approved"
STATUS_FINAL_APPROVED = "final-approved"
STATUS_NEEDS_REVISION = "needs-revision"

LOG_STATUSES = (
    STATUS_DRAFT,
    STATUS_PENDING_LEAD,
    STATUS_PENDING_GUIDE,
    STATUS_APPROVED,
    STATUS_FINAL_APPROVED,
    STATUS_NEEDS_REVISION,
)

LOG_STATUS_LABELS = {
    STATUS_DRAFT: "Draft",
    STATUS_PENDING_LEAD: "Pending Team Lead Review",
    STATUS_PENDING_GUIDE: "Pending Guide Review",
    STATUS_APPROVED: "Approved by Guide",
    STATUS_FINAL_APPROVED: "Final Approved",
    STATUS_NEEDS_REVISION: "Needs Revision",
}

# Team codes
TEAM_CODE_PREFIX_LENGTH = 6
TEAM_CODE_SUFFIX_LENGTH = 6
TEAM_CODE_MAX_ATTEMPTS = 5

# Invitations
INVITATION_TYPE_INVITE = "invite"
INVITATION_TYPE_REQUEST = "request"
INVITATION_PENDING = "pending"
INVITATION_ACCEPTED = "accepted"
INVITATION_DECLINED = "declined"
INVITATION_APPROVED = "approved"
INVITATION_REJECTED = "rejected"

# Milestones
MILESTONE_STATUSES = ("planned", "in-progress", "completed")

# Email-related constants
SMTP_AUTH_ERROR_CODE = 534
