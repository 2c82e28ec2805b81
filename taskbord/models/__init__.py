# Models package — import all models here so Alembic can discover them.

from taskbord.models.user import User  # noqa: F401
from taskbord.models.organization import Organization, EmployeeMembership  # noqa: F401
from taskbord.models.workspace import Workspace, Friend  # noqa: F401
from taskbord.models.bord import Bord  # noqa: F401
from taskbord.models.assignment import TaskAssignment  # noqa: F401
from taskbord.models.publish import ChangeTracker, PublishSnapshot  # noqa: F401
from taskbord.models.notification import Notification  # noqa: F401
from taskbord.models.audit import AuditEvent  # noqa: F401
