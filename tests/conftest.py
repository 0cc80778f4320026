"""
Shared test setup.

Every model is imported so mapper configuration succeeds when a single
test module instantiates one.
"""

from erp.modules.audit.models import AuditLog  # noqa: F401
from erp.modules.batches.models import Batch, FormVisibility  # noqa: F401
from erp.modules.resources.models import Resource  # noqa: F401
from erp.modules.students.models import Student, StudentDocument  # noqa: F401
from erp.modules.tasks.models import Task, TaskAssignment, TaskProgress  # noqa: F401
from erp.modules.users.models import User  # noqa: F401
