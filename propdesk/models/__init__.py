from ..extensions import db

# Core Models
from .zone import Zone
from .building import Building
from .unit import Unit, VACANCY_STATES, VACANCY_AVAILABLE, VACANCY_UNAVAILABLE, VACANCY_PENDING
from .tenant import Tenant, TENANT_STATUSES, STATUS_ACTIVE
from .document import Document, OwnerKind, owner_kind_of, OWNER_MODELS, VISIBLE_YES, VISIBLE_NO
from .user import User, ROLE_MANAGER, ROLE_TENANT
