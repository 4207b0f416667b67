from dataclasses import dataclass, field
from typing import Any, Optional

# Failure kinds and the HTTP status each is answered with
UNIT_OCCUPIED = "unit_occupied"
PORTAL_ACCESS_EXISTS = "portal_access_exists"
PORTAL_ACCESS_MISSING = "portal_access_missing"
EMAIL_TAKEN = "email_taken"
NO_FILE = "no_file"
STORE_FAILED = "store_failed"
MISSING_AFTER_STORE = "missing_after_store"

STATUS_BY_KIND = {
    UNIT_OCCUPIED: 409,
    PORTAL_ACCESS_EXISTS: 409,
    PORTAL_ACCESS_MISSING: 409,
    EMAIL_TAKEN: 409,
    NO_FILE: 400,
    STORE_FAILED: 500,
    MISSING_AFTER_STORE: 500,
}


@dataclass
class OperationResult:
    """Outcome of a mutating operation: a success message or an error kind with detail."""

    ok: bool
    message: str
    kind: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)
    # The created or changed record, kept out of the response body
    entity: Any = None

    @classmethod
    def success(cls, message, entity=None, **data):
        return cls(ok=True, message=message, data=data, entity=entity)

    @classmethod
    def failure(cls, kind, message, **data):
        return cls(ok=False, message=message, kind=kind, data=data)

    @property
    def status_code(self):
        if self.ok:
            return 200
        return STATUS_BY_KIND.get(self.kind, 400)

    def to_dict(self):
        body = {"ok": self.ok, "message": self.message}
        if not self.ok:
            body["error"] = self.kind
        body.update(self.data)
        return body
