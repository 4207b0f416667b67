from datetime import datetime, date
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from . import db

STATUS_ACTIVE = 'active'
STATUS_INACTIVE = 'inactive'
STATUS_TERMINATED = 'terminated'
TENANT_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE, STATUS_TERMINATED)

STATUS_LABELS = {
    STATUS_ACTIVE: 'Active',
    STATUS_INACTIVE: 'Inactive',
    STATUS_TERMINATED: 'Terminated',
}


class Tenant(db.Model):
    __tablename__ = 'tenants'
    __table_args__ = (
        # One active tenant per unit; the WHERE clause needs partial index support
        db.Index(
            'uq_tenants_active_unit', 'unit_id', unique=True,
            postgresql_where=db.text("status = 'active'"),
            sqlite_where=db.text("status = 'active'"),
        ).ddl_if(dialect=('postgresql', 'sqlite')),
    )

    id = db.Column(db.Integer, primary_key=True)

    # Personal Information
    title = db.Column(db.String(10), nullable=True)
    first_name = db.Column(db.String(255), nullable=False)
    last_name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(20), nullable=True)

    unit_id = db.Column(db.Integer, db.ForeignKey('units.id', ondelete='CASCADE'), nullable=False)

    # Lease Information
    rent = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal('0.00'))
    lease_start_date = db.Column(db.Date, nullable=True)
    lease_end_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=STATUS_ACTIVE)  # active, inactive, terminated
    rent_due_date = db.Column(db.Date, nullable=True)

    # Metadata
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    unit = db.relationship('Unit', back_populates='tenants')
    user = db.relationship(
        'User', back_populates='tenant', uselist=False,
        cascade='all, delete-orphan',
    )

    def __repr__(self):
        return f'<Tenant {self.id}: {self.first_name} {self.last_name}>'

    @property
    def full_name(self):
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def status_label(self):
        return STATUS_LABELS.get(self.status, 'Unknown')

    @property
    def has_portal_access(self):
        return self.user is not None

    def lease_expiring_soon(self, today=None, warning_days=30):
        """Lease ends in the future and within the warning window"""
        if not self.lease_end_date:
            return False
        today = today or date.today()
        return today < self.lease_end_date <= today + relativedelta(days=warning_days)

    def rent_overdue(self, today=None):
        if not self.rent_due_date:
            return False
        return self.rent_due_date < (today or date.today())

    def serialize(self, today=None, warning_days=30):
        unit = self.unit
        building = unit.building if unit else None
        zone = building.zone if building else None
        return {
            'id': self.id,
            'title': self.title,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'full_name': self.full_name,
            'email': self.email,
            'phone': self.phone,
            'unit_id': self.unit_id,
            'unit_name': unit.name if unit else None,
            'unit_slug': unit.slug if unit else None,
            'building_name': building.name if building else None,
            'zone_name': zone.name if zone else None,
            'rent': f'{self.rent:.2f}' if self.rent is not None else None,
            'lease_start_date': self.lease_start_date.isoformat() if self.lease_start_date else None,
            'lease_end_date': self.lease_end_date.isoformat() if self.lease_end_date else None,
            'status': self.status,
            'status_label': self.status_label,
            'rent_due_date': self.rent_due_date.isoformat() if self.rent_due_date else None,
            'lease_expiring_soon': self.lease_expiring_soon(today, warning_days),
            'rent_overdue': self.rent_overdue(today),
            'has_portal_access': self.has_portal_access,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
