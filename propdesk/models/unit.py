from datetime import datetime

from . import db

VACANCY_AVAILABLE = 'available'
VACANCY_UNAVAILABLE = 'unavailable'
VACANCY_PENDING = 'pending'
VACANCY_STATES = (VACANCY_AVAILABLE, VACANCY_UNAVAILABLE, VACANCY_PENDING)

VACANCY_LABELS = {
    VACANCY_AVAILABLE: 'Available',
    VACANCY_UNAVAILABLE: 'Occupied',
    VACANCY_PENDING: 'Pending',
}


class Unit(db.Model):
    __tablename__ = 'units'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)
    type = db.Column(db.String(255), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    postcode = db.Column(db.String(10), nullable=True)
    vacancy = db.Column(
        db.Enum(*VACANCY_STATES, name='unit_vacancy'),
        nullable=False, default=VACANCY_AVAILABLE,
    )
    building_id = db.Column(db.Integer, db.ForeignKey('buildings.id', ondelete='CASCADE'), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    building = db.relationship('Building', back_populates='units')
    tenants = db.relationship(
        'Tenant', back_populates='unit', lazy=True,
        cascade='all, delete-orphan',
        order_by='Tenant.created_at.desc(), Tenant.id.desc()',
    )
    documents = db.relationship(
        'Document',
        primaryjoin="and_(Unit.id == foreign(Document.documentable_id), "
                    "Document.documentable_type == 'unit')",
        lazy=True, cascade='all', overlaps='documents',
        order_by='Document.created_at.desc(), Document.id.desc()',
    )

    def __repr__(self):
        return f'<Unit {self.id}: {self.name} in Building {self.building_id}>'

    @property
    def zone(self):
        return self.building.zone if self.building else None

    @property
    def active_tenant(self):
        """The tenant currently occupying the unit, if any"""
        for tenant in self.tenants:
            if tenant.status == 'active':
                return tenant
        return None

    @property
    def vacancy_label(self):
        return VACANCY_LABELS.get(self.vacancy, 'Unknown')

    def serialize(self):
        building = self.building
        zone = self.zone
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'type': self.type,
            'address': self.address,
            'postcode': self.postcode,
            'vacancy': self.vacancy,
            'vacancy_label': self.vacancy_label,
            'building_id': self.building_id,
            'building_name': building.name if building else None,
            'building_slug': building.slug if building else None,
            'zone_id': zone.id if zone else None,
            'zone_name': zone.name if zone else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
