from datetime import datetime

from . import db
from ..utils.numbers import percentage


class Building(db.Model):
    __tablename__ = 'buildings'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)
    street = db.Column(db.String(255), nullable=True)
    zone_id = db.Column(db.Integer, db.ForeignKey('zones.id', ondelete='CASCADE'), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    zone = db.relationship('Zone', back_populates='buildings')
    units = db.relationship(
        'Unit', back_populates='building', lazy=True,
        cascade='all, delete-orphan',
        order_by='Unit.created_at.desc(), Unit.id.desc()',
    )
    documents = db.relationship(
        'Document',
        primaryjoin="and_(Building.id == foreign(Document.documentable_id), "
                    "Document.documentable_type == 'building')",
        lazy=True, cascade='all', overlaps='documents',
        order_by='Document.created_at.desc(), Document.id.desc()',
    )

    def __repr__(self):
        return f'<Building {self.id}: {self.name}>'

    @property
    def occupied_unit_count(self):
        return sum(1 for unit in self.units if unit.vacancy == 'unavailable')

    @property
    def occupancy_rate(self):
        """Percentage of units marked unavailable, rounded half-up"""
        return percentage(self.occupied_unit_count, len(self.units))

    def serialize(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'street': self.street,
            'zone_id': self.zone_id,
            'zone_name': self.zone.name if self.zone else None,
            'zone_slug': self.zone.slug if self.zone else None,
            'unit_count': len(self.units),
            'occupied_unit_count': self.occupied_unit_count,
            'occupancy_rate': self.occupancy_rate,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
