from datetime import datetime

from . import db


class Zone(db.Model):
    __tablename__ = 'zones'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    buildings = db.relationship(
        'Building', back_populates='zone', lazy=True,
        cascade='all, delete-orphan',
        order_by='Building.created_at.desc(), Building.id.desc()',
    )
    documents = db.relationship(
        'Document',
        primaryjoin="and_(Zone.id == foreign(Document.documentable_id), "
                    "Document.documentable_type == 'zone')",
        lazy=True, cascade='all', overlaps='documents',
        order_by='Document.created_at.desc(), Document.id.desc()',
    )

    def __repr__(self):
        return f'<Zone {self.id}: {self.name}>'

    def serialize(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'building_count': len(self.buildings),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
