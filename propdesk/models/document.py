import enum
from datetime import datetime

from . import db
from .zone import Zone
from .building import Building
from .unit import Unit


class OwnerKind(str, enum.Enum):
    """The three entity kinds a document can be attached to"""
    ZONE = 'zone'
    BUILDING = 'building'
    UNIT = 'unit'


OWNER_MODELS = {
    OwnerKind.ZONE: Zone,
    OwnerKind.BUILDING: Building,
    OwnerKind.UNIT: Unit,
}


def owner_kind_of(owner):
    for kind, model in OWNER_MODELS.items():
        if isinstance(owner, model):
            return kind
    raise TypeError(f"{type(owner).__name__} cannot own documents")


VISIBLE_YES = 'yes'
VISIBLE_NO = 'no'


class Document(db.Model):
    __tablename__ = 'documents'
    __table_args__ = (
        db.Index('ix_documents_documentable', 'documentable_type', 'documentable_id'),
    )

    id = db.Column(db.Integer, primary_key=True)

    # File Information
    name = db.Column(db.String(255), nullable=False)
    path = db.Column(db.String(500), nullable=False)
    type = db.Column(db.String(100), nullable=True)  # MIME type
    size = db.Column(db.Integer, nullable=True)  # bytes

    # Categorisation
    folder_path = db.Column(db.String(255), nullable=True)
    document_type = db.Column(db.String(50), nullable=True)
    year = db.Column(db.Integer, nullable=True)

    # Owner: zone | building | unit
    documentable_type = db.Column(db.String(20), nullable=False)
    documentable_id = db.Column(db.Integer, nullable=False)

    visible_to_tenants = db.Column(
        db.Enum(VISIBLE_YES, VISIBLE_NO, name='document_visibility'),
        nullable=False, default=VISIBLE_NO,
    )

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<Document {self.id}: {self.name}>'

    @property
    def owner_kind(self):
        return OwnerKind(self.documentable_type)

    @property
    def owner(self):
        return db.session.get(OWNER_MODELS[self.owner_kind], self.documentable_id)

    @property
    def is_visible_to_tenants(self):
        # Only unit documents are ever shown in the tenant portal
        return self.owner_kind is OwnerKind.UNIT and self.visible_to_tenants == VISIBLE_YES

    def serialize(self, url=None):
        from ..services.documents import folder_display_name, document_type_display
        return {
            'id': self.id,
            'name': self.name,
            'path': self.path,
            'url': url,
            'type': self.type,
            'size': self.size,
            'folder_path': self.folder_path,
            'folder_name': folder_display_name(self.folder_path) if self.folder_path else None,
            'document_type': self.document_type,
            'document_type_label': document_type_display(self.document_type) if self.document_type else None,
            'year': self.year,
            'owner_type': self.documentable_type,
            'owner_id': self.documentable_id,
            'visible_to_tenants': self.visible_to_tenants,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
