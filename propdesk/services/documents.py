"""
Document placement, upload and visibility.

Files are laid out by the owner's slug chain::

    {zone}/general
    {zone}/company-accounts/{year}
    {zone}/company-claims/{year}
    {zone}/buildings/{building}
    {zone}/buildings/{building}/units/{unit}

A Document row is written only after the bytes are stored and confirmed present.
"""
import mimetypes
import os

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.utils import secure_filename

from ..models import db, Document, OwnerKind, owner_kind_of, VISIBLE_YES, VISIBLE_NO
from ..storage import get_storage
from ..utils.validation import FormValidator
from .results import OperationResult, NO_FILE, STORE_FAILED, MISSING_AFTER_STORE

FOLDER_GENERAL = 'general'
FOLDER_COMPANY_ACCOUNTS = 'company_accounts'
FOLDER_COMPANY_CLAIMS = 'company_claims'
ZONE_FOLDERS = (FOLDER_GENERAL, FOLDER_COMPANY_ACCOUNTS, FOLDER_COMPANY_CLAIMS)

COMPANY_ACCOUNT_TYPES = {
    'tax_return': 'Tax Return',
    'profit_loss': 'Profit & Loss Statement',
    'balance_sheet': 'Balance Sheet',
    'annual_accounts': 'Annual Accounts',
    'management_accounts': 'Management Accounts',
}

COMPANY_CLAIM_TYPES = {
    'insurance_claim': 'Insurance Claim',
    'warranty_claim': 'Warranty Claim',
    'legal_claim': 'Legal Claim',
    'compensation_claim': 'Compensation Claim',
    'other_claim': 'Other Claim',
}

DOCUMENT_TYPES_BY_FOLDER = {
    FOLDER_COMPANY_ACCOUNTS: COMPANY_ACCOUNT_TYPES,
    FOLDER_COMPANY_CLAIMS: COMPANY_CLAIM_TYPES,
}

_BASE_EXTENSIONS = {'pdf', 'docx', 'txt'}
ALLOWED_EXTENSIONS = {
    OwnerKind.ZONE: _BASE_EXTENSIONS | {'xlsx', 'xls'},
    OwnerKind.BUILDING: _BASE_EXTENSIONS,
    OwnerKind.UNIT: _BASE_EXTENSIONS | {'jpg', 'jpeg', 'png'},
}

# Zone document list filters
FOLDER_VIEWS = ('all', 'general', 'company-accounts', 'company-claims')

NO_FILE_MESSAGE = "No file was received. Please try again."


# ---------------- Naming helpers ----------------
def zone_folder_path(folder, year=None):
    if folder == FOLDER_COMPANY_ACCOUNTS:
        return f"company-accounts/{year}"
    if folder == FOLDER_COMPANY_CLAIMS:
        return f"company-claims/{year}"
    return FOLDER_GENERAL


def folder_display_name(folder_path):
    if not folder_path or folder_path == FOLDER_GENERAL:
        return 'General'
    if folder_path.startswith('company-accounts/'):
        return f"Accounts {folder_path[len('company-accounts/'):]}"
    if folder_path.startswith('company-claims/'):
        return f"Claims {folder_path[len('company-claims/'):]}"
    return folder_path.replace('-', ' ').capitalize()


def document_type_display(document_type):
    return (
        COMPANY_ACCOUNT_TYPES.get(document_type)
        or COMPANY_CLAIM_TYPES.get(document_type)
        or document_type.replace('_', ' ').title()
    )


def storage_directory(owner, folder_path=None):
    """Directory an owner's uploads are stored under"""
    kind = owner_kind_of(owner)
    if kind is OwnerKind.ZONE:
        return f"{owner.slug}/{folder_path or FOLDER_GENERAL}"
    if kind is OwnerKind.BUILDING:
        return f"{owner.zone.slug}/buildings/{owner.slug}"
    if kind is OwnerKind.UNIT:
        building = owner.building
        return f"{building.zone.slug}/buildings/{building.slug}/units/{owner.slug}"
    raise TypeError(kind)


def file_extension(filename):
    return filename.rsplit('.', 1)[1].lower() if '.' in filename else ''


def allowed_file(filename, kind):
    return file_extension(filename) in ALLOWED_EXTENSIONS[kind]


def stored_filename(original_name):
    """
    On-disk name for an upload. Falls back to ``document.<ext>`` when
    ``secure_filename`` loses the extension (``契約書.pdf`` becomes ``pdf``).
    """
    ext = file_extension(original_name)
    filename = secure_filename(original_name)
    suffix = f".{ext}" if ext else ''
    if not filename or not filename.lower().endswith(suffix):
        return f"document{suffix}"
    return filename


def _available_path(storage, directory, filename):
    """``directory/filename``, suffixed ``-1``, ``-2``... if a file is already there"""
    stem, ext = os.path.splitext(filename)
    candidate = f"{directory}/{filename}"
    n = 1
    while storage.exists(candidate):
        candidate = f"{directory}/{stem}-{n}{ext}"
        n += 1
    return candidate


# ---------------- Upload ----------------
def validate_upload(owner, filename, size, data):
    """Check file type, size and the owner-specific form fields."""
    kind = owner_kind_of(owner)
    form = FormValidator(data)

    if not allowed_file(filename, kind):
        allowed = ', '.join(sorted(ALLOWED_EXTENSIONS[kind]))
        form.add_error('file', f"file must be one of the following types: {allowed}")
    max_bytes = current_app.config['MAX_UPLOAD_BYTES']
    if size > max_bytes:
        form.add_error('file', f"file may not be greater than {max_bytes // 1024} kilobytes")

    cleaned = {
        'folder_path': None,
        'year': None,
        'document_type': None,
        'visible_to_tenants': VISIBLE_NO,
    }

    if kind is OwnerKind.ZONE:
        folder = form.choice('folder', ZONE_FOLDERS, default=FOLDER_GENERAL)
        if folder in DOCUMENT_TYPES_BY_FOLDER:
            year = form.integer('year', required=True, minimum=1900, maximum=2100)
            document_type = form.choice('document_type', tuple(DOCUMENT_TYPES_BY_FOLDER[folder]))
            cleaned.update(year=year, document_type=document_type)
        cleaned['folder_path'] = zone_folder_path(folder, cleaned['year'])
    elif kind is OwnerKind.UNIT:
        cleaned['visible_to_tenants'] = form.choice(
            'visible_to_tenants', (VISIBLE_YES, VISIBLE_NO), default=VISIBLE_NO
        )

    form.validate()
    return cleaned


def upload_document(owner, upload, data=None, storage=None):
    """
    Store an uploaded file for a zone, building or unit and record it.

    ``upload`` is a werkzeug ``FileStorage`` (or None when nothing was sent).
    Invalid input raises ValidationError before anything is stored; storage
    problems come back as failure results and leave no Document row.
    """
    storage = storage or get_storage()
    kind = owner_kind_of(owner)
    data = dict(data or {})

    if upload is None or not upload.filename:
        current_app.logger.error("%s document upload for %s: no file received", kind.value, owner.slug)
        return OperationResult.failure(NO_FILE, NO_FILE_MESSAGE)

    original_name = upload.filename
    content = upload.read()
    size = len(content)
    mime_type = (
        upload.mimetype
        or mimetypes.guess_type(original_name)[0]
        or 'application/octet-stream'
    )

    cleaned = validate_upload(owner, original_name, size, data)

    current_app.logger.info(
        "%s file upload attempt: %s (%d bytes, %s) for %s",
        kind.value, original_name, size, mime_type, owner.slug,
    )

    directory = storage_directory(owner, cleaned['folder_path'])
    target = _available_path(storage, directory, stored_filename(original_name))

    try:
        stored_path = storage.save(content, target, content_type=mime_type)
    except (IOError, OSError) as e:
        return _storage_failure(kind, owner, original_name, STORE_FAILED, f"File storage failed: {e}")
    if not stored_path:
        return _storage_failure(kind, owner, original_name, STORE_FAILED, "File storage failed - no path returned")
    if not storage.exists(stored_path):
        return _storage_failure(kind, owner, original_name, MISSING_AFTER_STORE, "File was not saved to storage")

    document = Document(
        name=original_name,
        path=stored_path,
        size=size,
        type=mime_type,
        documentable_type=kind.value,
        documentable_id=owner.id,
        **cleaned,
    )
    db.session.add(document)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        storage.delete(stored_path)
        current_app.logger.exception("Could not record document %s for %s", original_name, owner.slug)
        raise

    current_app.logger.info("Document %s stored at %s", document.id, stored_path)

    if kind is OwnerKind.ZONE:
        message = f"Document uploaded successfully to {folder_display_name(document.folder_path)}"
    else:
        message = f'Document "{original_name}" uploaded successfully!'
    return OperationResult.success(
        message, entity=document,
        document=document.serialize(url=storage.get_url(stored_path)),
    )


def _storage_failure(kind, owner, original_name, failure_kind, reason):
    current_app.logger.error(
        "%s document upload failed for %s (file %s): %s",
        kind.value, owner.slug, original_name, reason,
    )
    return OperationResult.failure(failure_kind, f"Failed to upload document: {reason}")


# ---------------- Visibility & removal ----------------
def toggle_visibility(document):
    document.visible_to_tenants = VISIBLE_NO if document.visible_to_tenants == VISIBLE_YES else VISIBLE_YES
    db.session.commit()
    state = 'visible to' if document.visible_to_tenants == VISIBLE_YES else 'hidden from'
    return OperationResult.success(
        f"Document is now {state} tenants.", entity=document,
        visible_to_tenants=document.visible_to_tenants,
    )


def delete_document(document, storage=None):
    storage = storage or get_storage()
    name, path = document.name, document.path
    db.session.delete(document)
    db.session.commit()
    try:
        storage.delete(path)
    except OSError as e:
        current_app.logger.warning("Could not remove stored file %s: %s", path, e)
    return OperationResult.success(f'Document "{name}" deleted.')


# ---------------- Queries ----------------
def owner_documents(owner, folder_view='all'):
    """Newest first; zone documents can be narrowed to one folder"""
    kind = owner_kind_of(owner)
    query = Document.query.filter(
        Document.documentable_type == kind.value,
        Document.documentable_id == owner.id,
    )
    if kind is OwnerKind.ZONE and folder_view not in (None, '', 'all'):
        if folder_view == FOLDER_GENERAL:
            query = query.filter(Document.folder_path == FOLDER_GENERAL)
        else:
            query = query.filter(Document.folder_path.like(f"{folder_view}/%"))
    return query.order_by(Document.created_at.desc(), Document.id.desc())


def tenant_visible_documents(tenant):
    """Unit documents a tenant may see in the portal"""
    return Document.query.filter(
        Document.documentable_type == OwnerKind.UNIT.value,
        Document.documentable_id == tenant.unit_id,
        Document.visible_to_tenants == VISIBLE_YES,
    ).order_by(Document.created_at.desc(), Document.id.desc())
