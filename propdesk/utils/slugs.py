from slugify import slugify

from ..extensions import db


def unique_slug(model, text: str, fallback: str) -> str:
    """Slug for ``text`` that no ``model`` row uses yet, numbered ``-2``, ``-3``... on collision."""
    base = slugify(text) or fallback
    slug = base
    n = 2
    while db.session.query(model.id).filter(model.slug == slug).first() is not None:
        slug = f"{base}-{n}"
        n += 1
    return slug
