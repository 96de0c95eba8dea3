"""Settings model: one row per key, grouped by category."""

import enum
from datetime import datetime, timezone

from ...core.database import db


class SettingsCategory(str, enum.Enum):
    GENERAL = 'GENERAL'
    CONTACT = 'CONTACT'
    SEO = 'SEO'
    EMAIL = 'EMAIL'
    PAYMENT = 'PAYMENT'
    SHIPPING = 'SHIPPING'
    FAVICON = 'FAVICON'
    PRODUCT_CARD = 'PRODUCT_CARD'


def parse_category(value):
    """Coerce a category name (any case) or enum member to SettingsCategory."""
    if isinstance(value, SettingsCategory):
        return value
    try:
        return SettingsCategory(str(value).strip().upper())
    except ValueError:
        valid = ', '.join(c.value for c in SettingsCategory)
        raise ValueError(f"Invalid category {value!r}. Category must be one of: {valid}") from None


def _utcnow():
    return datetime.now(timezone.utc)


class Setting(db.Model):
    __tablename__ = 'settings'

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(100), unique=True, nullable=False, index=True)
    # Ciphertext for sensitive keys, plaintext otherwise
    value = db.Column(db.Text, nullable=False, default='')
    category = db.Column(
        db.Enum(SettingsCategory, name='settings_category'),
        nullable=False,
        default=SettingsCategory.GENERAL,
        index=True,
    )
    updated_by = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'key': self.key,
            'value': self.value,
            'category': self.category.value if self.category else None,
            'updated_by': self.updated_by,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Setting {self.key}>"
