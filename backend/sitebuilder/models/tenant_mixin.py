from sqlalchemy.orm import declared_attr
from sitebuilder.extensions import db


class TenantMixin:
    # Foreign keys on mixins must be produced per class
    @declared_attr
    def website_id(cls):
        return db.Column(
            db.String(36),
            db.ForeignKey("websites.id"),
            nullable=False,
            index=True
        )
