from sitebuilder.extensions import db
from .base import BaseModel
from .tenant_mixin import TenantMixin


class WebsiteSection(BaseModel, TenantMixin):
    __tablename__ = "website_sections"

    section_name = db.Column(db.String(100), nullable=False)  # hero, menu, faq
    is_enabled = db.Column(db.Boolean, nullable=True)  # null reads as enabled
    display_order = db.Column(db.Integer, default=0)
    custom_config = db.Column(db.JSON, default=dict)

    __table_args__ = (
        db.UniqueConstraint("website_id", "section_name", name="uq_website_section_name"),
    )
