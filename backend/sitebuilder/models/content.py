from sitebuilder.extensions import db
from .base import BaseModel
from .tenant_mixin import TenantMixin


# -------------------------------------------------
# Single-row content (one row per website)
# -------------------------------------------------

class HeroContent(BaseModel, TenantMixin):
    __tablename__ = "hero_content"
    __section__ = "hero"

    headline = db.Column(db.String(255), nullable=False, default="")
    subheadline = db.Column(db.Text, nullable=True)
    cta_text = db.Column(db.String(100), nullable=True)
    cta_link = db.Column(db.String(255), nullable=True)
    background_image_url = db.Column(db.String(512), nullable=True)

    __table_args__ = (
        db.UniqueConstraint("website_id", name="uq_hero_content_website"),
    )


class AboutContent(BaseModel, TenantMixin):
    __tablename__ = "about_content"
    __section__ = "about"

    title = db.Column(db.String(255), nullable=False, default="")
    body = db.Column(db.Text, nullable=True)
    image_url = db.Column(db.String(512), nullable=True)
    stats = db.Column(db.JSON, default=list)  # [{"label": ..., "value": ...}]

    __table_args__ = (
        db.UniqueConstraint("website_id", name="uq_about_content_website"),
    )


# -------------------------------------------------
# List content (many rows per website, ordered)
# -------------------------------------------------

class MenuItem(BaseModel, TenantMixin):
    __tablename__ = "menu_items"
    __section__ = "menu"

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.String(32), nullable=True)  # display string, "$4.50"
    category = db.Column(db.String(100), nullable=True)
    image_url = db.Column(db.String(512), nullable=True)
    display_order = db.Column(db.Integer, default=0)


class Testimonial(BaseModel, TenantMixin):
    __tablename__ = "testimonials"
    __section__ = "testimonials"

    author_name = db.Column(db.String(255), nullable=False)
    quote = db.Column(db.Text, nullable=False)
    rating = db.Column(db.Integer, nullable=True)
    display_order = db.Column(db.Integer, default=0)


class FaqItem(BaseModel, TenantMixin):
    __tablename__ = "faq_items"
    __section__ = "faq"

    question = db.Column(db.Text, nullable=False)
    answer = db.Column(db.Text, nullable=False)
    display_order = db.Column(db.Integer, default=0)


CONTENT_MODELS = (HeroContent, AboutContent, MenuItem, Testimonial, FaqItem)

# table name -> section that displays it
CONTENT_SECTIONS = {model.__tablename__: model.__section__ for model in CONTENT_MODELS}


def editable_columns():
    """table name -> column names, for every inline-editable table."""
    return {
        model.__tablename__: [column.name for column in model.__table__.columns]
        for model in CONTENT_MODELS
    }
