from sitebuilder.extensions import db
from .base import BaseModel


class Website(BaseModel):
    """One customer website (tenant). Deactivated rather than deleted."""
    __tablename__ = "websites"

    subdomain = db.Column(db.String(63), unique=True, nullable=False, index=True)
    site_title = db.Column(db.String(255), nullable=False)
    site_description = db.Column(db.Text, nullable=True)
    logo_url = db.Column(db.String(512), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    theme_preset_id = db.Column(
        db.String(36), db.ForeignKey("theme_presets.id"), nullable=True
    )
