from sitebuilder.extensions import db
from .base import BaseModel


class ThemePreset(BaseModel):
    __tablename__ = "theme_presets"

    name = db.Column(db.String(100), nullable=False, unique=True)
    colors = db.Column(db.JSON, nullable=False, default=dict)  # primary, accent, cream, ...
