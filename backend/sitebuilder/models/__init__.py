from .theme_preset import ThemePreset
from .tenant import Website
from .section import WebsiteSection
from .content import (
    AboutContent,
    FaqItem,
    HeroContent,
    MenuItem,
    Testimonial,
    CONTENT_MODELS,
    CONTENT_SECTIONS,
    editable_columns,
)
