"""Theme catalog and content snippet models."""

from pydantic import BaseModel, Field


class ThemeDescriptor(BaseModel):
    """A marketing theme the user can pick."""

    id: str = Field(..., description="Theme identifier")
    name: str = Field(..., description="Display name")
    description: str = Field("", description="What the theme covers")

    class Config:
        """Pydantic config."""
        frozen = True


class ContentSnippet(BaseModel):
    """A reusable piece of content tied to a theme."""

    id: str = Field(..., description="Component identifier")
    name: str = Field(..., description="Component name")
    content: str = Field("", description="Free-text content")
    section: str = Field("", description="Category label of the component")

    class Config:
        """Pydantic config."""
        frozen = True


THEME_CATEGORIES: tuple[ThemeDescriptor, ...] = (
    ThemeDescriptor(id="safety", name="Safety", description="Dosage, side effects, contraindications"),
    ThemeDescriptor(id="efficacy", name="Efficacy", description="Clinical outcomes and effectiveness"),
    ThemeDescriptor(id="brand", name="Brand", description="Brand identity and messaging"),
    ThemeDescriptor(id="mechanism", name="Mechanism of Action", description="How the drug works"),
    ThemeDescriptor(id="patient", name="Patient Focus", description="Patient benefits and quality of life"),
)

DEFAULT_THEME_ID = "safety"


def get_theme(theme_id: str) -> ThemeDescriptor:
    """Look up a theme by id.

    Raises:
        KeyError: If the id is not in the catalog.
    """
    for theme in THEME_CATEGORIES:
        if theme.id == theme_id:
            return theme
    raise KeyError(theme_id)
