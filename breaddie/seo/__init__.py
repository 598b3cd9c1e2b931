"""Search-engine structured data and page metadata."""

from breaddie.seo.metadata import PageMetadata, generate_profile_metadata, generate_story_page_metadata
from breaddie.seo.structured_data import (
    generate_person_structured_data,
    generate_recipe_structured_data,
    generate_structured_data_script,
)

__all__ = [
    "PageMetadata",
    "generate_person_structured_data",
    "generate_profile_metadata",
    "generate_recipe_structured_data",
    "generate_story_page_metadata",
    "generate_structured_data_script",
]
