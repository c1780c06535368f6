"""Row ids are PostgreSQL UUIDs; anything else is rejected at the API edge
instead of failing inside the database driver."""

from typing import Annotated

from fastapi import Path
from pydantic import Field

UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"

EntityId = Annotated[str, Field(pattern=UUID_PATTERN)]
PathId = Annotated[str, Path(pattern=UUID_PATTERN)]
