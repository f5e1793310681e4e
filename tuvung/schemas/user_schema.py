from typing import Optional

from pydantic import BaseModel, ConfigDict


class CurrentUser(BaseModel):
    """Identity carried by a Supabase access token."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: Optional[str] = None
    role: str = "authenticated"
