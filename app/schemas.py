from datetime import datetime

from pydantic import BaseModel, ConfigDict


class LinkCreate(BaseModel):
    # Checked by crud.create_link so bad values come back as 400, not 422
    target_url: str | None = None
    code: str | None = None

class LinkOut(BaseModel):
    code: str
    target_url: str
    total_clicks: int
    last_clicked: datetime | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

class Health(BaseModel):
    ok: bool
    version: str
    uptime_seconds: float
