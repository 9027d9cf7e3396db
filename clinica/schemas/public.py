from pydantic import BaseModel


class PublicProfessionalOut(BaseModel):
    id: str
    name: str
    specialty: str | None = None
    photo_url: str | None = None
    realized_this_month: int


class PublicStatsOut(BaseModel):
    month: str
    professionals: list[PublicProfessionalOut]
    total_realized: int
