from pydantic import BaseModel


class SessionPayload(BaseModel):
    id: str
    email: str
    role: str
    iat: int | None = None
    exp: int | None = None
