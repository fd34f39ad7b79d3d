from pydantic import BaseModel, ConfigDict, constr


class BuildPayload(BaseModel):
    """Fields of an incoming build payload that are checked; the rest pass through."""

    model_config = ConfigDict(extra="allow")

    ticket: constr(strict=True, pattern=r"^[A-Za-z0-9]+$")
