from pydantic import BaseModel, ConfigDict, Field


class SiteDataSchema(BaseModel):
    """Site resource as returned by the integration API"""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    online: bool = Field(..., description="Whether the site tunnel is connected")
    name: str | None = Field(default="", description="Display name")
    nice_id: str = Field(default="", alias="niceId")
    org_id: str = Field(default="", alias="orgId")
    message: str | None = Field(default="", description="Server supplied message")


class SiteResponseSchema(BaseModel):
    """Response envelope: {data, success, error, message, status}"""

    model_config = ConfigDict(extra="ignore")

    data: SiteDataSchema
    success: bool = False
    error: bool = False
    message: str | None = ""
    status: int = 0
