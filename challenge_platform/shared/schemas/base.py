"""Base schemas and common types used across the platform."""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )


# ===========================================
# COMMON RESPONSE WRAPPERS
# ===========================================


class SuccessResponse(BaseSchema):
    """Generic success acknowledgement."""

    type: str = "success"
    text: str


class ErrorResponse(BaseSchema):
    """Error body produced by HTTPException."""

    detail: str
