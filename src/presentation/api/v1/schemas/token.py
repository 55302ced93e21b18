from pydantic import BaseModel, ConfigDict, Field

from src.domain.enums import CallerRole


class TokenPayload(BaseModel):
    """JWT token payload schema with caller identity and role"""

    sub: str = Field(..., description="Caller ID (subject)")
    role: str | None = Field(None, description="helper | jugendamt | admin")
    helper_id: str | None = Field(None, description="Helper ID for helper callers")
    exp: int = Field(..., description="Token expiration timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "sub": "user_123",
                "role": "helper",
                "helper_id": "h1",
                "exp": 1234567890,
            }
        }
    )

    @property
    def caller_role(self) -> CallerRole:
        """Closed role; unknown or missing claims are least-privileged"""
        return CallerRole.from_value(self.role)
