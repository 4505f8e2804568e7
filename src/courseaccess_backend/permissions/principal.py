from typing import Optional
from pydantic import BaseModel, ConfigDict


class Principal(BaseModel):
    """Caller identity as established by the authentication layer.

    `authenticated` is the only proof the core trusts: it is set by whoever
    verified the caller (bearer token lookup, an operator command, ...).
    """

    user_id: Optional[str] = None
    authenticated: bool = False

    model_config = ConfigDict(frozen=True)

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls(user_id=None, authenticated=False)

    @classmethod
    def authenticated_as(cls, user_id: str) -> "Principal":
        return cls(user_id=user_id, authenticated=True)
