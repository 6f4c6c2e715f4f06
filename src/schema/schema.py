import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

MAX_MESSAGE_LENGTH = 2000
MAX_HISTORY_MESSAGES = 6  # last 3 exchanges

CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def sanitize_text(text: str) -> str:
    return CONTROL_CHARS.sub("", text).strip()


class ChatTurn(BaseModel):
    """One earlier message in the conversation."""

    role: str = Field(
        description="Who sent the message.",
        examples=["user", "assistant"],
    )
    content: str | None = Field(
        description="Message text.",
        default=None,
    )


class ChatRequest(BaseModel):
    """User input for the chat endpoint."""

    message: str = Field(
        description="The user's message.",
        examples=["Give me an opener for someone who loves hiking"],
    )
    conversation_history: list[ChatTurn] = Field(
        description="Earlier turns of the conversation. Only the last few are used.",
        default_factory=list,
    )
    session_id: str | None = Field(
        description="Session token, for clients that cannot send the session cookie.",
        default=None,
    )

    @field_validator("message")
    @classmethod
    def validate_message(cls, value: str) -> str:
        value = sanitize_text(value)
        if not value:
            raise ValueError("Message is required")
        if len(value) > MAX_MESSAGE_LENGTH:
            raise ValueError(f"Message must be at most {MAX_MESSAGE_LENGTH} characters")
        return value

    def sanitized_history(self) -> list[dict[str, str]]:
        """Last few user/assistant turns with non-empty content."""
        history = []
        for turn in self.conversation_history[-MAX_HISTORY_MESSAGES:]:
            if turn.role not in ("user", "assistant") or not turn.content:
                continue
            content = sanitize_text(turn.content)[:MAX_MESSAGE_LENGTH]
            if content:
                history.append({"role": turn.role, "content": content})
        return history


class ChatResponse(BaseModel):
    response: str = Field(
        description="The assistant's reply."
    )
    session_id: str = Field(
        description="Session token to send with the next request."
    )
    remaining_seconds: int = Field(
        description="Seconds of daily usage left after this exchange."
    )


def optional_detail(value: str | int | None) -> str | None:
    """Sanitized free-text detail, or None when it is blank or too long."""
    if value is None:
        return None
    value = sanitize_text(str(value))
    if not value or len(value) > MAX_MESSAGE_LENGTH:
        return None
    return value


class PickupLinesRequest(BaseModel):
    """Input for the pickup line generator."""

    category: str = Field(
        description="Style of pickup line.",
        examples=["Clever/Witty", "Funny/Playful"],
    )
    context: str | None = Field(
        description="Optional situation to write the lines for.",
        default=None,
        examples=["a coffee shop"],
    )
    session_id: str | None = Field(
        description="Session token, for clients that cannot send the session cookie.",
        default=None,
    )

    @field_validator("category")
    @classmethod
    def validate_category(cls, value: str) -> str:
        value = sanitize_text(value)
        if not value:
            raise ValueError("Category is required")
        if len(value) > MAX_MESSAGE_LENGTH:
            raise ValueError(f"Category must be at most {MAX_MESSAGE_LENGTH} characters")
        return value

    def prompt(self) -> str:
        # an unusable context is dropped rather than rejected
        prompt = f"Generate {self.category} pickup lines"
        context = optional_detail(self.context)
        if context:
            prompt += f" for {context}"
        return prompt


class PickupLinesResponse(BaseModel):
    pickup_lines: str = Field(
        description="Numbered pickup lines, with optional usage tips."
    )
    category: str = Field(
        description="The category the lines were written for."
    )
    session_id: str
    remaining_seconds: int


class TinderBioRequest(BaseModel):
    """Input for the Tinder bio writer. Every detail is optional."""

    personality: str | None = None
    interests: str | None = None
    profession: str | None = None
    age: int | str | None = None
    style: str | None = Field(
        description="Bio style.",
        default=None,
        examples=["Adventurous", "Humorous"],
    )
    session_id: str | None = Field(
        description="Session token, for clients that cannot send the session cookie.",
        default=None,
    )

    def details(self) -> list[str]:
        """Usable details as "name: value" pairs, blank or oversized ones dropped."""
        details = []
        for name in ("personality", "interests", "profession", "age", "style"):
            value = optional_detail(getattr(self, name))
            if value:
                details.append(f"{name}: {value}")
        return details

    def prompt(self) -> str:
        prompt = "Create optimized Tinder bios"
        details = self.details()
        if details:
            prompt += f" for someone with {', '.join(details)}"
        return prompt


class TinderBioResponse(BaseModel):
    bios: str = Field(
        description="Two or three bio variations with short explanations."
    )
    session_id: str
    remaining_seconds: int



class SessionResponse(BaseModel):
    session_id: str = Field(
        description="Session token to send with later requests."
    )
    is_new_session: bool = Field(
        description="Whether a new session was created for this request."
    )
    expires_at: datetime | None = Field(
        description="When the session expires.",
        default=None,
    )
    daily_limit_seconds: int = Field(
        description="Seconds of usage allowed per day."
    )
    remaining_seconds: int = Field(
        description="Seconds of usage left today."
    )


class UsageInfoResponse(BaseModel):
    seconds_used_today: int = Field(
        description="Seconds of usage consumed today.",
        default=0
    )
    daily_limit_seconds: int = Field(
        description="Seconds of usage allowed per day."
    )
    remaining_seconds: int = Field(
        description="Seconds of usage left today."
    )
    resets_at: datetime = Field(
        description="When the daily usage counter resets."
    )
    accounting: Literal["flat", "elapsed"] = Field(
        description="How each exchange is charged: a flat cost or measured wall-clock time."
    )
    approaching_limit: bool = Field(
        description="Whether at least 80% of the daily limit is used.",
        default=False
    )


class StatusResponse(BaseModel):
    status: str = Field(default="ok")
    active_sessions: int = Field(
        description="Number of live sessions."
    )
    daily_limit_seconds: int
    rate_limit: str
