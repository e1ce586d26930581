"""Schemas for SAT questions."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Validation caps (input hardening)
SECTION_MAX_LENGTH = 64
TEXT_MAX_LENGTH = 8000

# Columns a partial update may write. Anything else in the form is ignored.
PATCHABLE_FIELDS = ("test_id", "section", "question_text", "hint", "explanation")


class QuestionBase(BaseModel):
    """Base schema for question."""

    test_id: int = Field(..., gt=0, description="ID of the test this question belongs to")
    section: str = Field(..., min_length=1, max_length=SECTION_MAX_LENGTH, description="Test section")
    question_text: str | None = Field(None, max_length=TEXT_MAX_LENGTH, description="Question text")
    hint: str | None = Field(None, max_length=TEXT_MAX_LENGTH, description="Hint shown on request")
    explanation: str | None = Field(
        None, max_length=TEXT_MAX_LENGTH, description="Explanation for the answer"
    )


class QuestionCreate(QuestionBase):
    """Fields accepted when creating a question."""

    pass


class QuestionReplace(QuestionBase):
    """Fields accepted by a full update; omitted text fields are cleared."""

    pass


class QuestionPatch(BaseModel):
    """Fields accepted by a partial update."""

    test_id: int | None = Field(None, gt=0)
    section: str | None = Field(None, min_length=1, max_length=SECTION_MAX_LENGTH)
    question_text: str | None = Field(None, max_length=TEXT_MAX_LENGTH)
    hint: str | None = Field(None, max_length=TEXT_MAX_LENGTH)
    explanation: str | None = Field(None, max_length=TEXT_MAX_LENGTH)
    remove_image: bool = Field(default=False, description="Clear the stored image")

    def changes(self) -> dict:
        """Values explicitly sent by the client, restricted to patchable columns."""
        return {
            field: value
            for field, value in self.model_dump(exclude_unset=True).items()
            if field in PATCHABLE_FIELDS
        }


class QuestionResponse(BaseModel):
    """Question response schema."""

    model_config = ConfigDict(from_attributes=True)

    question_id: int
    test_id: int | None = None
    section: str | None = None
    question_text: str | None = None
    hint: str | None = None
    image: str | None = None
    explanation: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class MessageResponse(BaseModel):
    """Outcome message for update and delete operations."""

    message: str
