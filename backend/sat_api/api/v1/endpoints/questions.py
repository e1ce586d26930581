"""SAT question endpoints.

Questions are submitted as multipart forms so an image can travel with the
fields. The image itself lives in object storage; the row stores its URL.
"""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Request, UploadFile, status
from sqlalchemy.orm import Session

from sat_api.common.request_id import current_request_id
from sat_api.core.app_exceptions import DatabaseError, RecordNotFound
from sat_api.db.session import get_db
from sat_api.schemas.question import (
    SECTION_MAX_LENGTH,
    TEXT_MAX_LENGTH,
    MessageResponse,
    QuestionCreate,
    QuestionPatch,
    QuestionReplace,
    QuestionResponse,
)
from sat_api.services.questions import QuestionRepository
from sat_api.storage.images import ImageLifecycleManager, ImageUpload

router = APIRouter(prefix="/questions", tags=["Questions"])

UPDATED_MESSAGE = "Question was updated successfully."
DELETED_MESSAGE = "Question was deleted successfully!"

TestIdForm = Annotated[int, Form(gt=0, description="ID of the test this question belongs to")]
SectionForm = Annotated[str, Form(min_length=1, max_length=SECTION_MAX_LENGTH, description="Test section")]
TextForm = Annotated[str | None, Form(max_length=TEXT_MAX_LENGTH)]


def get_repository(db: Session = Depends(get_db)) -> QuestionRepository:
    return QuestionRepository(db)


def get_image_manager(request: Request) -> ImageLifecycleManager:
    return request.app.state.image_manager


def question_form(
    test_id: TestIdForm,
    section: SectionForm,
    question_text: TextForm = None,
    hint: TextForm = None,
    explanation: TextForm = None,
) -> QuestionCreate:
    """Form fields of a create or full update."""
    return QuestionCreate(
        test_id=test_id,
        section=section,
        question_text=question_text,
        hint=hint,
        explanation=explanation,
    )


def question_replace_form(form: QuestionCreate = Depends(question_form)) -> QuestionReplace:
    return QuestionReplace(**form.model_dump())


def question_patch_form(
    test_id: Annotated[int | None, Form(gt=0)] = None,
    section: Annotated[str | None, Form(min_length=1, max_length=SECTION_MAX_LENGTH)] = None,
    question_text: TextForm = None,
    hint: TextForm = None,
    explanation: TextForm = None,
    remove_image: Annotated[bool, Form(description="Clear the stored image")] = False,
) -> QuestionPatch:
    """Form fields of a partial update. Only the fields that were sent count as set."""
    sent = {
        "test_id": test_id,
        "section": section,
        "question_text": question_text,
        "hint": hint,
        "explanation": explanation,
    }
    return QuestionPatch(
        **{name: value for name, value in sent.items() if value is not None},
        remove_image=remove_image,
    )


async def read_upload(image: UploadFile | None) -> ImageUpload | None:
    """Read an optional file part; an empty part counts as no file."""
    if image is None or not image.filename:
        return None
    return ImageUpload(
        data=await image.read(),
        content_type=image.content_type or "application/octet-stream",
        filename=image.filename,
    )


def update_outcome(question_id: int, updated: bool) -> MessageResponse:
    if updated:
        return MessageResponse(message=UPDATED_MESSAGE)
    return MessageResponse(
        message=(
            f"Cannot update Question with id={question_id}. "
            "Maybe Question was not found or req.body is empty!"
        )
    )


async def write_update(
    repo: QuestionRepository,
    images: ImageLifecycleManager,
    background_tasks: BackgroundTasks,
    question_id: int,
    values: dict,
    current_image: str | None,
    upload: ImageUpload | None,
) -> bool:
    """Write ``values``, swapping in ``upload`` as the new image when one was sent.

    The superseded image is only scheduled for cleanup once the row holds
    the new location.
    """
    if upload is None:
        return repo.update(question_id, values) == 1

    location = await images.replace_image(
        current_image,
        upload.data,
        upload.content_type,
        upload.filename,
        persist=lambda location: repo.update(question_id, {**values, "image": location}) == 1,
        defer=background_tasks.add_task,
    )
    return location is not None


# ============================================================================
# Create
# ============================================================================


@router.post(
    "",
    response_model=QuestionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create question",
    description="Create a question. An optional `image` file is uploaded to object storage.",
)
async def create_question(
    payload: QuestionCreate = Depends(question_form),
    image: UploadFile | None = File(None),
    repo: QuestionRepository = Depends(get_repository),
    images: ImageLifecycleManager = Depends(get_image_manager),
) -> QuestionResponse:
    upload = await read_upload(image)
    location = None
    if upload:
        location = await images.upload_image(upload.data, upload.content_type, upload.filename)

    try:
        question = repo.create({**payload.model_dump(), "image": location})
    except DatabaseError:
        await images.discard_image(location)
        raise

    return QuestionResponse.model_validate(question)


# ============================================================================
# Read
# ============================================================================


@router.get("", response_model=list[QuestionResponse], summary="List questions")
async def list_questions(
    repo: QuestionRepository = Depends(get_repository),
) -> list[QuestionResponse]:
    return [QuestionResponse.model_validate(q) for q in repo.list_all()]


@router.get(
    "/section/{section}/test/{test_id}",
    response_model=list[QuestionResponse],
    summary="List questions of a test section",
)
async def list_questions_by_section_and_test(
    section: str,
    test_id: int,
    repo: QuestionRepository = Depends(get_repository),
) -> list[QuestionResponse]:
    return [
        QuestionResponse.model_validate(q)
        for q in repo.list_by_section_and_test(section, test_id)
    ]


@router.get(
    "/test/{test_id}",
    response_model=list[QuestionResponse],
    summary="List questions of a test",
)
async def list_questions_by_test(
    test_id: int,
    repo: QuestionRepository = Depends(get_repository),
) -> list[QuestionResponse]:
    return [QuestionResponse.model_validate(q) for q in repo.list_by_test(test_id)]


@router.get("/{question_id}", response_model=QuestionResponse, summary="Get question")
async def get_question(
    question_id: int,
    repo: QuestionRepository = Depends(get_repository),
) -> QuestionResponse:
    question = repo.get(question_id)
    if not question:
        raise RecordNotFound(f"Cannot find Question with id={question_id}.", question_id)
    return QuestionResponse.model_validate(question)


# ============================================================================
# Update
# ============================================================================

@router.put(
    "/{question_id}",
    response_model=MessageResponse,
    summary="Replace question",
    description=(
        "Replace every field of a question. Text fields that are not sent are cleared. "
        "The stored image is kept unless a new `image` file is sent."
    ),
)
async def update_question(
    question_id: int,
    background_tasks: BackgroundTasks,
    payload: QuestionReplace = Depends(question_replace_form),
    image: UploadFile | None = File(None),
    repo: QuestionRepository = Depends(get_repository),
    images: ImageLifecycleManager = Depends(get_image_manager),
) -> MessageResponse:
    question = repo.get_for_update(question_id)
    if not question:
        raise RecordNotFound(
            f"Cannot update Question with id={question_id}. Maybe Question was not found!",
            question_id,
        )

    updated = await write_update(
        repo,
        images,
        background_tasks,
        question_id,
        payload.model_dump(),
        question.image,
        await read_upload(image),
    )
    return update_outcome(question_id, updated)


@router.patch(
    "/{question_id}",
    response_model=MessageResponse,
    summary="Update question",
    description=(
        "Update the fields that are sent. Send an `image` file to replace the image, "
        "or `remove_image=true` to clear it."
    ),
)
async def patch_question(
    question_id: int,
    background_tasks: BackgroundTasks,
    payload: QuestionPatch = Depends(question_patch_form),
    image: UploadFile | None = File(None),
    repo: QuestionRepository = Depends(get_repository),
    images: ImageLifecycleManager = Depends(get_image_manager),
) -> MessageResponse:
    question = repo.get_for_update(question_id)
    if not question:
        raise RecordNotFound(
            f"Cannot update Question with id={question_id}. Maybe Question was not found!",
            question_id,
        )

    values = payload.changes()
    upload = await read_upload(image)

    if upload is None and payload.remove_image and question.image:
        updated = repo.update(question_id, {**values, "image": None}) == 1
        if updated:
            background_tasks.add_task(
                images.discard_image, question.image, request_id=current_request_id()
            )
        return update_outcome(question_id, updated)

    updated = await write_update(
        repo, images, background_tasks, question_id, values, question.image, upload
    )
    return update_outcome(question_id, updated)


# ============================================================================
# Delete
# ============================================================================


@router.delete("/{question_id}", response_model=MessageResponse, summary="Delete question")
async def delete_question(
    question_id: int,
    repo: QuestionRepository = Depends(get_repository),
    images: ImageLifecycleManager = Depends(get_image_manager),
) -> MessageResponse:
    question = repo.get_for_update(question_id)
    if not question:
        raise RecordNotFound(
            f"Cannot delete Question with id={question_id}. Maybe Question was not found!",
            question_id,
        )

    # The row is only removed once its image is gone; a storage failure
    # surfaces as 500 and leaves the question intact.
    await images.delete_image(question.image)

    if repo.delete(question_id) == 1:
        return MessageResponse(message=DELETED_MESSAGE)
    return MessageResponse(
        message=f"Cannot delete Question with id={question_id}. Maybe Question was not found!"
    )
