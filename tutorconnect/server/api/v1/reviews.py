"""
Session Review API Endpoints.

Participants of a finished session review each other once. Reviews written by
students feed the tutor's public rating, which is recomputed whenever such a
review is created, changed or removed.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from tutorconnect.core.database.base import utc_now
from tutorconnect.core.database.entities.reviews import ReviewerType, SessionReview
from tutorconnect.core.database.entities.tutoring_sessions import SessionStatus, TutoringSession
from tutorconnect.core.database.repositories import ReviewRepository, TutoringSessionRepository
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.models.io.common import MessageResponse, Pagination
from tutorconnect.core.models.io.reviews import (
    ReviewCreate,
    ReviewList,
    ReviewRead,
    ReviewUpdate,
    SessionReviewList,
    TutorReviewList,
)
from tutorconnect.server.services.deps import CurrentUser, SessionDep, ensure_owner_or_admin, is_admin
from tutorconnect.server.services.reviews import present_reviews

logger = get_logger(__name__)
router = APIRouter()


def _is_finished(booking: TutoringSession) -> bool:
    return booking.status == SessionStatus.COMPLETED.value or utc_now() > booking.scheduled_end


async def _get_owned_review(session: SessionDep, review_id: str, user: CurrentUser) -> SessionReview:
    review = await ReviewRepository(session).get_by_id(review_id)
    if review is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
    ensure_owner_or_admin(user, review.reviewer_id)
    return review


async def _refresh_rating_if_needed(repo: ReviewRepository, review: SessionReview) -> None:
    if review.reviewer_type == ReviewerType.STUDENT.value:
        profile = await repo.refresh_tutor_rating(review.reviewee_id)
        if profile is not None:
            logger.debug(f"Tutor {review.reviewee_id} rating is now {profile.rating} over {profile.total_reviews}")


@router.get(
    "/session/{session_id}",
    response_model=SessionReviewList,
    summary="List Session Reviews",
    description="Reviews written for a session. Participants and administrators only.",
    responses={404: {"description": "Session not found"}},
)
async def list_session_reviews(session_id: str, user: CurrentUser, session: SessionDep) -> SessionReviewList:
    booking = await TutoringSessionRepository(session).get_by_id(session_id)
    if booking is None or not (booking.is_participant(user.id) or is_admin(user)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    reviews = await ReviewRepository(session).for_session(session_id)
    return SessionReviewList(reviews=await present_reviews(session, reviews))


@router.get(
    "/tutor/{tutor_id}",
    response_model=TutorReviewList,
    summary="List Tutor Reviews",
    description="Public list of reviews students wrote about a tutor, newest first, with the average rating.",
)
async def list_tutor_reviews(
    tutor_id: str,
    session: SessionDep,
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> TutorReviewList:
    repo = ReviewRepository(session)
    reviews, total = await repo.about_tutor(tutor_id, limit=limit, offset=offset)
    average, _ = await repo.tutor_rating(tutor_id)
    return TutorReviewList(
        reviews=await present_reviews(session, reviews),
        average_rating=average,
        pagination=Pagination.build(total, limit, offset),
    )


@router.get(
    "/student/{student_id}",
    response_model=ReviewList,
    summary="List Reviews By Student",
    description="Reviews written by a student. The student themself or an administrator only.",
)
async def list_student_reviews(
    student_id: str,
    user: CurrentUser,
    session: SessionDep,
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> ReviewList:
    ensure_owner_or_admin(user, student_id)
    reviews, total = await ReviewRepository(session).by_reviewer(student_id, limit=limit, offset=offset)
    return ReviewList(reviews=await present_reviews(session, reviews), pagination=Pagination.build(total, limit, offset))


@router.post(
    "",
    response_model=ReviewRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Review",
    description="Review the other participant of a finished session. One review per participant and session.",
    responses={
        400: {"description": "Session cancelled, not finished yet, or wrong reviewee"},
        404: {"description": "Session not found"},
        409: {"description": "Session already reviewed"},
    },
)
async def create_review(data: ReviewCreate, user: CurrentUser, session: SessionDep) -> ReviewRead:
    booking = await TutoringSessionRepository(session).get_by_id(data.session_id)
    if booking is None or not booking.is_participant(user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    if booking.status == SessionStatus.CANCELLED.value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot review a cancelled session")
    if not _is_finished(booking):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Session has not finished yet")

    is_student = user.id == booking.student_id
    other_id = booking.tutor_id if is_student else booking.student_id
    if data.reviewee_id != other_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Reviewee must be the other participant of the session"
        )

    repo = ReviewRepository(session)
    if await repo.get_by_reviewer(booking.id, user.id) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="You have already reviewed this session")

    review = await repo.create(
        SessionReview(
            session_id=booking.id,
            reviewer_id=user.id,
            reviewee_id=other_id,
            reviewer_type=(ReviewerType.STUDENT if is_student else ReviewerType.TUTOR).value,
            rating=data.rating,
            comment=data.comment,
            is_anonymous=data.is_anonymous,
        )
    )
    await _refresh_rating_if_needed(repo, review)
    logger.info(f"Review {review.id} created by {user.id} for session {booking.id}")
    return (await present_reviews(session, [review]))[0]


@router.put(
    "/{review_id}",
    response_model=ReviewRead,
    summary="Update Review",
    description="Change the rating or comment of a review. Its author or an administrator only.",
    responses={400: {"description": "No valid fields to update"}, 404: {"description": "Review not found"}},
)
async def update_review(review_id: str, data: ReviewUpdate, user: CurrentUser, session: SessionDep) -> ReviewRead:
    review = await _get_owned_review(session, review_id, user)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")
    for field, value in changes.items():
        setattr(review, field, value)

    repo = ReviewRepository(session)
    review = await repo.update(review)
    await _refresh_rating_if_needed(repo, review)
    return (await present_reviews(session, [review]))[0]


@router.delete(
    "/{review_id}",
    response_model=MessageResponse,
    summary="Delete Review",
    description="Delete a review. Its author or an administrator only.",
    responses={404: {"description": "Review not found"}},
)
async def delete_review(review_id: str, user: CurrentUser, session: SessionDep) -> MessageResponse:
    review = await _get_owned_review(session, review_id, user)
    repo = ReviewRepository(session)
    await repo.delete(review.id)
    await _refresh_rating_if_needed(repo, review)
    logger.info(f"Review {review_id} deleted by {user.id}")
    return MessageResponse(message="Review deleted successfully")
