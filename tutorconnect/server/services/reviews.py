"""
Review presentation helpers.
"""

from __future__ import annotations

from typing import List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from tutorconnect.core.database.entities.reviews import SessionReview
from tutorconnect.core.models.io.reviews import ReviewRead

from .accounts import load_user_summaries


async def present_reviews(session: AsyncSession, reviews: Sequence[SessionReview]) -> List[ReviewRead]:
    """Reviews with reviewer summaries; anonymous reviews hide who wrote them."""
    reviewers = await load_user_summaries(session, [r.reviewer_id for r in reviews if not r.is_anonymous])
    presented = []
    for review in reviews:
        item = ReviewRead.model_validate(review)
        if review.is_anonymous:
            item.reviewer_id = None
        else:
            item.reviewer = reviewers.get(review.reviewer_id)
        presented.append(item)
    return presented
