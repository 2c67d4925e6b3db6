"""
Course review service.

Course ``average_rating`` and ``total_reviews`` are recomputed from the
published reviews after every write; tutor ``total_reviews`` is a running
counter.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from edustack.core.database.entities.courses import Course
from edustack.core.database.entities.reviews import Review, ReviewLike
from edustack.core.database.entities.users import User
from edustack.core.database.repositories.courses import CourseRepository
from edustack.core.database.repositories.enrollments import EnrollmentRepository
from edustack.core.database.repositories.reviews import ReviewLikeRepository, ReviewRepository
from edustack.core.database.repositories.users import TutorRepository
from edustack.core.errors import BadRequestError, ForbiddenError, NotFoundError
from edustack.core.logging_config import get_logger
from edustack.core.models.domain.enums import EnrollmentStatus, ReviewSortField, SortOrder
from edustack.core.models.io.common import Pagination
from edustack.core.models.io.reviews import ReviewCreate, ReviewListData, ReviewRead, ReviewStatistics, ReviewUpdate

logger = get_logger(__name__)

REVIEW_NOT_FOUND = "Review not found"


class ReviewService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.reviews = ReviewRepository(session)
        self.likes = ReviewLikeRepository(session)
        self.courses = CourseRepository(session)
        self.tutors = TutorRepository(session)

    async def _refresh_course_rating(self, course: Course) -> None:
        summary = await self.reviews.rating_summary([course.id])
        await self.courses.update(
            course, {"average_rating": summary["averageRating"], "total_reviews": summary["totalReviews"]}
        )

    async def _read(self, review: Review) -> ReviewRead:
        loaded = await self.reviews.get_with_student(review.id)
        likes = await self.likes.counts([review.id])
        return ReviewRead.model_validate(loaded).model_copy(update={"likes": likes.get(review.id, 0)})

    async def list_for_course(
        self, course_id: str, sort_by: ReviewSortField, sort_order: SortOrder, page: int, limit: int
    ) -> ReviewListData:
        """Published reviews of a course with rating statistics."""
        result = await self.reviews.list_published_for_course(
            course_id, sort_by, sort_order == SortOrder.desc, page, limit
        )
        likes = await self.likes.counts([review.id for review in result.items])
        summary = await self.reviews.rating_summary([course_id])
        return ReviewListData(
            reviews=[
                ReviewRead.model_validate(review).model_copy(update={"likes": likes.get(review.id, 0)})
                for review in result.items
            ],
            statistics=ReviewStatistics(
                total_reviews=summary["totalReviews"],
                average_rating=summary["averageRating"],
                rating_distribution=await self.reviews.rating_distribution(course_id),
            ),
            pagination=Pagination.from_page(result),
        )

    async def create_review(self, user: User, course_id: str, payload: ReviewCreate) -> ReviewRead:
        course = await self.courses.get_by_id(course_id)
        if course is None:
            raise NotFoundError("Course not found")
        enrollment = await EnrollmentRepository(self.session).get_for(user.id, course.id)
        if enrollment is None:
            raise ForbiddenError("You must be enrolled in this course to leave a review")
        if await self.reviews.get_for(user.id, course.id) is not None:
            raise BadRequestError("You have already reviewed this course")

        review = await self.reviews.create(
            Review(
                student_id=user.id,
                course_id=course.id,
                rating=payload.rating,
                title=payload.title,
                content=payload.content,
                is_published=True,
                is_verified=enrollment.status == EnrollmentStatus.COMPLETED,
            )
        )
        await self._refresh_course_rating(course)
        await self.tutors.increment(course.tutor_id, total_reviews=1)
        await self.session.commit()
        logger.info(f"User {user.id} reviewed course {course.id} ({payload.rating} stars)")
        return await self._read(review)

    async def update_review(self, user: User, course_id: str, payload: ReviewUpdate) -> ReviewRead:
        review = await self.reviews.get_for(user.id, course_id)
        if review is None:
            raise NotFoundError(REVIEW_NOT_FOUND)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("rating") is None:
            changes.pop("rating", None)
        await self.reviews.update(review, changes)
        if "rating" in changes:
            course = await self.courses.get_by_id(course_id)
            await self._refresh_course_rating(course)
        await self.session.commit()
        return await self._read(review)

    async def delete_review(self, user: User, course_id: str) -> None:
        review = await self.reviews.get_for(user.id, course_id)
        if review is None:
            raise NotFoundError(REVIEW_NOT_FOUND)
        await self.likes.delete_for_review(review.id)
        await self.reviews.delete(review)
        course = await self.courses.get_by_id(course_id)
        await self._refresh_course_rating(course)
        await self.tutors.increment(course.tutor_id, total_reviews=-1)
        await self.session.commit()
        logger.info(f"User {user.id} deleted review of course {course_id}")

    async def toggle_like(self, user: User, review_id: str) -> bool:
        """Like the review, or remove an existing like. Returns the new state."""
        if await self.reviews.get_by_id(review_id) is None:
            raise NotFoundError(REVIEW_NOT_FOUND)
        existing = await self.likes.get_for(user.id, review_id)
        if existing is not None:
            await self.likes.delete(existing)
            liked = False
        else:
            await self.likes.create(ReviewLike(user_id=user.id, review_id=review_id))
            liked = True
        await self.session.commit()
        return liked
