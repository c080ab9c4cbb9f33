# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Learning store interface and the records it exchanges.

The learning store is the single persistence seam used by the grading,
progress and course services. Two implementations exist:
- InMemoryLearningStore: process-local state for development and tests
- SQLAlchemyLearningStore: PostgreSQL through SQLAlchemy async

The implementation is chosen once at process start (see
create_learning_store) and injected into the services.

Every implementation must raise PersistenceError for backend failures.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

from apexlms.utils.datetime import utc_now


def new_id() -> str:
    """Generate a new record identifier."""
    return str(uuid4())


@dataclass
class OptionRecord:
    """Answer option of a question.

    Attributes:
        id: Option identifier.
        question_id: Owning question identifier.
        text: Option text shown to the learner.
        is_correct: Whether this option is the correct answer.
    """

    id: str
    question_id: str
    text: str
    is_correct: bool


@dataclass
class QuestionRecord:
    """Question with its options.

    Attributes:
        id: Question identifier.
        quiz_id: Owning quiz identifier.
        text: Question text.
        kind: "MCQ" or "TF".
        points: Point value (positive).
        position: Authoring order within the quiz.
        options: Answer options.
    """

    id: str
    quiz_id: str
    text: str
    kind: str = "MCQ"
    points: int = 1
    position: int = 0
    options: list[OptionRecord] = field(default_factory=list)

    @property
    def correct_option_id(self) -> str | None:
        """Identifier of the correct option, if one is recorded."""
        for option in self.options:
            if option.is_correct:
                return option.id
        return None


@dataclass
class QuizRecord:
    """Quiz metadata.

    Attributes:
        id: Quiz identifier.
        title: Quiz title.
        passing_score: Minimum score (0-100) required to pass.
        randomize: Whether each attempt presents a random sample of questions.
        question_count: Sample size used when randomize is set.
    """

    id: str
    title: str
    passing_score: int = 70
    randomize: bool = False
    question_count: int = 10


@dataclass
class AttemptRecord:
    """Question set pinned for one quiz attempt.

    Attributes:
        id: Attempt identifier.
        quiz_id: Quiz being attempted.
        learner_id: Learner taking the quiz.
        question_ids: Questions presented, in presentation order.
        started_at: When the attempt was started.
    """

    id: str
    quiz_id: str
    learner_id: str
    question_ids: list[str]
    started_at: datetime = field(default_factory=utc_now)


@dataclass
class SubmissionRecord:
    """Graded quiz submission, written once.

    Attributes:
        id: Submission identifier.
        learner_id: Learner who submitted.
        quiz_id: Quiz graded.
        score: Score 0-100.
        passed: Whether the score met the passing threshold.
        attempt_id: Attempt graded, if the quiz was started as an attempt.
        submitted_at: When the submission was graded.
    """

    id: str
    learner_id: str
    quiz_id: str
    score: int
    passed: bool
    attempt_id: str | None = None
    submitted_at: datetime = field(default_factory=utc_now)


@dataclass
class LessonRecord:
    """Lesson inside a module.

    Attributes:
        id: Lesson identifier.
        module_id: Owning module identifier.
        title: Lesson title.
        content_type: VIDEO, TEXT, QUIZ or SCORM.
        content_body: Video URL or text body.
        quiz_id: Quiz delivered by a QUIZ lesson.
        order_index: Position within the module.
    """

    id: str
    module_id: str
    title: str
    content_type: str
    content_body: str = ""
    quiz_id: str | None = None
    order_index: int = 0


@dataclass
class ModuleRecord:
    """Module with its lessons ordered by order_index."""

    id: str
    course_id: str
    title: str
    order_index: int = 0
    lessons: list[LessonRecord] = field(default_factory=list)


@dataclass
class CourseRecord:
    """Course metadata."""

    id: str
    title: str
    description: str = ""
    thumbnail_url: str | None = None
    is_published: bool = False


@dataclass
class LearningStats:
    """Counts across the whole store.

    Attributes:
        total_courses: All courses, drafts included.
        published_courses: Courses visible to learners.
        total_learners: Distinct learners with progress or submissions.
        lessons_completed: Progress records.
        total_submissions: Graded quiz submissions.
        passed_submissions: Submissions that met the passing score.
    """

    total_courses: int = 0
    published_courses: int = 0
    total_learners: int = 0
    lessons_completed: int = 0
    total_submissions: int = 0
    passed_submissions: int = 0


class LearningStore(ABC):
    """Abstract persistence interface for the learning core.

    Implementations must raise PersistenceError when the backend is
    unavailable or rejects an operation.
    """

    # ------------------------------------------------------------------
    # Quizzes
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_quiz(self, quiz_id: str) -> QuizRecord | None:
        """Get quiz metadata, or None when the quiz does not exist."""
        ...

    @abstractmethod
    async def get_questions(
        self,
        quiz_id: str,
        question_ids: list[str] | None = None,
    ) -> list[QuestionRecord]:
        """Fetch questions of a quiz with their options in one batch.

        Args:
            quiz_id: Quiz identifier.
            question_ids: Restrict to these questions and return them in this
                order. Identifiers that do not belong to the quiz are skipped.
                When None, the whole bank is returned in authoring order.

        Returns:
            Question records with options populated.
        """
        ...

    @abstractmethod
    async def save_quiz(self, quiz: QuizRecord, questions: list[QuestionRecord]) -> None:
        """Persist a new quiz with its questions and options."""
        ...

    # ------------------------------------------------------------------
    # Attempts and submissions
    # ------------------------------------------------------------------

    @abstractmethod
    async def save_attempt(self, attempt: AttemptRecord) -> None:
        """Persist a pinned quiz attempt."""
        ...

    @abstractmethod
    async def get_attempt(self, attempt_id: str) -> AttemptRecord | None:
        """Get an attempt, or None when it does not exist."""
        ...

    @abstractmethod
    async def save_submission(self, submission: SubmissionRecord) -> None:
        """Persist a graded submission."""
        ...

    @abstractmethod
    async def list_submissions(self, learner_id: str, quiz_id: str) -> list[SubmissionRecord]:
        """List a learner's submissions for a quiz, oldest first."""
        ...

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    @abstractmethod
    async def add_progress(self, learner_id: str, course_id: str, lesson_id: str) -> bool:
        """Record a completed lesson with insert-or-ignore semantics.

        Returns:
            True if a new record was created, False if it already existed.
        """
        ...

    @abstractmethod
    async def list_progress(self, learner_id: str, course_id: str) -> set[str]:
        """Get lesson identifiers completed by a learner in a course."""
        ...

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_course(self, course_id: str) -> CourseRecord | None:
        """Get course metadata, or None when the course does not exist."""
        ...

    @abstractmethod
    async def list_courses(self, published_only: bool = True) -> list[CourseRecord]:
        """List courses ordered by title."""
        ...

    @abstractmethod
    async def get_course_outline(self, course_id: str) -> list[ModuleRecord]:
        """Get modules of a course with their lessons, both ordered."""
        ...

    @abstractmethod
    async def save_course(self, course: CourseRecord, modules: list[ModuleRecord]) -> None:
        """Persist a new course with its modules and lessons."""
        ...

    @abstractmethod
    async def update_course(self, course: CourseRecord) -> bool:
        """Overwrite course metadata. The outline is left unchanged.

        Returns:
            True if the course existed and was updated.
        """
        ...

    @abstractmethod
    async def delete_course(self, course_id: str) -> bool:
        """Delete a course with its outline and lesson progress.

        Returns:
            True if the course existed and was deleted.
        """
        ...

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_stats(self) -> LearningStats:
        """Count courses, learners, completions and submissions."""
        ...

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @abstractmethod
    async def ping(self) -> bool:
        """Check whether the backend is reachable."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        return None
