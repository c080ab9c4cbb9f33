# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Demo seed data.

This module provides sample content for development and demos:
- Quizzes: the "Mastering React & JavaScript Quiz" question bank
- Courses: video courses, one ending with the sample quiz

Seeding works on any learning store and skips content that already exists.
Identifiers are fixed so seeded content can be referenced directly.
"""

import asyncio
import logging

from apexlms.infrastructure.storage import (
    CourseRecord,
    LearningStore,
    LessonRecord,
    ModuleRecord,
    OptionRecord,
    QuestionRecord,
    QuizRecord,
)

logger = logging.getLogger(__name__)

SAMPLE_QUIZ_ID = "quiz-1"

# (text, kind, [(option text, is_correct), ...])
SAMPLE_QUESTIONS: list[tuple[str, str, list[tuple[str, bool]]]] = [
    ("What is the latest version of React as of 2024?", "MCQ",
     [("React 17", False), ("React 18", False), ("React 19", True)]),
    ("React Server Components can only run on the client.", "TF",
     [("True", False), ("False", True)]),
    ("Which hook is used for side effects in React?", "MCQ",
     [("useState", False), ("useEffect", True), ("useContext", False)]),
    ("What does JSX stand for?", "MCQ",
     [("JavaScript XML", True), ("Java Syntax Extension", False), ("JSON XML", False)]),
    ("Virtual DOM is faster than direct DOM manipulation in all cases.", "TF",
     [("True", False), ("False", True)]),
    ("Which keyword is used to define a constant in JS?", "MCQ",
     [("var", False), ("let", False), ("const", True)]),
    ("What is the purpose of useMemo?", "MCQ",
     [("Memoize values", True), ("Memoize components", False), ("Trigger effects", False)]),
    ("React is a framework, not a library.", "TF",
     [("True", False), ("False", True)]),
    ("What is the default port for a Vite dev server?", "MCQ",
     [("3000", False), ("5173", True), ("8080", False)]),
    ("How do you pass data to a child component?", "MCQ",
     [("State", False), ("Props", True), ("Context", False)]),
    ("What is the spread operator in JS?", "MCQ",
     [("...", True), ("&&", False), ("||", False)]),
    ('Arrow functions have their own "this" context.', "TF",
     [("True", False), ("False", True)]),
    ("Which method is used to add an element to the end of an array?", "MCQ",
     [("push", True), ("pop", False), ("shift", False)]),
    ("What is the result of typeof null?", "MCQ",
     [('"null"', False), ('"object"', True), ('"undefined"', False)]),
    ("Promises can have three states: pending, fulfilled, and rejected.", "TF",
     [("True", True), ("False", False)]),
    ('What is a "closure" in JavaScript?', "MCQ",
     [("A way to close a browser tab", False),
      ("A function with access to its outer scope", True),
      ("A private class method", False)]),
    ("Which React hook is used to access the DOM directly?", "MCQ",
     [("useRef", True), ("useMemo", False), ("useCallback", False)]),
    ("JavaScript is single-threaded.", "TF",
     [("True", True), ("False", False)]),
    ('What is the purpose of the "key" prop in lists?', "MCQ",
     [("Styling", False), ("Performance/Identity", True), ("Data binding", False)]),
    ("Strict Mode in React helps find potential problems.", "TF",
     [("True", True), ("False", False)]),
    ("Which operator is used for strict equality?", "MCQ",
     [("==", False), ("===", True), ("!=", False)]),
]

# (id, title, description, video urls, ends with the sample quiz)
SAMPLE_COURSES: list[tuple[str, str, str, list[str], bool]] = [
    ("fs-dev", "Full Stack Development", "Comprehensive guide to full stack development.", [
        "https://www.youtube.com/watch?v=nu_pCVPKzTk",
        "https://www.youtube.com/watch?v=7CqJlxBYj-M",
        "https://www.youtube.com/watch?v=9Jk1qkK2Ggk",
        "https://www.youtube.com/watch?v=8KaJRw-rfn8",
    ], False),
    ("devops", "DevOps Engineering", "Master DevOps tools and practices.", [
        "https://www.youtube.com/watch?v=0yWAtQ6wYNM",
        "https://www.youtube.com/watch?v=j5Zsa_eOXeY",
        "https://www.youtube.com/watch?v=9pZ2xmsSDdo",
        "https://www.youtube.com/watch?v=1ER2qz3cZzE",
    ], False),
    ("python", "Python Programming", "Master Python from basics to advanced.", [
        "https://www.youtube.com/watch?v=_uQrJ0TkZlc",
        "https://www.youtube.com/watch?v=rfscVS0vtbw",
        "https://www.youtube.com/watch?v=kqtD5dpn9C8",
        "https://www.youtube.com/watch?v=YYXdXT2l-Gg",
    ], False),
    ("frontend", "Frontend Development", "Master HTML, CSS, and JavaScript.", [
        "https://www.youtube.com/watch?v=G3e-cpL7ofc",
        "https://www.youtube.com/watch?v=UB1O30fR-EE",
        "https://www.youtube.com/watch?v=PkZNo7MFNFg",
        "https://www.youtube.com/watch?v=W6NZfCO5SIk",
    ], True),
]


async def seed_sample_quiz(store: LearningStore) -> bool:
    """Seed the sample quiz.

    Args:
        store: Learning store.

    Returns:
        True if the quiz was created, False if it already existed.
    """
    if await store.get_quiz(SAMPLE_QUIZ_ID) is not None:
        return False

    quiz = QuizRecord(
        id=SAMPLE_QUIZ_ID,
        title="Mastering React & JavaScript Quiz",
        passing_score=70,
        randomize=True,
        question_count=20,
    )

    questions = []
    for position, (text, kind, options) in enumerate(SAMPLE_QUESTIONS, start=1):
        question_id = f"{SAMPLE_QUIZ_ID}-q{position}"
        questions.append(
            QuestionRecord(
                id=question_id,
                quiz_id=SAMPLE_QUIZ_ID,
                text=text,
                kind=kind,
                points=1,
                position=position,
                options=[
                    OptionRecord(
                        id=f"{question_id}-o{index}",
                        question_id=question_id,
                        text=option_text,
                        is_correct=is_correct,
                    )
                    for index, (option_text, is_correct) in enumerate(options, start=1)
                ],
            )
        )

    await store.save_quiz(quiz, questions)
    logger.info("Seeded quiz %s with %d questions", SAMPLE_QUIZ_ID, len(questions))
    return True


async def seed_sample_courses(store: LearningStore) -> list[str]:
    """Seed the sample courses that do not exist yet.

    Args:
        store: Learning store. The sample quiz must already exist.

    Returns:
        Identifiers of the created courses.
    """
    created = []
    for course_id, title, description, videos, with_quiz in SAMPLE_COURSES:
        if await store.get_course(course_id) is not None:
            continue

        module_id = f"mod-{course_id}"
        lessons = [
            LessonRecord(
                id=f"lesson-{course_id}-{index}",
                module_id=module_id,
                title=f"Lesson {index + 1}",
                content_type="VIDEO",
                content_body=url,
                order_index=index,
            )
            for index, url in enumerate(videos)
        ]
        if with_quiz:
            lessons.append(
                LessonRecord(
                    id=f"lesson-{course_id}-quiz",
                    module_id=module_id,
                    title="Final Quiz",
                    content_type="QUIZ",
                    quiz_id=SAMPLE_QUIZ_ID,
                    order_index=len(videos),
                )
            )

        course = CourseRecord(
            id=course_id,
            title=title,
            description=description,
            thumbnail_url=f"https://picsum.photos/seed/{course_id}/800/450",
            is_published=True,
        )
        module = ModuleRecord(
            id=module_id,
            course_id=course_id,
            title="Course Content",
            order_index=0,
            lessons=lessons,
        )
        await store.save_course(course, [module])
        created.append(course_id)

    logger.info("Seeded %d courses", len(created))
    return created


async def seed_demo_content(store: LearningStore) -> dict:
    """Seed the sample quiz and courses.

    Args:
        store: Learning store.

    Returns:
        Dictionary with seeded entities.
    """
    logger.info("Seeding demo content...")

    quiz_created = await seed_sample_quiz(store)
    courses = await seed_sample_courses(store)

    logger.info("Demo content seeding complete")

    return {
        "quizzes": [SAMPLE_QUIZ_ID] if quiz_created else [],
        "courses": courses,
    }


if __name__ == "__main__":
    from apexlms.core.config import get_settings
    from apexlms.infrastructure.database.connection import close_database, init_database
    from apexlms.infrastructure.storage import SQLAlchemyLearningStore

    async def main():
        await init_database(get_settings())
        try:
            await seed_demo_content(SQLAlchemyLearningStore())
        finally:
            await close_database()

    asyncio.run(main())
