"""
Prompt templates for grounded answers and follow-up suggestions.

Template contract (grounded answer):
1. Persona statement
2. Enumerated lesson block: ordinal, id, title, summary, key issue, fix
3. The literal user question
4. Formatting instructions: word target, numbered points, [Lesson <id>] tags,
   closing "Bottom line" line

Composition is deterministic: the same (question, context) always yields the
same string.
"""

from typing import List, Sequence, Tuple

from astroscope.config import FOLLOW_UP_ANSWER_CHARS, FOLLOW_UP_COUNT, FOLLOW_UP_HISTORY
from astroscope.errors import EmptyContextError
from astroscope.lessons.schemas import SanitizedLesson

PERSONA = (
    "You are a helpful NASA mission advisor explaining space engineering to a "
    "general audience. Keep your response brief and accessible."
)

TARGET_WORDS = "150-200"

CITATION_TAG = "[Lesson {lesson_id}]"

LESSON_ENTRY = (
    "LESSON {ordinal} [ID: {lesson_id}]:\n"
    "Title: {title}\n"
    "Summary: {abstract}\n"
    "Key Issue: {root_cause}\n"
    "Fix: {recommendation}\n"
    "---"
)

INSTRUCTIONS = """INSTRUCTIONS:
- Write in simple, everyday language (avoid jargon)
- Be concise - aim for {target_words} words total
- Use standard markdown formatting
- Start with a quick summary mentioning how many cases you analyzed
- List 3-4 key points as a numbered list
- Include lesson references like {example_tag} after each point
- End with 1-2 brief recommendations"""

EXAMPLE_FORMAT = """EXAMPLE FORMAT:

Based on {count} NASA missions, here's what we found:

The main challenges were:

1. **[Brief point]** - [One sentence explanation] [Lesson 1234]
2. **[Brief point]** - [One sentence explanation] [Lesson 5678]
3. **[Brief point]** - [One sentence explanation] [Lesson 9012]

**Bottom line:** [One sentence with 1-2 practical recommendations]"""


class PromptComposer:
    """Assemble the grounding prompt."""

    def compose(self, question: str, context: Sequence[SanitizedLesson]) -> str:
        """
        Build the grounded-answer prompt.

        Raises:
            EmptyContextError: context is empty
        """
        if not context:
            raise EmptyContextError("Cannot compose a grounded prompt without context lessons")

        lesson_block = "\n\n".join(
            LESSON_ENTRY.format(
                ordinal=i,
                lesson_id=lesson.id,
                title=lesson.title,
                abstract=lesson.abstract,
                root_cause=lesson.root_cause,
                recommendation=lesson.recommendation,
            )
            for i, lesson in enumerate(context, start=1)
        )

        instructions = INSTRUCTIONS.format(
            target_words=TARGET_WORDS,
            example_tag=CITATION_TAG.format(lesson_id=context[0].id),
        )

        return (
            f"{PERSONA}\n\n"
            f"AVAILABLE NASA LESSONS:\n\n{lesson_block}\n\n"
            f"USER QUESTION: {question}\n\n"
            f"{instructions}\n\n"
            f"{EXAMPLE_FORMAT.format(count=len(context))}\n\n"
            "Now answer the user's question:"
        )

    def compose_follow_up(self, conversation: Sequence[Tuple[str, str]]) -> str:
        """Prompt asking for follow-up questions over the last few exchanges."""
        recent: List[Tuple[str, str]] = list(conversation)[-FOLLOW_UP_HISTORY:]
        exchanges = "\n\n".join(
            f"Q{i}: {question}\nA{i}: {answer[:FOLLOW_UP_ANSWER_CHARS]}..."
            for i, (question, answer) in enumerate(recent, start=1)
        )
        return (
            "Based on this NASA mission intelligence conversation, suggest "
            f"{FOLLOW_UP_COUNT} insightful follow-up questions a user might ask:\n\n"
            f"{exchanges}\n\n"
            f"Return {FOLLOW_UP_COUNT} questions as a JSON array: "
            '["Question 1?", "Question 2?", "Question 3?"]'
        )
