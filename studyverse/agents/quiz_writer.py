"""Quiz Writer Agent - Generates and checks multiple choice questions."""

import logging
from typing import Any, Callable

from langchain_aws import ChatBedrock
from langchain_core.messages import HumanMessage, SystemMessage

from studyverse.agents.content_writer import describe_request
from studyverse.config.settings import get_settings
from studyverse.graph.state import QuizGenerationState
from studyverse.models.study import QuizQuestion, QuizQuestionList, StudyRequest

logger = logging.getLogger(__name__)

QUIZ_SYSTEM_PROMPT = """You are an expert examiner. Create high-quality multiple-choice questions from a school chapter.

Requirements:
- Each question must have exactly 4 options
- Only ONE option should be correct; give its zero-based position as correct_answer_index
- Incorrect options (distractors) should be plausible but clearly wrong
- Questions should be clear, unambiguous and answerable from the chapter
- Add a one or two sentence explanation of the correct answer

Difficulty levels:
- Easy: recall of facts and definitions
- Medium: understanding and simple application
- Hard: analysis, comparison and multi-step reasoning"""


def build_quiz_messages(request: StudyRequest, question_count: int, difficulty: str) -> list:
    """
    Build the chat messages for a quiz.

    Args:
        request: What the learner asked for
        question_count: Number of questions to generate
        difficulty: Difficulty label

    Returns:
        System and human messages for the chat model
    """
    user_prompt = f"""Generate {question_count} multiple-choice questions for this chapter.

{describe_request(request)}
Difficulty level: {difficulty}

Generate exactly {question_count} questions."""

    return [
        SystemMessage(content=QUIZ_SYSTEM_PROMPT),
        HumanMessage(content=user_prompt),
    ]


class BedrockQuizClient:
    """Batch generation collaborator backed by AWS Bedrock structured output."""

    def __init__(self, model_name: str | None = None):
        self.settings = get_settings()
        self.model_name = model_name or self.settings.model_name

    def generate(self, request: StudyRequest) -> list[QuizQuestion]:
        question_count = request.question_count or self.settings.default_question_count
        difficulty = (
            request.difficulty.value if request.difficulty else self.settings.default_difficulty
        )

        llm = ChatBedrock(
            model=self.model_name,
            temperature=self.settings.quiz_temperature,
        )
        # Use structured output to automatically generate and validate the schema
        llm_with_structure = llm.with_structured_output(QuizQuestionList)

        result = llm_with_structure.invoke(
            build_quiz_messages(request, question_count, difficulty)
        )
        return list(result.questions)


def find_invalid_questions(questions: list[QuizQuestion]) -> list[int]:
    """Positions of questions whose answer index does not point at an option."""
    return [i for i, question in enumerate(questions) if not question.has_valid_answer]


# Workflow nodes


def make_generate_node(client) -> Callable[[QuizGenerationState], dict[str, Any]]:
    """
    Build the node that calls the batch quiz collaborator.

    Args:
        client: Object with ``generate(request) -> list[QuizQuestion]``

    Returns:
        Node function for the quiz workflow
    """

    def generate_quiz(state: QuizGenerationState) -> dict[str, Any]:
        request = state["request"]
        try:
            questions = client.generate(request)
        except Exception as e:
            logger.exception("Quiz generation failed for %s", request.chapter_name)
            return {"questions": [], "errors": state.get("errors", []) + [str(e)]}

        if not questions:
            return {"questions": [], "errors": state.get("errors", []) + ["No questions returned"]}
        return {"questions": list(questions)}

    return generate_quiz


def validate_quiz(state: QuizGenerationState) -> dict[str, Any]:
    """Check every generated question has an answer index inside its options."""
    questions = state.get("questions", [])
    issues = [
        {
            "question_index": i,
            "issue": (
                f"correct_answer_index {questions[i].correct_answer_index} "
                f"outside {len(questions[i].options)} options"
            ),
        }
        for i in find_invalid_questions(questions)
    ]
    if issues:
        logger.warning("Quiz result rejected: %d malformed question(s)", len(issues))
    return {"validation_issues": issues}


def make_record_node(record: Callable) -> Callable[[QuizGenerationState], dict[str, Any]]:
    """
    Build the node that commits a validated quiz.

    Args:
        record: ``record(questions) -> HistoryItem`` appending history then deducting

    Returns:
        Node function for the quiz workflow
    """

    def record_quiz(state: QuizGenerationState) -> dict[str, Any]:
        item = record(state["questions"])
        return {"history_item": item}

    return record_quiz
