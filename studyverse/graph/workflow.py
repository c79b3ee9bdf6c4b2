"""LangGraph workflow definition for quiz generation."""

from typing import Callable, Literal

from langgraph.graph import END, StateGraph

from studyverse.agents.quiz_writer import make_generate_node, make_record_node, validate_quiz
from studyverse.graph.state import QuizGenerationState


def should_validate(state: QuizGenerationState) -> Literal["validate", "end"]:
    """
    Stop when the collaborator call failed, otherwise check the result.

    Args:
        state: Current workflow state

    Returns:
        "end" if generation produced errors, "validate" otherwise
    """
    if state.get("errors"):
        return "end"
    return "validate"


def should_record(state: QuizGenerationState) -> Literal["record", "end"]:
    """Record only a quiz whose every question passed validation."""
    if state.get("validation_issues"):
        return "end"
    return "record"


def create_quiz_workflow(client, record: Callable) -> StateGraph:
    """
    Create the LangGraph workflow for one quiz generation.

    The workflow follows this structure:
    1. Generate - batch call to the quiz collaborator
    2. [Conditional] End on collaborator failure
    3. Validate - every answer index must point at an option
    4. [Conditional] End on malformed result
    5. Record - append to history, then deduct a credit

    Args:
        client: Batch quiz collaborator
        record: Commit callback used by the record node

    Returns:
        StateGraph ready to compile
    """
    workflow = StateGraph(QuizGenerationState)

    workflow.add_node("generate", make_generate_node(client))
    workflow.add_node("validate", validate_quiz)
    workflow.add_node("record", make_record_node(record))

    workflow.set_entry_point("generate")

    workflow.add_conditional_edges(
        "generate",
        should_validate,
        {
            "validate": "validate",
            "end": END,
        },
    )
    workflow.add_conditional_edges(
        "validate",
        should_record,
        {
            "record": "record",
            "end": END,
        },
    )
    workflow.add_edge("record", END)

    return workflow


def compile_workflow(client, record: Callable):
    """
    Compile the workflow and return it ready for execution.

    Returns:
        Compiled workflow
    """
    return create_quiz_workflow(client, record).compile()
