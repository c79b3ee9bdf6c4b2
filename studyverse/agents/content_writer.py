"""Content Writer Agent - Streams chapter summaries and essay outlines."""

from typing import Any, Iterator

from langchain_aws import ChatBedrock
from langchain_core.messages import HumanMessage, SystemMessage

from studyverse.config.settings import get_settings
from studyverse.models.study import ArtifactKind, StudyRequest

SUMMARY_SYSTEM_PROMPT = """You are an expert teacher who writes clear, exam-focused study notes.

Requirements:
- Cover every key concept, definition, date and person in the chapter
- Use markdown headings for sections and bullet points for facts
- Keep the language at the level of the stated class/grade
- Follow the curriculum of the stated education board when one is given
- End with a short "Key Takeaways" list"""

ESSAY_SYSTEM_PROMPT = """You are an expert writing tutor. Create a structured essay outline a student can write from.

Requirements:
- Propose a clear thesis statement
- Introduction, 3-5 body sections and a conclusion, each as a markdown heading
- Under each section list the main argument and supporting points from the chapter
- Suggest quotes, dates or examples the student should mention
- Keep the language at the level of the stated class/grade"""

_SYSTEM_PROMPTS = {
    ArtifactKind.SUMMARY: SUMMARY_SYSTEM_PROMPT,
    ArtifactKind.ESSAY: ESSAY_SYSTEM_PROMPT,
}


def describe_request(request: StudyRequest) -> str:
    """Render the study request fields shared by every prompt."""
    lines = [
        f"Subject: {request.subject}",
        f"Class / Grade: {request.grade_class}",
        f"Chapter: {request.chapter_name}",
    ]
    if request.board:
        lines.append(f"Education board: {request.board}")
    if request.author:
        lines.append(f"Textbook author / publisher: {request.author}")
    lines.append(f"Write the answer in: {request.language or 'English'}")
    return "\n".join(lines)


def build_content_messages(request: StudyRequest, kind: ArtifactKind) -> list:
    """
    Build the chat messages for a summary or essay outline.

    Args:
        request: What the learner asked for
        kind: ArtifactKind.SUMMARY or ArtifactKind.ESSAY

    Returns:
        System and human messages for the chat model
    """
    kind = ArtifactKind(kind)
    if kind not in _SYSTEM_PROMPTS:
        raise ValueError(f"{kind.value} is not a streamed text artifact")

    task = (
        "Write a comprehensive chapter summary."
        if kind is ArtifactKind.SUMMARY
        else "Write a detailed essay outline for this chapter."
    )
    user_prompt = f"""{task}

{describe_request(request)}"""

    return [
        SystemMessage(content=_SYSTEM_PROMPTS[kind]),
        HumanMessage(content=user_prompt),
    ]


def chunk_text(chunk: Any) -> str:
    """Extract the text carried by one streamed message chunk."""
    content = getattr(chunk, "content", chunk)
    if isinstance(content, str):
        return content
    # Some Bedrock models stream a list of typed content blocks
    if isinstance(content, list):
        return "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )
    return ""


class BedrockContentClient:
    """Streaming generation collaborator backed by AWS Bedrock."""

    def __init__(self, model_name: str | None = None):
        self.settings = get_settings()
        self.model_name = model_name or self.settings.model_name

    def _llm(self, kind: ArtifactKind) -> ChatBedrock:
        temperature = (
            self.settings.summary_temperature
            if kind is ArtifactKind.SUMMARY
            else self.settings.essay_temperature
        )
        return ChatBedrock(model=self.model_name, temperature=temperature)

    def stream(self, request: StudyRequest, kind: ArtifactKind) -> Iterator[str]:
        """Yield text deltas in arrival order."""
        messages = build_content_messages(request, kind)
        for chunk in self._llm(ArtifactKind(kind)).stream(messages):
            text = chunk_text(chunk)
            if text:
                yield text
