"""Generation agents backed by AWS Bedrock."""

from .content_writer import BedrockContentClient, build_content_messages
from .quiz_writer import BedrockQuizClient, build_quiz_messages, find_invalid_questions

__all__ = [
    "BedrockContentClient",
    "BedrockQuizClient",
    "build_content_messages",
    "build_quiz_messages",
    "find_invalid_questions",
]
