"""Content generation orchestrator - streamed summaries and essay outlines."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Protocol

from studyverse.errors import GenerationFailed, StudyVerseError
from studyverse.models.study import ArtifactKind, StudyRequest
from studyverse.session.context import SessionContext

logger = logging.getLogger(__name__)

STREAMED_KINDS = (ArtifactKind.SUMMARY, ArtifactKind.ESSAY)


class StreamingClient(Protocol):
    def stream(self, request: StudyRequest, kind: ArtifactKind) -> Iterable[str]: ...


def accumulate_deltas(deltas: Iterable[str]) -> Iterator[str]:
    """
    Fold text deltas into a growing document.

    Yields the whole document after every non-empty delta, concatenated
    strictly in arrival order.
    """
    document = ""
    for delta in deltas:
        if not delta:
            continue
        document += delta
        yield document


class ContentGenerationOrchestrator:
    """
    Drives one streamed generation from request to stored artifact.

    ``generate`` checks quota and request before touching the collaborator,
    then returns a lazy iterator of the growing document. Only when the
    stream ends cleanly is the artifact appended to history and a credit
    deducted. A failed or abandoned stream leaves no trace.
    """

    def __init__(self, client: StreamingClient | None = None):
        if client is None:
            from studyverse.agents.content_writer import BedrockContentClient

            client = BedrockContentClient()
        self.client = client

    def generate(
        self, session: SessionContext, request: StudyRequest, kind: ArtifactKind
    ) -> Iterator[str]:
        """
        Start a streamed generation.

        Args:
            session: Active session context
            request: Study request
            kind: ArtifactKind.SUMMARY or ArtifactKind.ESSAY

        Returns:
            Iterator over successive versions of the growing document

        Raises:
            QuotaExceeded, InvalidRequest, GenerationInProgress: immediately
            GenerationFailed: while iterating, if the stream breaks
        """
        kind = ArtifactKind(kind)
        if kind not in STREAMED_KINDS:
            raise ValueError(f"{kind.value} cannot be streamed")

        session.check_can_generate(request)
        return self._run(session, request, kind)

    def _run(
        self, session: SessionContext, request: StudyRequest, kind: ArtifactKind
    ) -> Iterator[str]:
        with session.generation_slot():
            document = ""
            try:
                for document in accumulate_deltas(self.client.stream(request, kind)):
                    yield document
            except StudyVerseError:
                raise
            except Exception as e:
                logger.exception("%s stream failed for %s", kind.value, request.chapter_name)
                raise GenerationFailed() from e

            if not document:
                logger.warning("%s stream for %s ended empty", kind.value, request.chapter_name)
                raise GenerationFailed("The model returned no content.")

            session.record_artifact(kind, request, document)


def generate_to_completion(
    orchestrator: ContentGenerationOrchestrator,
    session: SessionContext,
    request: StudyRequest,
    kind: ArtifactKind,
) -> str:
    """Drain a generation and return the final document."""
    document = ""
    for document in orchestrator.generate(session, request, kind):
        pass
    return document
