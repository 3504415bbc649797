"""
QuestionService - Pure Python question answering service.

Orchestrates one question end to end without any web framework dependencies:
normalize, cache lookup, per-dataset profiling/classification/aggregation,
prompt construction, text generation with the session history, then
bookkeeping (session transcript and answer cache).
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

import structlog

from data_chat.core.aggregation import execute
from data_chat.core.answer_prompt import DatasetAnalysis, build_answer_prompt
from data_chat.core.conversation_manager import ConversationManager
from data_chat.core.query_intent import classify_intent
from data_chat.core.result_cache import CachedResponse, ResponseCache, make_run_key
from data_chat.core.state_store import InMemorySessionStore, SessionStore
from data_chat.datasets.registry import DatasetRegistry, LoadedDataset

logger = structlog.get_logger()


class EmptyQuestionError(ValueError):
    """The question is blank after normalization."""


class UnknownDatasetError(KeyError):
    """One or more requested dataset ids are not configured."""

    def __init__(self, dataset_ids: list[str]) -> None:
        super().__init__(f"Unknown dataset(s): {dataset_ids}")
        self.dataset_ids = dataset_ids


class AnswerGenerationError(RuntimeError):
    """The text-generation step produced no answer."""


class AnswerGenerator(Protocol):
    """Anything that can turn a prompt plus chat history into text (e.g. GeminiClient)."""

    def generate(
        self,
        prompt: str,
        history: Sequence[dict[str, Any]] | None = None,
        files: Sequence[Any] | None = None,
    ) -> str | None: ...


@dataclass
class AnswerResult:
    """Result of answering one question."""

    answer: str
    session_id: str
    cached: bool
    analyses: list[dict[str, Any]] = field(default_factory=list)  # DatasetAnalysis.to_dict() per dataset


class QuestionService:
    """
    Question answering service.

    Args:
        registry: DatasetRegistry with the fixed dataset catalogue
        generator: Text generator (GeminiClient in production)
        response_cache: Answer cache (default: unbounded, process lifetime)
        session_store: Session persistence (default: in-memory)
        sample_row_count: Rows sent with pass-through questions
        attach_source_files: Upload the source CSVs and attach them to pass-through prompts
    """

    def __init__(
        self,
        registry: DatasetRegistry,
        generator: AnswerGenerator,
        response_cache: ResponseCache | None = None,
        session_store: SessionStore | None = None,
        sample_row_count: int = 20,
        attach_source_files: bool = False,
    ) -> None:
        self.registry = registry
        self.generator = generator
        self.response_cache = response_cache if response_cache is not None else ResponseCache(max_size=None)
        self.session_store = session_store if session_store is not None else InMemorySessionStore()
        self.sample_row_count = sample_row_count
        self.attach_source_files = attach_source_files
        self._normalizer = ConversationManager()

    def ask(
        self,
        question: str,
        session_id: str | None = None,
        dataset_ids: Sequence[str] | None = None,
    ) -> AnswerResult:
        """
        Answer a question about one or more datasets.

        Args:
            question: Natural language question
            session_id: Existing session id (a new session is created when None or unknown)
            dataset_ids: Datasets to answer against (default: all configured datasets)

        Returns:
            AnswerResult with the answer text and per-dataset analysis summaries

        Raises:
            EmptyQuestionError: If the question is empty
            UnknownDatasetError: If a dataset id is not configured
            AnswerGenerationError: If the generator returns no answer
        """
        normalized = self._normalizer.normalize_query(question)
        if not normalized:
            raise EmptyQuestionError("Question cannot be empty")

        selected = list(dataset_ids) if dataset_ids else self.registry.dataset_ids()
        unknown = [d for d in selected if d not in self.registry.dataset_ids()]
        if unknown:
            raise UnknownDatasetError(unknown)

        state = self.session_store.get_or_create(session_id)
        run_key = make_run_key(normalized, selected)

        cached = self.response_cache.get(run_key, state.session_id)
        if cached is not None:
            logger.info("answer_cache_hit", session_id=state.session_id, run_key=run_key)
            self._record_turn(state, question, cached.answer, run_key)
            return AnswerResult(
                answer=cached.answer,
                session_id=state.session_id,
                cached=True,
                analyses=cached.analyses,
            )

        datasets = [self.registry.get(d) for d in selected]
        analyses = [self._analyze(dataset, question) for dataset in datasets]
        prompt = build_answer_prompt(question, analyses)
        files = self._source_files(datasets, analyses)

        history = state.conversation.to_chat_history()
        answer = self.generator.generate(prompt, history=history, files=files or None)
        if not answer:
            logger.error("answer_generation_failed", session_id=state.session_id, run_key=run_key)
            raise AnswerGenerationError("Failed to process the question")

        analysis_dicts = [a.to_dict() for a in analyses]
        self._record_turn(state, question, answer, run_key)
        self.response_cache.put(
            CachedResponse(
                run_key=run_key,
                question=normalized,
                answer=answer,
                analyses=analysis_dicts,
                timestamp=datetime.now(UTC),
                session_id=state.session_id,
            )
        )

        logger.info(
            "question_answered",
            session_id=state.session_id,
            datasets=selected,
            computed=[a.dataset_id for a in analyses if a.result is not None],
            answer_length=len(answer),
        )
        return AnswerResult(answer=answer, session_id=state.session_id, cached=False, analyses=analysis_dicts)

    def clear_session(self, session_id: str) -> bool:
        """
        Clear a session's history and cached answers.

        Returns:
            True if the session existed
        """
        self.response_cache.clear(session_id)
        return self.session_store.delete(session_id)

    def _analyze(self, dataset: LoadedDataset, question: str) -> DatasetAnalysis:
        """Profile, classify and (when needed) aggregate one dataset."""
        if dataset.is_empty:
            logger.warning("dataset_empty_no_analysis", dataset_id=dataset.dataset_id)
            return DatasetAnalysis(
                dataset_id=dataset.dataset_id,
                display_name=dataset.display_name,
                period=dataset.period,
                row_count=0,
            )

        profile = dataset.profile
        intent = classify_intent(question, profile)
        if intent.needs_full_analysis:
            return DatasetAnalysis(
                dataset_id=dataset.dataset_id,
                display_name=dataset.display_name,
                period=dataset.period,
                row_count=profile.row_count,
                intent=intent,
                result=execute(dataset.rows, profile, intent),
            )

        return DatasetAnalysis(
            dataset_id=dataset.dataset_id,
            display_name=dataset.display_name,
            period=dataset.period,
            row_count=profile.row_count,
            intent=intent,
            profile_summary=profile.summary(),
            sample_rows=dataset.rows[: self.sample_row_count],
        )

    def _source_files(self, datasets: list[LoadedDataset], analyses: list[DatasetAnalysis]) -> list[Any]:
        """Upload source CSVs for pass-through datasets when file attachment is enabled."""
        if not self.attach_source_files:
            return []
        upload = getattr(self.generator, "upload_file", None)
        wait = getattr(self.generator, "wait_for_files_active", None)
        if upload is None or wait is None:
            logger.warning("source_files_unsupported", generator=type(self.generator).__name__)
            return []

        uploaded = [
            upload(dataset.source_path, mime_type="text/csv")
            for dataset, analysis in zip(datasets, analyses, strict=True)
            if analysis.result is None and not analysis.is_empty
        ]
        return wait(uploaded) if uploaded else []

    def _record_turn(self, state, question: str, answer: str, run_key: str) -> None:
        conversation = state.conversation
        conversation.add_message("user", question)
        conversation.add_message("assistant", answer, run_key=run_key)
        state.updated_at = datetime.now(UTC)
        self.session_store.put(state)
