import logging
from enum import Enum
from typing import Any, List, Optional

from langchain_anthropic import ChatAnthropic
from langchain_core.output_parsers import JsonOutputParser, StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_ollama import ChatOllama
from pydantic import BaseModel, Field, ValidationError

from studydeck.config import settings
from studydeck.errors import ContentGenerationError
from studydeck.schemas import FlashcardCreate

logger = logging.getLogger(__name__)


class StudyAction(str, Enum):
    GENERATE_FLASHCARDS = "generate-flashcards"
    GENERATE_QUIZ = "generate-quiz"
    EXPLAIN_CONCEPT = "explain-concept"
    CREATE_STUDY_PLAN = "create-study-plan"
    SUMMARIZE = "summarize"
    PRACTICE_PROBLEMS = "practice-problems"
    PRACTICE_TEST = "practice-test"
    MIND_MAP = "mind-map"
    WORKSHEET = "worksheet"
    GENERATE_CONCEPTS = "generate-concepts"
    MATCHING_GAME = "matching-game"
    SPEED_CHALLENGE = "speed-challenge"
    ELABORATIVE_INTERROGATION = "elaborative-interrogation"
    CREATE_CORNELL_NOTES = "create-cornell-notes"


# (output instructions, closing request) per action
ACTION_PROMPTS = {
    StudyAction.GENERATE_FLASHCARDS: (
        'Return a JSON object with key "flashcards": a list of objects with keys question, answer and optional hint.',
        "Create 10-20 flashcards.",
    ),
    StudyAction.GENERATE_QUIZ: (
        "Return a JSON list of multiple choice questions with keys question, options (list of strings), "
        "correctAnswer (index into options) and explanation.",
        "Create 8-12 questions.",
    ),
    StudyAction.EXPLAIN_CONCEPT: ("Explain clearly, with concrete examples.", "Explain the concept."),
    StudyAction.CREATE_STUDY_PLAN: (
        "Return a JSON list of days with keys day, topic, activities (list of strings), "
        "difficulty (1-10), timeMinutes and description.",
        "Create a 7-day plan.",
    ),
    StudyAction.SUMMARIZE: ("Summarize concisely.", "Summarize."),
    StudyAction.PRACTICE_PROBLEMS: (
        "Return a JSON list of problems with keys problem, solution, difficulty (easy|medium|hard) and optional tip.",
        "Create 6-10 problems.",
    ),
    StudyAction.PRACTICE_TEST: (
        "Write a practice test in markdown with the answers collected at the end.",
        "Create a practice test.",
    ),
    StudyAction.MIND_MAP: ("Write a concise mind map as nested markdown bullets.", "Create a mind map."),
    StudyAction.WORKSHEET: (
        "Return a JSON list of worksheet questions with keys id, type, question, options (optional), "
        "correctAnswer, explanation and points.",
        "Create 8-15 questions.",
    ),
    StudyAction.GENERATE_CONCEPTS: (
        "Return a JSON list of key concepts with keys concept, definition and optional example.",
        "List 10-20 key concepts.",
    ),
    StudyAction.CREATE_CORNELL_NOTES: (
        "Return a JSON object with keys topic, mainIdeas (list of objects with cue and note) and summary.",
        "Create Cornell notes.",
    ),
}

GENERIC_ACTIVITY_PROMPT = "Give a structured response suited to the requested study activity."


def get_content_generator():
    """Factory function to return the appropriate generator based on config"""
    if settings.ai_provider.lower() == "claude":
        return ClaudeContentGenerator()
    else:
        return OllamaContentGenerator()


def _as_text(value) -> str:
    # models sometimes emit numbers (answer 4, hint 0) where text is expected
    return "" if value is None else str(value).strip()


class GeneratedFlashcards(BaseModel):
    """Schema for AI flashcard output"""
    flashcards: List[FlashcardCreate] = Field(description="Question/answer flashcards")


class BaseContentGenerator:
    """Base class for AI-generated study content"""

    def __init__(self):
        self.llm = None
        self.prompt = ChatPromptTemplate.from_messages([
            ("system", "{system_prompt}"),
            ("human", "{user_prompt}"),
        ])

    def generate_content(
        self,
        action,
        input_text: str,
        difficulty: Optional[str] = None,
        grade_level: Optional[str] = None,
    ) -> str:
        """
        Generate study content as raw model text.

        Args:
            action: StudyAction (or its string value)
            input_text: Topic name or source material to study from
            difficulty: Optional difficulty hint (e.g. "hard")
            grade_level: Optional target grade level

        Returns:
            Model output text (JSON for structured actions)
        """
        chain = self.prompt | self.llm | StrOutputParser()
        return self._invoke(chain, action, input_text, difficulty, grade_level)

    def generate_flashcards(self, topic: str, count: Optional[int] = None) -> List[FlashcardCreate]:
        """Generate flashcards for a topic, dropping items without question or answer"""
        parser = JsonOutputParser(pydantic_object=GeneratedFlashcards)
        chain = self.prompt | self.llm | parser
        extra = f"Create exactly {count} flashcards." if count else None
        result = self._invoke(chain, StudyAction.GENERATE_FLASHCARDS, topic, None, None, extra)
        cards = self._extract_flashcards(result)
        if count:
            cards = cards[:count]
        return cards

    def _invoke(self, chain, action, input_text, difficulty, grade_level, extra=None) -> Any:
        action = self._resolve_action(action)
        if not input_text or not input_text.strip():
            raise ContentGenerationError("A topic or some content is required")

        try:
            result = chain.invoke({
                "system_prompt": self._build_system_prompt(action, difficulty, grade_level),
                "user_prompt": self._build_user_prompt(action, input_text, extra),
            })
        except Exception as e:
            logger.exception("Content generation failed for %s", action.value)
            raise ContentGenerationError(f"{self.__class__.__name__} failed: {e}") from e

        logger.info("Generated %s content with %s", action.value, self.__class__.__name__)
        return result

    @staticmethod
    def _resolve_action(action) -> StudyAction:
        try:
            return StudyAction(action)
        except ValueError:
            raise ContentGenerationError(f"Unknown study action: {action}") from None

    def _build_system_prompt(self, action: StudyAction, difficulty: Optional[str], grade_level: Optional[str]) -> str:
        """Build system prompt for LLM"""
        parts = ["You are an expert tutor."]
        if grade_level:
            parts.append(f"Target grade level: {grade_level}.")
        if difficulty:
            parts.append(f"Difficulty: {difficulty}.")
        parts.append("Stay on the given topic or content. When asked for structured output, output only valid JSON.")
        instructions, _ = ACTION_PROMPTS.get(action, (GENERIC_ACTIVITY_PROMPT, None))
        parts.append(instructions)
        return " ".join(parts)

    def _build_user_prompt(self, action: StudyAction, input_text: str, extra: Optional[str] = None) -> str:
        """Build user prompt: the material, then what to make of it"""
        text = input_text.strip()
        # Multi-line input is source material; a single line is a topic name
        base = f"CONTENT:\n{text}" if "\n" in text else f"TOPIC: {text}"
        _, request = ACTION_PROMPTS.get(action, (None, f"Generate the activity content for: {action.value}."))
        if extra:
            request = extra
        return f"{base}\n\n{request}"

    @staticmethod
    def _extract_flashcards(result: Any) -> List[FlashcardCreate]:
        # Models return either the list itself or an object wrapping it
        items = result
        if isinstance(result, dict):
            for key in ["flashcards", "cards", "items"]:
                if isinstance(result.get(key), list):
                    items = result[key]
                    break
            else:
                raise ContentGenerationError(
                    f"Model returned an object without a flashcard list. Keys: {list(result.keys())}"
                )
        if not isinstance(items, list):
            raise ContentGenerationError(f"Expected a list of flashcards, got {type(items).__name__}")

        cards = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                cards.append(FlashcardCreate(
                    question=_as_text(item.get("question")),
                    answer=_as_text(item.get("answer")),
                    hint=_as_text(item.get("hint")) or None,
                ))
            except ValidationError:
                continue
        if len(cards) < len(items):
            logger.warning("Dropped %d invalid flashcards from model output", len(items) - len(cards))
        return cards


class OllamaContentGenerator(BaseContentGenerator):
    """Generator using local Ollama for development"""

    def __init__(self):
        super().__init__()
        self.llm = ChatOllama(
            model=settings.ollama_model,
            base_url=settings.ollama_base_url,
            temperature=settings.ai_temperature,
        )


class ClaudeContentGenerator(BaseContentGenerator):
    """Generator using Claude API for production"""

    def __init__(self):
        super().__init__()
        if not settings.claude_api_key:
            raise ContentGenerationError("CLAUDE_API_KEY not set in environment variables")

        self.llm = ChatAnthropic(
            model=settings.claude_model,
            api_key=settings.claude_api_key,
            temperature=settings.ai_temperature,
        )


def generate_content(action, input_text: str, difficulty: Optional[str] = None, grade_level: Optional[str] = None) -> str:
    """Generate study content with the configured provider"""
    return get_content_generator().generate_content(action, input_text, difficulty, grade_level)
