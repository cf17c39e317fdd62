# ============================================================
# content.py: Génération de contenu (LLM)
# ------------------------------------------------------------
# Best-effort : description, tags et quiz d'un cours, et une
# citation du jour. Toute erreur (clé absente, timeout, JSON
# invalide) donne un contenu de repli, jamais une exception.
# ============================================================
import json
from typing import List, Optional

from openai import OpenAI, OpenAIError
from pydantic import ValidationError
from sqlmodel import Field, SQLModel

from opslearn import config
from opslearn.models import Quiz

COURSE_PROMPT = """I am creating a technical course for engineers titled "{title}".
The content is related to this URL (or type of content): "{url}".

Please generate:
1. A compelling, professional 2-sentence description.
2. A list of 3-5 relevant technical tags.
3. A short quiz with 3 multiple-choice questions to test understanding.

Return the response in this exact JSON structure:
{{
  "description": "string",
  "tags": ["string"],
  "quiz": {{
    "questions": [
      {{"id": "q1", "text": "Question?", "options": ["A", "B", "C", "D"], "correct_answer_index": 0}}
    ]
  }}
}}
"""

QUOTE_PROMPT = (
    "Give me a very short, motivating quote for a software reliability engineer "
    "about learning and stability. Max 20 words."
)
FALLBACK_QUOTE = "Continuous improvement is the path to perfection."


class CourseDetails(SQLModel):
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    quiz: Quiz = Field(default_factory=Quiz)


FALLBACK_DETAILS = CourseDetails(
    description="Could not generate description automatically. Please add one manually.",
    tags=["Custom"],
)


class NullContentGenerator:
    """Remplaçant sans réseau : contenu vide."""

    def generate_course_details(self, title: str, url: str) -> CourseDetails:
        return CourseDetails()

    def daily_quote(self) -> str:
        return FALLBACK_QUOTE


class OpenAIContentGenerator:
    def __init__(self, client: Optional[OpenAI] = None, model: str = config.OPENAI_MODEL):
        self._client = client
        self.model = model

    @property
    def client(self) -> OpenAI:
        # création paresseuse : OPENAI_API_KEY n'est lu qu'au premier appel
        if self._client is None:
            self._client = OpenAI(timeout=config.OPENAI_TIMEOUT_S, max_retries=0)
        return self._client

    def generate_course_details(self, title: str, url: str) -> CourseDetails:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": COURSE_PROMPT.format(title=title, url=url)}],
                response_format={"type": "json_object"},
            )
            data = json.loads(response.choices[0].message.content or "{}")
            return CourseDetails(
                description=data.get("description") or "No description generated.",
                tags=data.get("tags") or ["General"],
                quiz=Quiz.model_validate(data.get("quiz") or {"questions": []}),
            )
        except (OpenAIError, ValueError, ValidationError) as e:
            print(f"[content] course details failed: {e!r}", flush=True)
            return FALLBACK_DETAILS.model_copy(deep=True)

    def daily_quote(self) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": QUOTE_PROMPT}],
            )
            return (response.choices[0].message.content or "").strip() or "Keep learning, keep building."
        except OpenAIError as e:
            print(f"[content] daily quote failed: {e!r}", flush=True)
            return FALLBACK_QUOTE
