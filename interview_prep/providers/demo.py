import asyncio
import json
import random
from typing import Any

from interview_prep.core.constants import DEMO_DELAY_RANGE
from interview_prep.core.logging import log_event
from interview_prep.core.models import Language

from .base import GenerationBackend
from .exceptions import Sleep
from .language import detect_language_heuristic

MOCK_QUESTIONS: dict[Language, tuple[str, ...]] = {
    Language.EN: (
        "Can you walk me through your experience with the technologies mentioned in this role?",
        "How do you approach problem-solving when facing a challenging technical issue?",
        "Tell me about a time when you had to learn a new technology quickly. How did you go about it?",
        "How do you ensure your code is maintainable and follows best practices?",
        "Can you describe your experience working in a team environment and collaborating with other developers?",
    ),
    Language.PL: (
        "Opowiedz o swoim doświadczeniu z technologiami wymienionymi w tej ofercie pracy.",
        "Jak podchodzisz do rozwiązywania problemów, gdy napotkasz trudne wyzwanie techniczne?",
        "Opisz sytuację, gdy musiałeś szybko nauczyć się nowej technologii. Jak się do tego zabrałeś?",
        "Jak zapewniasz, że Twój kod jest łatwy w utrzymaniu i zgodny z najlepszymi praktykami?",
        "Jakie masz doświadczenie w pracy zespołowej i współpracy z innymi programistami?",
    ),
    Language.DE: (
        "Können Sie Ihre Erfahrung mit den in dieser Stelle erwähnten Technologien beschreiben?",
        "Wie gehen Sie bei der Problemlösung vor, wenn Sie vor einer schwierigen technischen Herausforderung stehen?",
        "Erzählen Sie von einer Zeit, als Sie eine neue Technologie schnell lernen mussten. "
        "Wie sind Sie dabei vorgegangen?",
        "Wie stellen Sie sicher, dass Ihr Code wartbar ist und bewährten Praktiken folgt?",
        "Können Sie Ihre Erfahrung in der Teamarbeit und Zusammenarbeit mit anderen Entwicklern beschreiben?",
    ),
}


def _user_content(payload: dict[str, Any]) -> str:
    for message in payload.get("messages", []):
        if message.get("role") == "user":
            return message.get("content") or ""
    return ""


class DemoBackend(GenerationBackend):
    """Offline backend used when no credential is configured.

    Generation answers with the five canned questions for the posting's
    language in shuffled order after a short simulated delay. Nothing here
    touches the network or raises classified errors.
    """

    demo_mode = True

    def __init__(
        self,
        sleep: Sleep = asyncio.sleep,
        rng: random.Random | None = None,
        delay_range: tuple[float, float] = DEMO_DELAY_RANGE,
    ):
        self._sleep = sleep
        self._rng = rng or random.Random()
        self.delay_range = delay_range

    async def complete(self, payload: dict[str, Any]) -> dict[str, Any]:
        language = detect_language_heuristic(_user_content(payload))
        questions = list(MOCK_QUESTIONS[language])
        self._rng.shuffle(questions)

        delay = self._rng.uniform(*self.delay_range)
        log_event(
            "generation.demo_response",
            component="demo",
            operation="complete",
            language=language.value,
            delay_s=round(delay, 3),
        )
        await self._sleep(delay)

        return {
            "id": "demo",
            "model": payload.get("model"),
            "choices": [
                {
                    "index": 0,
                    "message": {
                        "role": "assistant",
                        "content": json.dumps({"questions": questions}, ensure_ascii=False),
                    },
                    "finish_reason": "stop",
                }
            ],
        }

    async def detect_language(self, sample: str, model: str) -> Language:
        return detect_language_heuristic(sample)
