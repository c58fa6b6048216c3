"""Model fallback runner.

Walks an ordered ladder of Gemini model ids, one call at a time, and stops at
the first candidate that both answers with a success status and yields a
parseable (and, optionally, valid) JSON payload.

Every failure is recovered locally and recorded as a CandidateAttempt:
- http_error: the candidate answered with a non-success status
- transport_error: the call raised anything else (network, SDK, ...)
- payload_error: the text was not parseable JSON or failed validation

Only when the whole ladder is exhausted does the caller see an error
(AllCandidatesExhaustedError, carrying the attempts for diagnosis).
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Sequence

from src.llm.extraction import JsonShape, PayloadError, parse_json_payload
from src.llm.gemini import CandidateHTTPError
from src.utils.logger import logger

ModelCall = Callable[[str, str], Awaitable[str]]
PayloadValidator = Callable[[Any], Any]

HTTP_ERROR = "http_error"
TRANSPORT_ERROR = "transport_error"
PAYLOAD_ERROR = "payload_error"
OK = "ok"


@dataclass(frozen=True)
class CandidateAttempt:
    """What happened when one candidate model was tried."""

    model: str
    status: str
    detail: str = ""


class AllCandidatesExhaustedError(RuntimeError):
    """No candidate model produced a usable payload."""

    def __init__(self, attempts: Sequence[CandidateAttempt]):
        self.attempts = list(attempts)
        summary = "; ".join(f"{a.model}: {a.status} ({a.detail})" for a in self.attempts)
        super().__init__(f"All models busy. Attempts: {summary or 'none'}")


@dataclass
class FallbackOutcome:
    """Accumulated result of a ladder run."""

    value: Any = None
    model: Optional[str] = None
    attempts: list[CandidateAttempt] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.model is not None

    def unwrap(self) -> Any:
        """Return the value, or raise AllCandidatesExhaustedError if nothing succeeded."""
        if not self.succeeded:
            raise AllCandidatesExhaustedError(self.attempts)
        return self.value


class ModelFallbackRunner:
    """Try candidate models in fixed preference order until one succeeds."""

    def __init__(self, call_model: ModelCall, candidates: Sequence[str]) -> None:
        """Initialize the runner.

        Args:
            call_model: Async callable (model_id, prompt) -> response text.
            candidates: Model ids in descending preference order.

        Raises:
            ValueError: If no candidates are given.
        """
        if not candidates:
            raise ValueError("At least one candidate model is required")
        self.call_model = call_model
        self.candidates = tuple(candidates)

    async def run(
        self,
        prompt: str,
        shape: JsonShape,
        validate: Optional[PayloadValidator] = None,
    ) -> FallbackOutcome:
        """Run the prompt down the ladder.

        Args:
            prompt: Prompt text, sent unchanged to every candidate.
            shape: Expected top-level JSON shape of the answer.
            validate: Optional check on the parsed payload. It may raise
                PayloadError/ValueError to reject it, and its return value
                replaces the parsed payload.

        Returns:
            FallbackOutcome with the first usable value, or with only failed
            attempts when the ladder is exhausted.
        """
        outcome = FallbackOutcome()

        for position, model in enumerate(self.candidates, start=1):
            logger.debug(f"Candidate {position}/{len(self.candidates)}: {model}", extra={"model": model})
            try:
                text = await self.call_model(model, prompt)
                parsed = parse_json_payload(text, shape)
                value = validate(parsed) if validate else parsed
            except CandidateHTTPError as e:
                outcome.attempts.append(CandidateAttempt(model, HTTP_ERROR, f"status {e.status_code}"))
            except (PayloadError, ValueError) as e:
                outcome.attempts.append(CandidateAttempt(model, PAYLOAD_ERROR, str(e)))
            except Exception as e:
                outcome.attempts.append(CandidateAttempt(model, TRANSPORT_ERROR, f"{type(e).__name__}: {e}"))
            else:
                outcome.attempts.append(CandidateAttempt(model, OK))
                outcome.value = value
                outcome.model = model
                logger.debug(f"Candidate {model} succeeded", extra={"model": model})
                return outcome

            logger.debug(f"Candidate {model} failed: {outcome.attempts[-1].status} ({outcome.attempts[-1].detail})")

        return outcome
