from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit

from teamquiz.core.errors import MissingParameterError, ValidationError

WAITING = "/waiting"
ANSWER = "/answer"
RESULT_WAITING = "/result-waiting"

VIEWS = {
    "waiting": WAITING,
    "answer": ANSWER,
    "result-waiting": RESULT_WAITING,
}


@dataclass(frozen=True)
class Navigation:
    """A view plus its externally visible parameters, e.g. ``/answer?index=2``."""

    path: str
    params: dict[str, str] = field(default_factory=dict)

    @property
    def url(self) -> str:
        if not self.params:
            return self.path
        return f"{self.path}?{urlencode(self.params)}"

    @classmethod
    def parse(cls, url: str) -> "Navigation":
        parts = urlsplit(url)
        return cls(path=parts.path or WAITING, params=dict(parse_qsl(parts.query)))

    @classmethod
    def for_view(cls, view: str, index: Optional[str] = None) -> "Navigation":
        if view not in VIEWS:
            raise ValidationError(f"Unknown view: {view}")
        params = {"index": index} if index is not None else {}
        return cls(path=VIEWS[view], params=params)

    @classmethod
    def answer(cls, index: int) -> "Navigation":
        return cls(path=ANSWER, params={"index": str(index)})

    @classmethod
    def waiting(cls) -> "Navigation":
        return cls(path=WAITING)

    @classmethod
    def result_waiting(cls) -> "Navigation":
        return cls(path=RESULT_WAITING)


def parse_index(params: Mapping[str, str]) -> int:
    """The quiz index must be carried explicitly; it never defaults to zero."""
    raw = params.get("index")
    if raw is None or raw == "":
        raise MissingParameterError("Quiz index is not specified")
    try:
        return int(raw, 10)
    except (TypeError, ValueError):
        raise ValidationError(f"Quiz index is not an integer: {raw!r}") from None
