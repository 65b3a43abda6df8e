"""Per-sport variants of the ``match.states`` blob.

The blob is stored in the provider's native shape. It is validated here into
a tagged union keyed by sport family so that each score transform receives a
known variant. Anything that does not fit a sport's variant degrades to
``GenericStates``.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

# Sport slug → family tag, in parser precedence order.
SPORT_FAMILIES: dict[str, str] = {
    "rugby": "rugby",
    "rugby-union": "rugby",
    "rugby-league": "rugby",
    "cricket": "cricket",
    "hockey": "hockey",
    "ice-hockey": "hockey",
    "volleyball": "volleyball",
    "american-football": "american-football",
    "basketball": "basketball",
    "football": "football",
    "baseball": "baseball",
    "handball": "handball",
}


class _StatesBase(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    score: str | dict[str, Any] | None = None
    score_details: dict[str, Any] | None = Field(default=None, alias="scoreDetails")
    description: Any = None

    @property
    def score_object(self) -> dict[str, Any] | None:
        """The object-form score, when ``score`` is a mapping with a current value."""
        if isinstance(self.score, dict) and self.score.get("current"):
            return self.score
        return None

    @property
    def score_string(self) -> str | None:
        return self.score if isinstance(self.score, str) else None


class RugbyStates(_StatesBase):
    kind: Literal["rugby"]


class CricketStates(_StatesBase):
    kind: Literal["cricket"]
    teams: dict[str, Any] | None = None
    report: Any = None


class HockeyStates(_StatesBase):
    kind: Literal["hockey"]


class VolleyballStates(_StatesBase):
    kind: Literal["volleyball"]


class AmericanFootballStates(_StatesBase):
    kind: Literal["american-football"]


class BasketballStates(_StatesBase):
    kind: Literal["basketball"]


class FootballStates(_StatesBase):
    kind: Literal["football"]


class BaseballStates(_StatesBase):
    kind: Literal["baseball"]


class HandballStates(_StatesBase):
    kind: Literal["handball"]


class GenericStates(_StatesBase):
    kind: Literal["generic"]


MatchStates = Annotated[
    Union[
        RugbyStates,
        CricketStates,
        HockeyStates,
        VolleyballStates,
        AmericanFootballStates,
        BasketballStates,
        FootballStates,
        BaseballStates,
        HandballStates,
        GenericStates,
    ],
    Field(discriminator="kind"),
]

_ADAPTER: TypeAdapter[MatchStates] = TypeAdapter(MatchStates)


def sport_family(sport_slug: str | None) -> str:
    return SPORT_FAMILIES.get(sport_slug or "", "generic")


def validate_states(states: dict[str, Any], sport_slug: str | None) -> MatchStates:
    """Validate a raw states blob into the variant for ``sport_slug``.

    Never raises: a blob that does not fit its sport's variant is re-read as
    ``GenericStates``, keeping only a usable ``score`` field.
    """
    kind = sport_family(sport_slug)
    try:
        return _ADAPTER.validate_python({**states, "kind": kind})
    except ValidationError as exc:
        logger.debug("states blob does not fit %s variant: %s", kind, exc.error_count())

    score = states.get("score")
    if not isinstance(score, (str, dict)):
        score = None
    return GenericStates(kind="generic", score=score)
