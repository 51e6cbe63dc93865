"""Candidate page model produced by the page selector."""

from pydantic import BaseModel, ConfigDict


class CandidatePage(BaseModel):
    """A CDP target that survived background-page exclusion.

    Attributes:
        title: The page title at selection time.
        url: The page URL at selection time.
        score: Selection score (higher wins).
    """

    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    score: int
