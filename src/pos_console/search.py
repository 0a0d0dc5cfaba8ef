"""Fuzzy household search over the civic registry tables."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional

from rapidfuzz import fuzz, utils
from sqlmodel import Session, col, select

from .models import Family, FamilyMember, Household

DEFAULT_SCORE_CUTOFF = 60.0


@dataclass
class FamilyMatch:
    family: Family
    members: list[FamilyMember] = field(default_factory=list)


@dataclass
class HouseholdMatch:
    household: Household
    score: float
    families: list[FamilyMatch] = field(default_factory=list)

    def candidates(self) -> list[str]:
        """Every string the query is compared against."""

        h = self.household
        values = [h.name, h.purok, h.sitio, h.barangay, h.address]
        for match in self.families:
            values.extend([match.family.husband_name, match.family.wife_name])
            values.extend(member.fullname for member in match.members)
        return [value for value in values if value]


def score(query: str, candidates: list[str]) -> float:
    if not candidates:
        return 0.0
    return max(fuzz.WRatio(query, candidate, processor=utils.default_process) for candidate in candidates)


def search_households(
    db: Session,
    query: str,
    *,
    org_id: Optional[int] = None,
    limit: int = 20,
    score_cutoff: float = DEFAULT_SCORE_CUTOFF,
) -> list[HouseholdMatch]:
    """Rank households by their best-matching address or resident name."""

    query = query.strip()
    if not query:
        return []

    statement = select(Household)
    if org_id is not None:
        statement = statement.where(Household.org_id == org_id)
    households = list(db.exec(statement).all())
    if not households:
        return []

    household_ids = [h.id for h in households]
    families = db.exec(select(Family).where(col(Family.household_id).in_(household_ids))).all()
    family_ids = [f.id for f in families]
    members_by_family: dict[int, list[FamilyMember]] = defaultdict(list)
    if family_ids:
        for member in db.exec(select(FamilyMember).where(col(FamilyMember.family_id).in_(family_ids))).all():
            members_by_family[member.family_id].append(member)

    families_by_household: dict[int, list[FamilyMatch]] = defaultdict(list)
    for family in families:
        families_by_household[family.household_id].append(FamilyMatch(family, members_by_family[family.id]))

    matches = []
    for household in households:
        match = HouseholdMatch(household, 0.0, families_by_household[household.id])
        match.score = score(query, match.candidates())
        if match.score >= score_cutoff:
            matches.append(match)

    matches.sort(key=lambda m: (-m.score, m.household.id))
    return matches[:limit]
