from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from pos_console import search
from pos_console.auth import require_admin
from pos_console.dependencies import get_db
from pos_console.schemas import FamilyMemberRead, FamilyRead, HouseholdRead

router = APIRouter(prefix="/households", tags=["households"], dependencies=[Depends(require_admin)])


def _read(match: search.HouseholdMatch) -> HouseholdRead:
    household = HouseholdRead.model_validate(match.household)
    household.score = round(match.score, 2)
    household.families = [
        FamilyRead(
            id=f.family.id,
            husband_name=f.family.husband_name,
            wife_name=f.family.wife_name,
            members=[FamilyMemberRead.model_validate(m) for m in f.members],
        )
        for f in match.families
    ]
    return household


@router.get("/search", response_model=list[HouseholdRead])
def search_households(
    q: str = Query("", max_length=128),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> list[HouseholdRead]:
    """Fuzzy match on address fields and family/member names, best first."""

    return [_read(match) for match in search.search_households(db, q, limit=limit)]
