from sqlalchemy.orm import Session

from app.models.girl import Girl
from app.schemas.girl_schema import GirlPublic

PUBLIC_MIN_SORT_ORDER = 998
PUBLIC_STATUSES = {"available", "busy", "offline"}


def list_public_girls(db: Session) -> list[GirlPublic]:
    """
    Therapists visible to partners: unblocked, verified and ranked into the
    published tier. Coordinates come from the live status row, if any.
    """
    girls = (
        db.query(Girl)
        .filter(
            Girl.is_blocked.is_(False),
            Girl.is_verified.is_(True),
            Girl.sort_order >= PUBLIC_MIN_SORT_ORDER,
        )
        .order_by(Girl.girl_number)
        .all()
    )

    return [_to_public(girl) for girl in girls]


def _to_public(girl: Girl) -> GirlPublic:
    live = girl.status

    return GirlPublic(
        id=girl.id,
        girl_number=girl.girl_number,
        city_id=girl.city_id,
        username=girl.name,
        avatar_url=girl.avatar_url,
        lat=live.current_lat if live else None,
        lng=live.current_lng if live else None,
        status=live.status if live and live.status in PUBLIC_STATUSES else "offline",
        next_available_time=live.next_available_time if live else None,
    )
