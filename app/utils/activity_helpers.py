from sqlalchemy.ext.asyncio import AsyncSession
from app.models.support.activity_models import UserActivity
from app.models.enums.user_role import UserRole, ROLE_DISPLAY_NAMES
from app.constants.activity_templates import ACTIVITY_TEMPLATES
from app.constants.activity_codes import ActivityCode


async def emit_activity(
    db: AsyncSession,
    *,
    user_id: str | None,
    username: str,
    code: ActivityCode,
    **context,
):
    template = ACTIVITY_TEMPLATES.get(code)
    if not template:
        raise ValueError(f"No activity template for code {code}")

    try:
        message = template.format(**context)
    except KeyError as e:
        raise ValueError(
            f"Missing activity context key: {e.args[0]} for {code}"
        )

    db.add(
        UserActivity(
            user_id=user_id,
            username_snapshot=username,
            code=code.value,
            target_id=str(context["target_id"]) if context.get("target_id") is not None else None,
            message=message,
        )
    )


async def emit_user_activity(db: AsyncSession, user, code: ActivityCode, **context):
    """emit_activity with the actor fields filled in from the acting profile."""
    role = ROLE_DISPLAY_NAMES.get(UserRole(user.role), str(user.role))
    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=code,
        actor_role=role,
        actor_email=user.email,
        **context,
    )
