"""Operator commands: account creation and usage ledger retention."""
from typing import Optional

import click

from askbudi.auth import hash_password
from askbudi.config import settings
from askbudi.database import Database
from askbudi.models import User
from askbudi.profiles import get_or_create_profile, quota_for_plan
from askbudi.routes.auth import generate_user_id
from askbudi.timeutil import utcnow
from askbudi.usage import prune_usage

PLAN_TYPES = ["free", "pro", "enterprise"]


@click.group()
@click.option('--database-url', default=None, help='Override DATABASE_URL')
@click.pass_context
def cli(ctx: click.Context, database_url: Optional[str]):
    """AskBudi service administration."""
    ctx.obj = Database(database_url or settings.database_url)
    ctx.obj.create_all()
    ctx.call_on_close(ctx.obj.dispose)


@cli.command('create-user')
@click.option('--email', required=True, help='User email address')
@click.option('--password', required=True, help='User password')
@click.option('--plan', default='free', type=click.Choice(PLAN_TYPES), help='Plan tier')
@click.pass_obj
def create_user(database: Database, email: str, password: str, plan: str):
    """Create a user with a profile on the given plan."""
    db = database.session()
    try:
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            raise click.ClickException(f"User with email {email} already exists")

        user = User(
            id=generate_user_id(),
            email=email,
            password_hash=hash_password(password),
            created_at=utcnow(),
        )
        db.add(user)
        db.commit()

        profile = get_or_create_profile(db, user.id)
        profile.plan_type = plan
        profile.monthly_quota = quota_for_plan(plan)
        profile.credits_remaining = profile.monthly_quota
        db.commit()

        click.echo(f"User created: {email} ({user.id}, plan {plan})")
    finally:
        db.close()


@cli.command('prune-usage')
@click.option(
    '--older-than-days',
    type=int,
    default=None,
    help='Delete usage entries older than this (defaults to USAGE_RETENTION_DAYS)',
)
@click.pass_obj
def prune_usage_command(database: Database, older_than_days: Optional[int]):
    """Delete usage entries past the retention period."""
    days = older_than_days if older_than_days is not None else settings.usage_retention_days
    if days is None:
        raise click.UsageError("No retention configured; pass --older-than-days or set USAGE_RETENTION_DAYS")

    db = database.session()
    try:
        deleted = prune_usage(db, days)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--older-than-days')
    finally:
        db.close()

    click.echo(f"Deleted {deleted} usage entries older than {days} days")


if __name__ == "__main__":
    cli()
