"""Command line interface for Streakbook."""

from __future__ import annotations

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .errors import StreakbookError
from .logging_config import setup_logging
from .services.stats import group_weeks


def _app(ctx: click.Context) -> AppContext:
    """Build the app context once per invocation."""

    root = ctx.find_root()
    if root.obj is None:
        config = BaseConfig()
        setup_logging(config)
        # Reminder jobs cannot outlive a one-shot command.
        app = create_app_context(config, with_reminders=False)
        root.call_on_close(app.close)
        root.obj = app
    return root.obj


def _resolve_habit_id(app: AppContext, prefix: str) -> str:
    """Accept a full habit id or any unique prefix of one."""

    matches = [h.id for h in app.habit_service.habits.all() if h.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise click.ClickException(f"No habit matches {prefix!r}")
    raise click.ClickException(f"{prefix!r} matches {len(matches)} habits; use more characters")


class _Group(click.Group):
    """Turn domain errors into clean CLI failures."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except StreakbookError as exc:
            raise click.ClickException(str(exc)) from exc


@click.group(cls=_Group)
def cli() -> None:
    """Track habits, streaks and completion rates."""


@cli.command()
@click.argument("name")
@click.argument("email")
@click.password_option()
@click.pass_context
def register(ctx: click.Context, name: str, email: str, password: str) -> None:
    """Create an account and sign in."""

    user = _app(ctx).auth.sign_up(name, email, password)
    click.echo(f"Welcome, {user.name}!")


@cli.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
@click.pass_context
def login(ctx: click.Context, email: str, password: str) -> None:
    """Sign in to an existing account."""

    user = _app(ctx).auth.sign_in(email, password)
    click.echo(f"Signed in as {user.email}")


@cli.command()
@click.pass_context
def logout(ctx: click.Context) -> None:
    """Sign out."""

    _app(ctx).auth.sign_out()
    click.echo("Signed out")


@cli.command()
@click.argument("title")
@click.option("--description", "-d", required=True)
@click.option("--frequency", type=click.Choice(["daily", "weekly"]), default="daily", show_default=True)
@click.option("--day", "days", type=click.IntRange(0, 6), multiple=True, help="Target weekday (0-6) for weekly habits.")
@click.option("--remind", "reminder_time", default=None, help="Daily reminder time as HH:mm.")
@click.pass_context
def add(ctx, title, description, frequency, days, reminder_time) -> None:
    """Create a habit."""

    habit = _app(ctx).habit_service.create_habit(
        title,
        description,
        frequency=frequency,
        target_days=list(days) or None,
        reminder_time=reminder_time,
    )
    click.echo(f"Created {habit.id} {habit.title}")


@cli.command(name="list")
@click.pass_context
def list_habits(ctx: click.Context) -> None:
    """Show habits with streak and completion rate."""

    habits = _app(ctx).habit_service.list_habits()
    if not habits:
        click.echo("No habits yet")
        return
    for habit in habits:
        mark = "x" if habit.completed_today else " "
        click.echo(
            f"[{mark}] {habit.id[:8]}  {habit.title}  "
            f"streak={habit.streak}  rate={habit.completion_rate:.0f}%"
        )


@cli.command()
@click.argument("habit_id")
@click.option("--day", default=None, help="Day to toggle as YYYY-MM-DD (default today).")
@click.pass_context
def done(ctx: click.Context, habit_id: str, day: str | None) -> None:
    """Toggle completion of a habit for a day."""

    app = _app(ctx)
    log = app.habit_service.toggle_habit_completion(_resolve_habit_id(app, habit_id), day)
    state = "completed" if log.completed else "not completed"
    click.echo(f"{log.day}: {state}")


@cli.command()
@click.argument("habit_id")
@click.option("--title", default=None)
@click.option("--description", "-d", default=None)
@click.option("--frequency", type=click.Choice(["daily", "weekly"]), default=None)
@click.option("--remind", "reminder_time", default=None, help="New reminder time as HH:mm.")
@click.option("--no-remind", is_flag=True, default=False, help="Clear the reminder.")
@click.pass_context
def edit(ctx, habit_id, title, description, frequency, reminder_time, no_remind) -> None:
    """Change a habit's fields."""

    app = _app(ctx)
    changes = {
        key: value
        for key, value in {
            "title": title,
            "description": description,
            "frequency": frequency,
            "reminder_time": reminder_time,
        }.items()
        if value is not None
    }
    if no_remind:
        changes["reminder_time"] = None
    if not changes:
        raise click.UsageError("Nothing to change")
    habit = app.habit_service.update_habit(_resolve_habit_id(app, habit_id), **changes)
    click.echo(f"Updated {habit.id} {habit.title}")


@cli.command()
@click.argument("habit_id")
@click.confirmation_option(prompt="Delete this habit and all of its progress?")
@click.pass_context
def delete(ctx: click.Context, habit_id: str) -> None:
    """Delete a habit and its completion log."""

    app = _app(ctx)
    resolved = _resolve_habit_id(app, habit_id)
    app.habit_service.delete_habit(resolved)
    click.echo(f"Deleted {resolved}")


@cli.command()
@click.argument("habit_id")
@click.option("--months", type=click.IntRange(1, 24), default=None)
@click.pass_context
def history(ctx: click.Context, habit_id: str, months: int | None) -> None:
    """Print the completion calendar, one week per row."""

    app = _app(ctx)
    resolved = _resolve_habit_id(app, habit_id)
    days = app.habit_service.get_history(resolved, months)
    for week in group_weeks(days):
        cells = "".join("#" if day.completed else "." for day in week)
        click.echo(f"{week[0].day}  {cells}")
    habit = app.habit_service.get_habit(resolved)
    longest = app.habit_service.get_longest_streak(resolved)
    click.echo(f"Current streak: {habit.streak}  Longest: {longest}  Rate: {habit.completion_rate:.0f}%")


def main() -> None:
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
