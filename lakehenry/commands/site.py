"""Site maintenance CLI commands."""

import click
from flask.cli import with_appcontext

from lakehenry.extensions import db
from lakehenry.models import Event, EventKind, EventStatus
from lakehenry.services import events
from lakehenry.services.sessions import delete_session, verify_session

DEMO_EVENTS = (
    {
        'title': 'Community Meeting',
        'kind': EventKind.MEETING,
        'location': 'Lake Henry Pavilion',
        'summary': 'Open meeting for lake residents and friends. Date to be announced.',
    },
    {
        'title': 'Fundraising Dinner',
        'kind': EventKind.FUNDRAISER,
        'location': 'Richland Center (Venue TBD)',
        'summary': 'Annual dinner supporting lake restoration. Date to be announced.',
    },
)


@click.group('site')
def site_commands():
    """Site maintenance commands."""
    pass


@site_commands.command('init-db')
@with_appcontext
def init_db():
    """Create all database tables."""
    db.create_all()
    click.echo(click.style('✓ Database tables created', fg='green'))


@site_commands.command('seed-demo')
@with_appcontext
def seed_demo():
    """Insert the TBD demo events (skips ones that already exist)."""
    created = 0
    for demo in DEMO_EVENTS:
        base = events.base_event_id(demo['title'], None, True)
        if db.session.get(Event, base) is not None:
            click.echo(f'Skipping {base} (already present)')
            continue
        db.session.add(Event(
            id=base,
            title=demo['title'],
            kind=demo['kind'],
            status=EventStatus.PUBLISHED,
            is_tbd=True,
            location=demo['location'],
            summary=demo['summary'],
        ))
        created += 1
    db.session.commit()
    click.echo(click.style(f'✓ Seeded {created} demo event(s)', fg='green'))


@site_commands.command('revoke-session')
@click.argument('session_id')
@with_appcontext
def revoke_session(session_id):
    """Delete one admin session record so the cookie stops working."""
    state = verify_session(session_id)
    delete_session(session_id)
    if state.authenticated:
        click.echo(click.style('✓ Session revoked', fg='green'))
    else:
        click.echo(f'No live session found ({state.reason}); record removed if present')
