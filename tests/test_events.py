"""Event ids, schedule validation, posters and the public month feed."""

import io
from datetime import datetime, timedelta

import pytest

from lakehenry.extensions import bucket, db
from lakehenry.models import Event, EventKind, EventStatus
from lakehenry.services import civil_time
from lakehenry.services.events import base_event_id, generate_event_id, slugify

from conftest import JSON, ORIGIN, location

PNG = b'\x89PNG\r\n\x1a\n' + b'\x00' * 64


def local_in(days, hour=18):
    moment = datetime.now(civil_time.SITE_TZ) + timedelta(days=days)
    return moment.strftime(f'%Y-%m-%dT{hour:02d}:00')


def event_form(**overrides):
    data = {
        'title': 'Community Meeting',
        'kind': 'Meeting',
        'status': 'published',
        'date_start': local_in(30),
        'date_end': '',
        'location': 'Lake Henry Pavilion',
        'summary': 'Annual meeting',
        'url': '',
        'url_label': '',
    }
    data.update(overrides)
    return data


def create(admin_client, **overrides):
    return admin_client.post('/api/admin/events/create', data=event_form(**overrides), headers=ORIGIN)


def add_event(event_id, *, start=None, status=EventStatus.PUBLISHED, title='Lake Cleanup', poster_key=None):
    event = Event(
        id=event_id,
        title=title,
        kind=EventKind.EVENT,
        status=status,
        is_tbd=start is None,
        date_start=civil_time.local_to_utc(start) if start else None,
        poster_key=poster_key,
        poster_alt='Poster for the cleanup' if poster_key else None,
    )
    db.session.add(event)
    db.session.commit()
    return event


class TestIds:
    def test_slugify(self):
        assert slugify("  Bob's \"Big\" Lake Day!! ") == 'bobs-big-lake-day'
        assert len(slugify('x' * 200)) == 80

    def test_base_id_uses_local_date_or_tbd(self):
        assert base_event_id('Community Meeting', '2026-06-10T19:00', False) == '2026-06-10-community-meeting'
        assert base_event_id('Community Meeting', '2026-06-10T19:00', True) == 'tbd-community-meeting'
        assert base_event_id('Community Meeting', '', False) == 'tbd-community-meeting'

    def test_collisions_get_numeric_suffix(self, app):
        add_event('2026-06-10-community-meeting')
        assert generate_event_id('2026-06-10-community-meeting') == '2026-06-10-community-meeting-2'
        add_event('2026-06-10-community-meeting-2')
        assert generate_event_id('2026-06-10-community-meeting') == '2026-06-10-community-meeting-3'

    def test_same_title_same_day_via_endpoint(self, admin_client):
        start = local_in(20)
        first = create(admin_client, date_start=start)
        second = create(admin_client, date_start=start)
        day = start[:10]
        assert location(first) == (f'/admin/events/{day}-community-meeting', {'ok': 'created'})
        assert location(second) == (f'/admin/events/{day}-community-meeting-2', {'ok': 'created'})


class TestCreate:
    def test_create_stores_utc(self, admin_client):
        start = local_in(10, hour=19)
        end = local_in(10, hour=21)
        response = create(admin_client, date_start=start, date_end=end, url='https://example.org/info')
        assert response.status_code == 303

        event = db.session.execute(db.select(Event)).scalar_one()
        assert event.status == EventStatus.PUBLISHED
        assert event.kind == EventKind.MEETING
        assert civil_time.utc_to_local(event.date_start) == start
        assert civil_time.utc_to_local(event.date_end) == end
        assert event.url == 'https://example.org/info'

    def test_tbd_event_ignores_dates(self, admin_client):
        response = create(admin_client, is_tbd='on', date_start='', status='draft')
        assert location(response) == ('/admin/events/tbd-community-meeting', {'ok': 'created'})
        event = db.session.get(Event, 'tbd-community-meeting')
        assert event.is_tbd and event.date_start is None
        assert event.status == EventStatus.DRAFT

    @pytest.mark.parametrize('overrides, err', [
        ({'title': ''}, 'invalid'),
        ({'kind': 'Party'}, 'invalid'),
        ({'date_start': ''}, 'invalid'),
        ({'date_start': 'next tuesday'}, 'invalid'),
        ({'date_start': local_in(-3)}, 'past'),
        ({'date_start': local_in(5, hour=20), 'date_end': local_in(5, hour=19)}, 'range'),
        ({'url': 'javascript:alert(1)'}, 'url'),
        ({'url': 'ftp://example.org/file'}, 'url'),
    ])
    def test_create_validation(self, admin_client, overrides, err):
        response = create(admin_client, **overrides)
        assert location(response) == ('/admin/events/new', {'err': err})
        assert db.session.execute(db.select(Event)).first() is None

    def test_create_json_error(self, admin_client):
        response = admin_client.post(
            '/api/admin/events/create',
            data=event_form(date_start=local_in(-1)),
            headers={**ORIGIN, **JSON},
        )
        assert response.status_code == 400
        assert response.get_json() == {'ok': False, 'error': 'past'}


class TestUpdate:
    def test_unchanged_past_start_is_allowed(self, admin_client):
        past = local_in(-10)
        add_event('old-event', start=past)
        response = admin_client.post(
            '/api/admin/events/update',
            data=event_form(id='old-event', title='Renamed', date_start=past),
            headers=ORIGIN,
        )
        assert location(response) == ('/admin/events/old-event', {'ok': 'updated'})
        db.session.expire_all()
        assert db.session.get(Event, 'old-event').title == 'Renamed'

    def test_moving_start_into_past_is_rejected(self, admin_client):
        add_event('future-event', start=local_in(10))
        response = admin_client.post(
            '/api/admin/events/update',
            data=event_form(id='future-event', date_start=local_in(-2)),
            headers=ORIGIN,
        )
        assert location(response) == ('/admin/events/future-event', {'err': 'past'})

    def test_missing_event(self, admin_client):
        response = admin_client.post(
            '/api/admin/events/update',
            data=event_form(id='ghost'),
            headers=ORIGIN,
        )
        assert location(response) == ('/admin/events', {'err': 'notfound'})


class TestStatusAndDelete:
    def test_toggle_status(self, admin_client):
        add_event('e1', start=local_in(3), status=EventStatus.DRAFT)
        response = admin_client.post(
            '/api/admin/events/toggle-status',
            data={'id': 'e1', 'next': 'published'},
            headers=ORIGIN,
        )
        assert location(response) == ('/admin/events', {'ok': 'toggled'})
        db.session.expire_all()
        assert db.session.get(Event, 'e1').status == EventStatus.PUBLISHED

    def test_toggle_unknown(self, admin_client):
        response = admin_client.post('/api/admin/events/toggle-status', data={'id': 'nope'}, headers=ORIGIN)
        assert location(response) == ('/admin/events', {'err': 'notfound'})

    def test_delete_removes_poster(self, admin_client):
        bucket.put('events/posters/e2.png', PNG, 'image/png')
        add_event('e2', start=local_in(3), poster_key='events/posters/e2.png')

        response = admin_client.post('/api/admin/events/delete', data={'id': 'e2'}, headers=ORIGIN)
        assert location(response) == ('/admin/events', {'ok': 'deleted'})
        db.session.expire_all()
        assert db.session.get(Event, 'e2') is None
        assert not bucket.exists('events/posters/e2.png')

    def test_delete_unknown(self, admin_client):
        response = admin_client.post('/api/admin/events/delete', data={'id': 'nope'}, headers=ORIGIN)
        assert location(response) == ('/admin/events', {'err': 'notfound'})


class TestPosters:
    def upload(self, admin_client, event_id, body=PNG, content_type='image/png', alt='Poster for the cleanup'):
        return admin_client.post(
            '/api/admin/events/poster',
            data={'id': event_id, 'alt': alt, 'poster': (io.BytesIO(body), 'poster.png', content_type)},
            content_type='multipart/form-data',
            headers=ORIGIN,
        )

    def test_upload_and_serve(self, client, admin_client):
        add_event('e3', start=local_in(4))
        response = self.upload(admin_client, 'e3')
        assert location(response) == ('/admin/events/e3', {'ok': 'poster'})
        assert bucket.exists('events/posters/e3.png')

        served = client.get('/api/events/poster?id=e3')
        assert served.status_code == 200
        assert served.data == PNG
        assert served.headers['Content-Type'] == 'image/png'
        assert served.headers['Cache-Control'] == 'public, max-age=86400'
        assert served.headers['ETag']

        cached = client.get('/api/events/poster?id=e3', headers={'If-None-Match': served.headers['ETag']})
        assert cached.status_code == 304

    def test_replacing_with_other_type_removes_old_object(self, admin_client):
        add_event('e4', start=local_in(4))
        self.upload(admin_client, 'e4')
        self.upload(admin_client, 'e4', body=b'GIF89a' + b'\x00' * 16, content_type='image/gif')
        assert bucket.exists('events/posters/e4.gif')
        assert not bucket.exists('events/posters/e4.png')
        db.session.expire_all()
        assert db.session.get(Event, 'e4').poster_key == 'events/posters/e4.gif'

    def test_row_failure_removes_new_object(self, admin_client, monkeypatch):
        add_event('e5', start=local_in(4))

        def failing_commit():
            raise RuntimeError('database unavailable')

        monkeypatch.setattr(db.session, 'commit', failing_commit)
        response = self.upload(admin_client, 'e5')
        monkeypatch.undo()

        assert location(response) == ('/admin/events', {'err': 'server'})
        assert not bucket.exists('events/posters/e5.png')

    @pytest.mark.parametrize('kwargs, err', [
        ({'alt': 'tiny'}, 'alt'),
        ({'content_type': 'application/pdf'}, 'type'),
        ({'body': b''}, 'size'),
    ])
    def test_upload_validation(self, admin_client, kwargs, err):
        add_event('e6', start=local_in(4))
        response = self.upload(admin_client, 'e6', **kwargs)
        assert location(response) == ('/admin/events/e6', {'err': err})

    def test_unknown_event(self, admin_client):
        response = self.upload(admin_client, 'ghost')
        assert location(response) == ('/admin/events', {'err': 'notfound'})

    def test_draft_posters_are_hidden(self, client):
        bucket.put('events/posters/e7.png', PNG, 'image/png')
        add_event('e7', start=local_in(4), status=EventStatus.DRAFT, poster_key='events/posters/e7.png')
        assert client.get('/api/events/poster?id=e7').status_code == 404


class TestMonthFeed:
    def test_defaults_to_newest_month_with_data(self, client):
        far = local_in(70)
        near = local_in(1)
        add_event('far', start=far, title='Far Event')
        add_event('near', start=near, title='Near Event')
        add_event('draft', start=far, status=EventStatus.DRAFT, title='Hidden Draft')
        add_event('tbd-thing')

        feed = client.get('/api/events/month').get_json()
        assert feed['ok'] is True
        assert feed['monthKey'] == far[:7]
        assert [e['id'] for e in feed['monthEvents']] == ['far']
        assert feed['nextMonthKey'] is None
        assert feed['prevMonthKey'] is not None
        assert feed['monthLabel'] == civil_time.month_label(far[:7])

    def test_explicit_month_and_navigation(self, client):
        near = local_in(1)
        add_event('near', start=near)
        current = civil_time.current_month_key()

        feed = client.get(f'/api/events/month?month={near[:7]}').get_json()
        assert feed['monthKey'] == near[:7]
        assert feed['monthEvents'][0]['dateStart'] == near
        assert feed['monthEvents'][0]['dateStartUtc'].endswith('Z')
        if near[:7] != current:
            assert feed['prevMonthKey'] == current

    def test_unknown_month_falls_back(self, client):
        feed = client.get('/api/events/month?month=1999-01').get_json()
        assert feed['monthKey'] == civil_time.current_month_key()
        assert feed['monthEvents'] == []
        assert feed['prevMonthKey'] is None and feed['nextMonthKey'] is None

    def test_events_page_renders(self, client):
        add_event('near', start=local_in(1), title='Lake Cleanup Day')
        body = client.get('/events').get_data(as_text=True)
        assert 'Lake Cleanup Day' in body
