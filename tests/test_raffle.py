"""Raffle winners, month titles and the live video link."""

import pytest

from lakehenry.extensions import db, kv
from lakehenry.models import RaffleWinner
from lakehenry.services import civil_time, raffle

from conftest import ORIGIN

PAGE = 'https://www.facebook.com/61552199315213/videos'


def post_winners(admin_client, payload):
    return admin_client.post('/api/admin/raffle/winners', json=payload, headers=ORIGIN)


def winner(**overrides):
    payload = {
        'action': 'add',
        'drawDate': '2026-05-14',
        'ticketNumber': '0042',
        'name': 'Lee Parker',
        'town': 'Hamlin',
        'prize': '$100',
    }
    payload.update(overrides)
    return payload


class TestWinners:
    def test_add_and_list(self, admin_client):
        response = post_winners(admin_client, winner())
        assert response.status_code == 200
        assert response.get_json() == {'ok': True, 'id': '2026-05-2026-05-14-42'}

        listing = admin_client.get('/api/admin/raffle/winners?raffleKey=2026-05').get_json()
        assert listing['winners'] == [{
            'id': '2026-05-2026-05-14-42',
            'raffleKey': '2026-05',
            'drawDate': '2026-05-14',
            'ticketNumber': 42,
            'name': 'Lee Parker',
            'town': 'Hamlin',
            'prize': '$100',
        }]

    def test_same_id_replaces(self, admin_client):
        post_winners(admin_client, winner())
        post_winners(admin_client, winner(name='Lee Parker-Smith', prize=''))
        db.session.expire_all()
        rows = db.session.execute(db.select(RaffleWinner)).scalars().all()
        assert len(rows) == 1
        assert rows[0].winner_name == 'Lee Parker-Smith'
        assert rows[0].prize is None

    def test_same_ticket_different_day_is_separate(self, admin_client):
        post_winners(admin_client, winner())
        post_winners(admin_client, winner(drawDate='2026-05-21'))
        assert len(raffle.list_winners('2026-05')) == 2

    def test_numeric_ticket_in_json(self, admin_client):
        response = post_winners(admin_client, winner(ticketNumber=7))
        assert response.get_json()['id'] == '2026-05-2026-05-14-7'

    @pytest.mark.parametrize('overrides, status', [
        ({'drawDate': '2026-02-30'}, 400),
        ({'drawDate': '14/05/2026'}, 400),
        ({'ticketNumber': '0'}, 400),
        ({'ticketNumber': 'seven'}, 400),
        ({'name': 'L'}, 400),
        ({'town': ''}, 400),
        ({'action': 'explode'}, 400),
    ])
    def test_add_validation(self, admin_client, overrides, status):
        response = post_winners(admin_client, winner(**overrides))
        assert response.status_code == status
        body = response.get_json()
        assert body['ok'] is False and body['error']
        assert db.session.execute(db.select(RaffleWinner)).first() is None

    def test_error_message_is_readable(self, admin_client):
        response = post_winners(admin_client, winner(drawDate='2026-13-01'))
        assert response.get_json()['error'] == 'drawDate must be a valid YYYY-MM-DD date'

    def test_body_must_be_json_object(self, admin_client):
        response = admin_client.post(
            '/api/admin/raffle/winners',
            data='not json',
            content_type='application/json',
            headers=ORIGIN,
        )
        assert response.status_code == 400
        assert response.get_json() == {'ok': False, 'error': 'Invalid JSON'}

    def test_delete(self, admin_client):
        post_winners(admin_client, winner())
        response = post_winners(admin_client, {'action': 'delete', 'id': '2026-05-2026-05-14-42'})
        assert response.get_json() == {'ok': True}
        assert raffle.list_winners('2026-05') == []

    def test_delete_requires_id(self, admin_client):
        response = post_winners(admin_client, {'action': 'delete'})
        assert response.status_code == 400

    def test_list_requires_month(self, admin_client):
        response = admin_client.get('/api/admin/raffle/winners?raffleKey=May')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'raffleKey (YYYY-MM) required'

    def test_set_month_title(self, admin_client):
        response = post_winners(admin_client, {'action': 'setMeta', 'raffleKey': '2026-05', 'title': ' Spring Calendar Raffle '})
        assert response.get_json() == {'ok': True, 'title': 'Spring Calendar Raffle'}
        assert raffle.month_title('2026-05') == 'Spring Calendar Raffle'

        post_winners(admin_client, {'action': 'setMeta', 'raffleKey': '2026-05', 'title': ''})
        db.session.expire_all()
        assert raffle.month_title('2026-05') is None


class TestMonthFeed:
    def test_defaults_to_newest_month_when_current_is_empty(self, client, admin_client):
        post_winners(admin_client, winner(drawDate='2020-03-02'))
        post_winners(admin_client, winner(drawDate='2020-05-09'))
        post_winners(admin_client, {'action': 'setMeta', 'raffleKey': '2020-05', 'title': 'Boat Raffle'})

        feed = client.get('/api/raffle/month').get_json()
        assert feed['monthKey'] == '2020-05'
        assert feed['raffleTitle'] == 'Boat Raffle'
        assert feed['prevMonthKey'] == '2020-03'
        assert feed['nextMonthKey'] == civil_time.current_month_key()
        assert [w['drawDate'] for w in feed['winners']] == ['2020-05-09']
        assert feed['months'][0] == {
            'key': civil_time.current_month_key(),
            'label': civil_time.month_label(civil_time.current_month_key()),
        }

    def test_current_month_wins_when_it_has_winners(self, client, admin_client):
        current = civil_time.current_month_key()
        post_winners(admin_client, winner(drawDate='2020-03-02'))
        post_winners(admin_client, winner(drawDate=f'{current}-01'))
        assert client.get('/api/raffle/month').get_json()['monthKey'] == current

    def test_explicit_month(self, client, admin_client):
        post_winners(admin_client, winner(drawDate='2020-03-02'))
        post_winners(admin_client, winner(drawDate='2020-05-09'))
        feed = client.get('/api/raffle/month?month=2020-03').get_json()
        assert feed['monthKey'] == '2020-03'
        assert feed['nextMonthKey'] == '2020-05'
        assert feed['prevMonthKey'] is None

    def test_public_page_renders_winners(self, client, admin_client):
        post_winners(admin_client, winner(drawDate='2020-05-09', name='Robin Hale'))
        body = client.get('/raffle?month=2020-05').get_data(as_text=True)
        assert 'Robin Hale' in body


class TestVideoUrls:
    @pytest.mark.parametrize('url, video_id', [
        ('https://www.facebook.com/lakehenry/videos/123456789/', '123456789'),
        ('https://facebook.com/watch/?v=987654321', '987654321'),
        ('http://m.facebook.com/story/videos/555', '555'),
        ('https://www.facebook.com/watch/?v=abc', None),
        ('https://evil.example/videos/123', None),
        ('javascript:alert(1)', None),
        ('not a url', None),
    ])
    def test_facebook_video_id(self, url, video_id):
        assert raffle.facebook_video_id(url) == video_id

    def test_normalize_uses_configured_page(self):
        assert raffle.normalize_video_url('https://facebook.com/watch/?v=42', '61552199315213') == f'{PAGE}/42/'


class TestLiveConfig:
    def save(self, admin_client, url):
        return admin_client.post('/api/admin/raffle/live', json={'latestVideoUrl': url}, headers=ORIGIN)

    def test_empty_by_default(self, admin_client):
        response = admin_client.get('/api/admin/raffle/live')
        assert response.get_json() == {
            'ok': True,
            'config': {'latestVideoUrl': None, 'previousVideoUrl': None, 'updatedAt': None},
        }

    def test_save_normalises_and_rolls_previous(self, admin_client):
        first = self.save(admin_client, 'https://www.facebook.com/watch/?v=111').get_json()['config']
        assert first['latestVideoUrl'] == f'{PAGE}/111/'
        assert first['previousVideoUrl'] is None
        assert first['updatedAt'].endswith('Z')

        second = self.save(admin_client, 'https://facebook.com/lakehenry/videos/222').get_json()['config']
        assert second['latestVideoUrl'] == f'{PAGE}/222/'
        assert second['previousVideoUrl'] == f'{PAGE}/111/'

        # Saving the same video again keeps the previous link
        again = self.save(admin_client, f'{PAGE}/222/').get_json()['config']
        assert again['previousVideoUrl'] == f'{PAGE}/111/'

    def test_clearing_latest_keeps_previous(self, admin_client):
        self.save(admin_client, 'https://www.facebook.com/watch/?v=111')
        self.save(admin_client, 'https://www.facebook.com/watch/?v=222')
        cleared = self.save(admin_client, '').get_json()['config']
        assert cleared['latestVideoUrl'] is None
        assert cleared['previousVideoUrl'] == f'{PAGE}/111/'

    @pytest.mark.parametrize('url', ['https://youtube.com/watch?v=1', 12345, 'facebook'])
    def test_rejects_other_urls(self, admin_client, url):
        response = self.save(admin_client, url)
        assert response.status_code == 400
        assert response.get_json()['error'].startswith('Please paste a Facebook video URL')

    def test_malformed_record_reads_as_empty(self, app):
        kv.put(raffle.LIVE_CONFIG_KEY, '[1, 2')
        assert raffle.get_live_config()['latestVideoUrl'] is None

    def test_public_raffle_page_embeds_latest(self, client, admin_client):
        self.save(admin_client, 'https://www.facebook.com/watch/?v=111')
        body = client.get('/raffle').get_data(as_text=True)
        assert '111' in body
