"""Tests for cms_backend.routes.content — editor saves, history and rollback."""
import pytest

from cms_backend.models.content_version import ContentVersion
from cms_backend.models.seo_record import SEORecord


def patch_item(client, item_id, **body):
    return client.patch(f'/api/content/{item_id}', json=body)


class TestPatchContent:

    def test_updates_versions_and_scores(self, client, db_session, make_content_item):
        item = make_content_item()
        resp = patch_item(client, item.id, changes={'title': 'About Acme'}, author='ed', changeLog='rename')

        assert resp.status_code == 200
        body = resp.get_json()
        assert body['content']['title'] == 'About Acme'
        assert body['result']['version'] == '1.0'
        assert body['result']['seo_score'] is not None

        version = db_session.query(ContentVersion).one()
        assert version.change_log == 'rename'
        assert db_session.query(SEORecord).count() == 1

    def test_unknown_item_404(self, client):
        assert patch_item(client, 999, changes={'title': 'x'}).status_code == 404

    def test_invalid_changes_400(self, client, db_session, make_content_item):
        item = make_content_item()
        resp = patch_item(client, item.id, changes={'status': 'live'})

        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Invalid status'
        assert db_session.query(ContentVersion).count() == 0

    def test_bad_layout_400(self, client, make_content_item):
        item = make_content_item()
        resp = patch_item(client, item.id, changes={'layout': [{'block_type': 'hero', 'title': 'x'}]})

        assert resp.status_code == 400
        body = resp.get_json()
        assert body['error'] == 'Invalid layout'
        assert "subtitle" in body['details'][0]

    def test_malformed_feature_item_400(self, client, make_content_item):
        item = make_content_item()
        layout = [{'block_type': 'features', 'title': 't', 'features': ['a']}]
        resp = patch_item(client, item.id, changes={'layout': layout})

        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Invalid layout'

    def test_invalid_version_type(self, client, make_content_item):
        item = make_content_item()
        assert patch_item(client, item.id, changes={'title': 'x'}, versionType='mega').status_code == 400

    def test_auto_optimize_uses_app_generator(self, client, mock_generator, make_content_item):
        item = make_content_item(meta={'title': 'About', 'description': 'd', 'focus_keyword': 'marketing'})
        mock_generator.seo_suggestions.return_value = [{'type': 'keyword', 'suggestion': 's', 'priority': 'low'}]

        resp = patch_item(client, item.id, changes={'title': 'About Acme'}, autoOptimize=True)

        assert resp.get_json()['result']['seo_suggestions'][0]['type'] == 'keyword'


class TestVersions:

    def test_lists_history(self, client, make_content_item):
        item = make_content_item()
        patch_item(client, item.id, changes={'title': 'One'})
        patch_item(client, item.id, changes={'title': 'Two'}, versionType='major')

        resp = client.get(f'/api/content/{item.id}/versions')
        assert [(v['version'], v['is_current']) for v in resp.get_json()] == [('1.0', False), ('2.0', True)]

    def test_unknown_item_404(self, client):
        assert client.get('/api/content/999/versions').status_code == 404


class TestRollback:

    def test_rolls_back_as_new_version(self, client, db_session, make_content_item):
        item = make_content_item()
        patch_item(client, item.id, changes={'title': 'First'})
        patch_item(client, item.id, changes={'title': 'Second'})
        first = db_session.query(ContentVersion).filter_by(version='1.0').one()

        resp = client.post(f'/api/content/{item.id}/rollback/{first.id}', json={'author': 'ed', 'reason': 'oops'})

        assert resp.status_code == 200
        body = resp.get_json()
        assert body['content']['title'] == 'First'
        assert body['version']['version'] == '1.2'
        assert body['version']['change_log'] == 'Rolled back to version 1.0: oops'
        assert body['result']['seo_score'] is not None
        assert db_session.query(ContentVersion).count() == 3

    def test_unknown_version_404(self, client, make_content_item):
        item = make_content_item()
        assert client.post(f'/api/content/{item.id}/rollback/12345').status_code == 404

    def test_unknown_item_404(self, client):
        assert client.post('/api/content/999/rollback/1').status_code == 404
