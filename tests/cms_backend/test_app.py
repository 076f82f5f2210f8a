"""Tests for cms_backend.create_app — blueprints and the editor token gate."""
import pytest
from unittest.mock import patch


@pytest.fixture
def token():
    with patch('cms_backend.config.ADMIN_API_TOKEN', 'secret-token'):
        yield 'secret-token'


class TestCreateApp:

    def test_generator_registered(self, app, mock_generator):
        assert app.extensions['content_generator'] is mock_generator

    def test_blueprints_registered(self, app):
        assert {'health', 'forms', 'seo', 'ai', 'content'} <= set(app.blueprints)


class TestTokenGate:

    @pytest.mark.parametrize('method,path', [
        ('post', '/api/ai/generate'),
        ('patch', '/api/content/1'),
        ('get', '/api/content/1/versions'),
        ('post', '/api/seo/analyze'),
    ])
    def test_editor_endpoints_require_token(self, client, token, method, path):
        resp = getattr(client, method)(path, json={})
        assert resp.status_code == 401
        assert resp.get_json() == {'error': 'Unauthorized'}

    def test_wrong_token_rejected(self, client, token):
        resp = client.post('/api/ai/improve', json={}, headers={'Authorization': 'Bearer nope'})
        assert resp.status_code == 401

    def test_valid_token_passes(self, client, token):
        resp = client.post('/api/ai/improve', json={}, headers={'Authorization': f'Bearer {token}'})
        assert resp.status_code == 400

    @pytest.mark.parametrize('path', ['/robots.txt', '/api/seo/score'])
    def test_public_endpoints_open(self, client, token, path):
        assert client.get(path).status_code != 401

    def test_form_submission_open(self, client, token):
        assert client.post('/api/forms/999/submissions', json={'data': {}}).status_code == 404

    def test_no_token_configured_is_open(self, client):
        with patch('cms_backend.config.ADMIN_API_TOKEN', None):
            assert client.post('/api/ai/improve', json={}).status_code == 400
