"""Tests for cms_backend.routes.ai — the AI content endpoints."""
import pytest

from cms_backend.models.ai_content import AIContent
from cms_backend.services.content_generator import ContentGenerationError, GenerationResult


@pytest.fixture
def generation():
    return GenerationResult(
        content='<h1>Launch</h1>\n\nWe shipped.',
        tokens_used=1000,
        estimated_cost=0.0375,
        quality_score=95,
        readability_score=100,
        meta_title='Launch',
        meta_description='We shipped',
        seo_suggestions=[],
    )


class TestGenerate:

    def test_requires_type_and_prompt(self, client):
        resp = client.post('/api/ai/generate', json={'type': 'blog_post'})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Type and userPrompt are required'

    def test_generates_and_saves(self, client, db_session, mock_generator, generation):
        mock_generator.generate.return_value = generation
        resp = client.post('/api/ai/generate', json={
            'type': 'blog_post', 'userPrompt': 'Announce the launch', 'focusKeyword': 'launch',
            'author': 'ed',
        })

        assert resp.status_code == 200
        body = resp.get_json()
        assert body['success'] is True
        assert body['data']['content'] == generation.content
        assert body['data']['tokens_used'] == 1000

        req = mock_generator.generate.call_args.args[0]
        assert req.user_prompt == 'Announce the launch'
        assert req.focus_keyword == 'launch'

        record = db_session.get(AIContent, body['data']['ai_content_id'])
        assert record.type == 'blog_post'
        assert record.author == 'ed'
        assert record.ai_settings['model'] == 'gpt-4'
        assert record.seo_optimization['focus_keyword'] == 'launch'
        assert record.title.startswith('AI Generated blog post - ')

    def test_skip_saving(self, client, db_session, mock_generator, generation):
        mock_generator.generate.return_value = generation
        resp = client.post('/api/ai/generate', json={'type': 'page', 'userPrompt': 'x', 'saveToCollection': False})
        assert 'ai_content_id' not in resp.get_json()['data']
        assert db_session.query(AIContent).count() == 0

    def test_invalid_parameters(self, client):
        resp = client.post('/api/ai/generate', json={'type': 'page', 'userPrompt': 'x', 'maxTokens': 'lots'})
        assert resp.status_code == 400

    def test_non_numeric_word_count_400(self, client, mock_generator):
        resp = client.post('/api/ai/generate', json={'type': 'page', 'userPrompt': 'x', 'wordCount': 'abc'})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Invalid generation parameters'
        mock_generator.generate.assert_not_called()

    def test_string_keywords_split(self, client, mock_generator, generation):
        mock_generator.generate.return_value = generation
        client.post('/api/ai/generate', json={
            'type': 'page', 'userPrompt': 'x', 'keywords': 'seo, tools', 'saveToCollection': False,
        })
        assert mock_generator.generate.call_args.args[0].keywords == ['seo', 'tools']

    def test_generation_failure_500(self, client, mock_generator):
        mock_generator.generate.side_effect = ContentGenerationError('Failed to generate content')
        resp = client.post('/api/ai/generate', json={'type': 'page', 'userPrompt': 'x'})
        assert resp.status_code == 500
        assert resp.get_json()['details'] == 'Failed to generate content'


class TestImprove:

    def test_improves(self, client, mock_generator):
        mock_generator.improve.return_value = 'Better'
        resp = client.post('/api/ai/improve', json={
            'content': 'Good', 'improvementType': 'seo', 'focusKeyword': 'crm',
        })
        assert resp.get_json() == {'success': True, 'data': {'improved_content': 'Better'}}
        mock_generator.improve.assert_called_once_with('Good', 'seo', 'crm')

    def test_unknown_type(self, client, mock_generator):
        resp = client.post('/api/ai/improve', json={'content': 'Good', 'improvementType': 'magic'})
        assert resp.status_code == 400
        mock_generator.improve.assert_not_called()

    def test_missing_content(self, client):
        assert client.post('/api/ai/improve', json={'improvementType': 'seo'}).status_code == 400


class TestTranslate:

    def test_translates(self, client, mock_generator):
        mock_generator.translate.return_value = 'Bonjour'
        resp = client.post('/api/ai/translate', json={'content': 'Hello', 'targetLanguage': 'fr'})
        assert resp.get_json()['data'] == {'translated_content': 'Bonjour', 'target_language': 'fr'}
        mock_generator.translate.assert_called_once_with('Hello', 'fr', True)

    def test_preserve_formatting_flag(self, client, mock_generator):
        mock_generator.translate.return_value = 'Hola'
        client.post('/api/ai/translate', json={'content': 'Hi', 'targetLanguage': 'es', 'preserveFormatting': False})
        assert mock_generator.translate.call_args.args[2] is False

    def test_requires_language(self, client):
        assert client.post('/api/ai/translate', json={'content': 'Hello'}).status_code == 400


class TestSeoSuggestions:

    def test_returns_suggestions(self, client, mock_generator):
        mock_generator.seo_suggestions.return_value = [{'type': 'meta', 'suggestion': 'x', 'priority': 'high'}]
        resp = client.post('/api/ai/seo-suggestions', json={
            'content': 'text', 'focusKeyword': 'crm', 'currentTitle': 'CRM',
        })
        data = resp.get_json()['data']
        assert data['focus_keyword'] == 'crm'
        assert data['suggestions'][0]['priority'] == 'high'
        mock_generator.seo_suggestions.assert_called_once_with('text', 'crm', 'CRM', None)

    def test_requires_keyword(self, client):
        assert client.post('/api/ai/seo-suggestions', json={'content': 'text'}).status_code == 400
