"""Shared test fixtures."""
import pytest
from unittest.mock import patch, MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from cms_backend.database import Base, enable_sqlite_savepoints


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created."""
    engine = enable_sqlite_savepoints(create_engine('sqlite:///:memory:'))
    import cms_backend.models.form
    import cms_backend.models.submission
    import cms_backend.models.lead
    import cms_backend.models.seo_record
    import cms_backend.models.content_item
    import cms_backend.models.content_version
    import cms_backend.models.ai_content
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """SQLAlchemy session bound to in-memory SQLite. Rolls back after each test."""
    Session = sessionmaker(bind=db_engine)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(autouse=True)
def patch_get_session(db_session):
    """Route all get_session() calls to the test session.

    We disable close() so that route handlers calling session.close()
    in their finally blocks don't invalidate the shared test session.
    """
    _real_close = db_session.close
    db_session.close = lambda: None
    with patch('cms_backend.database.get_session', return_value=db_session):
        yield db_session
    db_session.close = _real_close


@pytest.fixture
def mock_redis():
    """Mock Redis client."""
    mock = MagicMock()
    with patch('cms_backend.extensions.redis_client', mock):
        yield mock


@pytest.fixture
def mock_generator():
    """ContentGenerator stand-in; configure return values per test."""
    generator = MagicMock()
    generator.default_model = 'gpt-4'
    return generator


@pytest.fixture
def app(mock_generator):
    """Flask test app."""
    from cms_backend import create_app
    app = create_app(content_generator=mock_generator)
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def make_form(db_session):
    """Factory fixture — persists a Form with sensible defaults."""
    from cms_backend.models.form import Form

    def _make(**overrides):
        defaults = dict(
            name='Contact Us',
            type='contact',
            is_active=True,
            fields=[
                {'name': 'name', 'label': 'Full Name', 'type': 'text', 'required': True},
                {'name': 'email', 'label': 'Email', 'type': 'email', 'required': True},
                {'name': 'company', 'label': 'Company', 'type': 'text', 'required': False},
                {'name': 'budget', 'label': 'Budget', 'type': 'number', 'required': False},
            ],
            lead_scoring={},
            notifications={},
            crm={},
            views=0,
            submissions=0,
            conversion_rate=0.0,
        )
        defaults.update(overrides)
        form = Form(**defaults)
        db_session.add(form)
        db_session.commit()
        return form
    return _make


@pytest.fixture
def make_content_item(db_session):
    """Factory fixture — persists a published ContentItem."""
    from cms_backend.models.content_item import ContentItem

    def _make(**overrides):
        defaults = dict(
            content_type='page',
            slug='about',
            title='About Us',
            status='published',
            body='<h1>About</h1><p>We build tools for marketing teams.</p>',
            layout=[],
            meta={'title': 'About Us', 'description': 'Who we are', 'focus_keyword': ''},
            images=[],
            links=[],
        )
        defaults.update(overrides)
        item = ContentItem(**defaults)
        db_session.add(item)
        db_session.commit()
        return item
    return _make


@pytest.fixture
def sample_submission():
    """Submission data resembling a real contact form post."""
    return {
        'name': 'Jane Doe',
        'email': 'jane@acme.io',
        'company': 'Acme',
        'budget': '5000',
        'message': 'Interested in a demo for our team.',
    }
