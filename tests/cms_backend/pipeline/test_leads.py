"""Tests for cms_backend.pipeline.leads — lead creation and merge."""
import pytest

from cms_backend.models.lead import Lead
from cms_backend.pipeline.leads import (
    LeadError,
    build_lead_fields,
    extract_custom_fields,
    field_type,
    normalize_email,
    upsert_lead,
)


class TestNormalizeEmail:

    def test_trims_and_lowercases(self):
        assert normalize_email('  Jane@ACME.io ') == 'jane@acme.io'


class TestFieldType:

    @pytest.mark.parametrize('value,expected', [
        (True, 'boolean'),
        (3, 'number'),
        (2.5, 'number'),
        ('https://acme.io', 'url'),
        ('hello', 'text'),
    ])
    def test_types(self, value, expected):
        assert field_type(value) == expected


class TestBuildLeadFields:

    def test_maps_standard_fields(self, make_form):
        form = make_form()
        fields = build_lead_fields({
            'firstName': 'Jane', 'lastName': 'Doe', 'email': 'jane@acme.io',
            'company': 'Acme', 'website': 'https://acme.io', 'budget': '5000',
            'tags': 'demo, enterprise,',
            'utm_source': 'google', 'utm_campaign': 'spring',
        }, form)

        assert fields['name'] == 'Jane Doe'
        assert fields['company'] == {'name': 'Acme', 'website': 'https://acme.io'}
        assert fields['qualification'] == {'budget': '5000'}
        assert fields['tags'] == ['demo', 'enterprise']
        assert fields['source']['form'] == form.id
        assert fields['source']['utm_parameters'] == {'source': 'google', 'campaign': 'spring'}

    def test_custom_fields_keyed_by_label(self, make_form):
        form = make_form(fields=[{'name': 'team_size', 'label': 'Team Size', 'type': 'number'}])
        custom = extract_custom_fields({'team_size': 12, 'email': 'a@b.co', 'utm_term': 'x'}, form)
        assert custom == {'Team Size': {'value': '12', 'type': 'number'}}

    def test_unlabelled_custom_field_uses_name(self, make_form):
        form = make_form(fields=[])
        assert 'referral' in extract_custom_fields({'referral': 'friend'}, form)


class TestUpsertLead:

    def test_missing_email_raises(self, db_session, make_form):
        with pytest.raises(LeadError):
            upsert_lead(db_session, make_form(), {'name': 'No Email'}, 40)

    def test_creates_new_lead(self, db_session, make_form, sample_submission):
        form = make_form()
        lead = upsert_lead(db_session, form, sample_submission, 65)

        assert lead.id is not None
        assert lead.email == 'jane@acme.io'
        assert lead.status == 'new'
        assert lead.score == 65
        assert lead.grade == 'warm'
        assert len(lead.scoring_history) == 1
        assert lead.scoring_history[0]['previous_score'] == 0
        assert lead.scoring_history[0]['new_score'] == 65
        assert len(lead.activities) == 1

    def test_email_lookup_is_normalized(self, db_session, make_form, sample_submission):
        form = make_form()
        first = upsert_lead(db_session, form, sample_submission, 30)
        second = upsert_lead(db_session, form, {**sample_submission, 'email': ' JANE@acme.io'}, 50)
        assert first.id == second.id
        assert db_session.query(Lead).count() == 1

    def test_update_appends_history(self, db_session, make_form, sample_submission):
        form = make_form()
        upsert_lead(db_session, form, sample_submission, 30)
        upsert_lead(db_session, form, sample_submission, 45)
        lead = upsert_lead(db_session, form, sample_submission, 85)

        assert len(lead.scoring_history) == 3
        assert [h['new_score'] for h in lead.scoring_history] == [30, 45, 85]
        assert lead.scoring_history[-1]['previous_score'] == 45
        assert len(lead.activities) == 3
        assert lead.score == 85
        assert lead.grade == 'hot'

    def test_update_keeps_known_values_when_new_ones_empty(self, db_session, make_form):
        form = make_form()
        upsert_lead(db_session, form, {'email': 'a@b.co', 'name': 'Ann', 'phone': '555-0100'}, 10)
        lead = upsert_lead(db_session, form, {'email': 'a@b.co', 'name': 'Ann Lee', 'phone': ''}, 10)

        assert lead.name == 'Ann Lee'
        assert lead.phone == '555-0100'

    def test_update_merges_custom_fields_and_tags(self, db_session, make_form):
        form = make_form(fields=[])
        upsert_lead(db_session, form, {'email': 'a@b.co', 'referral': 'friend', 'tags': 'demo'}, 10)
        lead = upsert_lead(db_session, form, {'email': 'a@b.co', 'interest': 'pricing', 'tags': 'pricing'}, 10)

        assert set(lead.custom_fields) == {'referral', 'interest'}
        assert lead.tags == ['demo', 'pricing']

    def test_status_not_reset_on_update(self, db_session, make_form, sample_submission):
        form = make_form()
        lead = upsert_lead(db_session, form, sample_submission, 30)
        lead.status = 'contacted'
        db_session.flush()

        lead = upsert_lead(db_session, form, sample_submission, 30)
        assert lead.status == 'contacted'
