"""
CRM sync adapters — one adapter per provider.

Each adapter maps submission fields to the provider's field names using the
form's field_mapping table and pushes the lead. Any non-2xx response raises
CrmSyncError; the notification stage records it.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Type

import requests

from cms_backend.config import HUBSPOT_API_URL, PIPEDRIVE_API_URL, WEBHOOK_TIMEOUT

logger = logging.getLogger('pipeline.crm')


class CrmSyncError(Exception):
    """Raised when a CRM rejects or cannot receive a lead."""


def map_fields(data: Dict[str, Any], field_mapping: List[Dict[str, str]]) -> Dict[str, Any]:
    """Translate submission field names to CRM field names. Empty values are skipped."""
    mapped = {}
    for mapping in field_mapping or []:
        form_field = mapping.get('form_field')
        crm_field = mapping.get('crm_field')
        if not form_field or not crm_field:
            continue
        value = data.get(form_field)
        if value is not None and value != '':
            mapped[crm_field] = value
    return mapped


def _check(response, provider: str):
    if not 200 <= response.status_code < 300:
        raise CrmSyncError(f"{provider} sync failed with status {response.status_code}")


class CrmAdapter(ABC):
    """Base class for CRM adapters."""
    provider: str = ''
    default_url: str = ''

    def __init__(self, config: Dict[str, Any], timeout: float = WEBHOOK_TIMEOUT):
        self.config = config or {}
        self.timeout = timeout

    @property
    def api_url(self) -> str:
        return self.config.get('api_url') or self.default_url

    @property
    def api_key(self) -> str:
        return self.config.get('api_key') or ''

    def mapped(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return map_fields(data, self.config.get('field_mapping'))

    def _bearer_headers(self) -> Dict[str, str]:
        return {
            'Authorization': f'Bearer {self.api_key}',
            'Content-Type': 'application/json',
        }

    @abstractmethod
    def sync(self, data: Dict[str, Any], lead_id: int) -> None:
        ...


class CustomCrmAdapter(CrmAdapter):
    """Generic JSON endpoint: POST {leadId, data, originalData} with bearer auth."""
    provider = 'custom'

    @property
    def api_url(self) -> str:
        return self.config.get('api_url') or self.config.get('webhook_url') or ''

    def sync(self, data, lead_id):
        if not self.api_url:
            raise CrmSyncError('custom CRM requires api_url')
        resp = requests.post(
            self.api_url,
            headers=self._bearer_headers(),
            json={'leadId': lead_id, 'data': self.mapped(data), 'originalData': data},
            timeout=self.timeout,
        )
        _check(resp, self.provider)


class HubSpotCrmAdapter(CrmAdapter):
    """HubSpot contacts API — one contact per lead."""
    provider = 'hubspot'
    default_url = HUBSPOT_API_URL

    def sync(self, data, lead_id):
        properties = self.mapped(data)
        properties.setdefault('email', data.get('email', ''))
        resp = requests.post(
            f"{self.api_url}/crm/v3/objects/contacts",
            headers=self._bearer_headers(),
            json={'properties': properties},
            timeout=self.timeout,
        )
        # 409 = contact already exists for this email; HubSpot keeps the original
        if resp.status_code == 409:
            logger.info("HubSpot contact already exists for lead %s", lead_id)
            return
        _check(resp, self.provider)


class SalesforceCrmAdapter(CrmAdapter):
    """Salesforce REST sObject API — creates a Lead record."""
    provider = 'salesforce'

    def sync(self, data, lead_id):
        if not self.api_url:
            raise CrmSyncError('salesforce requires api_url (instance URL)')
        fields = self.mapped(data)
        fields.setdefault('Email', data.get('email', ''))
        fields.setdefault('LastName', data.get('lastName') or data.get('name') or 'Unknown')
        fields.setdefault('Company', data.get('company') or 'Unknown')
        resp = requests.post(
            f"{self.api_url.rstrip('/')}/services/data/v59.0/sobjects/Lead",
            headers=self._bearer_headers(),
            json=fields,
            timeout=self.timeout,
        )
        _check(resp, self.provider)


class PipedriveCrmAdapter(CrmAdapter):
    """Pipedrive persons API — token passed as query param."""
    provider = 'pipedrive'
    default_url = PIPEDRIVE_API_URL

    def sync(self, data, lead_id):
        person = self.mapped(data)
        person.setdefault('name', data.get('name') or data.get('email') or f'Lead {lead_id}')
        if data.get('email'):
            person.setdefault('email', [data['email']])
        resp = requests.post(
            f"{self.api_url}/persons",
            params={'api_token': self.api_key},
            json=person,
            timeout=self.timeout,
        )
        _check(resp, self.provider)


# ── Adapter registry ─────────────────────────────────────────────────────────

ADAPTERS: Dict[str, Type[CrmAdapter]] = {
    'custom': CustomCrmAdapter,
    'hubspot': HubSpotCrmAdapter,
    'salesforce': SalesforceCrmAdapter,
    'pipedrive': PipedriveCrmAdapter,
}


def get_adapter(config: Dict[str, Any]) -> CrmAdapter:
    """Look up and instantiate the adapter for a form's CRM config."""
    provider = (config or {}).get('provider')
    adapter_cls = ADAPTERS.get(provider)
    if not adapter_cls:
        raise CrmSyncError(f"Unsupported CRM provider: {provider}")
    return adapter_cls(config)
