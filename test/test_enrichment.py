"""Tests for best-effort metrics enrichment."""

import asyncio

import pytest

from status_monitoring.enrichment import (
    UNKNOWN_ENRICHMENT,
    Enrichment,
    MetricsEnricher,
    enrich_all,
    enrich_safely,
)
from status_monitoring.models import Endpoint, EndpointStatus

ENDPOINT = Endpoint(id='1', name='Web server', url='https://web.example.test/', uptime='99.9%')

SAMPLE = {
    'sslInfo': {'isValid': True, 'expiresIn': '45 days'},
    'availability': {'last24h': '100.0%', 'last7d': '99.8%'},
    'lastDowntime': '2026-10-12T03:14:00Z',
    'responseHistory': [120, 98, 134, 0],
}


class StaticEnricher(MetricsEnricher):
    def __init__(self, data):
        self.data = data
        self.calls = []

    async def enrich(self, endpoint, status):
        self.calls.append((endpoint.id, status))
        return self.data


class FailingEnricher(MetricsEnricher):
    async def enrich(self, endpoint, status):
        raise ConnectionError("metrics store unreachable")


class SlowEnricher(MetricsEnricher):
    async def enrich(self, endpoint, status):
        await asyncio.sleep(5)
        return SAMPLE


class TestEnrichment:
    """Test the Enrichment model."""

    def test_placeholder(self):
        assert UNKNOWN_ENRICHMENT.to_dict() == {
            'sslInfo': {'isValid': None, 'expiresIn': 'unknown'},
            'availability': {'last24h': 'unknown', 'last7d': 'unknown'},
            'lastDowntime': 'unknown',
            'responseHistory': [],
        }

    def test_accepts_camel_and_snake_case(self):
        camel = Enrichment.model_validate(SAMPLE)
        snake = Enrichment.model_validate({
            'ssl_info': {'is_valid': True, 'expires_in': '45 days'},
            'availability': {'last24h': '100.0%', 'last7d': '99.8%'},
            'last_downtime': '2026-10-12T03:14:00Z',
            'response_history': [120, 98, 134, 0],
        })
        assert camel == snake
        assert camel.to_dict() == SAMPLE


class TestEnrichSafely:
    """Test enrich_safely()."""

    @pytest.mark.asyncio
    async def test_no_enricher(self):
        assert await enrich_safely(None, ENDPOINT, EndpointStatus.ONLINE) is UNKNOWN_ENRICHMENT

    @pytest.mark.asyncio
    async def test_valid_data(self):
        enricher = StaticEnricher(SAMPLE)

        result = await enrich_safely(enricher, ENDPOINT, EndpointStatus.DEGRADED)

        assert result.ssl_info.is_valid is True
        assert result.response_history == [120, 98, 134, 0]
        assert enricher.calls == [('1', EndpointStatus.DEGRADED)]

    @pytest.mark.asyncio
    async def test_numeric_windows_coerced_not_discarded(self):
        """A metrics store reporting numbers keeps the rest of its data."""
        data = {
            'sslInfo': {'isValid': True, 'expiresIn': 45},
            'availability': {'last24h': 99.9, 'last7d': 100},
            'lastDowntime': 1760842440,
            'responseHistory': [120, 98],
        }

        result = await enrich_safely(StaticEnricher(data), ENDPOINT, EndpointStatus.ONLINE)

        assert result != UNKNOWN_ENRICHMENT
        assert result.availability.last24h == '99.9'
        assert result.availability.last7d == '100'
        assert result.ssl_info.expires_in == '45'
        assert result.ssl_info.is_valid is True
        assert result.last_downtime == '1760842440'
        assert result.response_history == [120, 98]

    @pytest.mark.asyncio
    async def test_enrichment_instance_passed_through(self):
        enrichment = Enrichment.model_validate(SAMPLE)
        assert await enrich_safely(StaticEnricher(enrichment), ENDPOINT, EndpointStatus.ONLINE) is enrichment

    @pytest.mark.asyncio
    async def test_exception_gives_placeholder(self):
        result = await enrich_safely(FailingEnricher(), ENDPOINT, EndpointStatus.ONLINE)
        assert result == UNKNOWN_ENRICHMENT

    @pytest.mark.asyncio
    async def test_slow_enricher_gives_placeholder(self):
        result = await enrich_safely(SlowEnricher(), ENDPOINT, EndpointStatus.ONLINE, timeout=0.05)
        assert result == UNKNOWN_ENRICHMENT

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [
        {'responseHistory': [10, -5]},
        {'sslInfo': 'valid'},
        ['not', 'a', 'mapping'],
        None,
    ])
    async def test_invalid_data_gives_placeholder(self, data):
        result = await enrich_safely(StaticEnricher(data), ENDPOINT, EndpointStatus.ONLINE)
        assert result == UNKNOWN_ENRICHMENT


class TestEnrichAll:
    """Test enrich_all()."""

    @pytest.mark.asyncio
    async def test_preserves_order_and_isolates_failures(self):
        class PickyEnricher(MetricsEnricher):
            async def enrich(self, endpoint, status):
                if endpoint.id == '2':
                    raise RuntimeError("no data for 2")
                return {'lastDowntime': f'never-{endpoint.id}'}

        endpoints = [
            Endpoint(id=str(i), name=f's{i}', url=f'http://s{i}.test/') for i in range(1, 4)
        ]
        statuses = [EndpointStatus.ONLINE, EndpointStatus.OFFLINE, EndpointStatus.DEGRADED]

        results = await enrich_all(PickyEnricher(), endpoints, statuses)

        assert [r.last_downtime for r in results] == ['never-1', 'unknown', 'never-3']

    @pytest.mark.asyncio
    async def test_no_enricher(self):
        endpoints = [ENDPOINT, ENDPOINT.model_copy(update={'id': '2'})]
        results = await enrich_all(None, endpoints, [EndpointStatus.ONLINE] * 2)
        assert results == [UNKNOWN_ENRICHMENT, UNKNOWN_ENRICHMENT]
