"""Tests for StripeFdw wiring: configuration, shared transport, lifecycle."""

import pytest

from conftest import API_KEY, list_page
from stripe_spine.core.errors import InvalidConfigError, MissingConfigError
from stripe_spine.core.secrets import DictSecretBackend, SecretsResolver, set_resolver
from stripe_spine.fdw.wrapper import StripeFdw
from stripe_spine.fdw.types import Row


class TestConstruction:
    def test_missing_credential(self, settings, fake_stripe):
        with pytest.raises(MissingConfigError):
            StripeFdw({}, settings=settings, transport=fake_stripe.transport)
        assert fake_stripe.requests == []

    def test_bad_page_size(self, settings, fake_stripe):
        with pytest.raises(InvalidConfigError):
            StripeFdw({"api_key": API_KEY, "page_size": "500"}, settings=settings, transport=fake_stripe.transport)

    def test_process_resolver_used(self, settings, fake_stripe):
        set_resolver(SecretsResolver([DictSecretBackend({"stripe": "sk_resolved"})]))
        fake_stripe.queue(json=list_page([]))
        with StripeFdw({"api_key_id": "stripe"}, settings=settings, transport=fake_stripe.transport) as fdw:
            fdw.begin_scan([], ["id"], options={"object": "charges"})
        assert fake_stripe.last.headers["Authorization"] == "Bearer sk_resolved"

    def test_api_url_option(self, settings, fake_stripe):
        fake_stripe.queue(json=list_page([]))
        with StripeFdw(
            {"api_key": API_KEY, "api_url": "http://localhost:12111/v1"},
            settings=settings,
            transport=fake_stripe.transport,
        ) as fdw:
            fdw.begin_scan([], ["id"], options={"object": "invoices"})
        assert str(fake_stripe.last.url) == "http://localhost:12111/v1/invoices?limit=100"


class TestSharedTransport:
    def test_scan_then_mutate(self, make_fdw, fake_stripe):
        """One wrapper serves sequential scans and mutations."""
        fake_stripe.queue(json=list_page([{"id": "prod_1", "name": "Old"}]))
        fake_stripe.queue(json={"id": "prod_1"})

        fdw = make_fdw()
        fdw.begin_scan([], ["id", "name"], options={"object": "products"})
        row = fdw.iter_scan()
        fdw.end_scan()

        fdw.begin_modify({"object": "products", "rowid_column": "id"})
        assert fdw.update(row["id"], Row.from_dict({"name": "New"})) == "prod_1"
        fdw.end_modify()

        assert [r.method for r in fake_stripe.requests] == ["GET", "POST"]
