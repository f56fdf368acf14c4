"""Tests for stripe_spine.cli: command smoke tests via CliRunner.

The wrapper factory is patched so every command talks to ``FakeStripe``
instead of the network.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from conftest import API_KEY, list_page
from stripe_spine.cli import utils
from stripe_spine.cli.app import app
from stripe_spine.fdw.wrapper import StripeFdw

runner = CliRunner()


@pytest.fixture
def fake_api(monkeypatch, fake_stripe, settings):
    """Route the CLI's wrappers to the fake API and record their options."""
    seen: list[dict[str, str]] = []

    def make_fdw(options):
        seen.append(dict(options))
        opts = {"api_key": API_KEY, **options}
        return StripeFdw(opts, settings=settings, transport=fake_stripe.transport)

    monkeypatch.setattr(utils, "make_fdw", make_fdw)
    fake_stripe.seen_options = seen
    return fake_stripe


# ─── Root ────────────────────────────────────────────────────────────────


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "stripe-spine" in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "scan" in result.output

    def test_resources(self):
        result = runner.invoke(app, ["resources"])
        assert result.exit_code == 0
        assert "customers" in result.output
        assert "balance_transactions" in result.output


# ─── Scan ────────────────────────────────────────────────────────────────


class TestScanCLI:
    def test_scan_json(self, fake_api):
        fake_api.queue(json=list_page([
            {"id": "cus_1", "email": "a@b.co", "created": 1_700_000_000},
            {"id": "cus_2", "email": None},
        ]))
        result = runner.invoke(app, ["scan", "customers", "-c", "id", "-c", "email", "-c", "created", "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [
            {"id": "cus_1", "email": "a@b.co", "created": "2023-11-14T22:13:20+00:00"},
            {"id": "cus_2", "email": None, "created": None},
        ]

    def test_scan_table(self, fake_api):
        fake_api.queue(json=list_page([{"id": "ch_1", "amount": 500, "currency": "usd"}]))
        result = runner.invoke(app, ["scan", "charges", "-c", "id", "-c", "amount"])
        assert result.exit_code == 0, result.output
        assert "ch_1" in result.output
        assert "500" in result.output
        assert "1 row(s)" in result.output

    def test_scan_pushes_where(self, fake_api):
        fake_api.queue(json=list_page([{"id": "cus_1", "email": "a@b.co"}]))
        result = runner.invoke(app, ["scan", "customers", "-c", "id", "--where", "email=a@b.co", "--json"])
        assert result.exit_code == 0, result.output
        assert fake_api.params() == [("email", "a@b.co"), ("limit", "100")]

    def test_scan_filters_unpushed_where(self, fake_api):
        """Filters the API cannot apply are applied to the fetched rows."""
        fake_api.queue(json=list_page([
            {"id": "ch_1", "status": "succeeded"},
            {"id": "ch_2", "status": "failed"},
        ]))
        result = runner.invoke(app, ["scan", "charges", "-c", "id", "--where", "status=failed", "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [{"id": "ch_2"}]
        assert fake_api.params() == [("limit", "100")]

    def test_scan_filters_on_timestamp(self, fake_api):
        """A timestamp filter matches the ISO-8601 form the output prints."""
        fake_api.queue(json=list_page([
            {"id": "cus_1", "created": 1_700_000_000},
            {"id": "cus_2", "created": 1_600_000_000},
        ]))
        result = runner.invoke(
            app,
            ["scan", "customers", "-c", "id", "-c", "created", "--where", "created=2023-11-14T22:13:20+00:00", "--json"],
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [{"id": "cus_1", "created": "2023-11-14T22:13:20+00:00"}]

    def test_scan_limit_and_offset(self, fake_api):
        fake_api.queue(json=list_page([{"id": f"cus_{i}"} for i in range(5)]))
        result = runner.invoke(app, ["scan", "customers", "-c", "id", "--limit", "2", "--offset", "1", "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [{"id": "cus_1"}, {"id": "cus_2"}]

    def test_scan_unknown_resource(self, fake_api):
        result = runner.invoke(app, ["scan", "refunds"])
        assert result.exit_code == 1
        assert "Error (CONFIG)" in result.output
        assert "'refunds' object is not implemented" in result.output
        assert fake_api.requests == []

    def test_scan_http_error(self, fake_api):
        fake_api.queue(status=401, json={"error": {"message": "Invalid API Key"}})
        result = runner.invoke(app, ["scan", "charges"])
        assert result.exit_code == 1
        assert "Error (NETWORK)" in result.output
        assert "HTTP 401" in result.output

    def test_scan_bad_where(self, fake_api):
        result = runner.invoke(app, ["scan", "charges", "--where", "status"])
        assert result.exit_code != 0
        assert fake_api.requests == []

    def test_cli_options_forwarded(self, fake_api):
        fake_api.queue(json=list_page([]))
        runner.invoke(app, ["scan", "charges", "--api-key-id", "secret:env:K", "--page-size", "5"])
        assert fake_api.seen_options == [{"api_key_id": "secret:env:K", "page_size": "5"}]


# ─── Mutations ───────────────────────────────────────────────────────────


class TestMutationCLI:
    def test_insert(self, fake_api):
        fake_api.queue(json={"id": "cus_new"})
        result = runner.invoke(
            app,
            ["insert", "customers", "--set", "email=a@b.co", "--attrs", '{"metadata": {"tier": "gold"}}'],
        )
        assert result.exit_code == 0, result.output
        assert "Inserted cus_new" in result.output
        assert fake_api.form() == [("email", "a@b.co"), ("metadata[tier]", "gold")]

    def test_insert_bad_attrs(self, fake_api):
        result = runner.invoke(app, ["insert", "customers", "--attrs", "[1, 2]"])
        assert result.exit_code != 0
        assert fake_api.requests == []

    def test_update(self, fake_api):
        fake_api.queue(json={"id": "prod_1"})
        result = runner.invoke(app, ["update", "products", "prod_1", "--set", "name=Pro"])
        assert result.exit_code == 0, result.output
        assert "Updated prod_1" in result.output
        assert fake_api.last.url.path == "/v1/products/prod_1"

    def test_delete_force(self, fake_api):
        fake_api.queue(json={"id": "cus_1", "deleted": True})
        result = runner.invoke(app, ["delete", "customers", "cus_1", "--force"])
        assert result.exit_code == 0, result.output
        assert "Deleted cus_1" in result.output
        assert fake_api.last.method == "DELETE"

    def test_delete_aborted(self, fake_api):
        result = runner.invoke(app, ["delete", "customers", "cus_1"], input="n\n")
        assert result.exit_code == 0
        assert "Aborted" in result.output
        assert fake_api.requests == []


class TestCredentials:
    def test_missing_credential(self):
        """Without a key anywhere the command fails before any request."""
        result = runner.invoke(app, ["scan", "charges"])
        assert result.exit_code == 1
        assert "Error (CONFIG)" in result.output
        assert "api_key" in result.output
