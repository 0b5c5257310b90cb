"""
Tests for the operations CLI.
"""

import pytest
from sqlalchemy import select
from typer.testing import CliRunner

import cli
from rest_api.models import User
from shared.config.settings import settings
from tests.conftest import TestingSessionLocal

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_session(db_session, monkeypatch):
    """Point the CLI at the test database."""
    monkeypatch.setattr(cli, "SessionLocal", TestingSessionLocal)


class TestSeedCommand:
    def test_refuses_production_without_force(self, monkeypatch):
        monkeypatch.setattr(settings, "environment", "production")

        result = runner.invoke(cli.app, ["db-seed"])

        assert result.exit_code == 1
        assert "Cannot seed production" in result.output


class TestCreateAdmin:
    def test_creates_admin(self, db_session):
        result = runner.invoke(
            cli.app, ["create-admin", "--email", "Owner@Decube.com", "--password", "supersecret"]
        )

        assert result.exit_code == 0, result.output
        user = db_session.scalar(select(User).where(User.email == "owner@decube.com"))
        assert user.role == "ADMIN"

    def test_duplicate_email(self, admin_user):
        result = runner.invoke(cli.app, ["create-admin", "--email", "admin@test.com", "--password", "supersecret"])
        assert result.exit_code == 1

    def test_short_password(self):
        result = runner.invoke(cli.app, ["create-admin", "--email", "x@decube.com", "--password", "abc"])

        assert result.exit_code == 1
        assert "Invalid input" in result.output


class TestLowStock:
    def test_nothing_low(self, beer_stock):
        result = runner.invoke(cli.app, ["low-stock"])
        assert "All stock above minimum" in result.output

    def test_lists_low_items(self, db_session, beer_stock):
        beer_stock.quantity = 2
        db_session.commit()

        result = runner.invoke(cli.app, ["low-stock"])

        assert result.exit_code == 0
        assert "Bottled Beer" in result.output
        assert "2 bottle" in result.output
