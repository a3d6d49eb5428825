"""Tests for client find-or-create"""
import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ValidationFailure
from app.models import Client
from app.repositories.client_repository import ClientRepository
from app.services.client.client_service import ClientService, normalize_phone


@pytest.fixture
def clients(db):
    return ClientService(ClientRepository(db))


def test_normalize_phone():
    assert normalize_phone("+55 (11) 98765-4321") == "5511987654321"
    assert normalize_phone("") == ""
    assert normalize_phone(None) == ""


class TestFindOrCreate:

    def test_creates_client(self, db, clients, tenant):
        client = clients.find_or_create(tenant.id, "Maria", "(11) 98765-4321", "maria@example.com")

        assert client.phone == "11987654321"
        assert client.email == "maria@example.com"
        assert db.query(Client).count() == 1

    def test_reuses_client_and_updates_details(self, db, clients, tenant):
        first = clients.find_or_create(tenant.id, "Maria", "11987654321", "maria@example.com")
        second = clients.find_or_create(tenant.id, "Maria Silva", "11 98765-4321")

        assert second.id == first.id
        assert second.name == "Maria Silva"
        assert second.email == "maria@example.com"
        assert db.query(Client).count() == 1

    def test_phone_is_required(self, clients, tenant):
        with pytest.raises(ValidationFailure):
            clients.find_or_create(tenant.id, "Maria", "---")

    def test_concurrent_insert_reuses_the_winner(self, db, tenant):
        repository = ClientRepository(db)
        winner = repository.create(tenant.id, name="Maria", phone="11987654321")

        class RacingRepository(ClientRepository):
            """First lookup misses, as if another request inserted in between"""
            calls = 0

            def find_by_phone(self, tenant_id, phone):
                RacingRepository.calls += 1
                if RacingRepository.calls == 1:
                    return None
                return super().find_by_phone(tenant_id, phone)

        client = ClientService(RacingRepository(db)).find_or_create(tenant.id, "Maria", "11987654321")

        assert client.id == winner.id
        assert db.query(Client).count() == 1

    def test_integrity_error_without_winner_propagates(self, db, tenant):
        class AlwaysMissing(ClientRepository):
            def find_by_phone(self, tenant_id, phone):
                return None

        ClientRepository(db).create(tenant.id, name="Maria", phone="11987654321")

        with pytest.raises(IntegrityError):
            ClientService(AlwaysMissing(db)).find_or_create(tenant.id, "Maria", "11987654321")
