"""
Unit tests for UserService.

Tests member lookups by uid and id number, and supervisor candidates.
"""

import pytest

from backend.src.services.user_service import UserService
from backend.src.services.exceptions import NotFoundError, ValidationError


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def user_service(test_db_session):
    """Create a UserService instance for testing."""
    return UserService(test_db_session)


# ============================================================================
# Lookup Tests
# ============================================================================


class TestUserServiceLookup:
    """Tests for single-user lookups."""

    def test_get_by_uid(self, user_service, sample_user):
        user = sample_user(uid="uid-ana", id_number="1042", name="Ana")

        result = user_service.get_by_uid("uid-ana")

        assert result.id == user.id
        assert result.guid.startswith("usr_")

    def test_get_by_uid_not_found(self, user_service):
        with pytest.raises(NotFoundError):
            user_service.get_by_uid("uid-nobody")

    def test_get_by_id_number(self, user_service, sample_user):
        user = sample_user(uid="uid-ana", id_number="1042")
        assert user_service.get_by_id_number("1042").uid == user.uid

    def test_get_by_id_number_strips_whitespace(self, user_service, sample_user):
        sample_user(uid="uid-ana", id_number="1042")
        assert user_service.get_by_id_number("  1042\n").uid == "uid-ana"

    @pytest.mark.parametrize("id_number", ["", "12", "12345678901", "10a2", None])
    def test_get_by_id_number_malformed(self, user_service, id_number):
        with pytest.raises(ValidationError) as exc_info:
            user_service.get_by_id_number(id_number)
        assert exc_info.value.field == "id_number"

    def test_get_by_id_number_not_found(self, user_service, sample_user):
        sample_user(id_number="1042")
        with pytest.raises(NotFoundError):
            user_service.get_by_id_number("1043")


class TestUserServiceSupervisors:
    """Tests for supervisor candidates."""

    def test_lists_coordinators_and_admins_by_name(self, user_service, sample_user):
        sample_user(uid="uid-1", id_number="101", name="Rita", role="coordinator")
        sample_user(uid="uid-2", id_number="102", name="Bruno", role="volunteer")
        sample_user(uid="uid-3", id_number="103", name="Carla", role="admin")
        sample_user(uid="uid-4", id_number="104", name="Duarte", role="visitor")

        names = [u.name for u in user_service.list_supervisors()]

        assert names == ["Carla", "Rita"]

    def test_privileged_flag(self, sample_user):
        assert sample_user(uid="uid-1", id_number="101", role="admin").is_privileged is True
        assert sample_user(uid="uid-2", id_number="102", role="volunteer").is_privileged is False
