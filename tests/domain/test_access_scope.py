"""
Access scope resolution.

The scope is evaluated here without a database; the SQL translation of the
same rules is covered in tests/services/test_contract_views.py.
"""

from uuid import uuid4

import pytest

from contract_kernel.domain.access_scope import AccessScope, resolve_scope
from contract_kernel.domain.roles import (
    Role,
    UserIdentity,
    has_any_role,
    roles_from_names,
)

COUNTRY = uuid4()
OTHER_COUNTRY = uuid4()


def _user(*roles: Role, name: str = "Fastnet", country_id=COUNTRY) -> UserIdentity:
    return UserIdentity(id=uuid4(), name=name, country_id=country_id, roles=frozenset(roles))


class TestRoles:
    def test_has_any_role(self):
        user = _user(Role.GOVERNMENT)

        assert has_any_role(user, [Role.GOVERNMENT, Role.ADMIN])
        assert not has_any_role(user, [Role.ISP])
        assert not has_any_role(user, [])

    def test_roles_from_default_names(self):
        assert roles_from_names(["Admin", "ISP", "Principal"]) == frozenset(
            {Role.ADMIN, Role.ISP}
        )

    def test_roles_from_configured_names(self):
        mapping = {"ministry": Role.GOVERNMENT}

        assert roles_from_names(["ministry", "Admin"], mapping) == frozenset(
            {Role.GOVERNMENT}
        )


class TestResolveScope:
    def test_admin_is_unrestricted(self):
        scope = resolve_scope(_user(Role.ADMIN, Role.ISP))

        assert scope == AccessScope.everything()
        assert scope.permits_contract(OTHER_COUNTRY, False, "Anyone")
        assert scope.permits_lta(None, [])

    def test_plain_user_is_limited_to_country(self):
        scope = resolve_scope(_user())

        assert scope.permits_contract(COUNTRY, False, "Slownet")
        assert not scope.permits_contract(OTHER_COUNTRY, False, "Slownet")
        assert scope.permits_lta(COUNTRY, [])
        assert not scope.permits_lta(OTHER_COUNTRY, [])

    def test_government_requires_government_behalf(self):
        scope = resolve_scope(_user(Role.GOVERNMENT))

        assert scope.permits_contract(COUNTRY, True, "Slownet")
        assert not scope.permits_contract(COUNTRY, False, "Slownet")
        assert scope.permits_draft(COUNTRY, True, None)
        assert not scope.permits_draft(COUNTRY, False, None)

    def test_government_does_not_narrow_ltas(self):
        scope = resolve_scope(_user(Role.GOVERNMENT))

        assert scope.permits_lta(COUNTRY, ["Slownet"])

    def test_isp_sees_only_its_own_rows(self):
        scope = resolve_scope(_user(Role.ISP, name="Fastnet"))

        assert scope.permits_contract(COUNTRY, False, "Fastnet")
        assert not scope.permits_contract(COUNTRY, False, "Slownet")
        assert scope.permits_lta(COUNTRY, ["Slownet", "Fastnet"])
        assert not scope.permits_lta(COUNTRY, ["Slownet"])

    def test_roles_combine_conjunctively(self):
        scope = resolve_scope(_user(Role.GOVERNMENT, Role.ISP, name="Fastnet"))

        assert scope.permits_contract(COUNTRY, True, "Fastnet")
        assert not scope.permits_contract(COUNTRY, False, "Fastnet")
        assert not scope.permits_contract(COUNTRY, True, "Slownet")
        assert not scope.permits_contract(OTHER_COUNTRY, True, "Fastnet")

    @pytest.mark.parametrize("roles", [(), (Role.GOVERNMENT,), (Role.ISP,)])
    def test_user_without_country_sees_nothing(self, roles):
        scope = resolve_scope(_user(*roles, country_id=None))

        assert not scope.permits_contract(None, True, "Fastnet")
        assert not scope.permits_lta(None, ["Fastnet"])

    def test_describe_is_loggable(self):
        described = resolve_scope(_user(Role.ISP)).describe()

        assert described == {
            "unrestricted": False,
            "country_id": COUNTRY,
            "government_behalf_only": False,
            "isp_name": "Fastnet",
        }
