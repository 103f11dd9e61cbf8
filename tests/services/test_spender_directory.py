"""Tests for the spender directory implementations used by the boundary."""

import pytest

from ledger_kernel.domain.spender import Admin, Cso, SuperAdmin
from ledger_services import OpenSpenderDirectory, StaticSpenderDirectory
from ledger_services.directory import SUPER_ADMIN_NAME


class TestOpenSpenderDirectory:

    def test_accepts_everyone(self):
        directory = OpenSpenderDirectory()
        assert directory.exists(Admin("anyone"))
        assert directory.exists(Cso("anyone"))

    def test_names(self):
        directory = OpenSpenderDirectory()
        assert directory.display_name(SuperAdmin()) == SUPER_ADMIN_NAME
        assert directory.display_name(Cso("c1")) is None


class TestStaticSpenderDirectory:

    def test_ids_are_scoped_by_type(self):
        directory = StaticSpenderDirectory(admins={"7": "Ada"}, csos={"8": "Chidi"})
        assert directory.exists(Admin("7"))
        assert not directory.exists(Cso("7"))
        assert directory.exists(Cso("8"))
        assert directory.exists(SuperAdmin())

    def test_from_records(self):
        directory = StaticSpenderDirectory.from_records(
            [
                {"type": "admin", "id": "a1", "name": "Ada Admin"},
                {"type": "cso", "id": "c1"},
                {"type": "super_admin", "id": "root", "name": "ignored"},
            ]
        )
        assert directory.display_name(Admin("a1")) == "Ada Admin"
        # missing name falls back to the id
        assert directory.display_name(Cso("c1")) == "c1"
        assert directory.display_name(SuperAdmin()) == SUPER_ADMIN_NAME
        assert not directory.exists(Admin("root"))

    def test_from_records_rejects_unknown_type(self):
        with pytest.raises(ValueError):
            StaticSpenderDirectory.from_records([{"type": "teller", "id": "t1"}])
