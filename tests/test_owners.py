import pytest

from payd.models import User
from payd.services.owners import OwnerService


class FakeStore:
    def __init__(self, value=None, error=None):
        self.value = value
        self.error = error

    def owner(self):
        if self.error is not None:
            raise self.error
        return self.value


def test_no_error_reported():
    assert OwnerService(FakeStore()).owner() is None


def test_owner_is_returned():
    owner = User(id=1, name="Merchant Person", email="merchant@example.com")
    assert OwnerService(FakeStore(owner)).owner() == owner


def test_error_reported():
    cause = RuntimeError("no one here")
    with pytest.raises(RuntimeError) as excinfo:
        OwnerService(FakeStore(error=cause)).owner()
    assert excinfo.value is cause