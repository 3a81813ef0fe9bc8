import pytest

from domain.exceptions import ValidationError
from domain.ids import DispatchId, new_id


class TestNewId:
    def test_new_id_is_uuid_text(self):
        value = new_id()
        assert len(value) == 36
        assert value.count("-") == 4

    def test_new_ids_differ(self):
        assert new_id() != new_id()


class TestDispatchId:
    def test_generate(self):
        dispatch_id = DispatchId.generate()
        assert len(dispatch_id.value) == 32
        assert str(dispatch_id) == dispatch_id.value

    def test_frozen(self):
        dispatch_id = DispatchId(value="d-1")
        with pytest.raises(Exception):  # FrozenInstanceError
            dispatch_id.value = "d-2"

    def test_equality_and_hash(self):
        assert DispatchId("d-1") == DispatchId("d-1")
        assert len({DispatchId("d-1"), DispatchId("d-1")}) == 1

    def test_empty_raises(self):
        with pytest.raises(ValidationError):
            DispatchId(value=" ")
