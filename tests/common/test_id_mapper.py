"""
Tests for the IDMapper class.
"""

import pytest

from exhibitnet.common.id_mapper import IDMapper


class TestIDMapperBasic:
    """Test basic IDMapper functionality."""

    def test_empty_mapper(self):
        mapper = IDMapper()

        assert mapper.size() == 0
        assert len(mapper) == 0
        assert mapper.originals() == []
        assert repr(mapper) == "IDMapper(size=0)"

    def test_add_single_mapping(self):
        mapper = IDMapper()
        mapper.add_mapping("Paul Klee", 0)

        assert mapper.get_internal("Paul Klee") == 0
        assert mapper.get_original(0) == "Paul Klee"
        assert mapper.has_original("Paul Klee")
        assert "Paul Klee" in mapper

    def test_from_originals_numbers_consecutively(self):
        mapper = IDMapper.from_originals(["B", "A", "B", "C"])

        assert mapper.originals() == ["B", "A", "C"]
        assert mapper.get_internal("C") == 2

    def test_batch_lookup(self):
        mapper = IDMapper.from_originals(["A", "B", "C"])
        assert mapper.get_original_batch([2, 0]) == ["C", "A"]


class TestIDMapperErrors:
    """Test error conditions."""

    def test_unknown_original(self):
        with pytest.raises(KeyError):
            IDMapper().get_internal("nobody")

    def test_unknown_internal(self):
        with pytest.raises(KeyError):
            IDMapper().get_original(3)

    def test_non_integer_internal(self):
        with pytest.raises(TypeError):
            IDMapper().get_original("0")

    def test_duplicate_original(self):
        mapper = IDMapper()
        mapper.add_mapping("A", 0)

        with pytest.raises(ValueError):
            mapper.add_mapping("A", 1)

    def test_duplicate_internal(self):
        mapper = IDMapper()
        mapper.add_mapping("A", 0)

        with pytest.raises(ValueError):
            mapper.add_mapping("B", 0)

    def test_negative_internal(self):
        with pytest.raises(ValueError):
            IDMapper().add_mapping("A", -1)

    def test_unhashable_original(self):
        with pytest.raises(TypeError):
            IDMapper().add_mapping(["A"], 0)
