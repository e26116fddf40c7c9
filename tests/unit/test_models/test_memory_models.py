"""
Unit tests for the memory data models.
"""

import pytest

from pssmon.models.memory import FaultCounts, MemoryBreakdown, MemoryCategory, OtherCategory, Permissions


@pytest.mark.unit
class TestPermissions:
    """Test cases for Permissions."""

    @pytest.mark.parametrize("perms", ["r-xp", "rw-s", "---p", "rwxp"])
    def test_parse_and_format(self, perms):
        assert str(Permissions.parse(perms)) == perms

    def test_flags(self):
        perms = Permissions.parse("rw-s")

        assert perms.read and perms.write and not perms.execute
        assert perms.shared and not perms.private

    @pytest.mark.parametrize("perms", ["", "r-x", "r-xpp"])
    def test_invalid(self, perms):
        with pytest.raises(ValueError):
            Permissions.parse(perms)


@pytest.mark.unit
class TestMemoryBreakdown:
    """Test cases for MemoryBreakdown arithmetic."""

    def test_files_index_is_not_part_of_total(self):
        breakdown = MemoryBreakdown()
        breakdown.add(MemoryCategory.EXTERNAL_TEXT, 4096, file_key=("/lib/libc.so.6", "r-xp"))
        breakdown.add(OtherCategory("/data.bin", "r--p"), 1024, file_key=("/data.bin", "r--p"))

        assert breakdown.total() == 5120
        assert breakdown.other_total() == 1024
        assert sum(breakdown.files.values()) == 5120

    def test_sum_of_breakdowns(self):
        a, b = MemoryBreakdown(), MemoryBreakdown()
        a.add(MemoryCategory.HEAP, 100)
        b.add(MemoryCategory.HEAP, 50)
        b.add(MemoryCategory.STACK, 10)

        merged = sum([a, b])

        assert merged.get(MemoryCategory.HEAP) == 150
        assert merged.get(MemoryCategory.STACK) == 10
        assert a.get(MemoryCategory.HEAP) == 100

    def test_sum_of_one_breakdown_is_a_copy(self):
        only = MemoryBreakdown()
        only.add(MemoryCategory.HEAP, 100)

        merged = sum([only])
        merged.add(MemoryCategory.HEAP, 1)

        assert merged is not only
        assert only.get(MemoryCategory.HEAP) == 100

    def test_anon_inode_paths_are_file_like(self):
        assert OtherCategory("anon_inode:[perf_event]", "r--p").is_file_backed
        assert not OtherCategory("[anon:scudo]", "rw-p").is_file_backed

    def test_items_order(self):
        breakdown = MemoryBreakdown()
        breakdown.add(OtherCategory("/b"), 1)
        breakdown.add(MemoryCategory.ANONYMOUS, 2)
        breakdown.add(OtherCategory("/a"), 3)
        breakdown.add(MemoryCategory.STACK, 4)

        keys = [key for key, _ in breakdown.items()]

        assert keys == [MemoryCategory.STACK, MemoryCategory.ANONYMOUS, OtherCategory("/a"), OtherCategory("/b")]

    def test_negative_bytes_rejected(self):
        with pytest.raises(ValueError):
            MemoryBreakdown().add(MemoryCategory.HEAP, -1)


@pytest.mark.unit
class TestFaultsAndLabels:
    """Test cases for FaultCounts and category labels."""

    def test_fault_sum(self):
        assert sum([FaultCounts(1, 2), FaultCounts(3, 4)]) == FaultCounts(4, 6)

    def test_other_label(self):
        assert OtherCategory("/data.bin", "r--").label == "/data.bin r--"
        assert OtherCategory("/data.bin").label == "/data.bin"

    def test_sysv_is_not_file_backed(self):
        assert OtherCategory("/dev/shm/x").is_file_backed
        assert not OtherCategory("/SYSV00000000").is_file_backed
