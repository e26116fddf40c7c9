"""
Grouping keys for file-backed and catch-all memory.

A grouping key selects which attributes of a file-backed mapping distinguish
one report row from another. It is written as a mask over six letters:

====  ==========================
f     backing file identity
r     read bit
w     write bit
x     execute bit
s     shared bit
p     private bit
====  ==========================

The default mask ``frwxsp`` keeps one row per file and kernel permission
string. An empty mask merges every file-backed mapping into a single row.
"""

from dataclasses import dataclass

from ..models.memory import Permissions
from ..validation import validate_grouping_mask

DEFAULT_GROUPING_MASK = "frwxsp"
FILE_BACKED_LABEL = "file-backed"


@dataclass(frozen=True)
class GroupingKey:
    """The set of attributes selected by a grouping mask."""

    file: bool = True
    read: bool = True
    write: bool = True
    execute: bool = True
    shared: bool = True
    private: bool = True

    @classmethod
    def parse(cls, mask: str) -> "GroupingKey":
        """
        Build a grouping key from a mask such as ``frwxsp`` or ``fx``.

        Raises:
            ValidationError: If the mask contains unknown or repeated letters.
        """
        mask = validate_grouping_mask(mask)
        return cls(
            file="f" in mask,
            read="r" in mask,
            write="w" in mask,
            execute="x" in mask,
            shared="s" in mask,
            private="p" in mask,
        )

    @property
    def mask(self) -> str:
        return "".join(
            letter
            for letter, selected in zip(
                "frwxsp",
                (self.file, self.read, self.write, self.execute, self.shared, self.private),
            )
            if selected
        )

    def perms_label(self, perms: Permissions) -> str:
        """
        Render the selected permission bits.

        With every bit selected this is the kernel's own string (``r-xp``).
        A lone ``s`` or ``p`` renders as that letter or ``-``.
        """
        label = ""
        if self.read:
            label += "r" if perms.read else "-"
        if self.write:
            label += "w" if perms.write else "-"
        if self.execute:
            label += "x" if perms.execute else "-"
        if self.shared and self.private:
            label += "s" if perms.shared else "p"
        elif self.shared:
            label += "s" if perms.shared else "-"
        elif self.private:
            label += "p" if perms.private else "-"
        return label

    def file_label(self, path: str, perms: Permissions) -> str:
        """Row label for a file-backed mapping under this grouping."""
        perms_label = self.perms_label(perms)
        head = path if self.file else FILE_BACKED_LABEL
        return f"{head} {perms_label}" if perms_label else head


DEFAULT_GROUPING = GroupingKey()
