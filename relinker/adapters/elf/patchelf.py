"""
ELF dependency rewriter — pyelftools to read, patchelf to write.

``patchelf --replace-needed`` relocates the dynamic string table when
the new name is longer than the old one, so rewrites never truncate
or overwrite neighbouring strings. If patchelf cannot rewrite it
exits non-zero and the binary is left as it was.
"""

from __future__ import annotations

import logging
import shutil

from elftools.common.exceptions import ELFError
from elftools.elf.dynamic import DynamicSection
from elftools.elf.elffile import ELFFile

from relinker.adapters.base import DependencyRewriter, ElfReadError
from relinker.adapters.shell.runner import run_command
from relinker.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

PATCHELF_TIMEOUT = 60


def read_needed(path: str) -> list[str]:
    """Return the DT_NEEDED entries of an ELF file, in declaration order."""
    try:
        with open(path, "rb") as fh:
            elf = ELFFile(fh)
            needed: list[str] = []
            for section in elf.iter_sections():
                if not isinstance(section, DynamicSection):
                    continue
                for tag in section.iter_tags():
                    if tag.entry.d_tag == "DT_NEEDED":
                        needed.append(tag.needed)
            return needed
    except (OSError, ELFError) as e:
        raise ElfReadError(f"Failed to read ELF file {path}: {e}") from e


class PatchelfRewriter(DependencyRewriter):
    """Rewrite DT_NEEDED entries with patchelf."""

    tool_package = "patchelf"

    def __init__(self, patchelf: str = "patchelf"):
        self._patchelf = patchelf

    @property
    def name(self) -> str:
        return "patchelf"

    def is_available(self) -> bool:
        return shutil.which(self._patchelf) is not None

    def list_dependencies(self, path: str) -> list[str]:
        return read_needed(path)

    def replace_dependency(self, path: str, old: str, new: str) -> Receipt:
        logger.info("Replacing needed %s with %s", old, new)
        result = run_command(
            [self._patchelf, "--replace-needed", old, new, path],
            timeout=PATCHELF_TIMEOUT,
        )
        receipt = Receipt.from_command(self.name, "replace-needed", path, result)
        receipt.metadata.update({"old": old, "new": new})
        return receipt
