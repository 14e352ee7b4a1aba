"""
Profile operations — detect, back up, excise and append managed blocks.

The profile is a file we do not own.  It is never parsed; it is treated
as an ordered list of opaque lines in which a managed block is located
by a two-stage scan:

    1. header   ``^name\\s*\\(\\s*\\)\\s*\\{`` matched against the whole text
                (function form; the brace may sit on a later line) or
                ``^alias\\s+name=`` (alias form, reload only)
    2. body     a brace-depth scan from the header that counts ``{`` / ``}``
                outside quotes and comments, ending at the line where the
                depth returns to zero

The block also owns the run of ``#`` comment lines directly above its
header when any of them mentions the name.  Detection and removal share
one header scanner; ``remove`` refuses to write when a definition would
survive it (a body that never closes), so callers never append a
second copy next to one they failed to excise.

No lock is taken on the file.  A concurrent writer (a second instance,
an editor saving the file) can interleave with an append; invocation is
interactive and single-user, so this is accepted rather than guarded.
"""

from __future__ import annotations

import logging
import re
import shutil
import time
from bisect import bisect_right
from itertools import accumulate
from pathlib import Path

from quickalias.core.models.profile import AliasBlock, Backup, OwnerKind

logger = logging.getLogger(__name__)

# Banners written by any version of the tool carry this marker.
BANNER_MARKER = "Added by @lvmk/"

_BLANK_RUN = re.compile(r"\n{3,}")


# ═══════════════════════════════════════════════════════════════════
#  Patterns
# ═══════════════════════════════════════════════════════════════════


def function_pattern(name: str) -> re.Pattern[str]:
    """Opening line of a shell function named ``name``."""
    return re.compile(rf"^{re.escape(name)}\s*\(\s*\)\s*\{{", re.MULTILINE)


def alias_pattern(name: str) -> re.Pattern[str]:
    """An ``alias name=...`` definition line."""
    return re.compile(rf"^alias\s+{re.escape(name)}=", re.MULTILINE)


def _mentions(name: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![\w-]){re.escape(name)}(?![\w-])")


def find_headers(lines: list[str], name: str, kind: OwnerKind = "workflow") -> list[tuple[int, bool]]:
    """``(line index, is_function)`` of every definition of ``name``, top to bottom.

    Patterns run over the joined text, so ``gp()`` on one line and ``{`` on
    the next is still a header.  Offsets map back to indexes in ``lines``.
    """
    text = "".join(lines)
    starts = [0, *accumulate(len(ln) for ln in lines)]

    def line_of(offset: int) -> int:
        return bisect_right(starts, offset) - 1

    found = [(line_of(m.start()), True) for m in function_pattern(name).finditer(text)]
    if kind == "reload":
        found += [(line_of(m.start()), False) for m in alias_pattern(name).finditer(text)]
    return sorted(found)


def matches(text: str, name: str, kind: OwnerKind = "workflow") -> bool:
    """Whether ``text`` defines ``name`` in a form ``kind`` recognizes."""
    return bool(find_headers(text.splitlines(keepends=True), name, kind))


# ═══════════════════════════════════════════════════════════════════
#  Block scanning (pure)
# ═══════════════════════════════════════════════════════════════════


def find_block_end(lines: list[str], start: int) -> int | None:
    """Return one past the line that closes the function opened at ``start``.

    Braces inside single/double quotes, after a backslash, or in a
    ``#`` comment do not count.  Quote state carries across lines, so
    multi-line string literals are skipped as a whole.  Returns None
    when the body never closes.
    """
    depth = 0
    opened = False
    quote: str | None = None

    for j in range(start, len(lines)):
        line = lines[j]
        escaped = False
        for i, ch in enumerate(line):
            if escaped:
                escaped = False
            elif ch == "\\" and quote != "'":
                escaped = True
            elif quote:
                if ch == quote:
                    quote = None
            elif ch in ("'", '"'):
                quote = ch
            elif ch == "#" and (i == 0 or line[i - 1] in " \t;"):
                break
            elif ch == "{":
                depth += 1
                opened = True
            elif ch == "}":
                depth -= 1
                if opened and depth <= 0:
                    return j + 1
    return None


def _comment_run_start(lines: list[str], header: int) -> int:
    """First line of the contiguous ``#`` run directly above ``header``."""
    start = header
    while start > 0 and lines[start - 1].lstrip().startswith("#"):
        start -= 1
    return start


def _owned_comment_start(lines: list[str], header: int, name: str) -> int:
    """Extend a block upwards over its descriptive comment lines."""
    run_start = _comment_run_start(lines, header)
    if run_start == header:
        return header
    mention = _mentions(name)
    run = lines[run_start:header]
    if any(mention.search(ln) for ln in run) and not any(BANNER_MARKER in ln for ln in run):
        return run_start
    return header


def find_blocks(text: str, name: str, kind: OwnerKind = "workflow") -> list[AliasBlock]:
    """Locate every block defining ``name``, top to bottom.

    Function definitions are found for both kinds; ``alias name=``
    lines only for ``kind="reload"``.  An unterminated function body is
    skipped rather than extended to the end of the file.
    """
    lines = text.splitlines(keepends=True)
    blocks: list[AliasBlock] = []
    resume = 0

    for i, is_function in find_headers(lines, name, kind):
        if i < resume:
            continue
        if not is_function:
            blocks.append(AliasBlock(name=name, owner_kind=kind, start=i, end=i + 1, text=lines[i]))
            resume = i + 1
            continue
        end = find_block_end(lines, i)
        if end is None:
            logger.warning("Function '%s' at line %d never closes; leaving it", name, i + 1)
            continue
        start = _owned_comment_start(lines, i, name)
        blocks.append(AliasBlock(
            name=name,
            owner_kind=kind,
            start=start,
            end=end,
            text="".join(lines[start:end]),
        ))
        resume = end

    return blocks


def _drop_orphan_banners(lines: list[str]) -> list[str]:
    """Remove tool banners that no longer introduce any content.

    A banner is a contiguous comment run containing ``BANNER_MARKER``.
    It is orphaned when only blank lines separate it from the end of
    the file or from the next banner.
    """
    result = list(lines)
    i = len(result) - 1
    while i >= 0:
        if not result[i].lstrip().startswith("#"):
            i -= 1
            continue
        run_end = i + 1
        run_start = _comment_run_start(result, i)
        run = result[run_start:run_end]
        if any(BANNER_MARKER in ln for ln in run):
            k = run_end
            while k < len(result) and not result[k].strip():
                k += 1
            if k == len(result) or (
                result[k].lstrip().startswith("#")
                and BANNER_MARKER in "".join(result[k:_run_stop(result, k)])
            ):
                del result[run_start:run_end]
        i = run_start - 1
    return result


def _run_stop(lines: list[str], start: int) -> int:
    stop = start
    while stop < len(lines) and lines[stop].lstrip().startswith("#"):
        stop += 1
    return stop


def collapse_blank_runs(text: str) -> str:
    """Collapse runs of two or more blank lines into exactly one."""
    return _BLANK_RUN.sub("\n\n", text)


def excise(text: str, name: str, kind: OwnerKind = "workflow") -> tuple[str, list[AliasBlock]]:
    """Remove every block defining ``name`` from ``text``.

    Returns the new text and the blocks that were removed.  Content
    outside the removed ranges is left as-is apart from blank-run
    collapsing and dropping banners left with nothing beneath them.
    """
    blocks = find_blocks(text, name, kind)
    if not blocks:
        return text, []

    lines = text.splitlines(keepends=True)
    for block in reversed(blocks):
        del lines[block.start:block.end]

    lines = _drop_orphan_banners(lines)
    return collapse_blank_runs("".join(lines)), blocks


# ═══════════════════════════════════════════════════════════════════
#  File operations
# ═══════════════════════════════════════════════════════════════════


def read_profile(path: Path) -> str:
    """Profile text, or "" when the file does not exist yet."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""


def exists(path: Path, name: str, kind: OwnerKind = "workflow") -> bool:
    """Whether ``name`` is defined in the profile. Never raises."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Cannot read %s for detection: %s", path, e)
        return False
    return matches(content, name, kind)


def backup(path: Path) -> Backup | None:
    """Copy the profile to ``<path>.backup.<epoch-millis>``.

    Best effort: any failure (including a missing source) is logged and
    returns None so the install can proceed without a backup.
    """
    backup_path = path.with_name(f"{path.name}.backup.{int(time.time() * 1000)}")
    try:
        shutil.copy2(path, backup_path)
    except OSError as e:
        logger.warning("Could not back up %s: %s", path, e)
        return None
    logger.info("Backed up %s → %s", path, backup_path)
    return Backup(source_path=path, backup_path=backup_path)


def remove(path: Path, name: str, kind: OwnerKind = "workflow") -> bool:
    """Excise ``name``'s block(s) from the profile file.

    Returns False if the file cannot be read or written, or if a
    definition of ``name`` would remain afterwards (its body never
    closes); the file is left untouched in that case.  True otherwise,
    whether or not anything was removed.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Cannot read %s: %s", path, e)
        return False

    new_content, removed = excise(content, name, kind)
    if matches(new_content, name, kind):
        logger.warning("Cannot excise '%s' from %s: a definition does not close", name, path)
        return False
    if not removed:
        logger.debug("Nothing to remove for '%s' in %s", name, path)
        return True

    try:
        path.write_text(new_content, encoding="utf-8")
    except OSError as e:
        logger.warning("Cannot write %s: %s", path, e)
        return False

    logger.info("Removed %d block(s) for '%s' from %s", len(removed), name, path)
    return True


def remove_alias_line(path: Path, name: str) -> bool:
    """Excise ``alias name=...`` lines and any function of the same name."""
    return remove(path, name, "reload")


def append(path: Path, text: str) -> None:
    """Append ``text`` verbatim, creating the file if needed.

    Raises:
        OSError: The caller turns this into a failure result.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    existing = read_profile(path)
    with open(path, "a", encoding="utf-8") as f:
        if existing and not existing.endswith("\n"):
            f.write("\n")
        f.write(text)
    logger.info("Appended %d bytes to %s", len(text), path)
