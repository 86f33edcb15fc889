import os
import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ..cli_logger import logger

CMAKE_CACHE = "CMakeCache.txt"
LINK_FILE = "link.txt"
MAKE_SUFFIX = ".make"

_CACHE_ENTRY = re.compile(r'^(?P<key>"[^"]*"|[^#/:=\s][^:=]*)(?::(?P<type>[A-Za-z_]+))?=(?P<value>.*?)(?P<eol>\r?\n?)$')


@dataclass(frozen=True)
class StripRule:
    pattern: "re.Pattern"
    replacement: str = ""

    def apply(self, text) -> Tuple[str, int]:
        return self.pattern.subn(self.replacement, text)


def strip_rules(flag) -> List[StripRule]:
    """Substitution rules removing ``flag`` as a whole token.

    Tokens are delimited by whitespace or ``;`` (CMake lists). The delimiter in
    front of the flag goes with it, so ``-lz -lwebp -lpng`` becomes
    ``-lz -lpng``. ``-lwebpmux`` is not a ``-lwebp`` token.
    """
    token = re.escape(flag)
    end = r'(?=[\s;"]|$)'
    return [
        StripRule(re.compile(r"[ \t;]+" + token + end, re.MULTILINE)),
        StripRule(re.compile(r"^" + token + r"(?:[ \t;]+|" + end + ")", re.MULTILINE)),
    ]


def apply_rules(text, rules) -> Tuple[str, int]:
    total = 0
    for rule in rules:
        text, count = rule.apply(text)
        total += count
    return text, total


@dataclass(frozen=True)
class PatchReport:
    cache_entries: Tuple[str, ...] = ()
    occurrences: Dict[str, int] = field(default_factory=dict)

    @property
    def patched(self):
        return any(self.occurrences.values())


def _read(path):
    with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
        return f.read()


def _write(path, text):
    with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
        f.write(text)


def parse_cache_line(line):
    """Split a CMakeCache.txt line into ``(key, type, value, eol)``; None for comments and blanks."""
    match = _CACHE_ENTRY.match(line)
    if not match:
        return None
    return match.group("key"), match.group("type"), match.group("value"), match.group("eol")


def cache_entries_matching(cache_path, marker):
    """Cache entries whose key contains ``marker``, compared case-insensitively."""
    if not marker or not os.path.isfile(cache_path):
        return []
    marker = marker.lower()
    entries = []
    for line in _read(cache_path).splitlines():
        parsed = parse_cache_line(line)
        if parsed and marker in parsed[0].lower():
            entries.append(line)
    return entries


def patch_cache(cache_path, rules) -> int:
    """Apply ``rules`` to the values of the cache entries only.

    Keys, types, comments and unrelated lines are kept byte for byte and the
    file is rewritten only when a value changed.
    """
    if not os.path.isfile(cache_path):
        return 0
    lines = _read(cache_path).splitlines(keepends=True)
    total = 0
    for index, line in enumerate(lines):
        parsed = parse_cache_line(line)
        if parsed is None:
            continue
        key, type_, value, eol = parsed
        new_value, count = apply_rules(value, rules)
        if count:
            total += count
            type_part = f":{type_}" if type_ else ""
            lines[index] = f"{key}{type_part}={new_value}{eol}"
    if total:
        _write(cache_path, "".join(lines))
    return total


def patch_file(path, rules) -> int:
    text = _read(path)
    new_text, count = apply_rules(text, rules)
    if count:
        _write(path, new_text)
    return count


def generated_build_files(build_dir):
    """``link.txt`` and ``*.make`` files below ``build_dir``, sorted."""
    found = []
    for root, dirs, files in os.walk(build_dir):
        dirs.sort()
        for name in sorted(files):
            if name == LINK_FILE or name.endswith(MAKE_SUFFIX):
                found.append(os.path.join(root, name))
    return found


def patch_build_dir(build_dir, flags, marker=None) -> PatchReport:
    """Strip unwanted linker ``flags`` from a configured CMake build directory.

    Must run after configure and before the build. Safe to run when there is
    nothing to remove: no file is touched then.
    """
    if not os.path.isdir(build_dir):
        logger.warning(f"Build directory {build_dir} does not exist, nothing to patch.")
        return PatchReport()

    cache_path = os.path.join(build_dir, CMAKE_CACHE)
    entries = cache_entries_matching(cache_path, marker)
    if marker:
        logger.info(f"Checking if {marker} was detected by CMake...")
        if entries:
            logger.info(f"{marker}-related variables found in {CMAKE_CACHE}:")
            for entry in entries[:10]:
                logger.step_info(entry, indent=4)
        else:
            logger.info(f"No {marker} variables found in {CMAKE_CACHE}")

    occurrences = {}
    for flag in flags:
        rules = strip_rules(flag)
        count = patch_cache(cache_path, rules)
        if count:
            occurrences[cache_path] = occurrences.get(cache_path, 0) + count
        for path in generated_build_files(build_dir):
            relative = os.path.relpath(path, build_dir)
            count = patch_file(path, rules)
            if count:
                occurrences[path] = occurrences.get(path, 0) + count
                logger.info(f"Found {flag} in {relative}, removed {count} occurrence(s)")
            elif os.path.basename(path) == LINK_FILE:
                logger.info(f"No {flag} found in {relative}")
            else:
                logger.debug(f"No {flag} found in {relative}")

    report = PatchReport(cache_entries=tuple(entries), occurrences=occurrences)
    if report.patched:
        logger.info(f"Removed {', '.join(flags)} from linker flags in {len(occurrences)} file(s)")
    else:
        logger.info(f"No {', '.join(flags) or 'flags'} found to remove")
    return report
