from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .errors import ConfigError, UnknownLibraryError


@dataclass(frozen=True)
class LibraryRecipe:
    """How to build one third-party library.

    ``header_subdir`` is the directory below ``<prefix>/include`` holding the
    installed headers. ``disabled_packages`` are CMake ``find_package`` names
    whose auto-detection is switched off on Linux. ``strip_link_flags`` are
    linker flags removed from the generated build files after configure, and
    ``dependency_marker`` is the substring used to report related cache entries.
    """

    name: str
    archive: str
    url: Optional[str] = None
    header_subdir: str = ""
    static_lib: str = ""
    disabled_packages: Tuple[str, ...] = ()
    dependency_marker: Optional[str] = None
    strip_link_flags: Tuple[str, ...] = ()
    cmake_args: Tuple[str, ...] = ()

    @property
    def static_lib_name(self):
        return self.static_lib or f"{self.name}.a"


# pkg-config can find webp.pc on hosts where the webp libraries are absent,
# which breaks the final link of libopenjp2.
LIBOPENJP2 = LibraryRecipe(
    name="libopenjp2",
    archive="libopenjp2.tar.gz",
    url="https://github.com/uclouvain/openjpeg/archive/refs/tags/v2.5.2.tar.gz",
    header_subdir="openjpeg-2.5",
    static_lib="libopenjp2.a",
    disabled_packages=("WebP",),
    dependency_marker="WEBP",
    strip_link_flags=("-lwebp",),
)

BUILTIN_RECIPES = {
    LIBOPENJP2.name: LIBOPENJP2,
}

TUPLE_FIELDS = ("disabled_packages", "strip_link_flags", "cmake_args")
_FIELDS = ("archive", "url", "header_subdir", "static_lib", "dependency_marker") + TUPLE_FIELDS


def _recipe_fields(name, table):
    fields = {}
    for key, value in table.items():
        if key not in _FIELDS:
            raise ConfigError(f"Unknown key '{key}' in [libraries.{name}]")
        if key in TUPLE_FIELDS:
            if isinstance(value, str):
                value = [value]
            value = tuple(str(v) for v in value)
        fields[key] = value
    return fields


def load_recipes(conf=None):
    """Built-in recipes merged with the ``[libraries.<name>]`` tables of the config.

    A table naming a built-in library overrides only the keys it sets; any
    other table defines a new library and must at least give ``archive``.
    """
    recipes = dict(BUILTIN_RECIPES)
    for name, table in (conf or {}).get("libraries", {}).items():
        fields = _recipe_fields(name, table)
        if name in recipes:
            recipes[name] = replace(recipes[name], **fields)
        else:
            if "archive" not in fields:
                raise ConfigError(f"[libraries.{name}] must set 'archive'")
            recipes[name] = LibraryRecipe(name=name, **fields)
    return recipes


def select_recipes(recipes, names):
    """Recipes for ``names`` in the order given, or every recipe when empty."""
    if not names:
        return list(recipes.values())
    selected = []
    for name in names:
        if name not in recipes:
            raise UnknownLibraryError(
                f"Unknown library '{name}'. Known libraries: {', '.join(sorted(recipes))}"
            )
        selected.append(recipes[name])
    return selected
