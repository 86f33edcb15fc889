import unittest

from nativebuilder.errors import ConfigError, UnknownLibraryError
from nativebuilder.recipes import BUILTIN_RECIPES, LIBOPENJP2, load_recipes, select_recipes


class TestRecipes(unittest.TestCase):

    def test_builtin_libopenjp2(self):
        self.assertEqual(LIBOPENJP2.archive, "libopenjp2.tar.gz")
        self.assertEqual(LIBOPENJP2.static_lib_name, "libopenjp2.a")
        self.assertEqual(LIBOPENJP2.header_subdir, "openjpeg-2.5")
        self.assertEqual(LIBOPENJP2.strip_link_flags, ("-lwebp",))

    def test_load_without_config(self):
        self.assertEqual(load_recipes({}), BUILTIN_RECIPES)

    def test_override_builtin(self):
        recipes = load_recipes({"libraries": {"libopenjp2": {"cmake_args": "-DBUILD_CODEC=OFF"}}})
        recipe = recipes["libopenjp2"]
        self.assertEqual(recipe.cmake_args, ("-DBUILD_CODEC=OFF",))
        self.assertEqual(recipe.archive, "libopenjp2.tar.gz")

    def test_new_library(self):
        recipes = load_recipes({"libraries": {"libpng": {"archive": "libpng.tar.xz", "header_subdir": "libpng16"}}})
        self.assertEqual(list(recipes), ["libopenjp2", "libpng"])
        self.assertEqual(recipes["libpng"].static_lib_name, "libpng.a")

    def test_new_library_requires_archive(self):
        with self.assertRaises(ConfigError):
            load_recipes({"libraries": {"libpng": {"header_subdir": "libpng16"}}})

    def test_unknown_key(self):
        with self.assertRaises(ConfigError):
            load_recipes({"libraries": {"libopenjp2": {"archiv": "typo.tar.gz"}}})

    def test_select_in_given_order(self):
        recipes = load_recipes({"libraries": {"libpng": {"archive": "libpng.tar.xz"}}})
        selected = select_recipes(recipes, ("libpng", "libopenjp2"))
        self.assertEqual([recipe.name for recipe in selected], ["libpng", "libopenjp2"])
        self.assertEqual(len(select_recipes(recipes, ())), 2)

    def test_select_unknown(self):
        with self.assertRaises(UnknownLibraryError):
            select_recipes(BUILTIN_RECIPES, ("libjxl",))


if __name__ == '__main__':
    unittest.main()
