import unittest

from s3_folders.paths import (
    breadcrumbs,
    child_prefix,
    file_display_name,
    folder_display_name,
    normalize_prefix,
    parent_prefix,
)


class PathHelpersTests(unittest.TestCase):
    def test_parent_prefix(self):
        self.assertEqual("photos/", parent_prefix("photos/2023/"))
        self.assertEqual("", parent_prefix("photos/"))
        self.assertEqual("", parent_prefix(""))
        self.assertEqual("a/b/", parent_prefix("a/b/c/"))

    def test_child_prefix_is_the_service_prefix(self):
        self.assertEqual("photos/2023/", child_prefix("photos/", "photos/2023/"))

    def test_display_names(self):
        self.assertEqual("2023", folder_display_name("photos/2023/"))
        self.assertEqual("photos", folder_display_name("photos/"))
        self.assertEqual("a.jpg", file_display_name("photos/a.jpg"))
        self.assertEqual("root.txt", file_display_name("root.txt"))

    def test_normalize_prefix(self):
        self.assertEqual("", normalize_prefix(""))
        self.assertEqual("", normalize_prefix(None))
        self.assertEqual("", normalize_prefix("/"))
        self.assertEqual("photos/", normalize_prefix("photos"))
        self.assertEqual("photos/2023/", normalize_prefix(" /photos/2023/ "))

    def test_breadcrumbs(self):
        self.assertEqual([("/", "")], breadcrumbs(""))
        self.assertEqual(
            [("/", ""), ("photos", "photos/"), ("2023", "photos/2023/")],
            breadcrumbs("photos/2023/"),
        )


if __name__ == "__main__":
    unittest.main()
