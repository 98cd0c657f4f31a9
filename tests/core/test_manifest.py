import json
import unittest
from unittest.mock import mock_open, patch

from deptree.core.errors import InputError
from deptree.core.manifest import analyze_manifest, load_manifest
from deptree.core.model import RootPackage

PACKAGE_JSON = {
    "name": "my-app",
    "dependencies": {"react": "^18.2.0", "lodash": "4.17.21", "left-pad": ""},
    "devDependencies": {"jest": "~29.7.0", "react": "^18.2.0"},
    "peerDependencies": {"react-dom": "^18.0.0"},
}


class TestManifest(unittest.TestCase):

    def test_roots_in_section_order(self):
        analysis = analyze_manifest(PACKAGE_JSON)

        self.assertEqual(analysis.name, "my-app")
        self.assertEqual(analysis.roots, [
            RootPackage("react", "18.2.0"),
            RootPackage("lodash", "4.17.21"),
            RootPackage("left-pad", "latest"),
            RootPackage("jest", "29.7.0", is_dev=True),
            RootPackage("react", "18.2.0", is_dev=True),
            RootPackage("react-dom", "18.0.0", is_peer=True),
        ])

    def test_counts_and_duplicates(self):
        analysis = analyze_manifest(PACKAGE_JSON)

        self.assertEqual(analysis.total, 6)
        self.assertEqual((analysis.production, analysis.dev, analysis.peer), (3, 2, 1))
        self.assertEqual(analysis.duplicates, ["react"])

    def test_empty_manifest(self):
        analysis = analyze_manifest({})

        self.assertEqual(analysis.name, "package.json")
        self.assertEqual(analysis.roots, [])
        self.assertEqual(analysis.total, 0)

    def test_invalid_section(self):
        with self.assertRaises(InputError):
            analyze_manifest({"dependencies": ["react"]})

    def test_load_from_file(self):
        with patch("builtins.open", mock_open(read_data=json.dumps(PACKAGE_JSON))):
            analysis = load_manifest("package.json")

        self.assertEqual(analysis.total, 6)

    def test_load_invalid_json(self):
        with patch("builtins.open", mock_open(read_data="{ not json")):
            with self.assertRaises(InputError):
                load_manifest("package.json")

    @patch("builtins.open", side_effect=FileNotFoundError)
    def test_load_missing_file(self, _):
        with self.assertRaises(InputError):
            load_manifest("missing/package.json")

    def test_load_unreadable_file(self):
        errors = [
            IsADirectoryError(21, "Is a directory"),
            PermissionError(13, "Permission denied"),
            UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"),
        ]
        for error in errors:
            with self.subTest(error=type(error).__name__):
                with patch("builtins.open", side_effect=error):
                    with self.assertRaises(InputError):
                        load_manifest("package.json")
