import contextlib
import io
import json
import os
import sys
import tempfile
import unittest


REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
sys.path.insert(0, SRC_ROOT)


from gbindgen.bindgen.bindings import generate  # noqa: E402
from gbindgen.bindgen.errors import DiscoveryError, MissingAttributeError  # noqa: E402
from gbindgen.bindgen.gobject import GTypeBoxed, GTypeEnum, GTypeError, GTypeInterface, GTypeObject  # noqa: E402
from gbindgen.bindgen.ir_cfg import CfgAll, CfgBoolean, CfgNamed  # noqa: E402
from gbindgen.bindgen.manifest import MANIFEST_NAME, load_manifest_data  # noqa: E402
from gbindgen.cli import main  # noqa: E402


MANIFEST = {
    "config": {"defines": {"feature = v2": "MY_V2"}},
    "types": {"GtkContainer": "struct", "GtkWidgetClass": "struct"},
    "declarations": [
        {
            "item": "enum",
            "ident": "Error",
            "attrs": [{"list": "gerror_domain", "nested": [{"name": "name", "value": "MyLibError"}]}],
        },
        {
            "item": "enum",
            "ident": "Flags",
            "attrs": [{"list": "gflags", "nested": ["MyLibFlags"]}],
        },
        {
            "item": "struct",
            "ident": "Rect",
            "attrs": [{"doc": " A rectangle."}, {"list": "gboxed", "nested": [{"name": "name", "value": "GdkRect"}]}],
        },
        {
            "item": "impl",
            "trait": "glib::subclass::ObjectSubclass",
            "self_ty": "imp::Widget",
            "module_attrs": [{"list": "cfg", "nested": [{"path": "unix"}]}],
            "attrs": [{"list": "cfg", "nested": [{"name": "feature", "value": "v2"}]}],
            "items": [
                {"const": "NAME", "value": "GtkWidget"},
                {"type": "ParentType", "ty": "gtk::GtkContainer"},
                {"type": "Class", "ty": "GtkWidgetClass"},
                {"type": "Instance", "ty": []},
                {"fn": "class_init"},
            ],
        },
        {
            "item": "impl",
            "trait": "ObjectInterface",
            "self_ty": "FooInterface",
            "items": [{"const": "NAME", "value": "MyFoo"}],
        },
        {"item": "impl", "trait": "Drop", "self_ty": "Widget"},
        {"item": "fn", "ident": "helper"},
    ],
}


class DiscoveryTests(unittest.TestCase):
    def test_loads_every_kind(self) -> None:
        library, config = load_manifest_data(MANIFEST)
        kinds = {node.name: type(node.gtype) for node in library.gobjects}
        self.assertEqual(
            kinds,
            {
                "MyLibError": GTypeError,
                "MyLibFlags": GTypeEnum,
                "GdkRect": GTypeBoxed,
                "GtkWidget": GTypeObject,
                "MyFoo": GTypeInterface,
            },
        )
        self.assertEqual(config.defines, {"feature = v2": "MY_V2"})
        widget = next(node for node in library.gobjects if node.name == "GtkWidget")
        self.assertEqual(str(widget.path), "imp::Widget")
        self.assertEqual(widget.cfg, CfgAll((CfgBoolean("unix"), CfgNamed("feature", "v2"))))
        self.assertIsNone(widget.gtype.instance)
        rect = next(node for node in library.gobjects if node.name == "GdkRect")
        self.assertEqual(rect.documentation.lines, ["A rectangle."])

    def test_error_enums_with_the_same_ident_are_both_rendered(self) -> None:
        data = {
            "declarations": [
                {
                    "item": "enum",
                    "ident": "Error",
                    "attrs": [{"list": "gerror_domain", "nested": [{"name": "name", "value": name}]}],
                }
                for name in ("FooError", "BarError")
            ]
        }
        library, config = load_manifest_data(data)
        config.quiet = True
        text = generate(library, config).to_string()
        self.assertIn("#define FOO_ERROR ", text)
        self.assertIn("#define BAR_ERROR ", text)

    def test_reports_every_broken_declaration(self) -> None:
        data = {
            "declarations": [
                {"item": "struct", "ident": "Rect", "attrs": [{"list": "gboxed", "nested": []}]},
                {"item": "impl", "trait": "ObjectSubclass", "self_ty": "Widget", "items": [{"const": "NAME", "value": "GtkWidget"}]},
                {"item": "enum", "attrs": []},
                {"item": "enum", "ident": "Color", "attrs": [{"list": "genum", "nested": [{"name": "type_name", "value": "MyLibColor"}]}]},
            ]
        }
        with self.assertRaises(DiscoveryError) as ctx:
            load_manifest_data(data)
        errors = ctx.exception.errors
        self.assertEqual(len(errors), 3)
        self.assertIsInstance(errors[0], MissingAttributeError)
        self.assertEqual(errors[1].key, "ParentType")
        self.assertIn("missing field 'ident'", str(errors[2]))


class CliTests(unittest.TestCase):
    def _write_manifest(self, tmp: str, data: dict) -> str:
        path = os.path.join(tmp, MANIFEST_NAME)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        return path

    def test_writes_to_stdout(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self._write_manifest(tmp, MANIFEST)
            stdout = io.StringIO()
            with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(io.StringIO()):
                code = main([tmp, "--include-guard", "MY_LIB_H"])
        self.assertEqual(code, 0)
        text = stdout.getvalue()
        self.assertIn("#ifndef MY_LIB_H\n", text)
        self.assertIn("#define MY_LIB_ERROR                    (my_lib_error_quark())\n", text)
        self.assertIn("#define MY_LIB_TYPE_FLAGS                    (my_lib_flags_get_type())\n", text)
        self.assertIn("typedef struct GtkContainer GtkContainer;\n", text)

    def test_verify_detects_changes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            manifest = self._write_manifest(tmp, MANIFEST)
            output = os.path.join(tmp, "bindings.h")
            with contextlib.redirect_stderr(io.StringIO()):
                self.assertEqual(main([manifest, "-o", output]), 0)
                self.assertEqual(main([manifest, "-o", output, "--verify"]), 0)
                self.assertEqual(main([manifest, "-o", output, "--verify", "--include-guard", "X_H"]), 2)

    def test_verify_requires_output(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            manifest = self._write_manifest(tmp, MANIFEST)
            stderr = io.StringIO()
            with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as ctx:
                main([manifest, "--verify"])
        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("--verify requires --output", stderr.getvalue())

    def test_reports_name_errors(self) -> None:
        data = {
            "declarations": [
                {"item": "struct", "ident": "Rect", "attrs": [{"list": "gboxed", "nested": [{"name": "name", "value": "GdkBox"}]}]},
                {"item": "enum", "ident": "Color", "attrs": [{"list": "genum", "nested": [{"name": "type_name", "value": "MyLibShade"}]}]},
            ]
        }
        with tempfile.TemporaryDirectory() as tmp:
            manifest = self._write_manifest(tmp, data)
            stderr = io.StringIO()
            with contextlib.redirect_stderr(stderr), contextlib.redirect_stdout(io.StringIO()):
                code = main([manifest])
        self.assertEqual(code, 1)
        messages = stderr.getvalue()
        self.assertIn("Rect: cannot derive names from `GdkBox`", messages)
        self.assertIn("Color: cannot derive names from `MyLibShade`", messages)
        self.assertIn("Couldn't generate bindings for", messages)


if __name__ == "__main__":
    unittest.main()
