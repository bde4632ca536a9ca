import io
import os
import sys
import unittest


REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
sys.path.insert(0, SRC_ROOT)


from gbindgen.bindgen.errors import NameDerivationError  # noqa: E402
from gbindgen.bindgen.gobject import (  # noqa: E402
    GObject,
    GTypeBoxed,
    GTypeEnum,
    GTypeError,
    GTypeInterface,
    GTypeObject,
    write_gobject,
)
from gbindgen.bindgen.ir_types import Path, Type  # noqa: E402
from gbindgen.bindgen.library import DeclarationTypeResolver  # noqa: E402
from gbindgen.bindgen.writer import SourceWriter  # noqa: E402


def _render(node: GObject) -> str:
    resolved = node.resolve_declaration_types(DeclarationTypeResolver())
    buffer = io.StringIO()
    write_gobject(resolved, None, SourceWriter(buffer))
    return buffer.getvalue()


def _widget() -> GObject:
    return GObject(
        Path("Widget"),
        "GtkWidget",
        GTypeObject(
            parent_type=Type.path("GtkContainer"),
            instance=Type.path("GtkWidgetInstance"),
            klass=Type.path("GtkWidgetClass"),
        ),
    )


class ObjectRenderTests(unittest.TestCase):
    def test_object_macros(self) -> None:
        self.assertEqual(
            _render(_widget()).splitlines(),
            [
                "#define GTK_TYPE_WIDGET                    (gtk_widget_get_type())",
                "#define GTK_WIDGET(obj)            (G_TYPE_CHECK_INSTANCE_CAST((obj),GTK_TYPE_WIDGET,GtkWidget))",
                "#define GTK_IS_WIDGET(obj)         (G_TYPE_CHECK_INSTANCE_TYPE((obj),GTK_TYPE_WIDGET))",
                "#define GTK_WIDGET_CLASS(klass)    (G_TYPE_CHECK_CLASS_CAST((klass),GTK_TYPE_WIDGET,GtkWidgetClass))",
                "#define GTK_IS_WIDGET_CLASS(klass) (G_TYPE_CHECK_CLASS_TYPE((klass),GTK_TYPE_WIDGET))",
                "#define GTK_WIDGET_GET_CLASS(obj)  (G_TYPE_INSTANCE_GET_CLASS((obj),GTK_TYPE_WIDGET,GtkWidgetClass))",
                "G_DEFINE_AUTOPTR_CLEANUP_FUNC(GtkWidget, g_object_unref)",
                "",
            ],
        )

    def test_rendering_is_repeatable(self) -> None:
        node = _widget()
        self.assertEqual(_render(node), _render(node))

    def test_multi_word_local_name(self) -> None:
        node = GObject(Path("ListModel"), "GListModel", GTypeObject(parent_type=Type.path("GObject")))
        first = _render(node).splitlines()[0]
        self.assertEqual(first, "#define G_TYPE_LIST_MODEL                    (g_list_model_get_type())")

    def test_mismatched_runtime_name(self) -> None:
        node = GObject(Path("Widget"), "GtkButton", GTypeObject(parent_type=Type.path("GtkContainer")))
        with self.assertRaises(NameDerivationError):
            _render(node)


class OtherKindRenderTests(unittest.TestCase):
    def test_interface_macros(self) -> None:
        node = GObject(Path("FooInterface"), "MyFoo", GTypeInterface(Type.path("FooInterface")))
        self.assertEqual(
            _render(node),
            "#define MY_TYPE_FOO                    (my_foo_get_type())\n"
            "#define MY_FOO(obj)            (G_TYPE_CHECK_INSTANCE_CAST((obj),MY_TYPE_FOO,MyFoo))\n"
            "#define MY_IS_FOO(obj)         (G_TYPE_CHECK_INSTANCE_TYPE((obj),MY_TYPE_FOO))\n"
            "#define MY_FOO_GET_INTERFACE(obj)  (G_TYPE_INSTANCE_GET_CLASS((obj),MY_TYPE_FOO,MyFooInterface))\n"
            "\n",
        )

    def test_error_quark(self) -> None:
        node = GObject(Path("Error"), "MyLibError", GTypeError(Type.path("Error")))
        self.assertEqual(_render(node), "#define MY_LIB_ERROR                    (my_lib_error_quark())\n\n")

    def test_enum_type(self) -> None:
        node = GObject(Path("Color"), "MyLibColor", GTypeEnum(Type.path("Color")))
        self.assertEqual(_render(node), "#define MY_LIB_TYPE_COLOR                    (my_lib_color_get_type())\n\n")

    def test_boxed_type(self) -> None:
        node = GObject(Path("Rect"), "GdkRect", GTypeBoxed())
        self.assertEqual(_render(node), "#define GDK_TYPE_RECT                    (gdk_rect_get_type())\n\n")


if __name__ == "__main__":
    unittest.main()
